"""
Post feed store.

Holds the loaded posts, newest first, each with its comments oldest first.
Likes and comments added here are local state: a refetch replaces them with
what the persistence service returns. The store is shared by every viewer,
so likes are tracked per viewer and ``user_liked`` only exists on the copies
returned by ``view``.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set

from woven_circles.errors import AuthRequired, FetchFailed, NotFound, ValidationError
from woven_circles.models import (
    ANONYMOUS,
    Comment,
    Post,
    clean_tags,
    normalize_location,
    utcnow,
)

logger = logging.getLogger(__name__)

POST_SELECT = """
    *,
    profiles(name, avatar_url),
    comments(
        id,
        content,
        created_at,
        author_id,
        profiles(name)
    )
"""

DEFAULT_PAGE_SIZE = 10


def post_matches(post, search_text='', tag=None):
    """True when the post passes both the search text and the tag filter"""
    needle = (search_text or '').lower()
    matches_search = (
        needle in post.content.lower()
        or needle in post.user_name.lower()
        or any(needle in t.lower() for t in post.tags)
    )
    matches_tag = tag in post.tags if tag else True
    return matches_search and matches_tag


def filter_posts(posts, search_text='', tag=None) -> List[Post]:
    return [post for post in posts if post_matches(post, search_text, tag)]


@dataclass
class FeedFilter:
    search_text: str = ''
    tag: Optional[str] = None

    def select_tag(self, tag):
        # Clicking the selected tag again clears it
        self.tag = None if tag == self.tag else tag
        self.search_text = ''

    def clear(self):
        self.search_text = ''
        self.tag = None

    @property
    def active(self):
        return bool(self.search_text or self.tag)

    def apply(self, posts):
        return filter_posts(posts, self.search_text, self.tag)

    def to_dict(self):
        return {'search': self.search_text, 'tag': self.tag}


class PostFeedStore:
    def __init__(self, client):
        self._client = client
        self._posts: List[Post] = []
        # post id -> ids of the viewers who liked it
        self._likes: Dict[str, Set[str]] = {}
        self._subscribers = []
        self._fetch_lock = threading.Lock()
        self.last_error = None

    @property
    def posts(self):
        return list(self._posts)

    def subscribe(self, callback):
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback) if callback in self._subscribers else None

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self.posts)

    def fetch_all(self, author_id=None, limit=None, offset=None):
        """Load posts from the persistence service, newest first.

        On failure the error is kept in ``last_error``, an empty list is
        returned and the posts already held are left as they were.
        """
        if not self._fetch_lock.acquire(blocking=False):
            logger.info("Post fetch already in flight, returning current posts")
            return self.posts

        try:
            query = (
                self._client.table('posts')
                .select(POST_SELECT)
                .order('created_at', desc=True)
            )
            if author_id:
                query = query.eq('author_id', author_id)
            if limit:
                query = query.limit(limit)
            if offset:
                query = query.range(offset, offset + (limit or DEFAULT_PAGE_SIZE) - 1)

            response = query.execute()
            posts = [Post.from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error("Error fetching posts: %s", e)
            self.last_error = FetchFailed(
                'There was a problem loading the posts. Please try again.'
            )
            return []
        finally:
            self._fetch_lock.release()

        self.last_error = None
        self._posts = posts
        self._likes = {}
        logger.debug("Fetched %d posts", len(posts))
        self._notify()
        return self.posts

    def get(self, post_id) -> Post:
        for post in self._posts:
            if post.id == post_id:
                return post
        raise NotFound(f"Post '{post_id}' not found")

    def create(self, content, tags=None, location=None, author_id=None, author_name=None):
        content = (content or '').strip()
        if not content:
            raise ValidationError('Please add some content to your post')
        if not author_id:
            raise ValidationError('You need to be logged in to create posts')

        tags = clean_tags(tags)
        location = normalize_location(location)
        payload = {
            'content': content,
            'author_id': author_id,
            'location': location.to_dict() if location else None,
            'title': '',
            # Tags are stored comma-joined in the category column
            'category': ','.join(tags),
        }

        try:
            response = self._client.table('posts').insert(payload).execute()
        except Exception as e:
            logger.error("Error creating post: %s", e)
            raise FetchFailed('There was a problem creating your post. Please try again.') from e

        rows = response.data or []
        if not rows:
            raise FetchFailed('There was a problem creating your post. Please try again.')

        post = Post.from_row(rows[0])
        post.user_name = author_name or ANONYMOUS
        post.tags = tags
        post.location = location
        if post.timestamp is None:
            post.timestamp = utcnow()

        self._posts.insert(0, post)
        logger.info("Created post %s for %s", post.id, author_id)
        self._notify()
        return post

    def liked_by(self, post_id, viewer_id):
        return viewer_id in self._likes.get(post_id, ())

    def view(self, post, viewer_id=None) -> Post:
        """Copy of post with ``user_liked`` set for viewer_id"""
        return replace(post, user_liked=self.liked_by(post.id, viewer_id))

    def view_all(self, posts, viewer_id=None) -> List[Post]:
        return [self.view(post, viewer_id) for post in posts]

    def toggle_like(self, post_id, viewer_id):
        """Flip viewer_id's like; returns the post as that viewer sees it"""
        if not viewer_id:
            raise AuthRequired('You need to be logged in to like posts')
        post = self.get(post_id)
        likers = self._likes.setdefault(post_id, set())
        if viewer_id in likers:
            likers.discard(viewer_id)
            post.likes -= 1
        else:
            likers.add(viewer_id)
            post.likes += 1
        self._notify()
        return self.view(post, viewer_id)

    def append_comment(self, post_id, comment):
        post = self.get(post_id)
        post.comments.append(comment)
        self._notify()
        return post

    def add_comment(self, post_id, content, author_id=None, author_name=None):
        if not author_id:
            raise AuthRequired('You need to be logged in to comment')
        content = (content or '').strip()
        if not content:
            raise ValidationError('Please add a comment')

        comment = Comment(
            id=f"comment-{uuid.uuid4().hex[:12]}",
            user_id=author_id,
            user_name=author_name or ANONYMOUS,
            content=content,
            timestamp=utcnow(),
        )
        self.append_comment(post_id, comment)
        return comment

    def fetch_comments(self, post_id):
        try:
            response = (
                self._client.table('comments')
                .select('*, profiles(name, avatar_url)')
                .eq('post_id', post_id)
                .order('created_at', desc=False)
                .execute()
            )
        except Exception as e:
            logger.error("Error fetching comments: %s", e)
            return []
        return [Comment.from_row(row) for row in response.data or []]

    def filter(self, search_text='', tag=None):
        return filter_posts(self._posts, search_text, tag)

    def report(self, post_id, reason):
        if not (reason or '').strip():
            raise ValidationError('A reason is required to submit a report')
        # Reports are not persisted; moderation happens outside this service
        logger.info("Report received for post %s", post_id)
        return True
