"""
Data models for the application.
Rows come back from Supabase as plain dicts; these dataclasses are the
normalized shapes the stores hold and the blueprints serialize.
"""
import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from woven_circles.errors import ValidationError

ANONYMOUS = 'Anonymous'
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(ts):
    if not ts:
        return None
    if isinstance(ts, datetime):
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
    # Supabase returns ISO 8601, e.g. "2024-03-24T00:34:59.123+00:00" or "...Z"
    parsed = datetime.fromisoformat(ts.replace('Z', '+00:00'))
    # Rows without an offset are UTC
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def to_dict(self):
        return {'lat': self.lat, 'lng': self.lng}


def _resolve_number(value, name):
    # Map SDK positions expose lat()/lng() accessors; call them once here
    if callable(value):
        value = value()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Coordinate '{name}' must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"Coordinate '{name}' must be finite")
    return number


def normalize_coordinates(value) -> Optional[Coordinates]:
    """Resolve any coordinate representation to plain floats.

    Accepts a Coordinates instance, a mapping with ``lat``/``lng`` keys, a
    ``(lat, lng)`` pair, or any object exposing ``lat``/``lng`` attributes
    (plain values or zero-argument accessors). Returns None for None.
    """
    if value is None:
        return None
    if isinstance(value, Coordinates):
        return value
    if isinstance(value, dict):
        if 'lat' not in value or 'lng' not in value:
            raise ValidationError("Coordinates require 'lat' and 'lng'")
        lat, lng = value['lat'], value['lng']
    elif isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise ValidationError('Coordinates must be a (lat, lng) pair')
        lat, lng = value
    elif hasattr(value, 'lat') and hasattr(value, 'lng'):
        lat, lng = value.lat, value.lng
    else:
        raise ValidationError('Unrecognized coordinates')
    return Coordinates(lat=_resolve_number(lat, 'lat'), lng=_resolve_number(lng, 'lng'))


@dataclass(frozen=True)
class Location:
    address: str

    def to_dict(self):
        return {'address': self.address}


def normalize_location(value) -> Optional[Location]:
    """Collapse the stored location shapes into Location or None.

    The ``posts.location`` column holds JSON, but older rows carry the JSON
    pre-serialized as a string and some carry a bare address string.
    """
    if value is None or isinstance(value, Location):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = json.loads(text)
        except ValueError:
            return Location(address=text)
        if isinstance(value, str):
            return Location(address=value.strip()) if value.strip() else None
        if not isinstance(value, dict):
            # "37402", "true" and the like decode to non-objects; keep the text
            return Location(address=text)
    if isinstance(value, dict):
        address = str(value.get('address') or '').strip()
        return Location(address=address) if address else None
    return None


def split_tags(category):
    if not category:
        return []
    return [tag for tag in (t.strip() for t in category.split(',')) if tag]


def clean_tags(tags):
    """Trim, drop blanks and de-duplicate by exact match, keeping order"""
    cleaned = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


@dataclass
class Identity:
    id: str
    name: str
    email: str = ''
    avatar_url: Optional[str] = None

    @classmethod
    def from_user(cls, user):
        """Build from a Supabase auth user"""
        metadata = getattr(user, 'user_metadata', None) or {}
        return cls(
            id=user.id,
            name=metadata.get('name') or ANONYMOUS,
            email=getattr(user, 'email', None) or '',
            avatar_url=metadata.get('avatar_url'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'avatar_url': self.avatar_url,
        }


@dataclass
class Profile:
    """Profile model - maps to Supabase profiles table"""
    id: str
    name: str = ''
    email: str = ''
    location: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            name=row.get('name') or '',
            email=row.get('email') or '',
            location=row.get('location'),
            bio=row.get('bio'),
            avatar_url=row.get('avatar_url'),
            created_at=parse_timestamp(row.get('created_at')),
            updated_at=parse_timestamp(row.get('updated_at')),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'location': self.location,
            'bio': self.bio,
            'avatar_url': self.avatar_url,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }


def _author_name(row):
    profile = row.get('profiles') or {}
    return profile.get('name') or ANONYMOUS


@dataclass
class Comment:
    """Comment model - maps to Supabase comments table"""
    id: str
    user_id: str
    user_name: str
    content: str
    timestamp: Optional[datetime] = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            user_id=row.get('author_id'),
            user_name=_author_name(row),
            content=row.get('content') or '',
            timestamp=parse_timestamp(row.get('created_at')),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user_name,
            'content': self.content,
            'timestamp': _isoformat(self.timestamp),
        }


@dataclass
class Post:
    """Post model - maps to Supabase posts table"""
    id: str
    user_id: str
    user_name: str
    content: str
    tags: List[str] = field(default_factory=list)
    location: Optional[Location] = None
    timestamp: Optional[datetime] = None
    likes: int = 0
    user_liked: bool = False
    comments: List[Comment] = field(default_factory=list)

    @classmethod
    def from_row(cls, row):
        comments = [Comment.from_row(c) for c in row.get('comments') or []]
        comments.sort(key=lambda c: (c.timestamp is not None, c.timestamp or EPOCH))
        return cls(
            id=row['id'],
            user_id=row.get('author_id'),
            user_name=_author_name(row),
            content=row.get('content') or '',
            tags=split_tags(row.get('category')),
            location=normalize_location(row.get('location')),
            timestamp=parse_timestamp(row.get('created_at')),
            comments=comments,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user_name,
            'content': self.content,
            'tags': list(self.tags),
            'location': self.location.to_dict() if self.location else None,
            'timestamp': _isoformat(self.timestamp),
            'likes': self.likes,
            'userLiked': self.user_liked,
            'comments': [c.to_dict() for c in self.comments],
        }


@dataclass
class Resource:
    id: str
    name: str
    description: str
    category: str
    coordinates: Coordinates
    added_by: str

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'coordinates': self.coordinates.to_dict(),
            'addedBy': self.added_by,
        }


@dataclass(frozen=True)
class Marker:
    id: str
    position: Coordinates

    def to_dict(self):
        return {'id': self.id, 'position': self.position.to_dict()}
