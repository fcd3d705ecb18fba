from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from woven_circles.auth_helpers import current_viewer
from woven_circles.feed import filter_posts
from woven_circles.workspace import get_viewer, get_workspace

feed_bp = Blueprint('feed', __name__)

def _int_arg(name):
    value = request.args.get(name, type=int)
    return value if value and value > 0 else None

@feed_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def list_posts():
    user_id, _ = current_viewer()
    feed = get_workspace().feed
    posts = feed.fetch_all(
        author_id=request.args.get('author') or None,
        limit=_int_arg('limit'),
        offset=_int_arg('offset'),
    )
    if feed.last_error is not None:
        return jsonify({**feed.last_error.to_dict(), 'posts': []}), feed.last_error.status_code

    filtered = filter_posts(posts, request.args.get('search', ''), request.args.get('tag') or None)
    return jsonify({
        'posts': [p.to_dict() for p in feed.view_all(filtered, user_id)],
        'total': len(posts),
    }), 200

@feed_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def create_post():
    data = request.get_json(silent=True) or {}
    user_id, name = current_viewer()
    feed = get_workspace().feed
    post = feed.create(
        data.get('content'),
        tags=data.get('tags') or [],
        location=data.get('location'),
        author_id=user_id,
        author_name=name,
    )
    return jsonify(feed.view(post, user_id).to_dict()), 201

@feed_bp.route('/<post_id>/like', methods=['POST'])
@jwt_required(optional=True)
def toggle_like(post_id):
    user_id, _ = current_viewer()
    post = get_workspace().feed.toggle_like(post_id, user_id)
    return jsonify({'id': post.id, 'likes': post.likes, 'userLiked': post.user_liked}), 200

@feed_bp.route('/<post_id>/comments', methods=['GET'])
def list_comments(post_id):
    comments = get_workspace().feed.fetch_comments(post_id)
    return jsonify([c.to_dict() for c in comments]), 200

@feed_bp.route('/<post_id>/comments', methods=['POST'])
@jwt_required(optional=True)
def add_comment(post_id):
    data = request.get_json(silent=True) or {}
    user_id, name = current_viewer()
    comment = get_workspace().feed.add_comment(post_id, data.get('content'), user_id, name)
    return jsonify(comment.to_dict()), 201

@feed_bp.route('/<post_id>/report', methods=['POST'])
@jwt_required(optional=True)
def report_post(post_id):
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    reports = get_viewer(user_id).reports
    reports.open(post_id, user_id)
    event = reports.submit(data.get('reason'))
    return jsonify({
        'message': 'Thank you for helping keep our community safe',
        'report': event.to_dict(),
    }), 200

def _filter_response(user_id):
    feed = get_workspace().feed
    feed_filter = get_viewer(user_id).feed_filter
    return jsonify({
        'filter': feed_filter.to_dict(),
        'posts': [p.to_dict() for p in feed.view_all(feed_filter.apply(feed.posts), user_id)],
    }), 200

@feed_bp.route('/filter', methods=['GET'])
@jwt_required(optional=True)
def get_filter():
    user_id, _ = current_viewer()
    return _filter_response(user_id)

@feed_bp.route('/filter/tag', methods=['POST'])
@jwt_required(optional=True)
def select_tag():
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    get_viewer(user_id).feed_filter.select_tag(data.get('tag') or None)
    return _filter_response(user_id)

@feed_bp.route('/filter', methods=['DELETE'])
@jwt_required(optional=True)
def clear_filter():
    user_id, _ = current_viewer()
    get_viewer(user_id).feed_filter.clear()
    return _filter_response(user_id)
