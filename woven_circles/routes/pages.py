from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from woven_circles.auth_helpers import current_viewer
from woven_circles.workspace import get_viewer, get_workspace

pages_bp = Blueprint('pages', __name__)

@pages_bp.route('/', methods=['GET'])
@jwt_required(optional=True)
def home():
    """Feed page; ?search= and ?tag= update the viewer's filter"""
    user_id, _ = current_viewer()
    feed_filter = get_viewer(user_id).feed_filter
    if 'tag' in request.args:
        feed_filter.select_tag(request.args.get('tag') or None)
    if 'search' in request.args:
        feed_filter.search_text = request.args.get('search', '')

    feed = get_workspace().feed
    posts = feed.fetch_all()
    error = feed.last_error
    return jsonify({
        'page': 'feed',
        'filter': feed_filter.to_dict(),
        'posts': [p.to_dict() for p in feed.view_all(feed_filter.apply(posts), user_id)],
        'error': error.message if error else None,
    }), 200

@pages_bp.route('/map', methods=['GET'])
@jwt_required()
def map_page():
    user_id, _ = current_viewer()
    return jsonify({
        'page': 'map',
        'map': get_viewer(user_id).markers.to_dict(),
        'resources': [r.to_dict() for r in get_workspace().resources.resources],
    }), 200

@pages_bp.route('/profile', methods=['GET'])
@jwt_required()
def profile_page():
    user_id, name = current_viewer()
    profile = get_workspace().profiles.get(user_id)
    return jsonify({
        'page': 'profile',
        'user': {'id': user_id, 'name': name},
        'profile': profile.to_dict() if profile else None,
    }), 200

@pages_bp.route('/login', methods=['GET'])
@pages_bp.route('/register', methods=['GET'])
def login_page():
    return jsonify({
        'page': 'login',
        'redirectTo': request.args.get('redirectTo', '/'),
    }), 200
