from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from woven_circles.auth_helpers import current_viewer
from woven_circles.errors import NotFound
from woven_circles.workspace import get_workspace

profile_bp = Blueprint('profile', __name__)

@profile_bp.route('', methods=['GET'])
@jwt_required()
def get_profile():
    user_id, _ = current_viewer()
    profile = get_workspace().profiles.get(user_id)
    if profile is None:
        raise NotFound('Profile not found')
    return jsonify(profile.to_dict()), 200

@profile_bp.route('', methods=['PUT'])
@jwt_required()
def update_profile():
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    profile = get_workspace().profiles.update(
        user_id,
        name=data.get('name'),
        location=data.get('location'),
        bio=data.get('bio'),
    )
    if profile is None:
        raise NotFound('Profile not found')
    return jsonify(profile.to_dict()), 200
