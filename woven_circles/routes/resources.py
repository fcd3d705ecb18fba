from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from woven_circles.auth_helpers import current_viewer
from woven_circles.errors import AuthRequired
from woven_circles.workspace import get_viewer, get_workspace

resources_bp = Blueprint('resources', __name__)

@resources_bp.route('', methods=['GET'])
def list_resources():
    resources = get_workspace().resources.search(request.args.get('q', ''))
    return jsonify([r.to_dict() for r in resources]), 200

@resources_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def add_resource():
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    if not user_id:
        raise AuthRequired('You need to be logged in to add resources')

    draft = get_viewer(user_id).add_resource
    if data.get('coordinates') is not None or not draft.active:
        resource = get_workspace().resources.add(
            data.get('name'),
            data.get('description'),
            data.get('category'),
            data.get('coordinates'),
            user_id,
        )
        draft.reset()
    else:
        resource = draft.submit(
            data.get('name'),
            data.get('description'),
            data.get('category'),
            user_id,
        )
    return jsonify(resource.to_dict()), 201

@resources_bp.route('/geocode', methods=['POST'])
def geocode():
    data = request.get_json(silent=True) or {}
    result = get_workspace().resources.geocode(data.get('address'))
    return jsonify(result.to_dict()), 200

@resources_bp.route('/draft', methods=['POST'])
@jwt_required()
def begin_draft():
    user_id, _ = current_viewer()
    draft = get_viewer(user_id).add_resource
    draft.begin(user_id)
    return jsonify(draft.to_dict()), 200

@resources_bp.route('/draft', methods=['DELETE'])
@jwt_required()
def cancel_draft():
    user_id, _ = current_viewer()
    draft = get_viewer(user_id).add_resource
    draft.cancel()
    return jsonify(draft.to_dict()), 200

@resources_bp.route('/draft/address', methods=['POST'])
@jwt_required()
def search_draft_address():
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    draft = get_viewer(user_id).add_resource
    draft.search_address(data.get('address'))
    return jsonify(draft.to_dict()), 200

@resources_bp.route('/markers', methods=['GET'])
@jwt_required(optional=True)
def get_markers():
    user_id, _ = current_viewer()
    return jsonify(get_viewer(user_id).markers.to_dict()), 200

@resources_bp.route('/map-click', methods=['POST'])
@jwt_required()
def map_click():
    data = request.get_json(silent=True) or {}
    user_id, _ = current_viewer()
    viewer = get_viewer(user_id)
    forwarded = viewer.markers.on_map_click({'lat': data.get('lat'), 'lng': data.get('lng')})
    return jsonify({'forwarded': forwarded, 'draft': viewer.add_resource.to_dict()}), 200

@resources_bp.route('/markers/<resource_id>/select', methods=['POST'])
@jwt_required(optional=True)
def select_marker(resource_id):
    user_id, _ = current_viewer()
    resource = get_viewer(user_id).markers.on_marker_click(resource_id)
    return jsonify(resource.to_dict()), 200

@resources_bp.route('/selection', methods=['DELETE'])
@jwt_required(optional=True)
def clear_selection():
    user_id, _ = current_viewer()
    get_viewer(user_id).markers.clear_selection()
    return jsonify({'selected': None}), 200
