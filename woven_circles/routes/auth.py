from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)
from woven_circles.auth_helpers import current_viewer
from woven_circles.errors import ValidationError
from woven_circles.workspace import get_viewer, get_workspace

auth_bp = Blueprint('auth', __name__)

def _session_response(identity, status=200):
    access_token = create_access_token(identity=identity.id, additional_claims={'name': identity.name})
    response = jsonify({'access_token': access_token, 'user': identity.to_dict()})
    set_access_cookies(response, access_token)
    return response, status

def _check_confirmation(data, password):
    confirm = data.get('confirm_password')
    if confirm is not None and confirm != password:
        raise ValidationError("Passwords don't match")

@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    email = data.get('email')
    password = data.get('password')
    _check_confirmation(data, password)

    pending = get_workspace().register(name, email, password)

    # Stay logged out until the email address is confirmed
    return jsonify({
        'message': 'Please check your email to confirm your account',
        'registration': pending.to_dict(),
    }), 201

@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    identity = get_workspace().login(data.get('email'), data.get('password'))
    return _session_response(identity)

@auth_bp.route('/oauth/<provider>', methods=['POST'])
def oauth(provider):
    url = get_workspace().sign_in_with_oauth(provider)
    return jsonify({'url': url}), 200

@auth_bp.route('/oauth/callback', methods=['POST'])
def oauth_callback():
    data = request.get_json(silent=True) or {}
    identity = get_workspace().complete_oauth(data.get('code'))
    return _session_response(identity)

@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    user_id, _ = current_viewer()
    get_workspace().logout(user_id)
    response = jsonify({'message': "You've been logged out successfully"})
    unset_jwt_cookies(response)
    return response, 200

@auth_bp.route('/password-reset', methods=['POST'])
def password_reset():
    data = request.get_json(silent=True) or {}
    get_workspace().request_password_reset(data.get('email'))
    return jsonify({'message': "We've sent you a password reset link"}), 200

@auth_bp.route('/password', methods=['POST'])
@jwt_required()
def update_password():
    data = request.get_json(silent=True) or {}
    password = data.get('password')
    _check_confirmation(data, password)
    user_id, _ = current_viewer()
    get_viewer(user_id).session.update_password(password)
    return jsonify({'message': 'Your password has been successfully reset'}), 200

@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    user_id, name = current_viewer()
    workspace = get_workspace()
    identity = workspace.viewer(user_id).session.identity if workspace.has_viewer(user_id) else None
    if identity is not None and identity.id == user_id:
        return jsonify(identity.to_dict()), 200
    return jsonify({'id': user_id, 'name': name}), 200
