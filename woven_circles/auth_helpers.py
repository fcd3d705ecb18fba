from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError


def has_session():
    """True when the request carries a valid access token"""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return False
    return get_jwt_identity() is not None


def current_viewer():
    """(user_id, display_name) of the caller, or (None, None).

    Only valid inside a view decorated with ``jwt_required``.
    """
    user_id = get_jwt_identity()
    if user_id is None:
        return None, None
    return user_id, get_jwt().get('name')
