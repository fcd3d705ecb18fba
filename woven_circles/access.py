"""
Route access control for page routes.

Protected pages need an active session; auth pages (login/register) are
only for visitors without one. Everything else, including the JSON API, is
public at this layer.
"""
from urllib.parse import urlencode

PROTECTED_ROUTES = ['/profile', '/map']
AUTH_ROUTES = ['/login', '/register']
LOGIN_PATH = '/login'
HOME_PATH = '/'


def resolve_access(path, has_session):
    """Return the redirect location for a page request, or None to allow it"""
    if path.startswith('/api/'):
        return None

    # Plain prefix match: '/mapping' is guarded like '/map'

    if any(path.startswith(route) for route in PROTECTED_ROUTES) and not has_session:
        return f"{LOGIN_PATH}?{urlencode({'redirectTo': path})}"

    if any(path.startswith(route) for route in AUTH_ROUTES) and has_session:
        return HOME_PATH

    return None
