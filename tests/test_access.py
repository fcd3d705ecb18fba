"""
Tests for page route access control.
"""
import pytest

from woven_circles.access import resolve_access


@pytest.mark.parametrize('path, has_session, expected', [
    ('/profile', False, '/login?redirectTo=%2Fprofile'),
    ('/map', False, '/login?redirectTo=%2Fmap'),
    ('/map/resource-1', False, '/login?redirectTo=%2Fmap%2Fresource-1'),
    ('/mapping', False, '/login?redirectTo=%2Fmapping'),
    ('/profile', True, None),
    ('/login', True, '/'),
    ('/register', True, '/'),
    ('/login', False, None),
    ('/', False, None),
    ('/guidelines', False, None),
    ('/api/posts', False, None),
])
def test_resolve_access(path, has_session, expected):
    assert resolve_access(path, has_session) == expected
