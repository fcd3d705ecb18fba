"""
Pytest configuration and shared fixtures.

Provides an in-memory stand-in for the Supabase query builder so the stores
and blueprints can be exercised without network access.
"""
import itertools
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token

from woven_circles.app import create_app
from woven_circles.config import TestingConfig


# =============================================================================
# Fake Supabase client
# =============================================================================

class FakeQuery:
    """Chainable query recording every builder call"""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.calls = []
        self._filters = []
        self._insert = None
        self._update = None

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record('select', *args, **kwargs)

    def order(self, *args, **kwargs):
        return self._record('order', *args, **kwargs)

    def limit(self, *args, **kwargs):
        return self._record('limit', *args, **kwargs)

    def range(self, *args, **kwargs):
        return self._record('range', *args, **kwargs)

    def eq(self, column, value):
        self._filters.append((column, value))
        return self._record('eq', column, value)

    def insert(self, payload):
        self._insert = payload
        return self._record('insert', payload)

    def update(self, payload):
        self._update = payload
        return self._record('update', payload)

    def execute(self):
        error = self.db.errors.get(self.table)
        if error is not None:
            raise error

        rows = self.db.tables.setdefault(self.table, [])
        if self._insert is not None:
            row = {
                'id': f"{self.table}-{next(self.db.ids)}",
                'created_at': '2024-05-01T12:00:00+00:00',
                **self._insert,
            }
            rows.append(row)
            return SimpleNamespace(data=[row])

        matched = [r for r in rows if all(r.get(c) == v for c, v in self._filters)]
        if self._update is not None:
            for row in matched:
                row.update(self._update)
        return SimpleNamespace(data=[dict(r) for r in matched])


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.errors = {}
        self.queries = []
        self.ids = itertools.count(1)
        self.auth = MagicMock()
        self.auth.get_session.return_value = None

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query


def make_user(user_id='u1', name='Ana', email='ana@x.com'):
    return SimpleNamespace(id=user_id, email=email, user_metadata={'name': name})


def post_row(post_id, content, created_at, author_id='u2', author='Ben', category='', comments=None, location=None):
    return {
        'id': post_id,
        'title': '',
        'content': content,
        'author_id': author_id,
        'created_at': created_at,
        'updated_at': created_at,
        'location': location,
        'category': category,
        'profiles': {'name': author, 'avatar_url': None},
        'comments': comments or [],
    }


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def seeded_supabase(fake_supabase):
    fake_supabase.tables['posts'] = [
        post_row(
            'p2', 'Offering free tomatoes from the garden', '2024-04-02T10:00:00+00:00',
            author='Cleo', category='food,garden',
            location={'address': 'Southside Community Garden'},
        ),
        post_row(
            'p1', 'Looking for a ride to the clinic on Tuesday', '2024-04-01T09:00:00+00:00',
            author='Ben', category='transport',
            comments=[
                {'id': 'c2', 'content': 'Still need it?', 'created_at': '2024-04-01T11:00:00+00:00',
                 'author_id': 'u3', 'profiles': {'name': 'Dee'}},
                {'id': 'c1', 'content': 'I can drive you', 'created_at': '2024-04-01T10:00:00+00:00',
                 'author_id': 'u1', 'profiles': {'name': 'Ana'}},
            ],
        ),
    ]
    fake_supabase.tables['profiles'] = [
        {'id': 'u1', 'name': 'Ana', 'email': 'ana@x.com', 'location': 'Chattanooga, TN',
         'bio': None, 'avatar_url': None,
         'created_at': '2024-01-01T00:00:00+00:00', 'updated_at': '2024-01-01T00:00:00+00:00'},
    ]
    return fake_supabase


@pytest.fixture
def app(seeded_supabase):
    return create_app(TestingConfig, supabase_client=seeded_supabase)


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def workspace(app):
    return app.extensions['woven_circles']


@pytest.fixture
def auth_headers(app):
    """Authorization header for user u1 (Ana)."""
    with app.app_context():
        token = create_access_token(identity='u1', additional_claims={'name': 'Ana'})
    return {'Authorization': f"Bearer {token}"}


@pytest.fixture
def other_headers(app):
    """Authorization header for user u2 (Ben)."""
    with app.app_context():
        token = create_access_token(identity='u2', additional_claims={'name': 'Ben'})
    return {'Authorization': f"Bearer {token}"}
