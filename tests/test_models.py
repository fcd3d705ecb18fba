"""
Tests for the data models and boundary normalization.
"""
import math
from types import SimpleNamespace

import pytest

from tests.conftest import post_row
from woven_circles.errors import ValidationError
from woven_circles.models import (
    Coordinates,
    Identity,
    Location,
    Post,
    clean_tags,
    normalize_coordinates,
    normalize_location,
    split_tags,
)


class TestNormalizeCoordinates:

    def test_plain_mapping(self):
        assert normalize_coordinates({'lat': 35.03, 'lng': -85.3}) == Coordinates(35.03, -85.3)

    def test_string_values_are_coerced(self):
        coords = normalize_coordinates({'lat': '35.0456', 'lng': '-85.3097'})
        assert coords == Coordinates(35.0456, -85.3097)
        assert type(coords.lat) is float

    def test_accessors_are_called_exactly_once(self):
        calls = []

        def lat():
            calls.append('lat')
            return 35.1

        def lng():
            calls.append('lng')
            return -85.2

        coords = normalize_coordinates(SimpleNamespace(lat=lat, lng=lng))

        assert coords == Coordinates(35.1, -85.2)
        assert calls == ['lat', 'lng']
        assert not callable(coords.lat)
        # Reading the normalized value never goes back to the accessor
        coords.lat, coords.lng
        assert calls == ['lat', 'lng']

    def test_pair(self):
        assert normalize_coordinates((1, 2)) == Coordinates(1.0, 2.0)

    def test_none_passes_through(self):
        assert normalize_coordinates(None) is None

    @pytest.mark.parametrize('value', [
        {'lat': float('nan'), 'lng': 1},
        {'lat': 1, 'lng': math.inf},
        {'lat': 'north', 'lng': 1},
        {'lat': 1},
        (1, 2, 3),
        42,
    ])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValidationError):
            normalize_coordinates(value)


class TestNormalizeLocation:

    @pytest.mark.parametrize('value, expected', [
        (None, None),
        ('', None),
        ({'address': 'Downtown'}, Location('Downtown')),
        ('{"address": "Downtown"}', Location('Downtown')),
        ('Community Garden', Location('Community Garden')),
        ({'address': '  '}, None),
        ('"Riverfront"', Location('Riverfront')),
        ('37402', Location('37402')),
        (' true ', Location('true')),
        ('[1]', Location('[1]')),
    ])
    def test_shapes(self, value, expected):
        assert normalize_location(value) == expected


def test_split_tags_drops_blanks():
    assert split_tags('food, housing,,') == ['food', 'housing']
    assert split_tags(None) == []


def test_clean_tags_dedupes_exact_matches_in_order():
    assert clean_tags(['health', ' transport', 'health', '', 'Health']) == ['health', 'transport', 'Health']


def test_identity_from_user_defaults_name():
    user = SimpleNamespace(id='u9', email='x@y.z', user_metadata={})
    assert Identity.from_user(user).name == 'Anonymous'


def test_post_from_row():
    row = post_row(
        'p1', 'Hello', '2024-04-01T09:00:00Z', category='a,b',
        location='{"address": "Main St"}',
        comments=[
            {'id': 'c2', 'content': 'later', 'created_at': '2024-04-01T11:00:00+00:00', 'author_id': 'u3'},
            {'id': 'c1', 'content': 'first', 'created_at': '2024-04-01T10:00:00+00:00', 'author_id': 'u1',
             'profiles': {'name': 'Ana'}},
        ],
    )
    row['profiles'] = None

    post = Post.from_row(row)

    assert post.user_name == 'Anonymous'
    assert post.tags == ['a', 'b']
    assert post.location == Location('Main St')
    assert post.likes == 0 and post.user_liked is False
    assert [c.id for c in post.comments] == ['c1', 'c2']
    assert post.comments[0].user_name == 'Ana'
    assert post.to_dict()['location'] == {'address': 'Main St'}


def test_comments_sort_by_instant_across_offsets():
    row = post_row(
        'p1', 'Hello', '2024-04-01T09:00:00Z',
        comments=[
            # 10:30 UTC
            {'id': 'c2', 'content': 'later', 'created_at': '2024-04-01T05:30:00-05:00', 'author_id': 'u3'},
            # 10:00 UTC
            {'id': 'c1', 'content': 'first', 'created_at': '2024-04-01T12:00:00+02:00', 'author_id': 'u1'},
            {'id': 'c0', 'content': 'undated', 'created_at': None, 'author_id': 'u2'},
        ],
    )

    post = Post.from_row(row)

    assert [c.id for c in post.comments] == ['c0', 'c1', 'c2']
