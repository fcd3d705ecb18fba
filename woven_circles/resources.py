"""
Resource store and the add-resource draft flow.

Coordinates are resolved to plain floats when they enter the store, so
nothing downstream ever holds a map SDK accessor.
"""
import logging
import threading
import time

from woven_circles.errors import AuthRequired, NotFound, ValidationError
from woven_circles.models import Resource, normalize_coordinates

logger = logging.getLogger(__name__)

SEED_RESOURCES = [
    {
        'id': 'resource-1',
        'name': 'Southside Community Garden',
        'description': (
            'Urban garden with 20 plots available for community members. '
            'Offers free gardening workshops every month.'
        ),
        'category': 'Food',
        'coordinates': {'lat': 35.0345, 'lng': -85.3094},
        'added_by': 'user-2',
    },
    {
        'id': 'resource-2',
        'name': 'Northshore Free Health Clinic',
        'description': (
            'Provides basic healthcare services to uninsured and underinsured '
            'community members. Open Tuesdays and Thursdays.'
        ),
        'category': 'Healthcare',
        'coordinates': {'lat': 35.0628, 'lng': -85.3097},
        'added_by': 'user-3',
    },
    {
        'id': 'resource-3',
        'name': 'Downtown Mutual Aid Food Pantry',
        'description': 'Community-run food pantry offering free groceries. No ID required. Open daily 3-7pm.',
        'category': 'Food',
        'coordinates': {'lat': 35.0456, 'lng': -85.3097},
        'added_by': 'user-4',
    },
]


def _resource_from_record(record):
    return Resource(
        id=record['id'],
        name=record['name'],
        description=record['description'],
        category=record['category'],
        coordinates=normalize_coordinates(record['coordinates']),
        added_by=record['added_by'],
    )


class ResourceStore:
    def __init__(self, geocoder, seed=None):
        self._geocoder = geocoder
        self._seed = SEED_RESOURCES if seed is None else seed
        self._resources = []
        self._subscribers = []
        self._fetch_lock = threading.Lock()

    @property
    def resources(self):
        return list(self._resources)

    def subscribe(self, callback):
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback) if callback in self._subscribers else None

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self.resources)

    def fetch_all(self):
        if not self._fetch_lock.acquire(blocking=False):
            logger.info("Resource fetch already in flight, returning current resources")
            return self.resources
        try:
            self._resources = [_resource_from_record(record) for record in self._seed]
        finally:
            self._fetch_lock.release()
        logger.debug("Loaded %d resources", len(self._resources))
        self._notify()
        return self.resources

    def get(self, resource_id):
        for resource in self._resources:
            if resource.id == resource_id:
                return resource
        raise NotFound(f"Resource '{resource_id}' not found")

    def add(self, name, description, category, coordinates, added_by):
        name = (name or '').strip()
        description = (description or '').strip()
        category = (category or '').strip()
        if not name or not description or not category or coordinates is None:
            raise ValidationError('Please fill in all fields and select a location on the map')

        resource = Resource(
            id=f"resource-{int(time.time() * 1000)}",
            name=name,
            description=description,
            category=category,
            coordinates=normalize_coordinates(coordinates),
            added_by=added_by or 'unknown',
        )
        self._resources.append(resource)
        logger.info("Added resource %s (%s)", resource.id, resource.name)
        self._notify()
        return resource

    def geocode(self, address):
        return self._geocoder.geocode(address)

    def search(self, term=''):
        needle = (term or '').lower()
        return [
            r for r in self._resources
            if needle in r.name.lower()
            or needle in r.description.lower()
            or needle in r.category.lower()
        ]


class AddResourceFlow:
    """Draft state while a user places a new resource on the map"""

    def __init__(self, store):
        self._store = store
        self.active = False
        self.coordinates = None
        self.address = ''

    def begin(self, viewer_id):
        if not viewer_id:
            raise AuthRequired('You need to be logged in to add resources')
        self.active = True

    def set_coordinates(self, coordinates):
        self.coordinates = normalize_coordinates(coordinates)

    def search_address(self, address):
        # On failure the pending coordinates stay as they were
        result = self._store.geocode(address)
        self.coordinates = result.coordinates
        self.address = result.formatted_address
        return result

    def submit(self, name, description, category, added_by):
        if not self.active:
            raise ValidationError('Start adding a resource before submitting it')
        resource = self._store.add(name, description, category, self.coordinates, added_by)
        self.reset()
        return resource

    def cancel(self):
        self.reset()

    def reset(self):
        self.active = False
        self.coordinates = None
        self.address = ''

    def to_dict(self):
        return {
            'active': self.active,
            'coordinates': self.coordinates.to_dict() if self.coordinates else None,
            'address': self.address,
        }
