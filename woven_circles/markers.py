import logging

from woven_circles.models import Marker

logger = logging.getLogger(__name__)

MAP_CENTER = {'lat': 35.0456, 'lng': -85.3097}
MAP_ZOOM = 12


class MapMarkerSync:
    """Keeps map markers in step with the resource store and relays clicks"""

    def __init__(self, store, add_flow):
        self._store = store
        self._add_flow = add_flow
        self._listeners = []
        self.markers = []
        self.selected = None
        self._unsubscribe = store.subscribe(self._rebuild)
        self._rebuild(store.resources)

    def close(self):
        """Stop following the store"""
        self._unsubscribe()

    def _rebuild(self, resources):
        # Resource counts are small, so the whole list is replaced
        self.markers = [Marker(id=r.id, position=r.coordinates) for r in resources]

    def subscribe(self, callback):
        """callback(resource) fires whenever a resource is selected"""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback) if callback in self._listeners else None

    def on_map_click(self, coordinates):
        if not self._add_flow.active:
            return False
        self._add_flow.set_coordinates(coordinates)
        return True

    def on_marker_click(self, resource_id):
        resource = self._store.get(resource_id)
        self.selected = resource
        logger.debug("Selected resource %s", resource_id)
        for callback in list(self._listeners):
            callback(resource)
        return resource

    def clear_selection(self):
        self.selected = None

    def to_dict(self):
        return {
            'center': dict(MAP_CENTER),
            'zoom': MAP_ZOOM,
            'markers': [m.to_dict() for m in self.markers],
            'selected': self.selected.to_dict() if self.selected else None,
            'draft': self._add_flow.to_dict(),
        }
