"""
Workspace: the shared stores plus one viewer state per signed-in user.

Posts, resources and profiles are shared by everyone. Sign-in sessions,
feed filters, map selections, add-resource drafts and report dialogs belong
to a single viewer and are keyed by the JWT identity issued at login.
"""
import logging
import threading

from flask import current_app, g

from woven_circles.feed import FeedFilter, PostFeedStore
from woven_circles.geocoding import GoogleGeocoder
from woven_circles.markers import MapMarkerSync
from woven_circles.profiles import ProfileStore
from woven_circles.reports import ReportFlow
from woven_circles.resources import AddResourceFlow, ResourceStore
from woven_circles.session import IdentitySessionCache
from woven_circles.supabase_client import get_supabase, new_auth_client

logger = logging.getLogger(__name__)


class ViewerState:
    """The session, drafts and dialogs of one viewer"""

    def __init__(self, workspace, auth, guest=False):
        self.guest = guest
        self.session = IdentitySessionCache(auth, workspace.site_url, workspace.default_location)
        self.feed_filter = FeedFilter()
        self.add_resource = AddResourceFlow(workspace.resources)
        self.markers = MapMarkerSync(workspace.resources, self.add_resource)
        self.reports = ReportFlow(workspace.feed)

        self.session.subscribe(self._on_identity_change)

    def _on_identity_change(self, identity):
        # Drafts and open dialogs belong to whoever started them
        if identity is None:
            self.add_resource.reset()
            self.reports.cancel()

    def close(self):
        self.markers.close()
        self.session.close()


class Workspace:
    def __init__(self, client, geocoder, site_url='', default_location='', auth_factory=None):
        self.site_url = site_url
        self.default_location = default_location
        self.feed = PostFeedStore(client)
        self.profiles = ProfileStore(client)
        self.resources = ResourceStore(geocoder)
        self._shared_auth = client.auth
        self._auth_factory = auth_factory or (lambda: client.auth)
        self._viewers = {}
        self._viewers_lock = threading.Lock()
        self._oauth = None

    def _new_viewer(self):
        viewer = ViewerState(self, self._auth_factory())
        viewer.session.restore()
        return viewer

    def _new_session(self):
        return IdentitySessionCache(self._auth_factory(), self.site_url, self.default_location)

    def guest(self):
        """Throwaway state for a caller without a session; close it when done.

        Guests never sign in, so they read from the shared auth client
        without restoring anything from it.
        """
        return ViewerState(self, self._shared_auth, guest=True)

    def viewer(self, viewer_id) -> ViewerState:
        """State for viewer_id, created on first use"""
        with self._viewers_lock:
            viewer = self._viewers.get(viewer_id)
            if viewer is None:
                viewer = self._viewers[viewer_id] = self._new_viewer()
            return viewer

    def has_viewer(self, viewer_id):
        return viewer_id in self._viewers

    def _attach(self, identity, viewer):
        with self._viewers_lock:
            previous = self._viewers.get(identity.id)
            self._viewers[identity.id] = viewer
        if previous is not None and previous is not viewer:
            previous.close()
        logger.debug("Attached viewer state for %s", identity.id)
        return identity

    def login(self, email, password):
        viewer = self._new_viewer()
        try:
            identity = viewer.session.login(email, password)
        except Exception:
            viewer.close()
            raise
        return self._attach(identity, viewer)

    def register(self, name, email, password):
        # Registration never signs anyone in, so no viewer state is kept
        return self._new_session().register(name, email, password)

    def request_password_reset(self, email):
        self._new_session().request_password_reset(email)

    def sign_in_with_oauth(self, provider):
        # The redirect round trip completes on the client that started it
        if self._oauth is None:
            self._oauth = self._new_viewer()
        return self._oauth.session.sign_in_with_oauth(provider)

    def complete_oauth(self, code):
        viewer = self._oauth or self._new_viewer()
        try:
            identity = viewer.session.complete_oauth(code)
        except Exception:
            if viewer is not self._oauth:
                viewer.close()
            raise
        self._oauth = None
        return self._attach(identity, viewer)

    def logout(self, viewer_id):
        with self._viewers_lock:
            viewer = self._viewers.pop(viewer_id, None)
        if viewer is None:
            return False
        viewer.session.logout()
        viewer.close()
        logger.info("Ended viewer state for %s", viewer_id)
        return True

    def start(self):
        self.resources.fetch_all()
        return self


def init_workspace(app):
    geocoder = GoogleGeocoder(
        app.config['GOOGLE_MAPS_API_KEY'],
        timeout=app.config['GEOCODE_TIMEOUT'],
    )
    workspace = Workspace(
        get_supabase(),
        geocoder,
        site_url=app.config['SITE_URL'],
        default_location=app.config['DEFAULT_LOCATION'],
        auth_factory=new_auth_client,
    )
    app.extensions['woven_circles'] = workspace.start()
    app.teardown_appcontext(_release_guest)
    return workspace


def get_workspace() -> Workspace:
    return current_app.extensions['woven_circles']


def get_viewer(viewer_id) -> ViewerState:
    """Viewer state for the current request; guests get a throwaway one"""
    if 'viewer' not in g:
        workspace = get_workspace()
        g.viewer = workspace.viewer(viewer_id) if viewer_id else workspace.guest()
    return g.viewer


def _release_guest(exc):
    viewer = g.pop('viewer', None)
    if viewer is not None and viewer.guest:
        viewer.close()
