import logging
from dataclasses import dataclass

from woven_circles.errors import AuthRequired, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSubmitted:
    post_id: str
    reporter_id: str
    reason: str

    def to_dict(self):
        return {'post_id': self.post_id, 'reporter_id': self.reporter_id, 'reason': self.reason}


class ReportFlow:
    """Dialog state for reporting one post"""

    def __init__(self, feed):
        self._feed = feed
        self._listeners = []
        self.post_id = None
        self.reporter_id = None
        self.reason = ''

    @property
    def is_open(self):
        return self.post_id is not None

    def subscribe(self, callback):
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback) if callback in self._listeners else None

    def open(self, post_id, viewer_id):
        if not viewer_id:
            raise AuthRequired('You need to be logged in to report posts')
        self.post_id = post_id
        self.reporter_id = viewer_id
        self.reason = ''

    def submit(self, reason):
        if not self.is_open:
            raise ValidationError('No post selected for reporting')
        self.reason = reason or ''
        # Raises ValidationError on a blank reason and leaves the dialog open
        self._feed.report(self.post_id, self.reason)

        event = ReportSubmitted(
            post_id=self.post_id,
            reporter_id=self.reporter_id,
            reason=self.reason.strip(),
        )
        self.cancel()
        for callback in list(self._listeners):
            callback(event)
        return event

    def cancel(self):
        self.post_id = None
        self.reporter_id = None
        self.reason = ''
