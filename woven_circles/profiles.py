import logging

from woven_circles.errors import FetchFailed
from woven_circles.models import Profile

logger = logging.getLogger(__name__)


class ProfileStore:
    def __init__(self, client):
        self._client = client

    def get(self, user_id):
        try:
            response = (
                self._client.table('profiles')
                .select('*')
                .eq('id', user_id)
                .execute()
            )
        except Exception as e:
            logger.error("Error fetching profile: %s", e)
            return None

        if not response.data:
            return None
        return Profile.from_row(response.data[0])

    def update(self, user_id, name=None, location=None, bio=None):
        updates = {
            key: value
            for key, value in (('name', name), ('location', location), ('bio', bio))
            if value is not None
        }
        if not updates:
            return self.get(user_id)

        try:
            self._client.table('profiles').update(updates).eq('id', user_id).execute()
        except Exception as e:
            logger.error("Error updating profile: %s", e)
            raise FetchFailed('Failed to update profile') from e

        logger.info("Updated profile %s", user_id)
        return self.get(user_id)
