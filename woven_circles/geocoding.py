"""
Google Geocoding client.

Resolves a free-text address to the best-matching coordinates and the
canonical formatted address.
"""
import logging
from dataclasses import dataclass

import requests

from woven_circles.errors import GeocodeError, ValidationError, ZeroResults
from woven_circles.models import Coordinates, normalize_coordinates

logger = logging.getLogger(__name__)

GEOCODE_URL = 'https://maps.googleapis.com/maps/api/geocode/json'


@dataclass(frozen=True)
class GeocodeResult:
    coordinates: Coordinates
    formatted_address: str

    def to_dict(self):
        return {
            'coordinates': self.coordinates.to_dict(),
            'address': self.formatted_address,
        }


class GoogleGeocoder:
    def __init__(self, api_key, timeout=10, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def geocode(self, address):
        query = (address or '').strip()
        if not query:
            raise ValidationError('Please enter an address to search')
        if not self.api_key:
            raise GeocodeError('GOOGLE_MAPS_API_KEY is not configured')

        try:
            response = self._session.get(
                GEOCODE_URL,
                params={'address': query, 'key': self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Geocode request failed: %s", e)
            raise GeocodeError() from e

        status = data.get('status')
        results = data.get('results') or []
        if status == 'ZERO_RESULTS' or (status == 'OK' and not results):
            logger.info("Geocode found no results for %r", query)
            raise ZeroResults()
        if status != 'OK':
            logger.error("Geocode was not successful: %s", status)
            raise GeocodeError()

        best = results[0]
        try:
            coordinates = normalize_coordinates(best['geometry']['location'])
        except (KeyError, TypeError, ValidationError) as e:
            logger.error("Error processing geocoding result: %s", e)
            raise GeocodeError('Failed to process the location data. Please try again.') from e

        return GeocodeResult(
            coordinates=coordinates,
            formatted_address=str(best.get('formatted_address') or query),
        )
