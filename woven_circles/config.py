import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Supabase configuration
    # Get these from: Supabase Dashboard > Settings > API
    SUPABASE_URL = os.getenv('SUPABASE_URL')
    SUPABASE_KEY = os.getenv('SUPABASE_KEY')

    # JWT configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_TOKEN_LOCATION = ['headers', 'cookies']

    # CORS configuration
    CORS_HEADERS = 'Content-Type'

    # Google Maps configuration (geocoding)
    GOOGLE_MAPS_API_KEY = os.getenv('GOOGLE_MAPS_API_KEY', '')
    GEOCODE_TIMEOUT = float(os.getenv('GEOCODE_TIMEOUT', '10'))

    # Public origin of the site, used for OAuth and password reset redirects
    SITE_URL = os.getenv('SITE_URL', 'http://localhost:3000')

    # Location stored on new accounts until the user edits their profile
    DEFAULT_LOCATION = os.getenv('DEFAULT_LOCATION', 'Chattanooga, TN')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls, config):
        """Raise ValueError when a required setting is missing"""
        if not config.get('SUPABASE_URL'):
            raise ValueError("SUPABASE_URL environment variable is required!")
        if not config.get('SUPABASE_KEY'):
            raise ValueError("SUPABASE_KEY environment variable is required!")


class TestingConfig(Config):
    TESTING = True
    SUPABASE_URL = 'http://localhost:54321'
    SUPABASE_KEY = 'test-anon-key'
    JWT_SECRET_KEY = 'test-secret-key-with-at-least-32-bytes!!'
    GOOGLE_MAPS_API_KEY = 'test-maps-key'
