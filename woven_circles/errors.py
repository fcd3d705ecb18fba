"""
Error taxonomy shared by the stores and the HTTP layer.

Each error carries the HTTP status the blueprints answer with, so a single
Flask error handler can turn any of them into ``{'error': message}``.
"""


class MutualAidError(Exception):
    status_code = 500
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(MutualAidError):
    status_code = 400
    default_message = 'Invalid input'


class AuthRequired(MutualAidError):
    status_code = 401
    default_message = 'Please log in to continue'


class InvalidCredentials(MutualAidError):
    status_code = 401
    default_message = 'Please check your credentials and try again'


class EmailNotConfirmed(MutualAidError):
    status_code = 403
    default_message = 'Please check your email to confirm your account before logging in'


class NotFound(MutualAidError):
    status_code = 404
    default_message = 'Not found'


class EmailAlreadyRegistered(MutualAidError):
    status_code = 409
    default_message = 'This email is already registered'


class FetchFailed(MutualAidError):
    status_code = 502
    default_message = 'There was a problem loading the data. Please try again.'


class GeocodeError(MutualAidError):
    status_code = 502
    default_message = 'Failed to find address. Please try again.'


class ZeroResults(GeocodeError):
    status_code = 404
    default_message = 'No locations found for this address'


class OAuthError(MutualAidError):
    status_code = 502
    default_message = 'There was an error signing in with the provider'


class IdentityServiceError(MutualAidError):
    status_code = 502
    default_message = 'The authentication service could not complete the request'


def format_error(error):
    """Best-effort human readable message for any raised object"""
    if isinstance(error, str):
        return error
    message = getattr(error, 'message', None) or str(error)
    return message or MutualAidError.default_message
