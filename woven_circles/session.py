"""
Identity session cache.

Owns the one current identity of a viewer and mirrors it from the
Supabase auth client. Components observe changes through ``subscribe``
instead of reading ambient global state.
"""
import logging
from dataclasses import dataclass

from woven_circles.errors import (
    EmailAlreadyRegistered,
    EmailNotConfirmed,
    IdentityServiceError,
    InvalidCredentials,
    OAuthError,
    ValidationError,
    format_error,
)
from woven_circles.models import Identity

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class PendingRegistration:
    name: str
    email: str
    confirmation_required: bool = True

    def to_dict(self):
        return {
            'name': self.name,
            'email': self.email,
            'confirmation_required': self.confirmation_required,
        }


def _require(**fields):
    missing = [name for name, value in fields.items() if not (value or '').strip()]
    if missing:
        raise ValidationError(f"Please fill in all required fields: {', '.join(missing)}")


class IdentitySessionCache:
    def __init__(self, auth, site_url='', default_location=''):
        self._auth = auth
        self._site_url = site_url.rstrip('/')
        self._default_location = default_location
        self._identity = None
        self._subscribers = []
        self._auth_subscription = None

    @property
    def identity(self):
        return self._identity

    @property
    def is_authenticated(self):
        return self._identity is not None

    def subscribe(self, callback):
        """Register callback(identity_or_none); returns an unsubscribe function"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_identity(self, identity):
        previous = self._identity
        self._identity = identity
        if previous != identity:
            for callback in list(self._subscribers):
                callback(identity)

    def _identity_from_session(self, session):
        user = getattr(session, 'user', None) if session else None
        return Identity.from_user(user) if user else None

    def _on_auth_state_change(self, event, session):
        logger.debug("Auth state change: %s", event)
        self._set_identity(self._identity_from_session(session))

    def restore(self):
        """Load any existing session and start listening for auth changes"""
        try:
            session = self._auth.get_session()
        except Exception as e:
            logger.warning("Could not restore session: %s", e)
            session = None
        self._set_identity(self._identity_from_session(session))

        if self._auth_subscription is None:
            self._auth_subscription = self._auth.on_auth_state_change(self._on_auth_state_change)
        return self._identity

    def close(self):
        """Stop listening for identity service changes"""
        subscription, self._auth_subscription = self._auth_subscription, None
        if subscription is not None and hasattr(subscription, 'unsubscribe'):
            subscription.unsubscribe()

    def login(self, email, password):
        _require(email=email, password=password)
        try:
            response = self._auth.sign_in_with_password({'email': email.strip(), 'password': password})
        except Exception as e:
            logger.info("Login failed for %s: %s", email, e)
            if 'email not confirmed' in format_error(e).lower():
                raise EmailNotConfirmed() from e
            raise InvalidCredentials() from e

        if response is None or response.user is None:
            raise InvalidCredentials()
        identity = Identity.from_user(response.user)
        self._set_identity(identity)
        logger.info("Logged in user %s", identity.id)
        return identity

    def register(self, name, email, password):
        _require(name=name, email=email, password=password)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        try:
            response = self._auth.sign_up({
                'email': email.strip(),
                'password': password,
                'options': {
                    'data': {
                        'name': name.strip(),
                        'location': self._default_location,
                    },
                },
            })
        except Exception as e:
            message = format_error(e).lower()
            logger.info("Registration failed for %s: %s", email, e)
            if 'already registered' in message or 'email taken' in message:
                raise EmailAlreadyRegistered() from e
            raise IdentityServiceError('There was an error creating your account') from e

        # The account is pending email confirmation; the identity is set by a later login
        session = getattr(response, 'session', None)
        return PendingRegistration(
            name=name.strip(),
            email=email.strip(),
            confirmation_required=session is None,
        )

    def sign_in_with_oauth(self, provider):
        """Start the redirect-based flow and return the provider URL"""
        if not (provider or '').strip():
            raise ValidationError('An OAuth provider is required')
        try:
            response = self._auth.sign_in_with_oauth({
                'provider': provider,
                'options': {
                    'redirect_to': f"{self._site_url}/auth/callback",
                    'query_params': {
                        'access_type': 'offline',
                        'prompt': 'consent',
                    },
                },
            })
        except Exception as e:
            logger.error("Error signing in with %s: %s", provider, e)
            raise OAuthError(f"There was an error signing in with {provider}") from e

        url = getattr(response, 'url', None)
        if not url:
            raise OAuthError(f"There was an error signing in with {provider}")
        return url

    def complete_oauth(self, code):
        if not (code or '').strip():
            raise ValidationError('Missing authorization code')
        try:
            response = self._auth.exchange_code_for_session({'auth_code': code})
        except Exception as e:
            logger.error("Error completing OAuth sign in: %s", e)
            raise OAuthError() from e

        identity = self._identity_from_session(getattr(response, 'session', None))
        if identity is None and getattr(response, 'user', None) is not None:
            identity = Identity.from_user(response.user)
        if identity is None:
            raise OAuthError()
        self._set_identity(identity)
        return identity

    def logout(self):
        if self._identity is None:
            return
        self._set_identity(None)
        try:
            self._auth.sign_out()
        except Exception as e:
            # The local identity is already cleared; the remote session expires on its own
            logger.warning("Error logging out: %s", e)

    def request_password_reset(self, email):
        _require(email=email)
        try:
            self._auth.reset_password_for_email(
                email.strip(), {'redirect_to': f"{self._site_url}/reset-password"}
            )
        except Exception as e:
            logger.error("Error requesting password reset: %s", e)
            raise IdentityServiceError(format_error(e)) from e

    def update_password(self, password):
        _require(password=password)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        try:
            self._auth.update_user({'password': password})
        except Exception as e:
            logger.error("Error updating password: %s", e)
            raise IdentityServiceError(format_error(e) or 'Failed to reset password') from e
