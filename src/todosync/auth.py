from __future__ import annotations

import structlog

from .client import TodoApiClient
from .errors import AuthenticationError, NotAuthenticatedError, RequestError
from .normalizer import extract_auth
from .schemas import AuthPayload
from .session import SessionContext

log = structlog.get_logger()


# PUBLIC_INTERFACE
async def sign_in(client: TodoApiClient, session: SessionContext, *, email: str, password: str) -> AuthPayload:
    """
    Authenticate with email/password and store the returned credential in the session.

    Raises:
        AuthenticationError: the server rejected the credentials, could not be reached,
            or answered without a token. The session is left untouched.
        pydantic.ValidationError: the form itself is invalid.
    """
    try:
        body = await client.sign_in(email, password)
        payload = extract_auth(body)
    except RequestError as exc:
        log.info("sign_in_failed", email=email, reason=exc.message)
        raise AuthenticationError(exc.message or "Sign-in failed", cause=exc) from exc

    session.set_credentials(payload.token, payload.user)
    log.info("signed_in", email=email)
    return payload


# PUBLIC_INTERFACE
async def sign_up(
    client: TodoApiClient, session: SessionContext, *, name: str, email: str, password: str
) -> AuthPayload:
    """
    Register a new account and store the returned credential in the session.

    Raises:
        AuthenticationError: registration failed (message from the server when it sent one).
        pydantic.ValidationError: the form itself is invalid.
    """
    try:
        body = await client.sign_up(name, email, password)
        payload = extract_auth(body)
    except RequestError as exc:
        log.info("sign_up_failed", email=email, reason=exc.message)
        raise AuthenticationError(exc.message or "Signup failed", cause=exc) from exc

    session.set_credentials(payload.token, payload.user)
    log.info("signed_up", email=email)
    return payload


# PUBLIC_INTERFACE
def require_authenticated(session: SessionContext) -> None:
    """Gate for the authenticated view: raises NotAuthenticatedError without a token."""
    if not session.is_authenticated:
        raise NotAuthenticatedError("Sign in to manage your todos")
