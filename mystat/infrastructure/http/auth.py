"""Login exchange against the MyStat API.

The :class:`Authenticator` turns a :class:`~mystat.domain.models.Credential`
into a :class:`~mystat.domain.models.Session`. It performs one ``POST
auth/login`` and never touches shared state; installing the returned session
is the caller's job.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import jwt

from mystat.app.config import ClientSettings
from mystat.domain.models import (
    Credential,
    ErrorKind,
    Failure,
    Result,
    Session,
    Success,
    resolve_expiry,
    utcnow,
)
from mystat.infrastructure.observability import get_logger, log_context

logger = get_logger(__name__)

LOGIN_PATH = "auth/login"

# Status codes the login endpoint uses for rejected credentials.
_REJECTED_STATUSES = frozenset({400, 401, 403, 422})

Clock = Callable[[], datetime]


def describe_transport_error(exc: httpx.RequestError) -> str:
    """Return a short human-readable cause for a failed request."""
    if isinstance(exc, httpx.TimeoutException):
        return f"Request timed out: {exc}" if str(exc) else "Request timed out"
    return str(exc) or exc.__class__.__name__


def request_failure(exc: httpx.RequestError) -> Failure:
    """Map an httpx request error to a failure result.

    A body that cannot be decompressed is ``DECODE``; every other request
    error (connection, timeout, protocol, redirect loop) is ``TRANSPORT``.
    """
    if isinstance(exc, httpx.DecodingError):
        return Failure(ErrorKind.DECODE, f"Could not decode response body: {exc}")
    return Failure(ErrorKind.TRANSPORT, describe_transport_error(exc))



def token_claim_expiry(token: str) -> datetime | None:
    """Read the ``exp`` claim from a JWT without verifying its signature.

    Returns ``None`` when the token is not a JWT or carries no usable claim.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


def _field_messages(errors: list[Any]) -> str:
    messages = []
    for item in errors:
        if isinstance(item, dict) and item.get("message"):
            field = item.get("field")
            messages.append(f"{field}: {item['message']}" if field else str(item["message"]))
    return "; ".join(messages) or "Invalid login credentials"


class Authenticator:
    """Exchange credentials for a bearer session."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        settings: ClientSettings,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._http = http
        self._settings = settings
        self._clock = clock

    def _login_body(self, credential: Credential) -> dict[str, Any]:
        return {
            "application_key": self._settings.application_key,
            "id_city": None,
            **credential.as_login_fields(),
        }

    async def authenticate(
        self, credential: Credential, *, timeout: float | None = None
    ) -> Result[Session]:
        """Log in and return a fresh session.

        Args:
            credential: Username and password; both must be non-empty.
            timeout: Per-call deadline in seconds, client default when None.

        Returns:
            ``Success(Session)`` or a ``Failure`` of kind ``UNAUTHENTICATED``,
            ``TRANSPORT``, ``UPSTREAM`` or ``DECODE``.

        Raises:
            InvalidCredentialError: If username or password is empty.
        """
        credential.validate()

        with log_context(username=credential.username):
            try:
                response = await self._http.post(
                    LOGIN_PATH,
                    json=self._login_body(credential),
                    headers={"accept": "application/json"},
                    timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
                )
            except httpx.RequestError as exc:
                failure = request_failure(exc)
                logger.warning("Login request failed: %s", failure.message)
                return failure

            result = self._parse_login(response, issued_at=self._clock())
            if result.ok:
                logger.info(
                    "Logged in; session valid until %s",
                    result.data.expires_at.isoformat(),
                )
            else:
                logger.warning("Login failed: %s", result)
            return result

    def _parse_login(self, response: httpx.Response, *, issued_at: datetime) -> Result[Session]:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            if status in _REJECTED_STATUSES:
                return Failure(
                    ErrorKind.UNAUTHENTICATED,
                    "Invalid login credentials",
                    status_code=status,
                )
            if not response.is_success:
                return Failure(
                    ErrorKind.UPSTREAM,
                    f"Login failed with status {status}: {response.text[:200]}",
                    status_code=status,
                )
            return Failure(
                ErrorKind.DECODE, "Login response is not valid JSON", status_code=status
            )

        # Rejected credentials come back as a list of {field, message} objects
        if isinstance(body, list):
            return Failure(
                ErrorKind.UNAUTHENTICATED,
                _field_messages(body),
                details=body,
                status_code=status,
            )
        if status in _REJECTED_STATUSES:
            message = body.get("message") if isinstance(body, dict) else None
            return Failure(
                ErrorKind.UNAUTHENTICATED,
                str(message or "Invalid login credentials"),
                details=body,
                status_code=status,
            )
        if not response.is_success:
            return Failure(
                ErrorKind.UPSTREAM,
                f"Login failed with status {status}",
                details=body,
                status_code=status,
            )

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            return Failure(
                ErrorKind.DECODE,
                "Login response has no access_token",
                details=body,
                status_code=status,
            )

        expires_in = body.get("expires_in_access")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            expires_in = None
        expires_at = resolve_expiry(
            issued_at,
            expires_in=expires_in,
            claim_expiry=token_claim_expiry(token),
        )
        if expires_at is None:
            return Failure(
                ErrorKind.DECODE,
                "Login response carries no token lifetime",
                status_code=status,
            )
        if expires_at <= issued_at:
            return Failure(
                ErrorKind.DECODE,
                f"Login returned a token that expired at {expires_at.isoformat()}",
                status_code=status,
            )
        return Success(Session(token=token, issued_at=issued_at, expires_at=expires_at))


__all__ = [
    "Authenticator",
    "LOGIN_PATH",
    "describe_transport_error",
    "request_failure",
    "token_claim_expiry",
]
