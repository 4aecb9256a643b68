"""Authenticated request execution with one-shot recovery from 401 responses.

:class:`RequestExecutor` owns the client's :class:`Session`. Every logical
call goes through :meth:`RequestExecutor.execute`, which

1. makes sure a non-expired session exists, logging in if needed,
2. sends the request with the bearer token and locale headers,
3. on HTTP 401 drops the session, logs in again and retries exactly once,
4. turns the response into a :class:`Success` or :class:`Failure`.

Concurrent callers that find the session missing or expired share a single
login: the first one starts it, the others await the same task.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Literal, Mapping

import httpx
from pydantic import TypeAdapter, ValidationError

from mystat.domain.models import (
    Credential,
    ErrorKind,
    Failure,
    Result,
    Session,
    Success,
    utcnow,
)
from mystat.infrastructure.observability import get_logger, log_context

from .auth import Authenticator, Clock, request_failure

logger = get_logger(__name__)

MAX_AUTH_RETRIES = 1

# Value of the JSON ``code`` field that marks an application-level failure.
APPLICATION_FAILURE_CODE = 0

UnauthorizedHook = Callable[[str], None]


@dataclass(frozen=True)
class RequestSpec:
    """One logical request, relative to the API root.

    ``json`` and ``files`` are mutually exclusive; ``files`` produces a
    multipart body and may carry plain fields as ``(None, value)`` tuples.
    """

    method: Literal["GET", "POST"]
    path: str
    params: Mapping[str, Any] | None = None
    json: Any = None
    files: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.json is not None and self.files is not None:
            raise ValueError("RequestSpec takes either a JSON or a multipart body, not both")

    @property
    def body_kind(self) -> Literal["none", "json", "multipart"]:
        if self.files is not None:
            return "multipart"
        if self.json is not None:
            return "json"
        return "none"


def application_error(payload: Any) -> str | None:
    """Return the service message if ``payload`` is a failure envelope.

    Some endpoint families answer with HTTP 200 and a ``{code, message}``
    document; ``code == 0`` means the operation failed.
    """
    if not isinstance(payload, dict) or "code" not in payload or "message" not in payload:
        return None
    code = payload["code"]
    if isinstance(code, bool) or code != APPLICATION_FAILURE_CODE:
        return None
    return str(payload["message"] or "Request failed")


def decode_response(
    response: httpx.Response, shape: TypeAdapter[Any] | None = None
) -> Result[Any]:
    """Classify a non-401 response.

    Precedence: application failure marker, then HTTP status, then shape.
    The successful payload is returned exactly as parsed.
    """
    status = response.status_code
    try:
        payload = response.json()
    except ValueError:
        if not response.is_success:
            return Failure(
                ErrorKind.UPSTREAM,
                f"HTTP {status}: {response.text[:200]}",
                status_code=status,
            )
        return Failure(ErrorKind.DECODE, "Response body is not valid JSON", status_code=status)

    message = application_error(payload)
    if message is not None:
        return Failure(ErrorKind.UPSTREAM, message, details=payload, status_code=status)
    if not response.is_success:
        detail = payload.get("message") if isinstance(payload, dict) else None
        return Failure(
            ErrorKind.UPSTREAM,
            str(detail or f"HTTP {status}"),
            details=payload,
            status_code=status,
        )

    if shape is not None:
        try:
            shape.validate_python(payload)
        except ValidationError as exc:
            return Failure(
                ErrorKind.DECODE,
                f"Unexpected response shape ({exc.error_count()} validation errors)",
                details=exc.errors(include_url=False),
                status_code=status,
            )
    return Success(payload)


class RequestExecutor:
    """Send authenticated requests and keep the session fresh."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        authenticator: Authenticator,
        credential: Credential,
        *,
        language: str,
        session: Session | None = None,
        expiry_margin: timedelta = timedelta(0),
        on_unauthorized: UnauthorizedHook | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._http = http
        self._authenticator = authenticator
        self.credential = credential
        self.language = language
        self._session = session
        self._expiry_margin = expiry_margin
        self._on_unauthorized = on_unauthorized
        self._clock = clock
        self._pending_refresh: asyncio.Task[Result[Session]] | None = None

    # -------------------- session state --------------------
    @property
    def session(self) -> Session | None:
        return self._session

    def install(self, session: Session) -> None:
        self._session = session

    def invalidate(self) -> None:
        """Forget the current session so the next call logs in again."""
        self._session = None

    def session_is_valid(self) -> bool:
        session = self._session
        return session is not None and not session.is_expired(
            self._clock(), margin=self._expiry_margin
        )

    async def ensure_session(self, *, timeout: float | None = None) -> Result[Session]:
        session = self._session
        if session is not None and not session.is_expired(
            self._clock(), margin=self._expiry_margin
        ):
            return Success(session)
        return await self.refresh(timeout=timeout)

    async def refresh(self, *, timeout: float | None = None) -> Result[Session]:
        """Log in again, joining a login that is already in flight."""
        task = self._pending_refresh
        if task is None:
            logger.info("Session missing or expired; logging in")
            task = asyncio.create_task(self._login(timeout))
            self._pending_refresh = task
            task.add_done_callback(self._clear_pending)
        else:
            logger.debug("Waiting for login already in progress")
        # A cancelled waiter must not cancel the shared login
        return await asyncio.shield(task)

    async def _login(self, timeout: float | None) -> Result[Session]:
        result = await self._authenticator.authenticate(self.credential, timeout=timeout)
        if result.ok:
            self._session = result.data
        return result

    def _clear_pending(self, task: asyncio.Task[Result[Session]]) -> None:
        if self._pending_refresh is task:
            self._pending_refresh = None
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Login task raised %r", task.exception())

    # -------------------- request execution --------------------
    def _headers(self, session: Session) -> dict[str, str]:
        return {
            "accept": "application/json, text/plain, */*",
            "accept-language": self.language,
            "x-language": self.language,
            "authorization": f"Bearer {session.token}",
        }

    async def _send(
        self, spec: RequestSpec, session: Session, timeout: float | None
    ) -> httpx.Response:
        return await self._http.request(
            spec.method,
            spec.path,
            params=spec.params,
            json=spec.json,
            files=spec.files,
            headers=self._headers(session),
            timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
        )

    async def execute(
        self,
        spec: RequestSpec,
        *,
        shape: TypeAdapter[Any] | None = None,
        timeout: float | None = None,
    ) -> Result[Any]:
        """Perform ``spec`` and return its outcome.

        Args:
            spec: What to send.
            shape: Optional validator for the JSON payload; a mismatch yields
                ``Failure(DECODE)``.
            timeout: Per-call deadline in seconds, client default when None.
        """
        attempt = 0
        while True:
            session_result = await self.ensure_session(timeout=timeout)
            if not session_result.ok:
                return session_result
            session = session_result.data

            with log_context(method=spec.method, path=spec.path, attempt=attempt + 1):
                logger.debug("Sending request")
                try:
                    response = await self._send(spec, session, timeout)
                except httpx.RequestError as exc:
                    failure = request_failure(exc)
                    logger.warning("Request failed: %s", failure.message)
                    return failure

                if response.status_code != 401:
                    result = decode_response(response, shape)
                    if not result.ok:
                        logger.warning("Request unsuccessful: %s", result)
                    return result

                # Another caller may already have replaced the rejected session
                if self._session is session:
                    self.invalidate()
                if self._on_unauthorized is not None:
                    self._on_unauthorized(spec.path)
                if attempt >= MAX_AUTH_RETRIES:
                    logger.warning("Authorization rejected after re-login; giving up")
                    return Failure(
                        ErrorKind.UNAUTHENTICATED,
                        "Access token is expired or invalid",
                        status_code=401,
                    )
                logger.info("Authorization rejected; logging in again and retrying")
                attempt += 1


__all__ = [
    "APPLICATION_FAILURE_CODE",
    "MAX_AUTH_RETRIES",
    "RequestExecutor",
    "RequestSpec",
    "UnauthorizedHook",
    "application_error",
    "decode_response",
]
