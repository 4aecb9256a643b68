"""Client for the MyStat student portal API.

Usage:
    credential = Credential("student", "secret")
    async with MystatClient(credential) as client:
        result = await client.get_schedule_by_date()
        if result.ok:
            for lesson in result.data:
                print(lesson["started_at"], lesson["subject_name"])
        else:
            print(f"{result.kind.value}: {result.message}")

Every endpoint method returns a :class:`~mystat.domain.models.Success` with
the JSON payload exactly as the service sent it, or a
:class:`~mystat.domain.models.Failure` describing why it could not.
"""

from __future__ import annotations

import asyncio
import mimetypes
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Union

import httpx
from pydantic import TypeAdapter

from mystat.app.config import ClientSettings, load_settings
from mystat.domain.errors import ClientClosedError
from mystat.domain.models import (
    Credential,
    ErrorKind,
    Failure,
    HomeworkStatus,
    HomeworkType,
    Result,
    Session,
    Success,
    utcnow,
)
from mystat.infrastructure.http import Authenticator, RequestExecutor, RequestSpec
from mystat.infrastructure.http.auth import Clock
from mystat.infrastructure.http.executor import UnauthorizedHook
from mystat.infrastructure.observability import get_logger
from mystat.services import dto

logger = get_logger(__name__)

# Sent when the caller does not report time spent on an upload.
DEFAULT_SPENT_TIME = 99

UploadFile = Union[str, Path, tuple[str, bytes]]


def format_date_filter(day: date | None = None) -> str:
    """Format a date the way ``date_filter`` expects it (``YYYY-M-D``)."""
    day = day or date.today()
    return f"{day.year}-{day.month}-{day.day}"


def _file_part(file: UploadFile) -> tuple[str, bytes, str]:
    if isinstance(file, tuple):
        filename, content = file
    else:
        path = Path(file)
        filename, content = path.name, path.read_bytes()
    mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return filename, content, mime_type


class MystatClient:
    """Async client for the MyStat API.

    One instance holds one session. Concurrent calls on the same instance
    share it and never log in more than once at a time.

    Attributes:
        settings: Connection settings in effect for this client.
    """

    def __init__(
        self,
        credential: Credential,
        *,
        settings: ClientSettings | None = None,
        session: Session | None = None,
        group_id: int | None = None,
        on_unauthorized: UnauthorizedHook | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the client.

        Args:
            credential: Username and password used for every login.
            settings: Connection settings; :func:`load_settings` when omitted.
            session: A previously obtained session to start from.
            group_id: Known group id, skips the profile lookup for homework.
            on_unauthorized: Called with the request path whenever the
                service answers 401.
            transport: Custom httpx transport (tests, proxies).
            clock: Source of the current UTC time.
        """
        credential.validate()
        self.settings = settings or load_settings()
        self._http = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            transport=transport,
        )
        self._executor = RequestExecutor(
            self._http,
            Authenticator(self._http, self.settings, clock=clock),
            credential,
            language=self.settings.language,
            session=session,
            expiry_margin=timedelta(seconds=self.settings.expiry_margin_seconds),
            on_unauthorized=on_unauthorized,
            clock=clock,
        )
        self._group_id = group_id
        self._group_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_session(
        cls,
        credential: Credential,
        access_token: str,
        expires_at: datetime,
        **kwargs: Any,
    ) -> "MystatClient":
        """Create a client that starts with an existing bearer token.

        A token whose expiry has already passed is dropped, and the client
        logs in on its first request.
        """
        now = kwargs.get("clock", utcnow)()
        if expires_at <= now:
            logger.info("Saved token expired at %s; will log in again", expires_at.isoformat())
            return cls(credential, **kwargs)
        session = Session(token=access_token, issued_at=now, expires_at=expires_at)
        return cls(credential, session=session, **kwargs)

    async def __aenter__(self) -> "MystatClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._closed:
            self._closed = True
            await self._http.aclose()

    # -------------------- state --------------------
    @property
    def session(self) -> Session | None:
        """The current session, or None before the first login."""
        return self._executor.session

    @property
    def group_id(self) -> int | None:
        return self._group_id

    @property
    def credential(self) -> Credential:
        return self._executor.credential

    def set_credentials(self, credential: Credential) -> None:
        """Replace the login credentials.

        The current session and cached group id are dropped because they
        belong to the previous account.
        """
        credential.validate()
        self._executor.credential = credential
        self._executor.invalidate()
        self._group_id = None

    def set_language(self, language: str) -> None:
        self._executor.language = language

    def is_token_expired(self) -> bool:
        return not self._executor.session_is_valid()

    async def authenticate(self, *, timeout: float | None = None) -> Result[Session]:
        """Log in now and install the new session."""
        self._ensure_open()
        return await self._executor.refresh(timeout=timeout)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientClosedError("MystatClient is closed")

    async def _execute(
        self,
        spec: RequestSpec,
        shape: TypeAdapter[Any],
        timeout: float | None,
    ) -> Result[Any]:
        self._ensure_open()
        return await self._executor.execute(spec, shape=shape, timeout=timeout)

    async def _get(
        self,
        path: str,
        shape: TypeAdapter[Any],
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Result[Any]:
        return await self._execute(RequestSpec("GET", path, params=params), shape, timeout)

    # -------------------- profile --------------------
    async def get_user_info(self, *, timeout: float | None = None) -> Result[dict]:
        return await self._get("settings/user-info", dto.USER_INFO, timeout=timeout)

    async def get_user_settings(self, *, timeout: float | None = None) -> Result[dict]:
        return await self._get(
            "profile/operations/settings", dto.USER_SETTINGS, timeout=timeout
        )

    async def get_group_info(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get(
            "homework/settings/group-history", dto.GROUP_INFO_LIST, timeout=timeout
        )

    # -------------------- schedule and progress --------------------
    async def get_month_schedule(
        self, day: date | None = None, *, timeout: float | None = None
    ) -> Result[list]:
        return await self._get(
            "schedule/operations/get-month",
            dto.SCHEDULE,
            params={"date_filter": format_date_filter(day)},
            timeout=timeout,
        )

    async def get_schedule_by_date(
        self, day: date | None = None, *, timeout: float | None = None
    ) -> Result[list]:
        return await self._get(
            "schedule/operations/get-by-date",
            dto.SCHEDULE,
            params={"date_filter": format_date_filter(day)},
            timeout=timeout,
        )

    async def get_reviews(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("reviews/index/list", dto.REVIEWS, timeout=timeout)

    async def get_visits(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get(
            "progress/operations/student-visits", dto.VISITS, timeout=timeout
        )

    async def get_attendance(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("dashboard/chart/attendance", dto.ATTENDANCE, timeout=timeout)

    async def get_all_exams(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("progress/operations/student-exams", dto.EXAMS, timeout=timeout)

    async def get_future_exams(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("dashboard/info/future-exams", dto.EXAMS, timeout=timeout)

    async def get_stream_leaders(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("dashboard/progress/leader-stream", dto.LEADERS, timeout=timeout)

    async def get_group_leaders(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("dashboard/progress/leader-group", dto.LEADERS, timeout=timeout)

    async def get_activity(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("dashboard/progress/activity", dto.ACTIVITY, timeout=timeout)

    async def get_activity_log(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get(
            "dashboard/progress/activity-web", dto.ACTIVITY_LOG, timeout=timeout
        )

    # -------------------- news --------------------
    async def get_latest_news(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("news/operations/latest-news", dto.NEWS, timeout=timeout)

    async def get_news_details(
        self, news_id: int | str, *, timeout: float | None = None
    ) -> Result[dict]:
        return await self._get(
            "news/operations/detail-news",
            dto.NEWS_DETAILS,
            params={"news_id": news_id},
            timeout=timeout,
        )

    # -------------------- homework --------------------
    async def resolve_group_id(self, *, timeout: float | None = None) -> Result[int]:
        """Return the student's current group id, fetching it at most once.

        A failed lookup is returned as-is and not cached.
        """
        if self._group_id is not None:
            return Success(self._group_id)
        async with self._group_lock:
            if self._group_id is not None:
                return Success(self._group_id)
            info = await self.get_user_info(timeout=timeout)
            if not info.ok:
                return info
            group_id = info.data.get("current_group_id")
            if isinstance(group_id, bool) or not isinstance(group_id, int):
                return Failure(
                    ErrorKind.DECODE,
                    "User info carries no current_group_id",
                    details=info.data,
                )
            logger.debug("Resolved current group id %s", group_id)
            self._group_id = group_id
            return Success(group_id)

    async def get_homework_list(
        self,
        status: HomeworkStatus | int = HomeworkStatus.ACTIVE,
        page: int = 1,
        homework_type: HomeworkType | int = HomeworkType.HOMEWORK,
        *,
        timeout: float | None = None,
    ) -> Result[Any]:
        group = await self.resolve_group_id(timeout=timeout)
        if not group.ok:
            return group
        params = {
            "page": page,
            "status": int(status),
            "type": int(homework_type),
            "group_id": group.data,
        }
        return await self._get(
            "homework/operations/list", dto.HOMEWORK_LIST, params=params, timeout=timeout
        )

    async def get_homework_count(self, *, timeout: float | None = None) -> Result[list]:
        return await self._get("count/homework", dto.HOMEWORK_COUNT, timeout=timeout)

    async def upload_homework(
        self,
        homework_id: int,
        *,
        answer_text: str | None = None,
        file: UploadFile | None = None,
        spent_time_hour: int = DEFAULT_SPENT_TIME,
        spent_time_min: int = DEFAULT_SPENT_TIME,
        timeout: float | None = None,
    ) -> Result[dict]:
        """Submit a homework answer as text, a file, or both.

        Args:
            homework_id: Id of the homework being answered.
            answer_text: Free-text answer.
            file: Path of a file to attach, or a ``(filename, content)`` pair.
            spent_time_hour: Reported hours spent.
            spent_time_min: Reported minutes spent.
            timeout: Per-call deadline in seconds.

        Raises:
            ValueError: If neither ``answer_text`` nor ``file`` is given.
        """
        if not answer_text and file is None:
            raise ValueError("upload_homework needs answer_text, file, or both")

        parts: dict[str, Any] = {"id": (None, str(homework_id))}
        if answer_text:
            parts["answerText"] = (None, answer_text)
        if file is not None:
            parts["file"] = _file_part(file)
        parts["spentTimeHour"] = (None, str(spent_time_hour))
        parts["spentTimeMin"] = (None, str(spent_time_min))

        spec = RequestSpec("POST", "homework/operations/create", files=parts)
        return await self._execute(spec, dto.UPLOADED_HOMEWORK, timeout)

    async def delete_homework(
        self, homework_id: int | str, *, timeout: float | None = None
    ) -> Result[Any]:
        spec = RequestSpec("POST", "homework/operations/delete", json={"id": homework_id})
        return await self._execute(spec, dto.ANY_JSON, timeout)


__all__ = ["DEFAULT_SPENT_TIME", "MystatClient", "format_date_filter"]
