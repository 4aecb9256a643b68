"""Uniform success/failure envelope returned by every network-backed call.

Callers inspect the outcome instead of catching exceptions::

    result = await client.get_reviews()
    if result.ok:
        for review in result.data:
            ...
    else:
        print(result.kind, result.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from mystat.domain.errors import ResultError

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a call did not produce a payload."""

    UNAUTHENTICATED = "unauthenticated"
    TRANSPORT = "transport"
    UPSTREAM = "upstream"
    DECODE = "decode"


@dataclass(frozen=True)
class Success(Generic[T]):
    """The call succeeded; ``data`` is the parsed response payload."""

    data: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.data


@dataclass(frozen=True)
class Failure:
    """The call failed.

    ``details`` holds the raw error document from the service when there
    is one (for example the ``[{field, message}]`` list returned by login).
    """

    kind: ErrorKind
    message: str
    details: Any = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ResultError(self)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


Result = Union[Success[T], Failure]


__all__ = ["ErrorKind", "Failure", "Result", "Success"]
