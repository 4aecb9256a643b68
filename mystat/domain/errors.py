"""Exception types for programmer errors.

Expected failures (bad credentials, upstream errors, network problems) are
never raised; they are returned as :class:`~mystat.domain.models.Failure`
values. The exceptions below signal misuse of the library.
"""


class MystatError(Exception):
    """Base exception for all MyStat client errors."""


class InvalidCredentialError(MystatError, ValueError):
    """Username or password is empty."""


class ClientClosedError(MystatError, RuntimeError):
    """The client was used after :meth:`close` was called."""


class ResultError(MystatError):
    """Raised by :meth:`Failure.unwrap` when the result holds no payload."""

    def __init__(self, failure: object) -> None:
        super().__init__(str(failure))
        self.failure = failure


__all__ = [
    "ClientClosedError",
    "InvalidCredentialError",
    "MystatError",
    "ResultError",
]
