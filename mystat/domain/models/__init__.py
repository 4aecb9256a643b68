"""Domain models for the MyStat client."""

from .credentials import Credential
from .homework import HomeworkStatus, HomeworkType
from .result import ErrorKind, Failure, Result, Success
from .session import Session, expiry_from_field, resolve_expiry, utcnow

__all__ = [
    "Credential",
    "ErrorKind",
    "Failure",
    "HomeworkStatus",
    "HomeworkType",
    "Result",
    "Session",
    "Success",
    "expiry_from_field",
    "resolve_expiry",
    "utcnow",
]
