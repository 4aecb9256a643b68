"""CLI interface for the MyStat client.

All Click commands live in this package; ``mystat`` (the console script)
and ``python -m mystat.interfaces.cli`` both run :func:`cli`.
"""

from .__main__ import cli
from .portal import (
    activity,
    delete_homework,
    exams,
    get,
    homework,
    leaders,
    login,
    news,
    schedule,
    upload_homework,
)

__all__ = [
    "activity",
    "cli",
    "delete_homework",
    "exams",
    "get",
    "homework",
    "leaders",
    "login",
    "news",
    "schedule",
    "upload_homework",
]
