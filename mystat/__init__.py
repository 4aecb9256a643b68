"""
MyStat package initializer.

This package provides an asynchronous client for the MyStat student portal
API: login, bearer token tracking and typed access to the portal endpoints.

The package exposes a ``__version__`` attribute indicating the installed
version. The version is read from pyproject.toml via importlib.metadata.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mystat")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

from mystat.domain.models import (
    Credential,
    ErrorKind,
    Failure,
    HomeworkStatus,
    HomeworkType,
    Result,
    Session,
    Success,
)
from mystat.services.portal import MystatClient

__all__: list[str] = [
    "Credential",
    "ErrorKind",
    "Failure",
    "HomeworkStatus",
    "HomeworkType",
    "MystatClient",
    "Result",
    "Session",
    "Success",
    "__version__",
]
