"""HTTP adapters for the MyStat API.

This package provides the login exchange and the authenticated request
pipeline used by :class:`mystat.services.portal.MystatClient`.
"""

from .auth import (
    Authenticator,
    LOGIN_PATH,
    describe_transport_error,
    request_failure,
    token_claim_expiry,
)
from .executor import (
    APPLICATION_FAILURE_CODE,
    MAX_AUTH_RETRIES,
    RequestExecutor,
    RequestSpec,
    application_error,
    decode_response,
)

__all__ = [
    "APPLICATION_FAILURE_CODE",
    "Authenticator",
    "LOGIN_PATH",
    "MAX_AUTH_RETRIES",
    "RequestExecutor",
    "RequestSpec",
    "application_error",
    "decode_response",
    "describe_transport_error",
    "request_failure",
    "token_claim_expiry",
]
