"""Login credentials supplied by the caller."""

from __future__ import annotations

from dataclasses import dataclass, field

from mystat.domain.errors import InvalidCredentialError


@dataclass(frozen=True)
class Credential:
    """Immutable username/password pair.

    The library only checks that both values are non-empty; the remote
    service is responsible for validating their format.
    """

    username: str
    password: str = field(repr=False)

    def validate(self) -> None:
        if not self.username:
            raise InvalidCredentialError("username must not be empty")
        if not self.password:
            raise InvalidCredentialError("password must not be empty")

    def as_login_fields(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password}


__all__ = ["Credential"]
