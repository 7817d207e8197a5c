"""Tagged outcomes returned by the core services.

Services return ``Ok(value)`` or ``Err(kind)`` instead of raising; routers
inspect the tag and map it to an HTTP response.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DUPLICATE_IDENTITY = "duplicate_identity"
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_REVOKED = "token_revoked"
    RESOURCE_NOT_FOUND = "resource_not_found"
    INTERNAL = "internal"

    @property
    def is_unauthenticated(self) -> bool:
        return self in _TOKEN_FAILURES


_TOKEN_FAILURES = frozenset({ErrorKind.TOKEN_MALFORMED, ErrorKind.TOKEN_EXPIRED, ErrorKind.TOKEN_REVOKED})


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class Identity:
    """Authenticated caller resolved from a valid session token."""

    user_id: int
    username: Optional[str] = None
