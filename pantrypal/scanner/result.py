"""Tagged result variants threaded through detection and the store boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]


class DetectionErrorKind(Enum):
    CREDENTIAL_MISSING = "credential_missing"
    NETWORK_FAILURE = "network_failure"
    PARSE_ERROR = "parse_error"
    NO_ITEMS_DETECTED = "no_items_detected"


# Kinds that mean live detection could not be trusted or performed.
FALLBACK_KINDS = frozenset({
    DetectionErrorKind.CREDENTIAL_MISSING,
    DetectionErrorKind.NETWORK_FAILURE,
    DetectionErrorKind.PARSE_ERROR,
})


@dataclass(frozen=True)
class DetectionError:
    kind: DetectionErrorKind
    message: str
    raw: str | None = None  # model reply, kept for parse diagnostics


class DbErrorKind(Enum):
    NOT_FOUND = "not_found"
    CONSTRAINT = "constraint"
    OPERATIONAL = "operational"
    INVALID_ROW = "invalid_row"


@dataclass(frozen=True)
class DbError:
    kind: DbErrorKind
    message: str
