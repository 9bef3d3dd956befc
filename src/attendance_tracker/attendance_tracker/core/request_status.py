"""Request status registry.

Status codes are stored as integers. The first four codes are fixed;
CONFIRMED is the optional intermediate review step and was appended as 5
so stored codes of the other states never change.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any


class RequestStatus(IntEnum):
    PENDING = 1
    APPROVED = 2
    REJECTED = 3
    CANCELLED = 4
    CONFIRMED = 5


OPEN_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED})

_BY_TEXT = {s.name.lower(): s for s in RequestStatus}


def code_from_text(value: Any) -> int:
    """Map text (or an int code) to a status code.

    Missing or unrecognized input maps to PENDING.
    """
    if isinstance(value, bool) or value is None:
        return int(RequestStatus.PENDING)

    if isinstance(value, int):
        try:
            return int(RequestStatus(value))
        except ValueError:
            return int(RequestStatus.PENDING)

    if isinstance(value, str):
        text = value.strip().lower()
        if text.isdigit():
            return code_from_text(int(text))
        status = _BY_TEXT.get(text)
        if status is not None:
            return int(status)

    return int(RequestStatus.PENDING)


def text_from_code(code: Any) -> str:
    try:
        return RequestStatus(int(code)).name.lower()
    except (TypeError, ValueError):
        return "unknown"
