from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(
            f"{field_name} không hợp lệ",
            errors=[{"field": field_name, "msg": "Không được để trống"}],
        )
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def require_half_step(value: Any, field_name: str, *, min_value: float, max_value: float) -> float:
    """Number in [min_value, max_value] that is a multiple of 0.5."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} phải là số", errors=[{"field": field_name, "msg": "Không phải số"}])

    if number < min_value:
        raise ValidationError(f"{field_name} phải lớn hơn hoặc bằng {min_value:g}")
    if number > max_value:
        raise ValidationError(f"{field_name} không được vượt quá {max_value:g}")
    if (number * 2) != int(number * 2):
        raise ValidationError(f"{field_name} phải là số nguyên hoặc số thập phân .5")
    return number
