from typing import Any, Optional


def blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def trimmed(s: Optional[str]) -> str:
    return (s or "").strip()


def as_rating(v: Any) -> Optional[int]:
    """Star widgets send 0 for "no rating"; treat it like an unset field."""
    if v is None or v == "" or v == 0:
        return None
    return v
