from datetime import datetime
from typing import Union, Optional


def parse_iso_timestamp(s: Optional[str]) -> Optional[datetime]:
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def format_date(ts: Union[str, datetime, None]) -> Optional[str]:
    """
    Table cell date, e.g. '16.10.2026'. Unparseable input is returned as-is.
    """
    dt = ts if isinstance(ts, datetime) else parse_iso_timestamp(ts)
    if dt is None:
        return ts
    return dt.strftime("%d.%m.%Y")


def format_datetime(ts: Union[str, datetime, None]) -> Optional[str]:
    dt = ts if isinstance(ts, datetime) else parse_iso_timestamp(ts)
    if dt is None:
        return ts
    return dt.strftime("%d.%m.%Y, %H:%M:%S")
