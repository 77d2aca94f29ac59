from datetime import datetime
from typing import Optional


def money(v: float) -> str:
    return f"${float(v or 0.0):.2f}"


def order_date(dt: Optional[datetime]) -> str:
    # e.g. "Mar 4, 2025, 09:15 AM"
    if dt is None:
        return ""
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}, {dt.strftime('%I:%M %p')}"
