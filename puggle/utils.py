from __future__ import annotations

import datetime as dt
from urllib.parse import quote, urljoin


def join_url(base: str, path: str) -> str:
    """Resolve ``path`` against ``base`` the way a browser resolves a relative link."""
    return urljoin(base, quote(path))


def as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def rfc822_date(value: dt.datetime) -> str:
    return as_utc(value).strftime("%a, %d %b %Y %H:%M:%S %z")
