"""Date and time filters available to every template."""

from __future__ import annotations

import datetime as dt
from typing import Optional

import jinja2
from markupsafe import Markup
from zoneinfo import ZoneInfo

from .utils import as_utc

DATETIME_FORMATS = {
    "short": lambda d: d.strftime("%Y-%m-%d %H:%M"),
    "medium": lambda d: f"{d:%b} {d.day} {d:%Y %H:%M}",
    "long": lambda d: f"{d:%B} {d.day} {d:%Y %H:%M:%S}",
    "full": lambda d: f"{d:%A}, {d:%B} {d.day} {d:%Y %H:%M:%S}.{d.microsecond:06d}",
    "iso": lambda d: d.isoformat(timespec="seconds"),
    "unix": lambda d: str(int(d.timestamp())),
}

DATE_FORMATS = {
    "short": lambda d: d.strftime("%Y-%m-%d"),
    "medium": lambda d: f"{d:%b} {d.day} {d:%Y}",
    "long": lambda d: f"{d:%B} {d.day} {d:%Y}",
    "full": lambda d: f"{d:%A}, {d:%B} {d.day} {d:%Y}",
    "iso": lambda d: d.date().isoformat(),
    "unix": lambda d: str(int(d.timestamp())),
}

TIME_FORMATS = {
    "short": lambda d: d.strftime("%H:%M"),
    "medium": lambda d: d.strftime("%H:%M:%S"),
    "long": lambda d: d.strftime("%H:%M:%S.%f"),
    "full": lambda d: d.strftime("%H:%M:%S.%f"),
    "iso": lambda d: d.timetz().isoformat(timespec="seconds"),
    "unix": lambda d: str(int(d.timestamp())),
}


def to_datetime(value: object) -> dt.datetime:
    """Coerce a datetime, date, Unix timestamp or ISO-8601 string to an aware datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, dt.datetime):
        return as_utc(value)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(dt.datetime.fromisoformat(text))
        except ValueError as exc:
            raise ValueError(f"not a valid date-time: {value!r}") from exc
    raise TypeError(f"cannot format {type(value).__name__} as a date-time")


def _format(value: object, format: str, tz: Optional[str], formats: dict) -> str:
    moment = to_datetime(value).astimezone(ZoneInfo(tz) if tz else dt.timezone.utc)
    named = formats.get(format)
    if named is not None:
        return named(moment)
    return moment.strftime(format)


def datetimeformat(value: object, format: str = "medium", tz: Optional[str] = None) -> str:
    return _format(value, format, tz, DATETIME_FORMATS)


def dateformat(value: object, format: str = "medium", tz: Optional[str] = None) -> str:
    return _format(value, format, tz, DATE_FORMATS)


def timeformat(value: object, format: str = "medium", tz: Optional[str] = None) -> str:
    return _format(value, format, tz, TIME_FORMATS)


def published_on(value: object, **kwargs: str) -> Markup:
    """``Published on <time>`` fragment: ``kwargs`` shape the visible date, the attribute is ISO."""
    user_date = datetimeformat(value, **kwargs)
    iso_date = datetimeformat(value, format="iso")
    return Markup('Published on <time datetime="{}">{} UTC</time>').format(iso_date, user_date)


def now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def add_to_environment(env: jinja2.Environment) -> None:
    env.filters["datetimeformat"] = datetimeformat
    env.filters["dateformat"] = dateformat
    env.filters["timeformat"] = timeformat
    env.globals["now"] = now
