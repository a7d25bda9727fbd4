"""
Validation and normalization of event submissions.

``validate_event`` takes the raw field mapping a client submitted (a
multipart form turned into a dict, or a JSON body) and returns a
``ValidationResult``.  The result carries either a complete
``SanitizedEvent`` or the full list of human-readable problems, never
both.  Every field is checked independently so a single call reports
all errors at once.

The per-field helpers (``sanitize_plain_text``, ``normalize_date``,
``normalize_time``, ``parse_string_array`` and ``ensure_secure_url``)
are pure functions returning ``None`` for input they reject.  Nothing
here performs I/O, so validation always runs before any database work.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from ..schemas.event import SanitizedEvent


ALLOWED_MODES = ("online", "offline", "hybrid")

TEXT_FIELD_LIMITS: Dict[str, int] = {
    "title": 100,
    "description": 1000,
    "overview": 500,
    "venue": 100,
    "location": 150,
    "audience": 150,
    "organizer": 150,
}

ARRAY_FIELDS = ("agenda", "tags")

_MARKUP_CHARS = re.compile(r"[<>]")
_TIME_PATTERN = re.compile(r"([0-9]{1,2}):([0-9]{2})(?:\s*(AM|PM))?", re.IGNORECASE)

# English month names are matched explicitly rather than through
# ``strptime("%B")``, which follows the process locale.
_MONTHS = {
    name: number
    for number, names in enumerate(
        (
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ),
        start=1,
    )
    for name in names
}
_MONTH_DAY_YEAR = re.compile(r"([a-z]+)\.?\s+([0-9]{1,2}),?\s+([0-9]{4})", re.IGNORECASE)
_DAY_MONTH_YEAR = re.compile(r"([0-9]{1,2})\s+([a-z]+)\.?,?\s+([0-9]{4})", re.IGNORECASE)
_US_NUMERIC = re.compile(r"([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})")
_SLASHED_ISO = re.compile(r"([0-9]{4})/([0-9]{1,2})/([0-9]{1,2})")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate_event``.

    Exactly one of ``event`` and ``errors`` is populated.
    """

    event: Optional[SanitizedEvent] = None
    errors: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.event is None) == (not self.errors):
            raise ValueError("ValidationResult needs exactly one of event or errors")

    @property
    def is_valid(self) -> bool:
        return self.event is not None


def strip_markup(value: str) -> str:
    """Remove every ``<`` and ``>`` character."""
    return _MARKUP_CHARS.sub("", value)


def sanitize_plain_text(value: str, max_length: int) -> str:
    """Trim, strip angle brackets and truncate to ``max_length``.

    Brackets are removed before truncation so they never count against
    the limit.  The result is trimmed again on both sides, which makes
    the function a fixed point for already clean text.
    """
    cleaned = strip_markup(value.strip()).strip()
    return cleaned[:max_length].rstrip()


def _build_date(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date(value: str) -> Optional[str]:
    """Return ``value`` as ``YYYY-MM-DD`` or ``None`` if it is not a date.

    Accepts ISO 8601 dates and datetimes (a trailing ``Z`` included);
    datetimes carrying an offset are converted to UTC first.  Also
    accepts ``March 15, 2024``, ``15 Mar 2024``, ``03/15/2024`` and
    ``2024/03/15``.
    """
    candidate = value.strip()
    if not candidate:
        return None

    iso_candidate = candidate
    if iso_candidate[-1] in "Zz":
        iso_candidate = iso_candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(iso_candidate)
    except ValueError:
        parsed = None
    if parsed is not None:
        if parsed.tzinfo is not None:
            try:
                parsed = parsed.astimezone(timezone.utc)
            except OverflowError:
                # The offset pushes the instant outside years 1..9999.
                return None
        return parsed.date().isoformat()

    match = _MONTH_DAY_YEAR.fullmatch(candidate)
    if match and match.group(1).lower() in _MONTHS:
        return _build_date(int(match.group(3)), _MONTHS[match.group(1).lower()], int(match.group(2)))

    match = _DAY_MONTH_YEAR.fullmatch(candidate)
    if match and match.group(2).lower() in _MONTHS:
        return _build_date(int(match.group(3)), _MONTHS[match.group(2).lower()], int(match.group(1)))

    match = _US_NUMERIC.fullmatch(candidate)
    if match:
        return _build_date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = _SLASHED_ISO.fullmatch(candidate)
    if match:
        return _build_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    return None


def normalize_time(value: str) -> Optional[str]:
    """Convert ``H:MM``/``HH:MM`` with optional ``AM``/``PM`` to ``HH:MM``."""
    match = _TIME_PATTERN.fullmatch(value.strip())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = (match.group(3) or "").upper()

    if period == "PM" and hours != 12:
        hours += 12
    elif period == "AM" and hours == 12:
        hours = 0

    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


def parse_string_array(value: str) -> Optional[List[str]]:
    """Parse a JSON list, falling back to comma separated text.

    Anything that is not valid JSON is split on commas when it contains
    one and is otherwise taken as a single item.  Valid JSON that is not
    a list is rejected, and so is JSON nested too deeply to decode.
    Non-string items are dropped, as are items left empty after trimming
    and bracket stripping.  Returns ``None`` when no item survives.
    """
    try:
        candidate: Any = json.loads(value)
    except RecursionError:
        return None
    except ValueError:
        candidate = value.split(",") if "," in value else [value]

    if not isinstance(candidate, list):
        return None

    items: List[str] = []
    for item in candidate:
        text = strip_markup(item).strip() if isinstance(item, str) else ""
        if text:
            items.append(text)
    return items or None


def ensure_secure_url(value: str) -> Optional[str]:
    """Return the canonical form of an absolute ``https`` URL, else ``None``."""
    candidate = value.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None
    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() != "https" or not parts.hostname:
        return None

    userinfo, _, _ = parts.netloc.rpartition("@")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{userinfo}@{host}" if userinfo else host
    if port is not None and port != 443:
        netloc = f"{netloc}:{port}"
    return urlunsplit(("https", netloc, parts.path or "/", parts.query, parts.fragment))


def _string_value(raw: Mapping[str, Any], name: str) -> Optional[str]:
    value = raw.get(name)
    return value if isinstance(value, str) else None


def validate_event(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate and normalize a raw event submission.

    Fields are checked in a fixed order (text fields, ``date``,
    ``time``, ``mode``, ``agenda``, ``tags``, ``image``) and every
    problem is reported.  A missing or non-string value yields
    ``"<field> is required"``; a present but malformed value yields the
    field-specific message.
    """
    errors: List[str] = []
    sanitized: Dict[str, Any] = {}

    for name, max_length in TEXT_FIELD_LIMITS.items():
        raw_value = _string_value(raw, name)
        if raw_value is None:
            errors.append(f"{name} is required")
            continue
        clean_value = sanitize_plain_text(raw_value, max_length)
        if not clean_value:
            errors.append(f"{name} cannot be empty")
            continue
        sanitized[name] = clean_value

    raw_date = _string_value(raw, "date")
    if raw_date is None:
        errors.append("date is required")
    else:
        normalized_date = normalize_date(raw_date)
        if normalized_date is None:
            errors.append("date must be a valid date")
        else:
            sanitized["date"] = normalized_date

    raw_time = _string_value(raw, "time")
    if raw_time is None:
        errors.append("time is required")
    else:
        normalized_time = normalize_time(raw_time)
        if normalized_time is None:
            errors.append("time must be in HH:MM or HH:MM AM/PM format")
        else:
            sanitized["time"] = normalized_time

    raw_mode = _string_value(raw, "mode")
    if raw_mode is None:
        errors.append("mode is required")
    else:
        mode = raw_mode.strip().lower()
        if mode not in ALLOWED_MODES:
            errors.append(f"mode must be one of: {', '.join(ALLOWED_MODES)}")
        else:
            sanitized["mode"] = mode

    for name in ARRAY_FIELDS:
        raw_items = _string_value(raw, name)
        if raw_items is None:
            errors.append(f"{name} is required")
            continue
        items = parse_string_array(raw_items) if raw_items else None
        if items is None:
            errors.append(f"{name} must be an array of strings with at least one item")
        else:
            sanitized[name] = items

    raw_image = _string_value(raw, "image")
    if raw_image is None:
        errors.append("image is required")
    else:
        secure_image = ensure_secure_url(raw_image)
        if secure_image is None:
            errors.append("image must be a valid HTTPS URL")
        else:
            sanitized["image"] = secure_image

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(event=SanitizedEvent(**sanitized))


def to_raw_submission(event: SanitizedEvent) -> Dict[str, str]:
    """Render a sanitized event back into raw string form.

    Lists become JSON arrays, which is what clients submit through a
    multipart form.  Used to merge partial updates with stored events.
    """
    raw: Dict[str, str] = {}
    for name in SanitizedEvent.model_fields:
        value = getattr(event, name)
        raw[name] = json.dumps(value) if isinstance(value, list) else value
    return raw
