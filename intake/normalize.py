"""
Intake normalization.

Turns an arbitrary parsed webhook body into the monday column-value map and
the item title. Everything here is deterministic and does no I/O:
1. Unwrap the vendor envelope
2. Coerce each known field to a trimmed string
3. Normalize per column kind (dates, phones, labels, emails)
4. Apply the board's empty/invalid policy per field
5. Drop empty entries in one final pass
"""
import copy
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import phonenumbers

from .board import BoardConfig, ColumnKind, FieldSpec, InvalidPolicy, FINGERPRINT_BOARD
from .envelope import EnvelopeShape, unwrap_envelope

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " – "

# ASCII digits only
_DATE_ONLY = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DATE_TIME = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")
_NON_DIGITS = re.compile(r"[^0-9]")

# Tried in order after ISO-8601; callers are US-based so month comes first
DATE_FORMATS = [
    "%m/%d/%Y",  # 11/21/2025
    "%m/%d/%Y %H:%M",  # 11/21/2025 15:30
    "%m/%d/%Y %H:%M:%S",  # 11/21/2025 15:30:00
    "%m/%d/%Y %I:%M %p",  # 11/21/2025 3:30 PM
    "%m-%d-%Y",  # 11-21-2025
    "%m/%d/%y",  # 11/21/25
    "%Y/%m/%d",  # 2025/11/21
    "%B %d, %Y",  # November 21, 2025
    "%B %d %Y",  # November 21 2025
    "%b %d, %Y",  # Nov 21, 2025
    "%b %d %Y",  # Nov 21 2025
    "%d %B %Y",  # 21 November 2025
    "%d %b %Y",  # 21 Nov 2025
    "%a %b %d %Y",  # Fri Nov 21 2025
    "%a, %d %b %Y %H:%M:%S %z",  # Fri, 21 Nov 2025 15:30:00 -0800
    "%a, %d %b %Y %H:%M:%S GMT",  # Fri, 21 Nov 2025 23:30:00 GMT
]


@dataclass(frozen=True)
class NormalizedPhone:
    """Digits-only phone number plus the region it was read in."""
    digits: str
    region_hint: str

    def to_column(self) -> Dict[str, str]:
        """monday phone column value."""
        return {"phone": self.digits, "countryShortName": self.region_hint}


@dataclass(frozen=True)
class IntakeResult:
    """Output of normalize_intake."""
    shape: EnvelopeShape
    column_values: Dict[str, Any]
    item_name: str


def coerce_text(value: Any) -> str:
    """None -> "", JSON spelling for booleans, whole floats and nested values, else str() trimmed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value).strip()


def _utc_today(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d")


def _to_utc_date(parsed: datetime) -> str:
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%d")


def parse_date(value: str) -> Optional[str]:
    """
    Parse a date or datetime string for a monday date column.

    Values already shaped like YYYY-MM-DD or YYYY-MM-DD HH:MM:SS are returned
    unchanged so they are never re-read in another timezone.

    Args:
        value: Trimmed date input

    Returns:
        Date string, or None if empty or unparseable
    """
    if not value:
        return None

    if any(ch.isdigit() and not ch.isascii() for ch in value):
        logger.debug(f"Date with non-ASCII digits {value!r}")
        return None

    if _DATE_ONLY.fullmatch(value) or _DATE_TIME.fullmatch(value):
        return value

    iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return _to_utc_date(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if fmt.endswith("GMT"):
            parsed = parsed.replace(tzinfo=timezone.utc)
        return _to_utc_date(parsed)

    logger.debug(f"Unparseable date {value!r}")
    return None


def normalize_date(value: Any, now: Optional[datetime] = None) -> str:
    """Normalize a date input, falling back to today's UTC date."""
    return parse_date(coerce_text(value)) or _utc_today(now)


def normalize_phone(value: Any, country_code: int = 1) -> Optional[NormalizedPhone]:
    """
    Reduce a free-form phone string to its digits.

    Handles:
    - "1 (714) 555-1212" -> 7145551212 (domestic prefix dropped)
    - "714.555.1212" -> 7145551212
    - "5551212" -> 5551212 (7 digits is the minimum)

    Returns:
        NormalizedPhone, or None if fewer than 7 digits remain
    """
    digits = _NON_DIGITS.sub("", coerce_text(value))
    if not digits:
        return None

    prefix = str(country_code)
    if len(digits) == 11 and digits.startswith(prefix):
        digits = digits[len(prefix):]

    if len(digits) < 7:
        logger.debug(f"Dropping phone with {len(digits)} digits")
        return None

    region = phonenumbers.region_code_for_country_code(country_code)
    return NormalizedPhone(digits=digits, region_hint=region)


def derive_title(name: str, issue: str, fallback: str) -> str:
    """Item title: "name – issue", else name, else the fallback."""
    if name and issue:
        return f"{name}{TITLE_SEPARATOR}{issue}"
    return name or fallback


def elide_empty(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop entries whose value is None or an empty string."""
    return {key: value for key, value in values.items() if value is not None and value != ""}


def _column_value(spec: FieldSpec, raw: str, board: BoardConfig) -> Any:
    if not raw:
        return None
    if spec.kind == ColumnKind.TEXT:
        return raw
    if spec.kind == ColumnKind.DATE:
        return parse_date(raw)
    if spec.kind == ColumnKind.PHONE:
        phone = normalize_phone(raw, board.phone_country_code)
        return phone.to_column() if phone else None
    if spec.kind == ColumnKind.EMAIL:
        return {"email": raw, "text": raw}
    if spec.kind == ColumnKind.LABEL:
        return {"label": raw} if raw in spec.choices else None
    raise ValueError(f"Unknown column kind: {spec.kind}")


def resolve_field(spec: FieldSpec, raw: str, board: BoardConfig, today: str) -> Any:
    """
    Column value for one field, with the field's invalid policy applied.

    Returns None when the column should be left out.
    """
    value = _column_value(spec, raw, board)
    if value is not None:
        return value

    if spec.on_invalid == InvalidPolicy.DEFAULT:
        return today if spec.kind == ColumnKind.DATE else spec.default
    if spec.on_invalid == InvalidPolicy.SENTINEL and raw:
        return {"label": spec.sentinel}
    return None


def build_column_values(
    record: Dict[str, Any],
    board: BoardConfig = FINGERPRINT_BOARD,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Assemble the column-value map for an unwrapped intake record.

    Unknown keys in the record are ignored. Constant columns are always
    written. Empty entries are removed after the full map is built.
    """
    today = _utc_today(now)
    candidate: Dict[str, Any] = {}

    for spec in board.fields:
        raw = coerce_text(record.get(spec.source))
        candidate[spec.column_id] = resolve_field(spec, raw, board, today)

    for column_id, value in board.constant_columns:
        candidate[column_id] = copy.deepcopy(value)

    return elide_empty(candidate)


def normalize_intake(
    body: Any,
    board: BoardConfig = FINGERPRINT_BOARD,
    now: Optional[datetime] = None,
) -> IntakeResult:
    """
    Normalize a parsed webhook body.

    Args:
        body: Parsed JSON body, possibly wrapped in a vendor envelope
        board: Destination board
        now: Clock override for the date default

    Returns:
        IntakeResult with the cleaned column values and item title
    """
    shape, record = unwrap_envelope(body)
    logger.debug(f"Envelope shape={shape.value} keys={sorted(record.keys())}")

    column_values = build_column_values(record, board, now)
    item_name = derive_title(
        coerce_text(record.get("name")),
        coerce_text(record.get("issue")),
        board.fallback_title,
    )

    return IntakeResult(shape=shape, column_values=column_values, item_name=item_name)
