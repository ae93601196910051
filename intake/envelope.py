"""
Envelope unwrapping for inbound intake payloads.

Voice-agent platforms wrap the intake record in different layers depending on
how the webhook step is configured. Each known shape has a matcher that either
returns the inner record or None; matchers are tried in order and the first
match wins. A body that matches nothing is treated as the record itself.
"""
import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class EnvelopeShape(str, Enum):
    PAYLOAD = "PAYLOAD"  # {"payload": {...}}
    JSON = "JSON"  # {"json": {...}} (ZVA webhook step)
    DATA = "DATA"  # {"data": {...}}
    BODY_STRING = "BODY_STRING"  # {"body": "<json text>"}
    BODY_OBJECT = "BODY_OBJECT"  # {"body": {...}}
    BARE = "BARE"  # Already the record


Matcher = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


def _object_under(key: str) -> Matcher:
    def match(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        inner = body.get(key)
        return inner if isinstance(inner, dict) else None
    return match


def _body_string(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    raw = body.get("body")
    if not isinstance(raw, str):
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning(f"Failed to parse body.body as JSON, using top-level object: {raw[:200]!r}")
        return None
    if not isinstance(parsed, dict):
        logger.warning(f"body.body is JSON but not an object ({type(parsed).__name__}), using top-level object")
        return None
    return parsed


ENVELOPE_MATCHERS: List[Tuple[EnvelopeShape, Matcher]] = [
    (EnvelopeShape.PAYLOAD, _object_under("payload")),
    (EnvelopeShape.JSON, _object_under("json")),
    (EnvelopeShape.DATA, _object_under("data")),
    (EnvelopeShape.BODY_STRING, _body_string),
    (EnvelopeShape.BODY_OBJECT, _object_under("body")),
]


def unwrap_envelope(body: Any) -> Tuple[EnvelopeShape, Dict[str, Any]]:
    """
    Strip one layer of vendor envelope from a parsed JSON body.

    Args:
        body: Parsed request body (any JSON value)

    Returns:
        Tuple of (matched shape, inner record). Non-object bodies yield
        (BARE, {}) so downstream extraction sees an empty record.
    """
    if not isinstance(body, dict):
        return EnvelopeShape.BARE, {}

    for shape, matcher in ENVELOPE_MATCHERS:
        inner = matcher(body)
        if inner is not None:
            return shape, inner

    return EnvelopeShape.BARE, body
