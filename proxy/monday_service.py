"""
Monday Service - creates board items via the monday.com GraphQL API.

This service:
1. Refuses to call out when MONDAY_API_KEY is not configured
2. Sends exactly one create_item mutation per request (no retries)
3. Classifies the response into a WriteOutcome instead of raising

The board id, endpoint and API version come from an injected BoardConfig.
"""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from intake import BoardConfig, FINGERPRINT_BOARD

logger = logging.getLogger(__name__)


CREATE_ITEM_MUTATION = """
mutation ($boardId: ID!, $itemName: String!, $columnValues: JSON!) {
  create_item(
    board_id: $boardId,
    item_name: $itemName,
    column_values: $columnValues
  ) {
    id
    name
    column_values {
      id
      text
    }
  }
}
"""


class OutcomeKind(str, Enum):
    SUCCESS = "SUCCESS"
    CONFIG_ERROR = "CONFIG_ERROR"  # No credential, nothing sent
    NETWORK_ERROR = "NETWORK_ERROR"  # Transport failed before a response
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"  # Response body was not JSON
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"  # Non-2xx or error/errors in body


@dataclass
class WriteOutcome:
    """Result of a single create_item call."""
    kind: OutcomeKind
    http_status: Optional[int] = None
    body: Any = None  # Parsed upstream body, untouched
    raw: Optional[str] = None  # Raw text when the body was not JSON
    error: Optional[str] = None
    item_id: str = ""
    item_name: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS


def _text_or_empty(value: Any) -> str:
    return "" if value is None else str(value)


def classify_response(status_code: int, text: str) -> WriteOutcome:
    """
    Classify a completed upstream exchange.

    Order:
    1. Body not JSON (empty included) -> MALFORMED_RESPONSE
    2. Non-2xx, or top-level error/errors -> UPSTREAM_REJECTED
    3. Otherwise SUCCESS with the created item's id and name ("" if missing)
    """
    try:
        body = json.loads(text)
    except ValueError:
        return WriteOutcome(kind=OutcomeKind.MALFORMED_RESPONSE, http_status=status_code, raw=text)

    has_errors = isinstance(body, dict) and bool(body.get("error") or body.get("errors"))
    if not 200 <= status_code < 300 or has_errors:
        return WriteOutcome(kind=OutcomeKind.UPSTREAM_REJECTED, http_status=status_code, body=body)

    data = body.get("data") if isinstance(body, dict) else None
    created = data.get("create_item") if isinstance(data, dict) else None
    if not isinstance(created, dict):
        created = {}

    return WriteOutcome(
        kind=OutcomeKind.SUCCESS,
        http_status=status_code,
        body=body,
        item_id=_text_or_empty(created.get("id")),
        item_name=_text_or_empty(created.get("name")),
    )


class MondayService:
    """Service for writing items to a monday.com board."""

    def __init__(
        self,
        api_key: Optional[str],
        board: BoardConfig = FINGERPRINT_BOARD,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Does NOT raise when api_key is missing; create_item reports CONFIG_ERROR instead."""
        self.api_key = api_key
        self.board = board
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """Check if a credential is available."""
        return bool(self.api_key)

    def build_variables(self, column_values: Dict[str, Any], item_name: str) -> Dict[str, str]:
        """GraphQL variables; columnValues must be a JSON-encoded string, not an object."""
        return {
            "boardId": self.board.board_id,
            "itemName": item_name,
            "columnValues": json.dumps(column_values),
        }

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": self.api_key or "",
            "API-Version": self.board.api_version,
        }

    async def create_item(self, column_values: Dict[str, Any], item_name: str) -> WriteOutcome:
        """
        Create one item on the board.

        Args:
            column_values: Cleaned column-value map
            item_name: Item title

        Returns:
            WriteOutcome describing what happened
        """
        if not self.is_configured:
            logger.error("MONDAY_API_KEY not configured - not calling monday.com")
            return WriteOutcome(
                kind=OutcomeKind.CONFIG_ERROR,
                error="MONDAY_API_KEY env var is not set.",
            )

        payload = {
            "query": CREATE_ITEM_MUTATION,
            "variables": self.build_variables(column_values, item_name),
        }
        logger.info(f"Creating monday item on board {self.board.board_id}: itemName={item_name!r}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.board.api_url,
                    headers=self.build_headers(),
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"Network error calling monday.com: {e!r}")
            return WriteOutcome(kind=OutcomeKind.NETWORK_ERROR, error=str(e) or type(e).__name__)

        outcome = classify_response(response.status_code, response.text)

        if outcome.kind == OutcomeKind.SUCCESS:
            logger.info(f"monday item created: id={outcome.item_id} name={outcome.item_name!r}")
        elif outcome.kind == OutcomeKind.MALFORMED_RESPONSE:
            logger.error(f"Non-JSON response from monday.com (HTTP {response.status_code})")
        else:
            logger.warning(f"monday.com rejected create_item (HTTP {response.status_code})")

        return outcome


def get_monday_service() -> MondayService:
    """Build a MondayService from the current environment.

    The key is read on every call so a missing or rotated key is picked up
    without a restart.
    """
    return MondayService(api_key=os.getenv("MONDAY_API_KEY"))
