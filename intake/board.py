"""
BoardConfig and FieldSpec definitions.

This module declares the destination board: its id, the monday API endpoint,
and the column table that maps each intake field to a column id together with
the policy applied when the field is empty or invalid. The normalizer walks
this table; it has no per-field branching of its own.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple


class ColumnKind(str, Enum):
    """monday column value shapes."""
    TEXT = "TEXT"
    DATE = "DATE"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    LABEL = "LABEL"


class InvalidPolicy(str, Enum):
    """What to do when a field is empty or fails normalization."""
    DEFAULT = "DEFAULT"  # Substitute a default (today for DATE columns)
    DROP = "DROP"  # Leave the column out
    SENTINEL = "SENTINEL"  # Non-empty but unrecognized -> sentinel label; empty -> dropped


@dataclass(frozen=True)
class FieldSpec:
    """
    One row of the column table.

    Attributes:
        source: Key in the intake payload (e.g., "callerId")
        column_id: monday column id the value is written to
        kind: Shape of the column value
        on_invalid: Policy when the value is empty or invalid
        default: Value used by the DEFAULT policy (DATE columns use today)
        choices: For LABEL columns, the accepted labels (case-sensitive)
        sentinel: For LABEL columns, the label used by the SENTINEL policy
    """
    source: str
    column_id: str
    kind: ColumnKind
    on_invalid: InvalidPolicy = InvalidPolicy.DROP
    default: Optional[str] = None
    choices: FrozenSet[str] = frozenset()
    sentinel: Optional[str] = None


@dataclass(frozen=True)
class BoardConfig:
    """
    Immutable description of the destination board.

    Injected into MondayService at construction; never mutated at runtime.
    """
    board_id: str
    fields: Tuple[FieldSpec, ...]

    # Columns written on every item regardless of input
    constant_columns: Tuple[Tuple[str, Any], ...] = ()

    fallback_title: str = "Zoom Virtual Agent Call"
    phone_country_code: int = 1

    api_url: str = "https://api.monday.com/v2"
    api_version: str = "2023-10"


# =============================================================================
# FINGERPRINT BOARD
# =============================================================================

DIVISIONS: FrozenSet[str] = frozenset({
    "Arizona",
    "Illinois",
    "Alabama",
    "Texas",
    "Ohio",
    "Tennessee",
    "Indiana",
})

FINGERPRINT_BOARD = BoardConfig(
    board_id="9729411524",
    fields=(
        FieldSpec(
            source="name",
            column_id="name",
            kind=ColumnKind.TEXT,
            on_invalid=InvalidPolicy.DEFAULT,
            default="Unknown caller",
        ),
        FieldSpec(
            source="dateTime",
            column_id="date4",
            kind=ColumnKind.DATE,
            on_invalid=InvalidPolicy.DEFAULT,
        ),
        FieldSpec(source="phone", column_id="phone_mktdphra", kind=ColumnKind.PHONE),
        FieldSpec(source="email", column_id="email_mktdyt3z", kind=ColumnKind.EMAIL),
        FieldSpec(source="issue", column_id="text_mktdb8pg", kind=ColumnKind.TEXT),
        FieldSpec(
            source="division",
            column_id="color_mktd81zp",
            kind=ColumnKind.LABEL,
            on_invalid=InvalidPolicy.SENTINEL,
            choices=DIVISIONS,
            sentinel="Other",
        ),
        FieldSpec(source="callerId", column_id="phone_mkv0p9q3", kind=ColumnKind.PHONE),
        FieldSpec(source="zoomGuid", column_id="text_mkv7j2fq", kind=ColumnKind.TEXT),
    ),
    constant_columns=(
        ("color_mktsk31h", {"label": "Fingerprint"}),  # Department
        ("text_mkv07gad", "livescan@secureone.com"),  # Department email
    ),
)
