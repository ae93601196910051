"""
Intake normalization - envelope unwrapping, field cleanup, column mapping.
"""
from .board import (
    BoardConfig,
    ColumnKind,
    FieldSpec,
    InvalidPolicy,
    DIVISIONS,
    FINGERPRINT_BOARD,
)
from .envelope import (
    EnvelopeShape,
    unwrap_envelope,
)
from .normalize import (
    IntakeResult,
    NormalizedPhone,
    build_column_values,
    coerce_text,
    derive_title,
    elide_empty,
    normalize_date,
    normalize_intake,
    normalize_phone,
)

__all__ = [
    "BoardConfig",
    "ColumnKind",
    "FieldSpec",
    "InvalidPolicy",
    "DIVISIONS",
    "FINGERPRINT_BOARD",
    "EnvelopeShape",
    "unwrap_envelope",
    "IntakeResult",
    "NormalizedPhone",
    "build_column_values",
    "coerce_text",
    "derive_title",
    "elide_empty",
    "normalize_date",
    "normalize_intake",
    "normalize_phone",
]
