"""
Pydantic models for the write proxy responses.
Fields a given outcome does not use are left unset and dropped on dump.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class WriteResponse(BaseModel):
    """Uniform envelope returned by every route."""
    ok: bool
    message: str

    # Failures
    error: Optional[str] = None
    http_status: Optional[int] = None
    raw: Optional[str] = None
    monday: Any = None  # Upstream body, verbatim

    # Success
    boardId: Optional[str] = None
    mondayItemId: Optional[str] = None
    mondayItemName: Optional[str] = None
    columnValuesSent: Optional[Dict[str, Any]] = None
    mondayRaw: Any = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
