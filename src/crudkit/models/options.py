"""
Per-call request options.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class RequestOptions(BaseModel):
    payload: Optional[Any] = None   # serialized to JSON, wins over body
    body: Optional[Any] = None      # sent as-is
    headers: dict[str, str] = Field(default_factory=dict)
