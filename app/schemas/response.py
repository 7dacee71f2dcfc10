from pydantic import BaseModel
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.

    Only `error` is always present; `dest` and `detail` are set for
    destination failures and body validation failures.
    """
    error: str
    dest: Optional[str] = None
    detail: Optional[Any] = None
