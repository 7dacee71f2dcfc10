"""
app/schemas/ingest.py

Pydantic models for the /ingest endpoint.
The request schema drops unknown fields, accepts numeric values as strings
and enforces the auth code length.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal

from utils.constants import AUTH_CODE_MAX_LENGTH, AUTH_CODE_MIN_LENGTH, STATUS_FORWARDED


class IngestRequest(BaseModel):
    """Verification code delivery request."""

    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "phone": "+14155552671",
                "authCode": "8842"
            }
        }
    )

    # Pattern is checked in the route so a bad phone gets PHONE_INVALID
    phone: str = Field(..., description="Receiver phone, international format")
    auth_code: str = Field(
        ...,
        alias="authCode",
        min_length=AUTH_CODE_MIN_LENGTH,
        max_length=AUTH_CODE_MAX_LENGTH,
        description="Verification code to deliver"
    )


class IngestResponse(BaseModel):
    """Response returned once a destination accepted the message."""

    status: Literal["FORWARDED"] = STATUS_FORWARDED
    dest: str = Field(..., description="URL of the destination that handled the request")
    data: Any = Field(default=None, description="Destination response body")


class HealthResponse(BaseModel):
    ok: bool = True
    ts: int = Field(..., description="Server time in epoch milliseconds")
