"""
app/api/ingest.py

Purpose: Verification code intake endpoint

- Receives {phone, authCode} from trusted callers
- Validates the phone number
- Hands the code to the WATI forwarder and returns its outcome
"""

from fastapi import APIRouter, Depends, Request

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.schemas.ingest import IngestRequest, IngestResponse
from app.schemas.response import ErrorResponse
from app.services.wati_service import WatiService
from utils.constants import ERROR_PHONE_INVALID
from utils.validation_utils import mask_phone, validate_phone_number

logger = get_logger(__name__)
router = APIRouter()


def get_wati_service(request: Request) -> WatiService:
    """The forwarder created in the application lifespan."""
    return request.app.state.wati_service


def require_valid_phone(phone: str) -> str:
    """
    Returns the phone unchanged, or raises ValidationError (PHONE_INVALID).
    """
    if not validate_phone_number(phone):
        raise ValidationError("Phone number is not a valid international number", code=ERROR_PHONE_INVALID)
    return phone


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={
        400: {"model": ErrorResponse, "description": "PHONE_INVALID or BODY_INVALID"},
        401: {"model": ErrorResponse, "description": "UNAUTHORIZED"},
        500: {"model": ErrorResponse, "description": "FETCH_FAILED"},
        502: {"model": ErrorResponse, "description": "WATI_ERROR"},
    },
)
async def ingest(payload: IngestRequest, service: WatiService = Depends(get_wati_service)):
    """
    Forwards a verification code to the next WATI destination.

    Body:
      { "phone": "+14155552671", "authCode": "8842" }

    Errors are raised as relay exceptions and rendered by the
    exception handlers.
    """
    phone = require_valid_phone(payload.phone)

    logger.info("📱 Verification request received", extra={"phone": mask_phone(phone)})

    result = await service.forward(phone=phone, auth_code=payload.auth_code)
    return IngestResponse(dest=result.dest, data=result.data)
