"""
app/services/wati_service.py

Purpose: Forward verification codes to WATI destinations

- Picks the next destination in round-robin order
- Builds the verification template payload
- Sends it with the destination's bearer token
- Maps the destination's answer to a result or a relay error

No retries and no fallback: a failed destination fails the request.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.core.exceptions import DownstreamError, TransportError
from app.core.logging import LogContext, get_logger
from app.models.destination import Destination
from app.services.rotation import DestinationRotator
from utils.constants import DEFAULT_FORWARD_TIMEOUT_SECONDS, DEFAULT_TEMPLATE_NAME
from utils.validation_utils import mask_phone
from utils.whatsapp_utils import create_verification_message

logger = get_logger(__name__)


@dataclass
class ForwardResult:
    dest: str
    data: Any


class WatiService:
    """Service for relaying verification codes to WATI endpoints"""

    def __init__(
        self,
        rotator: DestinationRotator,
        template_name: str = DEFAULT_TEMPLATE_NAME,
        timeout: float = DEFAULT_FORWARD_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.rotator = rotator
        self.template_name = template_name
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def forward(self, phone: str, auth_code: str) -> ForwardResult:
        """
        Sends one verification code through the next destination.

        Args:
            phone: Validated receiver phone (+14155552671)
            auth_code: Code to deliver

        Returns:
            ForwardResult with the destination URL and its response body

        Raises:
            DownstreamError: destination answered with a non-2xx status
            TransportError: destination could not be reached
        """
        dest = self.rotator.next()
        payload = create_verification_message(
            phone=phone,
            auth_code=auth_code,
            channel_number=dest.channel,
            template_name=self.template_name
        )

        with LogContext(phone=mask_phone(phone), dest=dest.url):
            logger.info(f"📤 Forwarding verification code to {dest.url}")

            response = await self._send(dest, payload)
            data = self._parse_body(response)

            if not response.is_success:
                logger.error(
                    f"❌ Destination error from {dest.url}: {response.status_code} - {data}",
                    extra={"status": response.status_code}
                )
                raise DownstreamError(dest=dest.url, status=response.status_code, detail=data)

            logger.info(f"✅ Message sent via {dest.url}", extra={"status": response.status_code})
            return ForwardResult(dest=dest.url, data=data)

    async def _send(self, dest: Destination, payload: dict) -> httpx.Response:
        try:
            return await self._client.post(
                dest.url,
                json=payload,
                headers={"Authorization": f"Bearer {dest.token}"}
            )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling {dest.url}: {e}")
            raise TransportError(dest.url, "Destination timed out") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Network error calling {dest.url}: {e}", exc_info=True)
            raise TransportError(dest.url) from e

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """JSON body of the response, or {} when it is not JSON."""
        try:
            return response.json()
        except ValueError:
            return {}

    async def close(self):
        await self._client.aclose()
