"""
utils/whatsapp_utils.py

Purpose: WhatsApp message builders

- Constructs WATI template-message payloads
- Abstracts WhatsApp API formatting
"""

from typing import Any, Dict, List, Optional

from utils.constants import DEFAULT_TEMPLATE_NAME
from utils.validation_utils import strip_leading_plus


def create_custom_params(values: List[str]) -> List[Dict[str, str]]:
    """
    Creates template parameters numbered from "1".

    Args:
        values: Template variable values in body order

    Returns:
        List of {"name", "value"} dicts
    """
    return [
        {"name": str(index), "value": value}
        for index, value in enumerate(values, start=1)
    ]


def create_template_message(
    phone: str,
    custom_params: List[Dict[str, str]],
    channel_number: str,
    template_name: str = DEFAULT_TEMPLATE_NAME,
    broadcast_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Creates a WATI template message for a single receiver.

    Args:
        phone: Receiver phone, with or without leading "+"
        custom_params: Template parameters
        channel_number: Sending WhatsApp channel of the destination
        template_name: Approved template name
        broadcast_name: Broadcast label (defaults to template_name)

    Returns:
        Template message payload

    Example:
        {
            "template_name": "codigo_de_verificacion",
            "broadcast_name": "codigo_de_verificacion",
            "receivers": [
                {
                    "whatsappNumber": "14155552671",
                    "customParams": [{"name": "1", "value": "8842"}]
                }
            ],
            "channel_number": "5215550001111"
        }
    """
    return {
        "template_name": template_name,
        "broadcast_name": broadcast_name or template_name,
        "receivers": [
            {
                "whatsappNumber": strip_leading_plus(phone),
                "customParams": custom_params
            }
        ],
        "channel_number": channel_number
    }


def create_verification_message(
    phone: str,
    auth_code: str,
    channel_number: str,
    template_name: str = DEFAULT_TEMPLATE_NAME
) -> Dict[str, Any]:
    """
    Creates the verification-code template message.

    The code is sent as the template's only parameter, named "1".
    """
    return create_template_message(
        phone=phone,
        custom_params=create_custom_params([auth_code]),
        channel_number=channel_number,
        template_name=template_name
    )
