"""Twilio WhatsApp channel: send lookup replies back to the user."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

import config

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


@lru_cache(maxsize=1)
def _twilio_client() -> Client:
    secrets = config.get_twilio_secrets()
    return Client(secrets.account_sid, secrets.auth_token)


def normalize_address(address: str) -> str:
    """Return ``address`` in Twilio's ``whatsapp:+<number>`` form."""
    if address.startswith(WHATSAPP_PREFIX):
        return address
    if address.startswith("+"):
        return f"{WHATSAPP_PREFIX}{address}"
    logger.error("twilio_invalid_to_channel", extra={"to_sample": address[:6]})
    raise ValueError("Twilio To must be in format 'whatsapp:+<country><number>'")


def send_text(to: str, body: str) -> Dict[str, str]:
    """Send a text message via Twilio WhatsApp."""
    settings = config.get_settings()
    if not settings.whatsapp_enabled:
        raise config.ConfigurationError(
            "Set TWILIO_WHATSAPP_FROM or TWILIO_MESSAGING_SERVICE_SID for outbound messages"
        )

    message_args = {"to": normalize_address(to), "body": body}
    if settings.twilio_messaging_service_sid:
        message_args["messaging_service_sid"] = settings.twilio_messaging_service_sid
    else:
        from_addr = settings.twilio_whatsapp_from or ""
        if not from_addr.startswith(WHATSAPP_PREFIX):
            logger.error("twilio_invalid_from_channel", extra={"from_sample": from_addr[:9]})
            raise config.ConfigurationError(
                "Set TWILIO_WHATSAPP_FROM like 'whatsapp:+1...' or use TWILIO_MESSAGING_SERVICE_SID"
            )
        message_args["from_"] = from_addr

    try:
        message = _twilio_client().messages.create(**message_args)
    except TwilioRestException as exc:
        logger.error(
            "twilio_send_error",
            extra={
                "status": exc.status,
                "code": exc.code,
                "error": str(exc),
                "wa_hash": hash(to),
            },
        )
        raise

    return {"sid": message.sid}
