"""Discord Interactions (slash commands) integration for AWS Lambda.

Verifies Discord request signatures and answers the ``/lookup`` and
``/chat`` slash commands. Classification never leaves the process, so
commands are answered inline (interaction response type 4) instead of
being deferred to a follow-up worker.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

import chatbot
import classifier
import config

logger = logging.getLogger(__name__)

PING = 1
APPLICATION_COMMAND = 2
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4

LOOKUP_COMMANDS = {"lookup", "order"}
CHAT_COMMANDS = {"chat", "ask"}
ID_OPTION_NAMES = {"id", "order_id", "orderid"}
TEXT_OPTION_NAMES = {"q", "text", "message"}


def _json_response(body: Dict[str, Any], status: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _message(content: str) -> Dict[str, Any]:
    return _json_response({"type": CHANNEL_MESSAGE_WITH_SOURCE, "data": {"content": content}})


def is_discord_request(headers: Dict[str, str]) -> bool:
    """Heuristic: Discord Interactions include these headers."""
    if not headers:
        return False
    return (
        "x-signature-ed25519" in headers
        or "X-Signature-Ed25519" in headers
        or "x-signature-timestamp" in headers
        or "X-Signature-Timestamp" in headers
    )


def _verify_discord_signature(headers: Dict[str, str], raw_body: str) -> bool:
    settings = config.get_settings()
    if not settings.discord_validate_signature:
        return True

    public_key = settings.discord_public_key
    if not public_key:
        logger.error("discord_missing_public_key")
        return False

    sig = headers.get("x-signature-ed25519") or headers.get("X-Signature-Ed25519")
    ts = headers.get("x-signature-timestamp") or headers.get("X-Signature-Timestamp")
    if not sig or not ts:
        logger.warning("discord_missing_signature_headers")
        return False

    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        verify_key.verify(f"{ts}{raw_body}".encode(), bytes.fromhex(sig))
        return True
    except BadSignatureError:
        logger.warning("discord_signature_invalid")
        return False
    except ValueError as exc:
        logger.error("discord_signature_error", extra={"error": str(exc)})
        return False


def _option_value(data: Dict[str, Any], names: set) -> Optional[str]:
    for opt in data.get("options", []) or []:
        if (opt.get("name") or "").lower() in names:
            value = opt.get("value")
            return None if value is None else str(value)
    return None


def handle_interaction_event(event: Dict[str, Any], raw_body: str) -> Dict[str, Any]:
    """Handle an Interactions POST from Discord."""
    headers = event.get("headers") or {}
    if not _verify_discord_signature(headers, raw_body):
        return {"statusCode": 401, "body": "invalid request signature"}

    try:
        payload = json.loads(raw_body)
    except json.JSONDecodeError:
        return {"statusCode": 400, "body": "invalid json"}

    interaction_type = payload.get("type")
    if interaction_type == PING:
        return _json_response({"type": PONG})

    if interaction_type != APPLICATION_COMMAND:
        return _message("Unsupported interaction.")

    data = payload.get("data", {})
    name = (data.get("name") or "").lower()

    if name in LOOKUP_COMMANDS:
        identifier = _option_value(data, ID_OPTION_NAMES)
        try:
            result = classifier.classify(identifier)
        except classifier.EmptyInputError:
            return _message("Add an order ID after /lookup.")
        logger.info(
            "discord_lookup",
            extra={"chain": result.is_chain_transaction, "count": result.count},
        )
        return _message(chatbot.format_plain(result))

    if name in CHAT_COMMANDS:
        text = _option_value(data, TEXT_OPTION_NAMES)
        return _message(chatbot.plain_reply(text))

    return _message("Use /lookup with your order ID.")
