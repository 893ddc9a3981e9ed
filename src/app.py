"""AWS Lambda entry point for the order lookup API, UI and chat webhooks."""

from __future__ import annotations

import base64
import json
import logging
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote

from pydantic import ValidationError

import chatbot
import classifier
import config
import formats
import stats
import ui
import whatsapp
from discord_integration import handle_interaction_event, is_discord_request
from schemas import ErrorResponse, LookupRequest, LookupResponse, TwilioWebhookPayload

config.configure_logging()
logger = logging.getLogger(__name__)

LOOKUP_ROUTE = re.compile(r"/api/lookup(?:/(?P<order_id>[^/]*))?/?$")
STATS_ROUTE = re.compile(r"/api/stats(?:/(?P<provider>[^/]+))?/?$")
HEALTH_ROUTE = re.compile(r"/api/health/?$")

INVALID_INPUT = "invalid_input"


def _method_from_event(event: Dict[str, Any]) -> str:
    """Extract HTTP method from API Gateway event."""
    if "requestContext" in event:
        http = event["requestContext"].get("http", {})
        if "method" in http:
            return http["method"]
    return event.get("httpMethod", "")


def _path_from_event(event: Dict[str, Any]) -> str:
    path = event.get("requestContext", {}).get("http", {}).get("path")
    return path or event.get("rawPath") or event.get("path") or ""


def _cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": config.get_settings().cors_allow_origin,
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def _response(body: str, status: int = 200, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    response_headers = {"Content-Type": "text/plain"}
    if headers:
        response_headers.update(headers)
    return {"statusCode": status, "headers": response_headers, "body": body}


def _json_response(body: Dict[str, Any], status: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _json_response_cors(body: Dict[str, Any], status: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **_cors_headers()},
        "body": json.dumps(body),
    }


def _error(message: str, code: str, status: int) -> Dict[str, Any]:
    return _json_response_cors(ErrorResponse(error=message, code=code).to_json_dict(), status=status)


def _decode_body(event: Dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def _parse_json(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = _decode_body(event)
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("invalid_json_body")
        return {}
    return parsed if isinstance(parsed, dict) else {}


@lru_cache(maxsize=1)
def _stats_store() -> stats.CounterStore:
    return stats.CounterStore()


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Entrypoint for AWS Lambda."""
    method = _method_from_event(event)
    path = _path_from_event(event)
    logger.debug("incoming_event", extra={"method": method, "path": path})

    if method == "OPTIONS":
        return {"statusCode": 204, "headers": _cors_headers(), "body": ""}

    lookup_match = LOOKUP_ROUTE.search(path)
    if lookup_match:
        if method == "GET":
            return _lookup(unquote(lookup_match.group("order_id") or ""))
        if method == "POST":
            return _lookup_from_body(event)
        return _response("Method Not Allowed", status=405)

    if HEALTH_ROUTE.search(path):
        if method != "GET":
            return _response("Method Not Allowed", status=405)
        return _health()

    stats_match = STATS_ROUTE.search(path)
    if stats_match:
        provider = stats_match.group("provider")
        if method == "POST" and provider:
            return _increment_stat(unquote(provider))
        if method == "GET" and not provider:
            return _list_stats()
        return _response("Method Not Allowed", status=405)

    if method == "GET":
        if path.endswith("/ui"):
            return _response(ui.render_page(), headers={"Content-Type": "text/html", **_cors_headers()})
        return _response("Not Found", status=404)

    if method != "POST":
        return _response("Method Not Allowed", status=405)

    # Route based on headers/path: Discord Interactions vs JSON chat vs Twilio webhook
    headers = event.get("headers") or {}
    if path.endswith("/discord") or is_discord_request(headers):
        return handle_interaction_event(event, _decode_body(event))
    if path.endswith("/chat"):
        body = _parse_json(event)
        text = (body.get("text") or body.get("q") or "").strip()
        if not text:
            return _error("text is required", "empty_input", 400)
        return _json_response_cors(chatbot.handle_message(text).to_json_dict())

    payload, params = _parse_twilio_payload(event)
    if not payload:
        return _json_response({"status": "ignored"}, status=200)

    if not _validate_twilio_signature(event, params):
        return _response("Forbidden", status=403)

    return _handle_whatsapp_message(payload)


def _lookup(raw_id: Optional[str]) -> Dict[str, Any]:
    try:
        result = classifier.classify(raw_id)
    except classifier.EmptyInputError as exc:
        return _error(str(exc), exc.code, 400)

    logger.info(
        "lookup_completed",
        extra={
            "id_hash": hash(result.input),
            "chain": result.chain.chain_key if result.chain else None,
            "count": result.count,
        },
    )
    return _json_response_cors(LookupResponse.from_result(result).to_json_dict())


def _lookup_from_body(event: Dict[str, Any]) -> Dict[str, Any]:
    try:
        request = LookupRequest.model_validate(_parse_json(event))
    except ValidationError:
        return _error("Order ID must be a string", INVALID_INPUT, 400)
    if not request.identifier:
        return _error("Order ID is required in request body", classifier.EmptyInputError.code, 400)
    return _lookup(request.identifier)


def _health() -> Dict[str, Any]:
    return _json_response_cors(
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "supportedPartners": list(formats.partner_keys()),
            "supportedChains": list(formats.chain_keys()),
        }
    )


def _increment_stat(provider: str) -> Dict[str, Any]:
    if not formats.is_known_key(provider):
        return _error(f"Unknown provider: {provider}", "unknown_provider", 404)
    try:
        count = _stats_store().increment(provider)
    except stats.StatsUnavailableError as exc:
        return _error(str(exc), "stats_unavailable", 503)
    return _json_response_cors({"success": True, "provider": provider, "count": count})


def _list_stats() -> Dict[str, Any]:
    keys = formats.partner_keys() + formats.chain_keys()
    try:
        counts = _stats_store().get_counts(keys)
    except stats.StatsUnavailableError as exc:
        return _error(str(exc), "stats_unavailable", 503)
    return _json_response_cors({"success": True, "counts": counts})


def _parse_twilio_payload(event: Dict[str, Any]) -> Tuple[Optional[TwilioWebhookPayload], Dict[str, str]]:
    raw_body = _decode_body(event)
    if not raw_body:
        return None, {}

    parsed = {key: values[0] for key, values in parse_qs(raw_body).items() if values}
    if not parsed:
        return None, {}

    try:
        payload = TwilioWebhookPayload.model_validate(parsed)
    except ValidationError as exc:
        logger.error("payload_parse_error", extra={"error": str(exc)})
        return None, parsed

    return payload, parsed


def _full_request_url(event: Dict[str, Any]) -> str:
    headers = event.get("headers") or {}
    proto = headers.get("x-forwarded-proto") or headers.get("X-Forwarded-Proto", "https")
    host = headers.get("host") or headers.get("Host", "")
    path = _path_from_event(event)
    query = event.get("rawQueryString") or ""
    url = f"{proto}://{host}{path}"
    if query:
        url = f"{url}?{query}"
    return url


def _validate_twilio_signature(event: Dict[str, Any], params: Dict[str, str]) -> bool:
    settings = config.get_settings()
    if not settings.twilio_validate_signature:
        return True

    headers = event.get("headers") or {}
    signature = headers.get("x-twilio-signature") or headers.get("X-Twilio-Signature")
    if not signature:
        logger.warning("missing_twilio_signature")
        return False

    validator = config.get_twilio_validator()
    return bool(validator.validate(_full_request_url(event), params, signature))


def _handle_whatsapp_message(payload: TwilioWebhookPayload) -> Dict[str, Any]:
    sender = payload.wa_id or payload.from_number
    if payload.num_media > 0 and not payload.body.strip():
        logger.info("non_text_message_ignored", extra={"wa_hash": hash(sender)})
        return _json_response({"status": "ignored"}, status=200)

    reply_text = chatbot.plain_reply(payload.body)
    whatsapp.send_text(payload.from_number, reply_text)
    logger.info("twilio_message_sent", extra={"wa_hash": hash(sender)})
    return _response("OK")
