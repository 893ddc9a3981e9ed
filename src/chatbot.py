"""Chat replies for order lookups shared by every chat channel."""

from __future__ import annotations

import logging
from typing import Optional

import classifier
import nlu
from schemas import ChatButton, ChatReply, ClassificationResult

logger = logging.getLogger(__name__)

PROMPT_RESPONSE = (
    "I can help you look up your cryptocurrency order! "
    "Please share your order ID and I'll find the relevant transaction details for you."
)
AMBIGUOUS_HINT = (
    "This order format could match more than one partner. "
    "Please pick the partner you used for this order."
)


def no_match_text(identifier: str) -> str:
    return (
        f"I couldn't find any matching services for order ID: {identifier}. "
        "Please check the order ID and try again."
    )


def chain_text(result: ClassificationResult) -> str:
    chain = result.chain
    return (
        f"{result.input} looks like a {chain.display_name} transaction hash, not an order ID.\n"
        f"View it on the block explorer: {chain.explorer_url}"
    )


def handle_message(text: Optional[str]) -> ChatReply:
    """Extract an identifier from a chat message and build the reply for it."""
    identifier = nlu.extract_identifier(text)
    if not identifier:
        return ChatReply(content=PROMPT_RESPONSE)
    return reply_for_identifier(identifier)


def reply_for_identifier(identifier: Optional[str]) -> ChatReply:
    try:
        result = classifier.classify(identifier)
    except classifier.EmptyInputError:
        return ChatReply(content=PROMPT_RESPONSE)

    logger.info(
        "chat_lookup",
        extra={
            "id_hash": hash(result.input),
            "chain": result.is_chain_transaction,
            "count": result.count,
        },
    )
    return format_rich(result)


def format_rich(result: ClassificationResult) -> ChatReply:
    """Rich reply with one button per matching partner."""
    if result.is_chain_transaction:
        chain = result.chain
        return ChatReply(
            type="rich_message",
            content=chain_text(result),
            buttons=[ChatButton(text=f"View on {chain.display_name} explorer", value=chain.explorer_url)],
            identifier=result.input,
        )

    if not result.partners:
        return ChatReply(content=no_match_text(result.input), identifier=result.input)

    lines = [f"I found {result.count} matching service(s) for your order ID: {result.input}", ""]
    for match in result.partners:
        line = f"• **{match.display_name}**: {match.description}"
        if match.note:
            line = f"{line} ({match.note})"
        lines.append(line)
    if result.count > 1:
        lines.extend(["", AMBIGUOUS_HINT])
    lines.extend(["", "Click the buttons below to view your order details:"])

    buttons = [
        ChatButton(text=f"View {match.display_name} Order", value=match.tracking_url)
        for match in result.partners
    ]
    return ChatReply(
        type="rich_message",
        content="\n".join(lines),
        buttons=buttons,
        identifier=result.input,
    )


def format_plain(result: ClassificationResult) -> str:
    """Plain-text rendering for channels without buttons (WhatsApp, Discord)."""
    if result.is_chain_transaction:
        return chain_text(result)

    if not result.partners:
        return f"No matching services found for order ID: {result.input}"

    lines = [f"Found {result.count} matching service(s) for order ID: {result.input}", ""]
    for match in result.partners:
        line = f"{match.display_name}: {match.tracking_url}"
        if match.note:
            line = f"{line} ({match.note})"
        lines.append(line)
    if result.count > 1:
        lines.extend(["", AMBIGUOUS_HINT])
    return "\n".join(lines)


def plain_reply(text: Optional[str]) -> str:
    """Plain-text answer to a free-text message."""
    identifier = nlu.extract_identifier(text)
    if not identifier:
        return PROMPT_RESPONSE
    return format_plain(classifier.classify(identifier))
