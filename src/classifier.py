"""Classify an identifier against the known partner and chain formats."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import formats
from formats import ChainFormat, PartnerFormat
from schemas import ChainMatch, ClassificationResult, PartnerMatch

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised when no identifier is left after trimming the input."""

    code = "empty_input"

    def __init__(self, message: str = "Order ID is required"):
        super().__init__(message)


def match_chain(value: str, chains: Iterable[ChainFormat]) -> Optional[ChainMatch]:
    """Return the first chain format, in priority order, that accepts ``value``."""
    for chain in chains:
        if chain.matches(value):
            return ChainMatch(
                chain_key=chain.key,
                display_name=chain.display_name,
                description=chain.description,
                explorer_url=chain.explorer_url(value),
                raw_input=value,
            )
    return None


def match_partners(value: str, partners: Iterable[PartnerFormat]) -> List[PartnerMatch]:
    """Return every partner whose format accepts ``value``, in table order."""
    return [
        PartnerMatch(
            key=partner.key,
            display_name=partner.display_name,
            description=partner.description,
            tracking_url=partner.tracking_url(value),
            note=partner.note,
        )
        for partner in partners
        if partner.matches(value)
    ]


def classify(
    raw: Optional[str],
    *,
    partners: Iterable[PartnerFormat] = formats.PARTNER_FORMATS,
    chains: Iterable[ChainFormat] = formats.CHAIN_FORMATS,
) -> ClassificationResult:
    """
    Classify ``raw`` as a transaction hash or a set of candidate partner orders.

    Chain formats are tried first and the first hit short-circuits partner
    matching. Otherwise all partner matches are returned, possibly none.
    Raises EmptyInputError when ``raw`` is missing or blank.
    """
    value = (raw or "").strip()
    if not value:
        raise EmptyInputError()

    chain = match_chain(value, chains)
    if chain is not None:
        logger.debug("chain_transaction_detected", extra={"chain": chain.chain_key})
        return ClassificationResult(input=value, is_chain_transaction=True, chain=chain)

    matches = match_partners(value, partners)
    logger.debug(
        "partner_matches",
        extra={"count": len(matches), "keys": [match.key for match in matches]},
    )
    return ClassificationResult(input=value, partners=tuple(matches))
