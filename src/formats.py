"""Static tables of known order-ID and transaction-hash formats."""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
# Base58 drops 0, O, I and l
BASE58_ALPHABET = "1-9A-HJ-NP-Za-km-z"

PAYMENT_PROCESSOR = "Cryptocurrency payment processor"
EXCHANGE_SERVICE = "Cryptocurrency exchange service"


@dataclass(frozen=True)
class PartnerFormat:
    """Order-ID shape issued by one exchange or payment processor."""

    key: str
    display_name: str
    pattern: re.Pattern
    url_template: str
    description: str
    static_url: Optional[str] = None
    note: Optional[str] = None

    def matches(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is not None

    def tracking_url(self, order_id: str) -> str:
        if self.static_url:
            return self.static_url
        return f"{self.url_template}{order_id}"


@dataclass(frozen=True)
class ChainFormat:
    """Transaction-hash shape of one blockchain family."""

    key: str
    display_name: str
    pattern: re.Pattern
    description: str
    explorer_url: Callable[[str], str]
    case_sensitive: bool = False

    def matches(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is not None


def _partner(
    key: str,
    display_name: str,
    regex: str,
    url_template: str,
    description: str,
    *,
    ignore_case: bool = False,
    static_url: Optional[str] = None,
    note: Optional[str] = None,
) -> PartnerFormat:
    flags = re.ASCII | (re.IGNORECASE if ignore_case else 0)
    return PartnerFormat(
        key=key,
        display_name=display_name,
        pattern=re.compile(regex, flags),
        url_template=url_template,
        description=description,
        static_url=static_url,
        note=note,
    )


def _chain(
    key: str,
    display_name: str,
    regex: str,
    description: str,
    explorer_url: Callable[[str], str],
    *,
    case_sensitive: bool,
) -> ChainFormat:
    flags = re.ASCII | (0 if case_sensitive else re.IGNORECASE)
    return ChainFormat(
        key=key,
        display_name=display_name,
        pattern=re.compile(regex, flags),
        description=description,
        explorer_url=explorer_url,
        case_sensitive=case_sensitive,
    )


# Iteration order is the order partner matches are reported in.
PARTNER_FORMATS: Tuple[PartnerFormat, ...] = (
    _partner(
        "banxa",
        "Banxa",
        r"\d{6,8}",
        "https://edge3.banxa.com/status/",
        PAYMENT_PROCESSOR,
    ),
    # Paybis status pages require login, so a deep link would be misleading.
    _partner(
        "paybis",
        "Paybis",
        r"PB[A-Z0-9]{10,15}",
        "https://onramp.payb.is/?requestId=",
        PAYMENT_PROCESSOR,
        ignore_case=True,
        static_url="https://payb.is",
        note="Login may be required to view order status",
    ),
    _partner(
        "moonpay",
        "Moonpay",
        UUID_PATTERN,
        "https://buy.moonpay.com/transaction_receipt?transactionId=",
        PAYMENT_PROCESSOR,
        ignore_case=True,
    ),
    _partner(
        "simplex",
        "Simplex",
        UUID_PATTERN,
        "https://payment-status.simplex.com/#/",
        PAYMENT_PROCESSOR,
        ignore_case=True,
    ),
    _partner(
        "changenow",
        "ChangeNow",
        r"[a-zA-Z0-9]{14}",
        "https://changenow.io/exchange/",
        EXCHANGE_SERVICE,
    ),
    _partner(
        "letsexchange",
        "LetsExchange",
        r"[a-zA-Z0-9]{14}",
        "https://letsexchange.io/exchange/",
        EXCHANGE_SERVICE,
    ),
    _partner(
        "bity",
        "Bity",
        UUID_PATTERN,
        "https://go.bity.com/order-status?reference=",
        "Swiss crypto exchange & payment processor",
        ignore_case=True,
    ),
)

# Priority order matters: an 0x-prefixed hash must never fall through to bitcoin.
CHAIN_FORMATS: Tuple[ChainFormat, ...] = (
    _chain(
        "evm",
        "EVM",
        r"0x[0-9a-f]{64}",
        "Ethereum / EVM-compatible transaction hash",
        lambda tx_hash: f"https://blockscan.com/tx/{tx_hash}",
        case_sensitive=False,
    ),
    _chain(
        "bitcoin",
        "Bitcoin",
        r"[0-9a-f]{64}",
        "Bitcoin transaction ID",
        lambda tx_hash: f"https://www.blockchain.com/btc/tx/{tx_hash}",
        case_sensitive=False,
    ),
    _chain(
        "solana",
        "Solana",
        rf"[{BASE58_ALPHABET}]{{87,88}}",
        "Solana transaction signature",
        lambda signature: f"https://solscan.io/tx/{signature}",
        case_sensitive=True,
    ),
)


def _index(formats) -> Mapping:
    index = {}
    for fmt in formats:
        if fmt.key in index:
            raise ValueError(f"Duplicate format key: {fmt.key}")
        index[fmt.key] = fmt
    return MappingProxyType(index)


PARTNERS_BY_KEY: Mapping[str, PartnerFormat] = _index(PARTNER_FORMATS)
CHAINS_BY_KEY: Mapping[str, ChainFormat] = _index(CHAIN_FORMATS)


def get_partner(key: str) -> Optional[PartnerFormat]:
    return PARTNERS_BY_KEY.get(key)


def get_chain(key: str) -> Optional[ChainFormat]:
    return CHAINS_BY_KEY.get(key)


def partner_keys() -> Tuple[str, ...]:
    return tuple(PARTNERS_BY_KEY)


def chain_keys() -> Tuple[str, ...]:
    return tuple(CHAINS_BY_KEY)


def is_known_key(key: str) -> bool:
    """Return True when ``key`` names any configured partner or chain."""
    return key in PARTNERS_BY_KEY or key in CHAINS_BY_KEY
