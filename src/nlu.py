"""Lightweight extraction of a candidate identifier from free-text messages."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from formats import BASE58_ALPHABET, UUID_PATTERN

# Searched in order; most specific shapes first so a hash is not cut into an order ID.
# ASCII mode keeps full-width digits and case-fold variants like the Kelvin sign out.
CANDIDATE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"\b0x[0-9a-f]{64}\b", re.ASCII | re.IGNORECASE),
    re.compile(rf"\b{UUID_PATTERN}\b", re.ASCII | re.IGNORECASE),
    re.compile(r"\b[0-9a-f]{64}\b", re.ASCII | re.IGNORECASE),
    re.compile(rf"\b[{BASE58_ALPHABET}]{{87,88}}\b", re.ASCII),
    re.compile(r"\bPB[A-Z0-9]{10,15}\b", re.ASCII | re.IGNORECASE),
    # Requires a digit so 14-letter words such as "cryptocurrency" are skipped.
    re.compile(r"\b(?=[a-zA-Z]*\d)[a-zA-Z0-9]{14}\b", re.ASCII),
    re.compile(r"\b\d{6,8}\b", re.ASCII),
)


def extract_identifier(text: Optional[str]) -> Optional[str]:
    """Return the first identifier-looking token found in ``text``, if any."""
    if not text:
        return None
    for pattern in CANDIDATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None
