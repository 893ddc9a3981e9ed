"""DynamoDB-backed usage counters keyed by provider."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from botocore.exceptions import ClientError

import config

logger = logging.getLogger(__name__)


class StatsUnavailableError(RuntimeError):
    """Raised when the counter table cannot be read or written."""


def _counter_key(provider: str) -> Dict[str, str]:
    """Construct the DynamoDB key for a provider tally."""
    return {"pk": f"provider#{provider}", "sk": "stats"}


def _to_int(value: Any) -> int:
    if isinstance(value, Decimal):
        return int(value)
    return int(value or 0)


class CounterStore:
    """Thin wrapper over the DynamoDB table holding provider tallies."""

    def __init__(self, table: Optional[Any] = None):
        if table is None:
            settings = config.get_settings()
            table = config.get_dynamodb_resource().Table(settings.dynamodb_table)
        self._table = table

    def increment(self, provider: str, amount: int = 1) -> int:
        """Atomically add ``amount`` to the provider tally and return the new total."""
        # ADD runs read-increment-write server side, so concurrent callers never lose updates.
        try:
            response = self._table.update_item(
                Key=_counter_key(provider),
                UpdateExpression="ADD #count :amount",
                ExpressionAttributeNames={"#count": "count"},
                ExpressionAttributeValues={":amount": amount},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as exc:
            logger.error("dynamodb_update_item_error", extra={"error": str(exc), "provider": provider})
            raise StatsUnavailableError("Failed to update usage counter") from exc

        return _to_int(response.get("Attributes", {}).get("count"))

    def get_count(self, provider: str) -> int:
        try:
            response = self._table.get_item(Key=_counter_key(provider))
        except ClientError as exc:
            logger.error("dynamodb_get_item_error", extra={"error": str(exc), "provider": provider})
            raise StatsUnavailableError("Failed to read usage counter") from exc

        item = response.get("Item") or {}
        return _to_int(item.get("count"))

    def get_counts(self, providers: Iterable[str]) -> Dict[str, int]:
        """Return the tally for each provider, zero for providers never counted."""
        return {provider: self.get_count(provider) for provider in providers}
