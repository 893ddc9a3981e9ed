import pytest
from botocore.exceptions import ClientError

import config as config_module
import stats


class FailingTable:
    def _fail(self, operation):
        raise ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "table missing"}},
            operation,
        )

    def update_item(self, **kwargs):
        self._fail("UpdateItem")

    def get_item(self, **kwargs):
        self._fail("GetItem")


def test_increment_accumulates(monkeypatch, dynamodb_table):
    monkeypatch.setattr(config_module, "get_dynamodb_resource", lambda: dynamodb_table)
    store = stats.CounterStore()

    assert store.increment("banxa") == 1
    assert store.increment("banxa") == 2
    assert store.increment("moonpay") == 1

    table = dynamodb_table.Table("test-stats")
    item = table.get_item(Key={"pk": "provider#banxa", "sk": "stats"})["Item"]
    assert int(item["count"]) == 2


def test_get_counts_defaults_to_zero(monkeypatch, dynamodb_table):
    monkeypatch.setattr(config_module, "get_dynamodb_resource", lambda: dynamodb_table)
    store = stats.CounterStore()
    store.increment("paybis")

    assert store.get_counts(["paybis", "bity"]) == {"paybis": 1, "bity": 0}


def test_store_failures_raise_stats_unavailable():
    store = stats.CounterStore(table=FailingTable())

    with pytest.raises(stats.StatsUnavailableError):
        store.increment("banxa")
    with pytest.raises(stats.StatsUnavailableError):
        store.get_count("banxa")
