import os
import sys
from importlib import import_module
from typing import Generator

import boto3
import pytest
from moto import mock_aws

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
SCRIPTS_ROOT = os.path.join(PROJECT_ROOT, "scripts")

for path in (SRC_ROOT, SCRIPTS_ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

import config  # noqa: E402


REQUIRED_ENV = {
    "APP_ENV": "test",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "TWILIO_WHATSAPP_FROM": "whatsapp:+14155238886",
    "TWILIO_VALIDATE_SIGNATURE": "false",
    "DISCORD_VALIDATE_SIGNATURE": "false",
    "DDB_TABLE": "test-stats",
}


def _clear_caches() -> None:
    config.get_settings.cache_clear()
    config.get_twilio_secrets.cache_clear()
    config.get_twilio_validator.cache_clear()
    config._boto_session.cache_clear()


@pytest.fixture(autouse=True)
def _env_vars(monkeypatch) -> Generator[None, None, None]:
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "ACXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "auth-token")
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def aws_mock() -> Generator[None, None, None]:
    with mock_aws():
        _clear_caches()
        yield
        _clear_caches()


@pytest.fixture
def dynamodb_table(aws_mock) -> boto3.resources.base.ServiceResource:
    session = boto3.session.Session(region_name=REQUIRED_ENV["AWS_REGION"])
    dynamodb = session.resource("dynamodb")
    dynamodb.create_table(
        TableName=REQUIRED_ENV["DDB_TABLE"],
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    return dynamodb


@pytest.fixture
def app_module(monkeypatch, dynamodb_table):
    app = import_module("app")
    whatsapp = import_module("whatsapp")

    monkeypatch.setattr(config, "get_dynamodb_resource", lambda: dynamodb_table)
    stats_store = app._stats_store
    stats_store.cache_clear()
    whatsapp._twilio_client.cache_clear()
    yield app
    stats_store.cache_clear()


@pytest.fixture
def api_event():
    def _build(method: str, path: str, body: str = "", headers=None):
        return {
            "requestContext": {"http": {"method": method, "path": path}},
            "headers": headers or {"host": "example.com", "x-forwarded-proto": "https"},
            "body": body,
            "isBase64Encoded": False,
        }

    return _build
