from typing import Dict


def test_lambda_get_unknown_path_not_found(app_module):
    event: Dict[str, object] = {
        "requestContext": {"http": {"method": "GET"}},
    }
    response = app_module.lambda_handler(event, None)
    assert response["statusCode"] == 404


def test_lambda_rejects_unsupported_method(app_module, api_event):
    response = app_module.lambda_handler(api_event("DELETE", "/webhook"), None)
    assert response["statusCode"] == 405


def test_lambda_ignores_empty_body(app_module):
    event: Dict[str, object] = {
        "requestContext": {"http": {"method": "POST"}},
        "body": "",
    }
    response = app_module.lambda_handler(event, None)
    assert response["statusCode"] == 200
    assert response["body"] == '{"status": "ignored"}'


def test_twilio_signature_required_when_enabled(monkeypatch, app_module, api_event):
    monkeypatch.setenv("TWILIO_VALIDATE_SIGNATURE", "true")
    app_module.config.get_settings.cache_clear()

    event = api_event("POST", "/webhook", body="From=whatsapp%3A%2B628111111111&Body=17258381")
    response = app_module.lambda_handler(event, None)

    assert response["statusCode"] == 403
