import json
import logging

from tenant_gate.core.logging import JsonLogFormatter


def _format(**extra) -> dict:
    record = logging.makeLogRecord({"msg": "Feature gate denied", "levelname": "INFO", "name": "tenant_gate.test", **extra})
    return json.loads(JsonLogFormatter().format(record))


def test_feature_denial_fields_are_kept():
    payload = _format(code="FEATURE_NOT_ENABLED", tier="free", features=["scheduling"], org_id="org-1")

    assert payload["msg"] == "Feature gate denied"
    assert payload["level"] == "INFO"
    assert payload["fields"] == {
        "code": "FEATURE_NOT_ENABLED",
        "tier": "free",
        "features": ["scheduling"],
        "org_id": "org-1",
    }


def test_unlisted_extras_are_dropped():
    payload = _format(user_id="u-1", token="secret-jwt")

    assert payload["fields"] == {"user_id": "u-1"}


def test_long_errors_are_truncated():
    payload = _format(error="x" * 2000)

    assert len(payload["fields"]["error"]) == 500
