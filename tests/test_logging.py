import json
import logging

from bizsuite.utils.logging import (
    JSONFormatter,
    RequestContextFilter,
    bind_request_id,
    log_security_event,
    reset_request_id,
)


def make_record(**extra):
    record = logging.LogRecord("bizsuite.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_context_fields(self):
        payload = json.loads(JSONFormatter().format(make_record(tenant_id="t-1", user_id=None)))
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["tenant_id"] == "t-1"
        assert "user_id" not in payload

    def test_request_id_is_bound_per_context(self):
        record = make_record()
        token = bind_request_id("req-42")
        try:
            RequestContextFilter().filter(record)
        finally:
            reset_request_id(token)
        assert record.request_id == "req-42"

        unbound = make_record()
        RequestContextFilter().filter(unbound)
        assert unbound.request_id is None


class TestSecurityEvents:
    def test_security_event_is_a_warning(self, caplog):
        logger = logging.getLogger("bizsuite.security-test")
        with caplog.at_level(logging.WARNING, logger="bizsuite.security-test"):
            log_security_event("failed_login", {"reason": "invalid_credentials", "tenant_id": "t-9"}, logger)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.event_type == "failed_login"
        assert record.tenant_id == "t-9"

        payload = json.loads(JSONFormatter().format(record))
        assert payload["security_event"] is True
        assert payload["details"]["reason"] == "invalid_credentials"
