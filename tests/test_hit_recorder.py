from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from structlog.testing import capture_logs

from hitlog_app.services.hit_recorder import HitRecorder, resolve_client_ip
from hitlog_app.storage.strategies import HitStorageStrategy, InMemoryHitStorage


class TestResolveClientIP:
    """X-Real-IP, then first X-Forwarded-For entry, then peer address"""

    def test_real_ip_wins(self):
        headers = {"x-real-ip": "10.0.0.1", "x-forwarded-for": "10.0.0.2"}
        assert resolve_client_ip(headers, "10.0.0.3") == "10.0.0.1"

    def test_first_forwarded_entry_trimmed(self):
        headers = {"x-forwarded-for": "  198.51.100.7 , 10.0.0.2"}
        assert resolve_client_ip(headers, "10.0.0.3") == "198.51.100.7"

    def test_falls_back_to_remote_addr(self):
        assert resolve_client_ip({}, "10.0.0.3") == "10.0.0.3"

    def test_empty_headers_are_skipped(self):
        headers = {"x-real-ip": "", "x-forwarded-for": " "}
        assert resolve_client_ip(headers, "10.0.0.3") == "10.0.0.3"

    def test_nothing_available(self):
        assert resolve_client_ip({}, None) == ""


class TestHitRecorder:
    """Validation, normalization and failure containment"""

    def test_records_normalized_hit(self):
        storage = InMemoryHitStorage()
        recorder = HitRecorder(storage)

        assert recorder.record({"host": "allowed.test"}, "192.168.1.5") is True

        hit = storage.fetch_hits(limit=1, offset=0).hits[0]
        assert hit.ip == "192.168.1.5"
        assert hit.user_agent == "Unknown"
        assert hit.referer == ""
        assert hit.host == "allowed.test"
        assert hit.created_at.tzinfo is not None

    def test_truncates_to_500_characters(self):
        storage = InMemoryHitStorage()
        recorder = HitRecorder(storage)

        recorder.record({"user-agent": "u" * 1000, "referer": "r" * 750}, "10.0.0.1")

        hit = storage.fetch_hits(limit=1, offset=0).hits[0]
        assert hit.user_agent == "u" * 500
        assert hit.referer == "r" * 500

    def test_empty_user_agent_kept_empty(self):
        storage = InMemoryHitStorage()
        HitRecorder(storage).record({"user-agent": ""}, "10.0.0.1")

        hit = storage.fetch_hits(limit=1, offset=0).hits[0]
        assert hit.user_agent == ""

    def test_short_fields_untouched(self):
        storage = InMemoryHitStorage()
        HitRecorder(storage).record({"user-agent": "Mozilla/5.0", "referer": "https://a.b/"}, "10.0.0.1")

        hit = storage.fetch_hits(limit=1, offset=0).hits[0]
        assert hit.user_agent == "Mozilla/5.0"
        assert hit.referer == "https://a.b/"

    def test_empty_ip_rejected_with_warning(self):
        storage = InMemoryHitStorage()
        recorder = HitRecorder(storage)

        with capture_logs() as logs:
            assert recorder.record({"x-real-ip": ""}, "") is False

        assert storage.count_hits() == 0
        assert logs[0]["event"] == "hit_rejected"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["reason"] == "missing_ip"

    def test_invalid_ip_rejected(self):
        storage = InMemoryHitStorage()

        assert HitRecorder(storage).record({}, "not-an-ip") is False
        assert storage.count_hits() == 0

    def test_ipv6_accepted(self):
        storage = InMemoryHitStorage()

        assert HitRecorder(storage).record({"x-real-ip": "2001:db8::1"}, None) is True

    @pytest.mark.parametrize("error", [
        OperationalError("INSERT INTO hits", {}, Exception("connection refused")),
        PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached"),
    ])
    def test_storage_error_reported_as_failure(self, error):
        storage = MagicMock(spec=HitStorageStrategy)
        storage.insert_hit.side_effect = error

        with capture_logs() as logs:
            result = HitRecorder(storage).record({}, "10.0.0.1")

        assert result is False
        assert logs[-1]["event"] == "hit_storage_error"
        assert logs[-1]["log_level"] == "error"

    def test_unexpected_error_never_propagates(self):
        storage = MagicMock(spec=HitStorageStrategy)
        storage.insert_hit.side_effect = RuntimeError("boom")

        with capture_logs() as logs:
            assert HitRecorder(storage).record({}, "10.0.0.1") is False

        assert logs[-1]["event"] == "hit_unexpected_error"

    def test_success_logged_with_ua_preview(self):
        storage = InMemoryHitStorage()

        with capture_logs() as logs:
            HitRecorder(storage).record({"user-agent": "x" * 80, "host": "h.test"}, "10.0.0.1")

        entry = logs[-1]
        assert entry["event"] == "hit_logged"
        assert entry["ip"] == "10.0.0.1"
        assert entry["host"] == "h.test"
        assert entry["ua"] == "x" * 50
