import json

import pytest

from leadflow.core.errors import SessionBusy
from leadflow.observability import logging as obs_logging
from leadflow.settings import settings
from leadflow.utils.lock import session_lock


def test_lock_is_released_after_block(fake_redis):
    with session_lock("s1"):
        assert fake_redis.get("lock:form:s1")
    assert fake_redis.get("lock:form:s1") is None


def test_lock_held_elsewhere_is_busy(fake_redis, monkeypatch):
    monkeypatch.setattr("leadflow.utils.lock.time.sleep", lambda _s: None)
    fake_redis.set("lock:form:s1", "someone-else", px=5000)
    with pytest.raises(SessionBusy):
        with session_lock("s1"):
            pass
    # Another holder's lock is never deleted
    assert fake_redis.get("lock:form:s1") == "someone-else"


def test_log_redacts_pii(capsys, monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_PII_REDACTION", True)
    obs_logging.log("user_authenticated", phone="9876543210", user={"name": "Alice", "id": "u1"}, count=3)
    line = json.loads(capsys.readouterr().out)
    assert line["event"] == "user_authenticated"
    assert line["phone"] == "[REDACTED:***3210]"
    assert line["user"] == {"name": "[REDACTED:***lice]", "id": "u1"}
    assert line["count"] == 3


def test_log_passthrough_when_disabled(capsys, monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_PII_REDACTION", False)
    obs_logging.log("x", phone="9876543210")
    assert json.loads(capsys.readouterr().out)["phone"] == "9876543210"
