from __future__ import annotations

import json
import logging

from nondilutive.common.logging import JsonLogFormatter, bind_request_id, get_request_id, log_event


def _record(msg: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    r = logging.LogRecord("nondilutive.test", level, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(r, k, v)
    return r


def test_formatter_emits_core_fields() -> None:
    fmt = JsonLogFormatter(service="svc", env="test", version="1.0", sha="abc")
    out = json.loads(fmt.format(_record()))
    assert out["service"] == "svc"
    assert out["env"] == "test"
    assert out["version"] == "1.0"
    assert out["sha"] == "abc"
    assert out["severity"] == "INFO"
    assert out["event_type"] == "log"
    assert out["message"] == "hello"
    assert out["logger"] == "nondilutive.test"
    assert out["request_id"] is None


def test_formatter_includes_extras_and_bound_request_id() -> None:
    fmt = JsonLogFormatter(service="svc")
    with bind_request_id(request_id="rid-1") as rid:
        assert get_request_id() == "rid-1"
        out = json.loads(fmt.format(_record(level=logging.WARNING, event_type="collection.minted", token_ids=[1, 2])))
    assert rid == "rid-1"
    assert get_request_id() is None
    assert out["request_id"] == "rid-1"
    assert out["correlation_id"] == "rid-1"
    assert out["severity"] == "WARNING"
    assert out["event_type"] == "collection.minted"
    assert out["token_ids"] == [1, 2]


def test_log_event_sets_event_type_and_level(caplog) -> None:
    lg = logging.getLogger("nondilutive.test")
    caplog.set_level(logging.INFO, logger="nondilutive.test")
    log_event(lg, "collection.withdraw", severity="WARNING", amount=5)
    (r,) = caplog.records
    assert r.levelno == logging.WARNING
    assert r.getMessage() == "collection.withdraw"
    assert r.event_type == "collection.withdraw"
    assert r.amount == 5


def test_log_event_renames_fields_that_clash_with_record_attributes(caplog) -> None:
    lg = logging.getLogger("nondilutive.test")
    caplog.set_level(logging.INFO, logger="nondilutive.test")
    log_event(lg, "collection.ready", name="Non-Dilutive", module="core")
    (r,) = caplog.records
    assert r.name == "nondilutive.test"
    assert r.name_ == "Non-Dilutive"
    assert r.module_ == "core"
