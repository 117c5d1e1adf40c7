import re

from otzaria_toolkit.core.models.session_log import SessionLog


def test_entries_newest_first_with_timestamp():
    log = SessionLog()
    log.add("first")
    log.add("second", "success")
    entries = log.entries()
    assert [e.message for e in entries] == ["second", "first"]
    assert entries[0].level == "success"
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entries[0].timestamp)


def test_capacity_drops_oldest():
    log = SessionLog(capacity=3)
    for n in range(5):
        log.add(f"op {n}")
    assert len(log) == 3
    assert [e.message for e in log.entries()] == ["op 4", "op 3", "op 2"]


def test_entries_returns_copy():
    log = SessionLog()
    log.add("x")
    log.entries().clear()
    assert len(log) == 1
