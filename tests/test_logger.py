from __future__ import annotations

from pathlib import Path

import pytest

from logger import StatusLogger
from melody.sequencer import Sequencer
from tests._support.fake_host import FakeHost


def test_entries_are_bounded():
    logger = StatusLogger(max_entries=3)

    for i in range(5):
        logger.log_info(f"message {i}")

    assert [e.message for e in logger.get_all_logs()] == ["message 2", "message 3", "message 4"]


def test_recent_logs_filter_by_level():
    logger = StatusLogger()
    logger.log_debug("tick")
    logger.log_info("started")
    logger.log_warning("no target")
    logger.log_error("failed")

    assert [e.message for e in logger.get_recent_logs(10, min_level="WARNING")] == ["no target", "failed"]
    assert [e.message for e in logger.get_recent_logs(1)] == ["failed"]


def test_callback_tags_source_and_level():
    logger = StatusLogger()
    seq = Sequencer(FakeHost())
    seq.on_log(logger.callback("sequencer"))

    seq.start([0])

    entry = logger.get_all_logs()[-1]
    assert entry.source == "sequencer"
    assert entry.level == "INFO"
    assert entry.message == "Melody started: slots [1]"


def test_callback_rejects_unknown_level():
    with pytest.raises(ValueError):
        StatusLogger().callback("driver", "LOUD")


def test_echo_receives_formatted_entries():
    lines: list[str] = []
    logger = StatusLogger(echo=lines.append)

    logger.update_status("Playing")

    assert logger.get_current_status() == "Playing"
    assert len(lines) == 1
    assert lines[0].endswith("INFO status: Playing")


def test_export_writes_all_entries(tmp_path: Path):
    logger = StatusLogger()
    logger.log_info("one")
    logger.log_error("two", source="driver")
    target = tmp_path / "log.txt"

    assert logger.export_logs_to_file(str(target)) is True

    content = target.read_text(encoding="utf-8")
    assert content.startswith("Melody Loop - Log Export")
    assert "INFO melody: one" in content
    assert "ERROR driver: two" in content
