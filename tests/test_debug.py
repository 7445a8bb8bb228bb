import re

import pytest

from taskweave.debug import DebugLogger, LogEntry, LogLevel

LINE = re.compile(r"^\[\s*\d+\.\d{3}\] \[(TRACE|DEBUG|INFO |WARN |ERROR)\]( \[W\d+\])?( \[T\d+\])? \[[^\]]+\] .*$")

ALL_LEVELS = [LogLevel.TRACE, LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]


def test_logger_creation():
    logger = DebugLogger()
    assert not logger.is_enabled()


def test_logging():
    logger = DebugLogger()
    logger.enable()
    logger.set_log_level(LogLevel.DEBUG)

    logger.info("test", "This is a test")
    logger.debug("test", "Debug message")

    assert len(logger.get_logs()) == 2


def test_log_filtering():
    logger = DebugLogger()
    logger.enable()
    logger.set_log_level(LogLevel.WARN)

    logger.debug("test", "Should not appear")
    logger.info("test", "Should not appear")
    logger.warn("test", "Should appear")
    logger.error("test", "Should appear")

    logs = logger.get_logs()
    assert [entry.level for entry in logs] == [LogLevel.WARN, LogLevel.ERROR]


def test_default_level_is_info():
    logger = DebugLogger()
    logger.enable()
    logger.trace("c", "hidden")
    logger.debug("c", "hidden")
    logger.info("c", "shown")
    assert [e.message for e in logger.get_logs()] == ["shown"]


def test_disabled_logger_records_nothing(capsys):
    logger = DebugLogger()
    logger.error("c", "nothing")
    assert logger.get_logs() == []
    assert capsys.readouterr().out == ""


def test_disable_after_enable():
    logger = DebugLogger()
    logger.enable()
    logger.disable()
    logger.error("c", "nothing")
    assert not logger.is_enabled()
    assert logger.get_logs() == []


@pytest.mark.parametrize(
    "level, text",
    [
        (LogLevel.TRACE, "TRACE"),
        (LogLevel.DEBUG, "DEBUG"),
        (LogLevel.INFO, "INFO "),
        (LogLevel.WARN, "WARN "),
        (LogLevel.ERROR, "ERROR"),
    ],
)
def test_level_text(level, text):
    assert str(level) == text


@pytest.mark.parametrize("threshold_index", range(len(ALL_LEVELS)))
def test_level_ordering_controls_filtering(threshold_index):
    logger = DebugLogger()
    logger.enable()
    logger.set_log_level(ALL_LEVELS[threshold_index])
    for level in ALL_LEVELS:
        logger.log(level, "c", "m", None, None)
    recorded = [entry.level for entry in logger.get_logs()]
    assert recorded == ALL_LEVELS[threshold_index:]


def test_entry_fields_and_format(capsys):
    logger = DebugLogger()
    logger.enable()
    logger.set_log_level(LogLevel.DEBUG)
    logger.log(LogLevel.DEBUG, "Task-1", "Executing task", 0, 1)

    (entry,) = logger.get_logs()
    assert entry.component == "Task-1"
    assert entry.worker_id == 0
    assert entry.task_id == 1
    text = str(entry)
    assert LINE.match(text)
    assert text.endswith("[DEBUG] [W0] [T1] [Task-1] Executing task")
    assert "Executing task" in capsys.readouterr().out


def test_clear():
    logger = DebugLogger()
    logger.enable()
    logger.info("a", "b")
    logger.clear()
    assert logger.get_logs() == []


def test_export_logs():
    logger = DebugLogger()
    logger.enable()
    logger.info("Executor", "Starting execution")
    logger.warn("Scheduler", "Work stealing triggered")

    lines = logger.export_logs().splitlines()
    assert len(lines) == 2
    assert all(LINE.match(line) for line in lines)
    assert lines[0].endswith("[Executor] Starting execution")


def test_save_to_file(tmp_path):
    logger = DebugLogger()
    logger.enable()
    logger.info("Executor", "All tasks completed")
    target = tmp_path / "execution.log"
    logger.save_to_file(target)

    content = target.read_text(encoding="utf-8")
    assert content.endswith("[Executor] All tasks completed\n")


def test_save_to_missing_directory_raises(tmp_path):
    logger = DebugLogger()
    with pytest.raises(OSError):
        logger.save_to_file(tmp_path / "missing" / "x.log")


def test_get_logs_returns_copy():
    logger = DebugLogger()
    logger.enable()
    logger.info("a", "b")
    snapshot = logger.get_logs()
    snapshot.clear()
    assert len(logger.get_logs()) == 1