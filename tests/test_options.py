import json
import os
from datetime import datetime, timedelta

import pytest

from awaymail.logger.core import Level
from awaymail.logger.options import (
    FileOptions,
    RotatingFileWriter,
    get_logger,
    setup_logger_file,
)


class _Clock:
    def __init__(self, moment):
        self.moment = moment

    def __call__(self):
        return self.moment


def test_setup_without_config_raises():
    with pytest.raises(ValueError, match="legacy logger file config is nil"):
        setup_logger_file("svc", None)


def test_setup_stdout_logs_json(capsys):
    logger = setup_logger_file("svc", FileOptions(stdout=True))
    logger.info(None, "hi")
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Try newLogger File..."
    assert json.loads(lines[1])["message"] == "hi"


def test_setup_respects_level(capsys):
    logger = setup_logger_file("svc", FileOptions(stdout=True, level=Level.ERROR))
    logger.info(None, "quiet")
    assert capsys.readouterr().out.splitlines() == ["Try newLogger File..."]


def test_setup_passes_mask_option():
    logger = setup_logger_file("svc", FileOptions(stdout=True, mask=True))
    assert logger.mask is True


def test_setup_file_output(tmp_path):
    location = tmp_path / "logs" / "svc.log"
    logger = setup_logger_file("svc", FileOptions(file_location=str(location), file_max_age=7))
    assert logger.level == Level.INFO
    assert logger.mask is False
    logger.warn(None, "disk")
    logger.close()
    files = list((tmp_path / "logs").glob("svc.log.*"))
    assert len(files) == 1
    record = json.loads(files[0].read_text())
    assert record["level"] == "warn"
    assert record["message"] == "disk"


def test_writer_returns_byte_count(tmp_path):
    writer = RotatingFileWriter(str(tmp_path / "app.log"))
    text = "héllo\n"
    assert writer.write(text) == len(text.encode("utf-8"))
    writer.close()


def test_writer_rotates_daily(tmp_path):
    clock = _Clock(datetime(2024, 3, 1, 23, 30))
    location = tmp_path / "app.log"
    writer = RotatingFileWriter(str(location), clock=clock)
    writer.write("one\n")
    clock.moment += timedelta(days=1)
    writer.write("two\n")
    writer.close()
    names = sorted(p.name for p in tmp_path.glob("app.log.*"))
    assert names == ["app.log.20240301", "app.log.20240302"]
    assert (tmp_path / "app.log.20240301").read_text() == "one\n"
    assert (tmp_path / "app.log.20240302").read_text() == "two\n"
    assert os.path.realpath(location) == os.path.realpath(tmp_path / "app.log.20240302")


def test_writer_purges_old_files(tmp_path):
    clock = _Clock(datetime(2024, 3, 10, 12, 0))
    old = tmp_path / "app.log.20240101"
    recent = tmp_path / "app.log.20240308"
    old.write_text("old")
    recent.write_text("recent")
    old_time = (clock.moment - timedelta(days=10)).timestamp()
    recent_time = (clock.moment - timedelta(days=2)).timestamp()
    os.utime(old, (old_time, old_time))
    os.utime(recent, (recent_time, recent_time))

    writer = RotatingFileWriter(str(tmp_path / "app.log"), max_age=timedelta(days=7), clock=clock)
    writer.write("now\n")
    writer.close()
    assert not old.exists()
    assert recent.read_text() == "recent"


def test_get_logger_is_shared():
    first = get_logger()
    second = get_logger()
    assert first is second
    assert first.level == Level.INFO