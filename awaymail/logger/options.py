"""File-backed logger setup and a daily rotating log file writer."""

from __future__ import annotations

import glob
import os
import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import BinaryIO, Callable, Optional, Union

from .core import JsonLogger, Level, new_logger

FILE = "file"


@dataclass
class FileOptions:
    """Settings for :func:`setup_logger_file`; ``file_max_age`` is in days."""

    stdout: bool = False
    file_location: str = ""
    file_max_age: float = 0
    mask: bool = False
    level: Level = Level.INFO


class RotatingFileWriter:
    """Append to ``<location>.YYYYMMDD``, keeping ``location`` linked to it.

    Files matching ``<location>.*`` older than ``max_age`` are removed when
    a new file is started.
    """

    def __init__(
        self,
        location: str,
        max_age: Optional[timedelta] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.location = location
        self.pattern = location + ".%Y%m%d"
        self.max_age = max_age
        self._clock = clock
        self._lock = threading.Lock()
        self._filename: Optional[str] = None
        self._handle: Optional[BinaryIO] = None
        self._clock().strftime(self.pattern)

    def _update_link(self, target: str) -> None:
        temporary = self.location + "_symlink"
        try:
            if os.path.lexists(temporary):
                os.remove(temporary)
            os.symlink(os.path.abspath(target), temporary)
            os.replace(temporary, self.location)
        except OSError:
            pass

    def _purge(self, now: datetime) -> None:
        if self.max_age is None or self.max_age <= timedelta(0):
            return
        cutoff = (now - self.max_age).timestamp()
        for path in glob.glob(glob.escape(self.location) + ".*"):
            if path == self._filename or os.path.islink(path):
                continue
            try:
                if os.path.getmtime(path) < cutoff:
                    os.remove(path)
            except OSError:
                continue

    def _current_handle(self) -> BinaryIO:
        now = self._clock()
        filename = now.strftime(self.pattern)
        if self._handle is not None and filename == self._filename:
            return self._handle
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handle = open(filename, "ab")
        if self._handle is not None:
            self._handle.close()
        self._handle = handle
        self._filename = filename
        self._update_link(filename)
        self._purge(now)
        return handle

    def write(self, data: Union[str, bytes]) -> int:
        """Append ``data`` to the current file; returns the bytes written."""
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        with self._lock:
            handle = self._current_handle()
            handle.write(payload)
            handle.flush()
        return len(payload)

    def close(self) -> None:
        """Close the current file, if one is open."""
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None


def setup_logger_file(service_name: str, config: Optional[FileOptions]) -> JsonLogger:
    """Build a logger writing to stdout or to a rotating file."""
    print("Try newLogger File...")
    if config is None:
        raise ValueError("legacy logger file config is nil")

    writers: list = []
    closers: list = []
    if config.stdout:
        writers.append(sys.stdout)
    else:
        try:
            writer = RotatingFileWriter(
                config.file_location, max_age=timedelta(days=config.file_max_age)
            )
        except (OSError, ValueError, OverflowError) as exc:
            raise RuntimeError(
                f"init legacy logger with mode {FILE} error: sys file error: {exc}"
            ) from exc
        writers.append(writer)
        closers.append(writer)

    return new_logger(
        writers=writers, closers=closers, mask=config.mask, level=config.level
    )


_instance: Optional[JsonLogger] = None
_instance_lock = threading.Lock()


def get_logger() -> JsonLogger:
    """Return the shared stdout logger, creating it on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = setup_logger_file("", FileOptions(stdout=True))
        return _instance