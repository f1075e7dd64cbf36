"""
READER/WRITER LOCK
==================

Many readers or one writer. Writers are preferred: once a writer is waiting,
new readers queue behind it so a steady stream of reads cannot starve appends.

Usage:
  lock = ReadWriteLock()
  with lock.read_locked():
      ...
  with lock.write_locked():
      ...
"""

import threading
from contextlib import contextmanager


class ReadWriteLock:
    """A writer-preferring reader/writer lock built on a single Condition."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
