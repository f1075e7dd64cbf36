"""Tests for the reader/writer lock guarding the history store."""

import threading
import unittest

from gateway.utils.rwlock import ReadWriteLock


class ReadWriteLockTests(unittest.TestCase):

    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=2)

        def reader():
            with lock.read_locked():
                # Both readers must be inside at once for the barrier to open.
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        self.assertFalse(inside.broken)

    def test_writer_waits_for_reader(self):
        lock = ReadWriteLock()
        wrote = threading.Event()

        def writer():
            with lock.write_locked():
                wrote.set()

        lock.acquire_read()
        t = threading.Thread(target=writer)
        t.start()
        self.assertFalse(wrote.wait(0.2))
        lock.release_read()
        self.assertTrue(wrote.wait(2))
        t.join(timeout=2)

    def test_reader_waits_for_writer(self):
        lock = ReadWriteLock()
        read = threading.Event()

        def reader():
            with lock.read_locked():
                read.set()

        lock.acquire_write()
        t = threading.Thread(target=reader)
        t.start()
        self.assertFalse(read.wait(0.2))
        lock.release_write()
        self.assertTrue(read.wait(2))
        t.join(timeout=2)

    def test_lock_released_on_error(self):
        lock = ReadWriteLock()
        with self.assertRaises(RuntimeError):
            with lock.write_locked():
                raise RuntimeError("boom")
        # Would deadlock if the write side were still held.
        with lock.read_locked():
            pass


if __name__ == "__main__":
    unittest.main()
