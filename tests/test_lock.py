"""Tests for the reader/writer lock."""

import threading
import time

import pytest

from jsonkv import RWLock


class TestRWLock:
    def test_readers_share(self):
        lock = RWLock()
        barrier = threading.Barrier(3, timeout=5)
        errors = []

        def reader():
            with lock.read():
                try:
                    barrier.wait()
                except threading.BrokenBarrierError as e:
                    errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []

    def test_writer_excludes_readers(self):
        lock = RWLock()
        entered = threading.Event()

        def reader():
            with lock.read():
                entered.set()

        with lock.write():
            t = threading.Thread(target=reader)
            t.start()
            assert not entered.wait(0.1)
        assert entered.wait(5)
        t.join()

    def test_reader_excludes_writer(self):
        lock = RWLock()
        entered = threading.Event()

        def writer():
            with lock.write():
                entered.set()

        with lock.read():
            t = threading.Thread(target=writer)
            t.start()
            assert not entered.wait(0.1)
        assert entered.wait(5)
        t.join()

    def test_waiting_writer_blocks_new_readers(self):
        lock = RWLock()
        writer_done = threading.Event()
        reader_entered = threading.Event()

        def writer():
            with lock.write():
                writer_done.set()

        def reader():
            with lock.read():
                reader_entered.set()

        lock.acquire_read()
        w = threading.Thread(target=writer)
        w.start()
        while not lock._waiting_writers:
            time.sleep(0.01)
        r = threading.Thread(target=reader)
        r.start()
        assert not reader_entered.wait(0.1)
        lock.release_read()
        assert writer_done.wait(5)
        assert reader_entered.wait(5)
        w.join()
        r.join()

    def test_writers_serialized(self):
        lock = RWLock()
        counter = [0]

        def bump():
            for _ in range(1000):
                with lock.write():
                    value = counter[0]
                    counter[0] = value + 1

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter[0] == 4000

    def test_released_on_exception(self):
        lock = RWLock()
        with pytest.raises(RuntimeError):
            with lock.write():
                raise RuntimeError("boom")
        with lock.read():
            pass

    def test_unmatched_release(self):
        lock = RWLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()
