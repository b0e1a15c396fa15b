"""Tests for progress sinks."""

import io

from litesync.data.progress import NullProgress, TqdmProgress


def test_null_progress_accepts_calls():
    sink = NullProgress()
    sink.start("t", 10)
    sink.update(5)
    sink.close()


def test_tqdm_progress_writes_to_stream():
    stream = io.StringIO()
    sink = TqdmProgress(file=stream)

    sink.start("users", 10)
    sink.update(4)
    sink.update(10)
    sink.close()

    assert "users" in stream.getvalue()


def test_tqdm_progress_tracks_absolute_position():
    sink = TqdmProgress(file=io.StringIO())

    sink.start("users", 10)
    sink.update(4)
    sink.update(7)

    assert sink._bar.n == 7
    sink.close()
    assert sink._bar is None


def test_disabled_progress_writes_nothing():
    stream = io.StringIO()
    sink = TqdmProgress(file=stream, disable=True)

    sink.start("users", 10)
    sink.update(10)
    sink.close()

    assert stream.getvalue() == ""


def test_update_before_start_is_ignored():
    TqdmProgress(file=io.StringIO()).update(3)
