"""Tests for transport error classification."""

import asyncio
from types import SimpleNamespace

import pytest

from chat_engine.errors import ModelRejected, StreamIOError, StreamStalled
from chat_engine.streaming import classify_error, is_recoverable
from chat_engine.streaming.postprocess import INCOMPLETE_NOTICE, flag_possibly_incomplete


def with_status(exc, status):
    exc.status_code = status
    return exc


class TestClassifyError:
    """Tests for classify_error()."""

    def test_engine_errors_unchanged(self):
        """Test that engine errors pass through as-is."""
        error = StreamStalled("quiet")
        assert classify_error(error) is error

    @pytest.mark.parametrize(
        "exc",
        [
            RuntimeError("network timeout"),
            RuntimeError("Connection reset by peer"),
            RuntimeError("Service temporarily unavailable"),
            TimeoutError(),
            asyncio.TimeoutError(),
            ConnectionResetError("reset"),
            with_status(RuntimeError("overloaded"), 529),
            with_status(RuntimeError("slow down"), 429),
        ],
    )
    def test_recoverable(self, exc):
        """Test failures worth retrying."""
        classified = classify_error(exc)
        assert isinstance(classified, StreamIOError)
        assert classified.recoverable
        assert classified.cause is exc

    @pytest.mark.parametrize(
        "exc",
        [
            RuntimeError("Quota exceeded"),
            RuntimeError("Permission denied for this model"),
            RuntimeError("model not found"),
            PermissionError("not signed in"),
            with_status(RuntimeError("nope"), 401),
            with_status(RuntimeError("bad"), 400),
        ],
    )
    def test_rejections(self, exc):
        """Test failures that retrying cannot fix."""
        classified = classify_error(exc)
        assert isinstance(classified, ModelRejected)
        assert not classified.recoverable

    def test_status_beats_message(self):
        """Test that a status code wins over message hints."""
        exc = with_status(RuntimeError("network permission glitch"), 503)
        assert classify_error(exc).recoverable

    def test_status_from_response(self):
        """Test that a status on an attached response object is used."""
        exc = RuntimeError("failed")
        exc.response = SimpleNamespace(status_code=403)
        assert isinstance(classify_error(exc), ModelRejected)

    def test_unknown_is_not_recoverable(self):
        """Test that unrecognised failures are final."""
        classified = classify_error(ValueError("weird"))
        assert isinstance(classified, StreamIOError)
        assert not classified.recoverable
        assert not is_recoverable(ValueError("weird"))


class TestFlagPossiblyIncomplete:
    """Tests for the incomplete-response heuristic."""

    @pytest.mark.parametrize(
        "text",
        ["This answer is a full sentence.", "Here is the code:\n```py\nx = 1\n```", ""],
    )
    def test_not_flagged(self, text):
        """Test answers that look finished."""
        assert flag_possibly_incomplete(text) is None

    @pytest.mark.parametrize("text", ["Short", "This answer stops in the middle of a"])
    def test_flagged(self, text):
        """Test short answers and answers ending mid-sentence."""
        assert flag_possibly_incomplete(text) == INCOMPLETE_NOTICE
