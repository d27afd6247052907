"""Tests for data models."""

import re

import pytest

from chat_engine.errors import ModelRejected
from chat_engine.models import (
    Attachment,
    ExchangeConfig,
    ExchangeResult,
    Message,
    SessionState,
    StreamingSession,
    TransportKind,
)
from chat_engine.models.messages import extension_of, new_message_id


class TestAttachment:
    """Tests for Attachment model."""

    def test_extension_derived_from_name(self):
        """Test that ext defaults to the lowercase file extension."""
        attachment = Attachment(name="Main.PY", content="print(1)")
        assert attachment.ext == "py"

    def test_size_derived_from_content(self):
        """Test that size defaults to the UTF-8 byte length."""
        attachment = Attachment(name="notes.txt", content="héllo")
        assert attachment.size == 6

    def test_explicit_values_kept(self):
        """Test that explicit ext and size are not overwritten."""
        attachment = Attachment(name="x", content="abc", size=10, ext="md")
        assert attachment.ext == "md"
        assert attachment.size == 10

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("a.txt", "txt"),
            ("archive.tar.gz", "gz"),
            ("Dockerfile", "dockerfile"),
            (".gitignore", "gitignore"),
            ("README", ""),
            ("dir/sub/app.tsx", "tsx"),
        ],
    )
    def test_extension_of(self, filename, expected):
        """Test extension extraction for common names."""
        assert extension_of(filename) == expected


class TestMessage:
    """Tests for Message model."""

    def test_message_id_format(self):
        """Test that ids are a millisecond timestamp plus random suffix."""
        assert re.fullmatch(r"\d{13}-[0-9a-f]{8}", new_message_id())

    def test_message_ids_unique(self):
        """Test that consecutive messages get distinct ids."""
        first = Message(role="user", content="a")
        second = Message(role="user", content="a")
        assert first.id != second.id

    def test_message_timestamp_is_utc(self):
        """Test that created_at carries a timezone."""
        message = Message(role="assistant", content="hi")
        assert message.created_at.tzinfo is not None


class TestExchangeConfig:
    """Tests for ExchangeConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = ExchangeConfig(model_id="m1")
        assert config.system_prompt == ""
        assert config.temperature == 1.0
        assert config.test_mode is False

    def test_empty_model_rejected(self):
        """Test that an empty model id is invalid."""
        with pytest.raises(ValueError):
            ExchangeConfig(model_id="")

    @pytest.mark.parametrize("temperature", [-0.1, 2.1])
    def test_temperature_out_of_range(self, temperature):
        """Test that temperature must stay within 0..2."""
        with pytest.raises(ValueError):
            ExchangeConfig(model_id="m1", temperature=temperature)

    def test_temperature_bounds_accepted(self):
        """Test that the range ends are valid."""
        ExchangeConfig(model_id="m1", temperature=0.0)
        ExchangeConfig(model_id="m1", temperature=2.0)

    def test_system_prompt_too_long(self):
        """Test that an oversized system prompt is rejected."""
        with pytest.raises(ValueError):
            ExchangeConfig(model_id="m1", system_prompt="x" * 4001)

    def test_none_system_prompt_normalized(self):
        """Test that None becomes an empty system prompt."""
        config = ExchangeConfig(model_id="m1", system_prompt=None)
        assert config.system_prompt == ""


class TestStreamingSession:
    """Tests for StreamingSession bookkeeping."""

    def test_touch_accumulates_bytes(self):
        """Test that touch() counts received bytes and refreshes activity."""
        session = StreamingSession(config=ExchangeConfig(model_id="m1"))
        before = session.last_activity_at

        session.touch(3)
        session.touch(4)

        assert session.bytes_received == 7
        assert session.last_activity_at >= before
        assert session.state is SessionState.IDLE


class TestExchangeResult:
    """Tests for ExchangeResult."""

    def test_ok_and_to_dict(self):
        """Test serialisation of a completed result."""
        result = ExchangeResult(
            request_id="r1",
            state=SessionState.COMPLETED,
            message=Message(role="assistant", content="Hello"),
            attempts=1,
            transport=TransportKind.PRIMARY,
        )

        data = result.to_dict()
        assert result.ok
        assert data["state"] == "completed"
        assert data["transport"] == "primary"
        assert data["message"]["content"] == "Hello"
        assert data["error"] is None

    def test_failed_result_includes_error(self):
        """Test that a failed result reports its error."""
        result = ExchangeResult(
            request_id="r1",
            state=SessionState.FAILED_FINAL,
            message=Message(role="assistant", content="⚠️ ModelRejected: quota"),
            attempts=1,
            transport=TransportKind.PRIMARY,
            error=ModelRejected("quota"),
        )

        assert not result.ok
        assert result.to_dict()["error"] == {
            "kind": "ModelRejected",
            "message": "quota",
            "recoverable": False,
        }
