"""
Tests for dict session serialization.
"""
import pytest

from encrypted_sessions.serializer import decode_session, encode_session


class TestSerializer:
    """orjson encoding of session mappings."""

    def test_primitives(self):
        """Primitive values survive encoding."""
        data = {"name": "alice", "count": 3, "ratio": 0.5, "ok": True, "none": None}
        assert decode_session(encode_session(data)) == data

    def test_nested_bytes(self):
        """bytes are restored at any depth."""
        data = {"raw": b"\x00\xff", "nested": {"items": [b"a", {"deep": b"b"}]}}
        assert decode_session(encode_session(data)) == data

    def test_empty_payload(self):
        """An empty payload is an empty session."""
        assert decode_session(b"") == {}

    def test_not_an_object(self):
        """A top-level JSON array is rejected."""
        with pytest.raises(ValueError):
            decode_session(b"[1, 2]")

    def test_not_json(self):
        """Garbage payloads raise ValueError."""
        with pytest.raises(ValueError):
            decode_session(b"user|s:5:\"alice\";")

    def test_unserializable(self):
        """Arbitrary objects are refused."""
        with pytest.raises(TypeError):
            encode_session({"obj": object()})

    def test_wrapper_key_with_non_string_value(self):
        """A wrapper-shaped value that is not a string stays a dict."""
        data = {"field": {"__session_bytes_b64__": 5}}
        assert decode_session(encode_session(data)) == data

    def test_wrapper_key_with_invalid_base64(self):
        """A wrapper-shaped value that is not base64 stays a dict."""
        data = {"field": {"__session_bytes_b64__": "not base64!"}}
        assert decode_session(encode_session(data)) == data

    def test_top_level_wrapper_key_stays_mapping(self):
        """A session holding only the wrapper key decodes to a dict."""
        data = {"__session_bytes_b64__": "AAAA"}
        decoded = decode_session(encode_session(data))
        assert isinstance(decoded, dict)
        assert decoded == data

    def test_top_level_wrapper_key_non_string(self):
        """A top-level wrapper key with a number round-trips."""
        data = {"__session_bytes_b64__": 5}
        assert decode_session(encode_session(data)) == data
