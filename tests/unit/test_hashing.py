"""
Hashing Unit Tests
Tests for pmtorrent/crypto/hashing.py

Covers:
1. SHA-256 known vectors
2. combine() ordering
3. Emoji toy hasher
4. Hasher registry
5. Hex encoding/decoding
"""
import pytest

from pmtorrent.crypto.hashing import (
    EmojiHasher,
    Hasher,
    Sha256Hasher,
    decode_hex,
    encode_hex,
    get_hasher,
    hash_concat,
    sha256,
)


class TestSha256:
    """Tests for sha256 and Sha256Hasher."""

    def test_known_vector(self):
        assert sha256(b"hello").hex() == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    def test_empty_input(self):
        assert sha256(b"").hex() == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_hasher_matches_function(self):
        hasher = Sha256Hasher()
        assert hasher.hash(b"data") == sha256(b"data")
        assert hasher.digest_size == 32
        assert hasher.name == "sha256"

    def test_combine_is_hash_of_concatenation(self):
        hasher = Sha256Hasher()
        left, right = sha256(b"l"), sha256(b"r")
        assert hasher.combine(left, right) == sha256(left + right)
        assert hasher.combine(left, right) == hash_concat(left, right)

    def test_combine_is_ordered(self):
        hasher = Sha256Hasher()
        left, right = sha256(b"l"), sha256(b"r")
        assert hasher.combine(left, right) != hasher.combine(right, left)


class TestEmojiHasher:
    """Tests for the toy emoji hasher."""

    def test_empty_input_is_base_emoji(self):
        digest = EmojiHasher().hash(b"")
        assert digest == (0x1F442).to_bytes(4, "big")
        assert EmojiHasher.emoji(digest) == "\U0001F442"

    def test_small_input(self):
        assert EmojiHasher().hash(b"\x05") == (0x1F442 + 5).to_bytes(4, "big")

    def test_accumulator_wraps(self):
        # 255 -> (255 % 181) + 255 = 329 -> & 0xFF = 73
        assert EmojiHasher().hash(b"\xff\xff") == (0x1F442 + 73).to_bytes(4, "big")

    def test_digest_in_emoji_range(self):
        hasher = EmojiHasher()
        for i in range(256):
            value = int.from_bytes(hasher.hash(bytes([i, i, i])), "big")
            assert 0x1F442 <= value < 0x1F442 + 181

    def test_combine_uses_hash(self):
        hasher = EmojiHasher()
        a, b = hasher.hash(b"a"), hasher.hash(b"b")
        assert hasher.combine(a, b) == hasher.hash(a + b)


class TestRegistry:
    """Tests for get_hasher."""

    def test_known_names(self):
        assert isinstance(get_hasher("sha256"), Sha256Hasher)
        assert isinstance(get_hasher("EMOJI"), EmojiHasher)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown hasher"):
            get_hasher("md5")

    def test_custom_hasher(self):
        class XorHasher(Hasher):
            name = "xor"
            digest_size = 1

            def hash(self, data: bytes) -> bytes:
                acc = 0
                for value in data:
                    acc ^= value
                return bytes([acc])

        hasher = XorHasher()
        assert hasher.combine(b"\x01", b"\x03") == b"\x02"


class TestHex:
    """Tests for hex helpers."""

    def test_encode_has_no_prefix(self):
        assert encode_hex(bytes.fromhex("deadbeef")) == "deadbeef"

    def test_decode_with_and_without_prefix(self):
        assert decode_hex("0xdeadbeef") == bytes.fromhex("deadbeef")
        assert decode_hex("DEADBEEF") == bytes.fromhex("deadbeef")

    def test_decode_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            decode_hex("abc")

    def test_decode_invalid_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            decode_hex("zz")
