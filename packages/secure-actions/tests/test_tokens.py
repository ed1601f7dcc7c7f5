"""Tests for the token codec and credential helpers."""

from __future__ import annotations

import pytest

from secure_actions import (
    MalformedTokenError,
    decode_token,
    encode_token,
    parse_token,
    unwrap_token,
    wrap_token,
)
from secure_actions.credentials import generate_secret, hash_secret, verify_secret
from secure_actions.tokens import MAX_ACTION_ID


class TestTokenCodec:
    @pytest.mark.parametrize(
        "action_id, secret",
        [(0, "a"), (7, "abcdefghijklmnopqrst"), (123456789, "p@ss w/ spaces+=")],
    )
    def test_round_trip(self, action_id: int, secret: str) -> None:
        token = encode_token(action_id, secret)
        assert token == f"{action_id}:{secret}"
        assert decode_token(token) == (action_id, secret)
        assert parse_token(wrap_token(token)) == (action_id, secret)

    def test_secret_may_contain_separator(self) -> None:
        assert decode_token("3:a:b") == (3, "a:b")

    def test_negative_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            encode_token(-1, "secret")

    @pytest.mark.parametrize(
        "token",
        ["", "12", ":secret", "x:secret", "1.5:secret", "-1:secret", " 1:secret", "١:secret", "4:"],
    )
    def test_decode_malformed(self, token: str) -> None:
        with pytest.raises(MalformedTokenError):
            decode_token(token)

    @pytest.mark.parametrize(
        "token",
        ["9223372036854775808:s", "99999999999999999999:secret", "9" * 5000 + ":s"],
    )
    def test_decode_id_out_of_range(self, token: str) -> None:
        with pytest.raises(MalformedTokenError):
            decode_token(token)

    def test_decode_largest_id(self) -> None:
        assert decode_token("9223372036854775807:s") == (MAX_ACTION_ID, "s")
        assert decode_token("0" * 5000 + "42:s") == (42, "s")

    def test_wrapped_token_is_url_safe(self) -> None:
        wrapped = wrap_token("99:" + "?" * 30)
        assert ":" not in wrapped
        assert "=" not in wrapped
        assert "+" not in wrapped and "/" not in wrapped
        assert unwrap_token(wrapped) == "99:" + "?" * 30

    def test_unwrap_invalid_utf8(self) -> None:
        with pytest.raises(MalformedTokenError):
            unwrap_token("_w")

    def test_unwrap_non_ascii(self) -> None:
        with pytest.raises(MalformedTokenError):
            unwrap_token("ünïcode")

    def test_parse_wrapped_garbage(self) -> None:
        # Decodes cleanly but has no separator inside
        with pytest.raises(MalformedTokenError):
            parse_token(wrap_token("no separator here"))

    def test_parse_empty(self) -> None:
        with pytest.raises(MalformedTokenError):
            parse_token("")


class TestCredentials:
    def test_generate_secret(self) -> None:
        secret = generate_secret()
        assert len(secret) == 20
        assert secret.isalnum()
        assert generate_secret(32) != generate_secret(32)

    def test_generate_secret_too_short(self) -> None:
        with pytest.raises(ValueError):
            generate_secret(8)

    def test_hash_and_verify(self) -> None:
        hashed = hash_secret("correct horse battery", rounds=8)
        assert hashed.startswith("$2b$08$")
        assert "correct horse" not in hashed
        assert verify_secret("correct horse battery", hashed)
        assert not verify_secret("correct horse battery!", hashed)

    def test_hashes_are_salted(self) -> None:
        assert hash_secret("same", rounds=8) != hash_secret("same", rounds=8)

    def test_low_cost_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_secret("secret", rounds=4)

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_secret("", rounds=8)

    def test_long_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_secret("x" * 73, rounds=8)

    def test_verify_against_garbage_hash(self) -> None:
        assert not verify_secret("secret", "not-a-bcrypt-hash")
        assert not verify_secret("x" * 100, hash_secret("secret", rounds=8))
