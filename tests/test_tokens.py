"""Unit tests for auth/tokens.py -- password hashing and random strings.

Covers:
- hash_password() matches the known SHA3-512/base64 vector
- hash_password() is deterministic and sensitive to both inputs
- verify_password() accepts the right password only
- generate_token() length and alphabet
- generate_salt() / generate_session_token() honour the configured lengths
"""

import base64
import string

import pytest

from auth.tokens import (
    TOKEN_ALPHABET,
    generate_salt,
    generate_session_token,
    generate_token,
    hash_password,
    verify_password,
)
from core.config import get_settings

_KNOWN_DIGEST_HEX = (
    "a4d53131134530f701f930e59af6d301fa350b06b762a3850535b13400685a3a"
    "ea6fe190481a882c9540b1b8c00bf45044312fc125588dff349ce47b1cd3bccd"
)


class TestHashPassword:
    def test_known_vector(self) -> None:
        """SHA3-512("salt" + "asdf1234"), base64-encoded."""
        expected = base64.b64encode(bytes.fromhex(_KNOWN_DIGEST_HEX)).decode("ascii")
        assert hash_password("salt", "asdf1234") == expected

    def test_deterministic(self) -> None:
        assert hash_password("abc", "password1234") == hash_password("abc", "password1234")

    def test_salt_changes_hash(self) -> None:
        assert hash_password("abc", "password1234") != hash_password("abd", "password1234")

    def test_password_changes_hash(self) -> None:
        assert hash_password("abc", "password1234") != hash_password("abc", "password1235")

    def test_empty_inputs_are_valid(self) -> None:
        digest = base64.b64decode(hash_password("", ""))
        assert len(digest) == 64

    def test_non_ascii_input(self) -> None:
        assert hash_password("sälz", "pässwörd") == hash_password("sälz", "pässwörd")


class TestVerifyPassword:
    def test_accepts_matching_password(self) -> None:
        stored = hash_password("s4lt", "hunter2")
        assert verify_password("s4lt", "hunter2", stored) is True

    def test_rejects_wrong_password(self) -> None:
        stored = hash_password("s4lt", "hunter2")
        assert verify_password("s4lt", "hunter3", stored) is False

    def test_rejects_wrong_salt(self) -> None:
        stored = hash_password("s4lt", "hunter2")
        assert verify_password("other", "hunter2", stored) is False


class TestGenerateToken:
    @pytest.mark.parametrize("length", [0, 1, 32, 256, 1000])
    def test_exact_length(self, length: int) -> None:
        assert len(generate_token(length)) == length

    def test_alphanumeric_only(self) -> None:
        token = generate_token(2000)
        assert set(token) <= set(string.ascii_letters + string.digits)

    def test_alphabet_is_letters_and_digits(self) -> None:
        assert set(TOKEN_ALPHABET) == set(string.ascii_letters + string.digits)
        assert len(TOKEN_ALPHABET) == 62

    def test_negative_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            generate_token(-1)

    def test_successive_tokens_differ(self) -> None:
        assert generate_token(64) != generate_token(64)


class TestConfiguredLengths:
    def test_salt_length(self) -> None:
        assert len(generate_salt()) == get_settings().salt_length

    def test_session_token_length(self) -> None:
        assert len(generate_session_token()) == get_settings().session_token_length
