"""Tests for bcrypt password hashing."""

import pytest

from chatjournal.services import passwords

# Minimum bcrypt cost keeps these tests fast
FAST_ROUNDS = 4


class TestHashPassword:
    def test_hash_is_not_the_password(self):
        hashed = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        assert hashed != "password123"
        assert hashed.startswith("$2")

    def test_salted(self):
        first = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        second = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        assert first != second

    def test_cost_factor_recorded(self):
        hashed = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        assert hashed.split("$")[2] == "04"

    def test_over_72_bytes_rejected(self):
        with pytest.raises(ValueError):
            passwords.hash_password("a" * 73, rounds=FAST_ROUNDS)

    def test_multibyte_length_counted_in_bytes(self):
        # 25 three-byte characters = 75 bytes
        with pytest.raises(ValueError):
            passwords.hash_password("€" * 25, rounds=FAST_ROUNDS)


class TestVerifyPassword:
    def test_correct_password(self):
        hashed = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        assert passwords.verify_password("password123", hashed) is True

    def test_wrong_password(self):
        hashed = passwords.hash_password("password123", rounds=FAST_ROUNDS)
        assert passwords.verify_password("password124", hashed) is False

    def test_malformed_hash_does_not_raise(self):
        assert passwords.verify_password("password123", "not-a-bcrypt-hash") is False

    def test_over_long_password_does_not_match(self):
        hashed = passwords.hash_password("a" * 72, rounds=FAST_ROUNDS)
        assert passwords.verify_password("a" * 73, hashed) is False

    def test_burn_verification_time(self):
        # Only has to complete without raising
        passwords.burn_verification_time("whatever", rounds=FAST_ROUNDS)
