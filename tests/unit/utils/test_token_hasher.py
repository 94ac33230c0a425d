"""
Unit tests for salted secret hashing.
"""

import hashlib

import pytest

from access_token_core.utils.token_hasher import generate_salt, hash_secret, verify_secret

SECRET = "00112233445566778899aabbccddeeff"
ITERATIONS = 1000


class TestHashSecret:
    """Test hash_secret."""

    def test_same_inputs_same_hash(self):
        salt = generate_salt()
        assert hash_secret(SECRET, salt, ITERATIONS) == hash_secret(SECRET, salt, ITERATIONS)

    def test_different_salt_different_hash(self):
        assert hash_secret(SECRET, generate_salt(), ITERATIONS) != hash_secret(
            SECRET, generate_salt(), ITERATIONS
        )

    def test_different_secret_different_hash(self):
        salt = generate_salt()
        assert hash_secret(SECRET, salt, ITERATIONS) != hash_secret(
            SECRET[:-1] + "0", salt, ITERATIONS
        )

    def test_hash_is_pbkdf2_sha256_hex(self):
        salt = "pepper"
        expected = hashlib.pbkdf2_hmac(
            "sha256", SECRET.encode(), salt.encode(), ITERATIONS, dklen=32
        ).hex()
        assert hash_secret(SECRET, salt, ITERATIONS) == expected
        assert len(expected) == 64

    def test_hash_does_not_contain_secret(self):
        assert SECRET not in hash_secret(SECRET, generate_salt(), ITERATIONS)

    def test_iterations_change_hash(self):
        salt = generate_salt()
        assert hash_secret(SECRET, salt, 1000) != hash_secret(SECRET, salt, 1001)


class TestVerifySecret:
    """Test verify_secret."""

    def test_verify_matching_secret(self):
        salt = generate_salt()
        stored = hash_secret(SECRET, salt, ITERATIONS)
        assert verify_secret(SECRET, salt, stored, ITERATIONS) is True

    def test_verify_wrong_secret(self):
        salt = generate_salt()
        stored = hash_secret(SECRET, salt, ITERATIONS)
        assert verify_secret("f" * 32, salt, stored, ITERATIONS) is False

    def test_verify_wrong_salt(self):
        stored = hash_secret(SECRET, generate_salt(), ITERATIONS)
        assert verify_secret(SECRET, generate_salt(), stored, ITERATIONS) is False

    @pytest.mark.parametrize("stored", [None, "", "abc", "é" * 64, 12345])
    def test_verify_malformed_stored_hash_is_false(self, stored):
        assert verify_secret(SECRET, generate_salt(), stored, ITERATIONS) is False

    def test_verify_unencodable_secret_is_false(self):
        salt = generate_salt()
        stored = hash_secret(SECRET, salt, ITERATIONS)
        assert verify_secret("\ud800" * 32, salt, stored, ITERATIONS) is False
