"""Password hashing and bearer token helpers."""

import unittest
from unittest.mock import patch

from nita.core import security
from nita.core.security import (
    generate_token,
    hash_password,
    hash_token,
    random_password_hash,
    verify_password,
)


@patch("nita.core.security.BCRYPT_ROUNDS", 4)
class TestPasswords(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        self.assertNotEqual(hashed, "correct horse")
        self.assertTrue(verify_password("correct horse", hashed))
        self.assertFalse(verify_password("wrong horse", hashed))

    def test_missing_hash_never_verifies(self):
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", ""))

    def test_malformed_hash_never_verifies(self):
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))

    def test_shadow_hash_is_random(self):
        self.assertNotEqual(random_password_hash(), random_password_hash())


class TestTokens(unittest.TestCase):
    def test_generate_token_returns_plain_and_digest(self):
        plain, digest = generate_token()
        self.assertTrue(plain.startswith("nita_"))
        self.assertEqual(digest, hash_token(plain))
        self.assertEqual(len(digest), 64)
        self.assertNotIn(plain, digest)

    def test_tokens_are_unique(self):
        self.assertNotEqual(generate_token()[0], generate_token()[0])


class TestUnknownUserCost(unittest.TestCase):
    def test_dummy_hash_costs_the_same_as_stored_hashes(self):
        stored = hash_password("password123")
        self.assertTrue(security._DUMMY_HASH.startswith(f"$2b${security.BCRYPT_ROUNDS:02d}$"))
        self.assertEqual(security._DUMMY_HASH[:7], stored[:7])


if __name__ == "__main__":
    unittest.main()
