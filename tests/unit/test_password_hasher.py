"""Unit tests for PasswordHasher."""

import bcrypt

from tubeauth.services.password_hasher import PasswordHasher


class TestHash:
    """Tests for PasswordHasher.hash."""

    def test_returns_bcrypt_string(self, password_hasher):
        hashed = password_hasher.hash("my-secret-pw")
        assert hashed.startswith("$2b$") or hashed.startswith("$2a$")
        assert len(hashed) == 60

    def test_uses_configured_cost(self):
        hashed = PasswordHasher(rounds=5).hash("pw")
        assert hashed.split("$")[2] == "05"

    def test_different_salts(self, password_hasher):
        h1 = password_hasher.hash("same-password")
        h2 = password_hasher.hash("same-password")
        assert h1 != h2, "Each call should produce a unique salt"

    def test_never_contains_plaintext(self, password_hasher):
        assert "Secret123!" not in password_hasher.hash("Secret123!")


class TestVerify:
    """Tests for PasswordHasher.verify."""

    def test_correct_password(self, password_hasher):
        hashed = password_hasher.hash("correct-horse-battery")
        assert password_hasher.verify("correct-horse-battery", hashed) is True

    def test_wrong_password(self, password_hasher):
        hashed = password_hasher.hash("right-password")
        assert password_hasher.verify("wrong-password", hashed) is False

    def test_empty_password_does_not_match(self, password_hasher):
        hashed = password_hasher.hash("something")
        assert password_hasher.verify("", hashed) is False

    def test_long_passwords_differing_after_72_bytes(self, password_hasher):
        prefix = "a" * 80
        hashed = password_hasher.hash(prefix + "one")
        assert password_hasher.verify(prefix + "one", hashed) is True
        assert password_hasher.verify(prefix + "two", hashed) is False

    def test_unicode_password(self, password_hasher):
        hashed = password_hasher.hash("pässwörd-密码")
        assert password_hasher.verify("pässwörd-密码", hashed) is True

    def test_malformed_hash_returns_false(self, password_hasher):
        assert password_hasher.verify("anything", "not-a-bcrypt-hash") is False

    def test_raw_bcrypt_of_plaintext_is_not_accepted(self, password_hasher):
        """Stored hashes are over the reduced password, not the raw one."""
        raw = bcrypt.hashpw(b"plain", bcrypt.gensalt(rounds=4)).decode("utf-8")
        assert password_hasher.verify("plain", raw) is False
