"""Unit tests for password hashing."""

from userauth.kernel.identity.password import BCRYPT_ROUNDS, PasswordHasher


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self, hasher: PasswordHasher):
        """Same password should create different hashes (due to salt)."""
        hash1 = hasher.hash("TestPassword123")
        hash2 = hasher.hash("TestPassword123")

        assert hash1 != hash2
        assert hash1.startswith("$2b$10$")

    def test_verify_correct_password(self, hasher: PasswordHasher):
        hashed = hasher.hash("TestPassword123")

        assert hasher.verify("TestPassword123", hashed) is True

    def test_verify_wrong_password(self, hasher: PasswordHasher):
        hashed = hasher.hash("TestPassword123")

        assert hasher.verify("WrongPassword", hashed) is False

    def test_verify_malformed_digest_returns_false(self, hasher: PasswordHasher):
        """A digest bcrypt cannot parse is a mismatch, not an error."""
        assert hasher.verify("anything", "not-a-bcrypt-hash") is False

    def test_long_passwords_use_first_72_bytes(self, hasher: PasswordHasher):
        base = "x" * 72
        hashed = hasher.hash(base + "tail-one")

        assert hasher.verify(base + "tail-two", hashed) is True

    def test_unicode_password(self, hasher: PasswordHasher):
        hashed = hasher.hash("contraseña-ñandú")

        assert hasher.verify("contraseña-ñandú", hashed) is True
        assert hasher.verify("contrasena-nandu", hashed) is False

    def test_needs_rehash(self):
        low_cost = PasswordHasher(rounds=4)
        digest = low_cost.hash("pw")

        assert PasswordHasher().needs_rehash(digest) is True
        assert low_cost.needs_rehash(digest) is False
        assert PasswordHasher().needs_rehash("garbage") is True

    def test_default_cost(self, hasher: PasswordHasher):
        digest = hasher.hash("pw")

        assert hasher.rounds == BCRYPT_ROUNDS
        assert digest.split("$")[2] == str(BCRYPT_ROUNDS)
        assert hasher.needs_rehash(digest) is False
