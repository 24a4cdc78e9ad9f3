"""
Password Hashing Tests
----------------------
bcrypt hashing, verification and the timing-equalizing dummy check.
"""

from unittest.mock import patch

from session_auth.utils.passwrd_hashing import MAX_PASSWORD_BYTES, PasswordHasher


class TestPasswordHasher:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_and_verify(self):
        hashed = self.hasher.hash_password("SecurePass123")

        assert hashed != "SecurePass123"
        assert hashed.startswith("$2b$04$")
        assert self.hasher.verify_password("SecurePass123", hashed) is True
        assert self.hasher.verify_password("WrongPass123", hashed) is False

    def test_same_password_hashes_differently(self):
        assert self.hasher.hash_password("SecurePass123") != self.hasher.hash_password(
            "SecurePass123"
        )

    def test_rounds_override(self):
        assert self.hasher.hash_password("pw", rounds=5).startswith("$2b$05$")

    def test_malformed_hash_is_a_mismatch(self):
        assert self.hasher.verify_password("SecurePass123", "not-a-bcrypt-hash") is False

    def test_burn_verification_runs_bcrypt(self):
        with patch("session_auth.utils.passwrd_hashing.bcrypt.checkpw", return_value=False) as checkpw:
            self.hasher.burn_verification("SecurePass123")

        checkpw.assert_called_once()
        assert checkpw.call_args.args[1] == self.hasher._dummy_hash.encode("utf-8")

    def test_password_at_byte_limit(self):
        password = "p" * MAX_PASSWORD_BYTES
        hashed = self.hasher.hash_password(password)

        assert self.hasher.verify_password(password, hashed) is True

    def test_over_long_password_is_a_mismatch(self):
        hashed = self.hasher.hash_password("p" * MAX_PASSWORD_BYTES)

        assert self.hasher.verify_password("p" * 90, hashed) is False

    def test_burn_verification_runs_bcrypt_for_over_long_password(self):
        with patch("session_auth.utils.passwrd_hashing.bcrypt.checkpw", return_value=False) as checkpw:
            self.hasher.burn_verification("\U0001F600" * 30)

        checkpw.assert_called_once()
        assert len(checkpw.call_args.args[0]) == MAX_PASSWORD_BYTES
