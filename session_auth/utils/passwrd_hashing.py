"""
Password hashing utilities using bcrypt
"""

from typing import Optional

import bcrypt

DEFAULT_ROUNDS = 10
# bcrypt rejects longer input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Simple password hashing utility"""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        # Verified against when an account does not exist, so a failed login
        # costs the same bcrypt work either way.
        self._dummy_hash = self.hash_password("session-auth-timing-dummy")

    def hash_password(self, password: str, rounds: Optional[int] = None) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password
            rounds: Optional cost factor override

        Returns:
            Hashed password as string

        Raises:
            ValueError: If the password is longer than MAX_PASSWORD_BYTES
        """
        salt = bcrypt.gensalt(rounds=rounds or self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password
            hashed_password: Previously hashed password

        Returns:
            True if password matches, False otherwise (including malformed
            hashes and passwords longer than MAX_PASSWORD_BYTES)
        """
        password_bytes = password.encode("utf-8")
        too_long = len(password_bytes) > MAX_PASSWORD_BYTES
        try:
            # Over-long input is still checked (truncated) so it costs the same
            matched = bcrypt.checkpw(
                password_bytes[:MAX_PASSWORD_BYTES], hashed_password.encode("utf-8")
            )
        except ValueError:
            return False
        return matched and not too_long

    def burn_verification(self, password: str) -> None:
        """Run a verification that always fails, to equalize login timing."""
        self.verify_password(password, self._dummy_hash)
