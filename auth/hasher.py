"""Password hashing with bcrypt."""
import logging

from passlib.context import CryptContext

from errors import HashingError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
# bcrypt only reads this many bytes of the secret
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """One-way password hashing and verification."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__truncate_error=True
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Passwords longer than 72 UTF-8 bytes are refused rather than truncated.

        Raises:
            HashingError: If the password cannot be hashed
        """
        try:
            return self._context.hash(password)
        except (TypeError, ValueError) as e:
            # PasswordTruncateError is a ValueError
            logger.error(f"Failed to hash password: {e}")
            raise HashingError(cause=e)

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash.

        A malformed stored hash or an over-long password never verifies.
        """
        if len(password.encode('utf-8')) > BCRYPT_MAX_BYTES:
            logger.info("Password verification refused: password exceeds 72 bytes")
            return False
        try:
            return self._context.verify(password, password_hash)
        except (TypeError, ValueError) as e:
            logger.warning(f"Password verification failed on malformed hash: {e}")
            return False
