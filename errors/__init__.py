"""Application error taxonomy.

Every failure raised by the services derives from AppError. Each class carries
a machine readable code and the HTTP status the API layer responds with. The
wrapped cause is kept for logging and is never sent to clients.
"""
from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    code = 'INTERNAL'
    status_code = 500
    default_message = 'internal server error'

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.code}: {self.message}: {self.cause}"
        return f"{self.code}: {self.message}"


class InputError(AppError):
    """Raised for malformed or missing request input."""
    code = 'INVALID_INPUT'
    status_code = 400
    default_message = 'invalid input'


class ValidationError(AppError):
    """Raised when a request fails business validation."""
    code = 'VALIDATION'
    status_code = 400
    default_message = 'validation failed'


class AmbiguousIdentifier(ValidationError):
    """Raised when login receives both a username and an email."""
    default_message = 'provide either username or email, not both'


class MissingIdentifier(ValidationError):
    """Raised when login receives neither a username nor an email."""
    default_message = 'username or email is required'


class UnsupportedRole(ValidationError):
    """Raised for a role outside customer/seller."""
    code = 'INVALID_TYPE'
    default_message = 'unsupported user type'


class PayloadTypeMismatch(ValidationError):
    """Raised when a profile payload does not match the caller's role."""
    code = 'INVALID_PAYLOAD'
    default_message = 'payload does not match user type'


class InvalidCredentials(AppError):
    code = 'INVALID_CREDENTIALS'
    status_code = 401
    default_message = 'invalid credentials'


class InvalidToken(AppError):
    """Base class for token verification failures."""
    code = 'INVALID_TOKEN'
    status_code = 401
    default_message = 'invalid token'


class InvalidSignature(InvalidToken):
    default_message = 'invalid token signature'


class MalformedClaims(InvalidToken):
    default_message = 'invalid token claims'


class TokenExpired(InvalidToken):
    default_message = 'token has expired'


class RefreshTokenMismatch(InvalidToken):
    default_message = 'refresh token does not match'


class RefreshTokenExpired(InvalidToken):
    default_message = 'refresh token has expired'


class RefreshTokenRevoked(InvalidToken):
    default_message = 'refresh token has been revoked'


class PermissionDenied(AppError):
    code = 'FORBIDDEN'
    status_code = 403
    default_message = 'permission denied'


class NotFound(AppError):
    code = 'NOT_FOUND'
    status_code = 404
    default_message = 'not found'


class IdentityNotFound(NotFound):
    default_message = 'user not found'


class TokenNotFound(NotFound):
    default_message = 'refresh token not found'


class AlreadyExists(AppError):
    code = 'DUPLICATE'
    status_code = 409
    default_message = 'already exists'


class DuplicateIdentity(AlreadyExists):
    default_message = 'user with this email or username already exists'


class DuplicateProduct(AlreadyExists):
    default_message = 'product with this title already exists'


class RepositoryError(AppError):
    """Raised when a datastore operation fails."""
    code = 'REPOSITORY'
    default_message = 'repository error'


class UniquenessCheckFailed(RepositoryError):
    default_message = 'failed to check uniqueness'


class HashingError(AppError):
    code = 'HASHING'
    default_message = 'failed to hash password'


class TokenGenerationError(AppError):
    code = 'JWT_GENERATION'
    default_message = 'failed to generate token'


class TokenPersistenceError(TokenGenerationError):
    default_message = 'failed to store refresh token'


__all__ = [
    'AppError',
    'InputError',
    'ValidationError',
    'AmbiguousIdentifier',
    'MissingIdentifier',
    'UnsupportedRole',
    'PayloadTypeMismatch',
    'InvalidCredentials',
    'InvalidToken',
    'InvalidSignature',
    'MalformedClaims',
    'TokenExpired',
    'RefreshTokenMismatch',
    'RefreshTokenExpired',
    'RefreshTokenRevoked',
    'PermissionDenied',
    'NotFound',
    'IdentityNotFound',
    'TokenNotFound',
    'AlreadyExists',
    'DuplicateIdentity',
    'DuplicateProduct',
    'RepositoryError',
    'UniquenessCheckFailed',
    'HashingError',
    'TokenGenerationError',
    'TokenPersistenceError',
]
