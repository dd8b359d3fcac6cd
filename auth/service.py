"""Account lifecycle: registration, login, credential and profile updates, deletion."""

import logging
from typing import Optional

from errors import (
    AmbiguousIdentifier,
    AppError,
    DuplicateIdentity,
    IdentityNotFound,
    InvalidCredentials,
    MissingIdentifier,
    PayloadTypeMismatch,
    RefreshTokenMismatch,
    TokenNotFound,
    UniquenessCheckFailed,
    UnsupportedRole,
    ValidationError,
)
from identity.models import Role
from identity.repository import IdentityRepository
from .hasher import PasswordHasher
from .schemas import PROFILE_PAYLOADS, ProfileFields
from .session import SessionManager, TokenPair

logger = logging.getLogger(__name__)


def _check_role(role) -> Role:
    try:
        return Role(role)
    except ValueError:
        logger.warning(f"Unsupported user type: {role}")
        raise UnsupportedRole()


class AuthService:
    """Orchestrates identities, password hashes and sessions."""

    def __init__(
        self,
        identities: IdentityRepository,
        sessions: SessionManager,
        hasher: PasswordHasher
    ):
        self.identities = identities
        self.sessions = sessions
        self.hasher = hasher

    async def _ensure_available(self, role: Role, email: str, username: str) -> None:
        """Fail if the email or username is taken within the role."""
        checks = (
            ('email', self.identities.get_by_email),
            ('username', self.identities.get_by_username),
        )
        values = {'email': email, 'username': username}

        for field, lookup in checks:
            try:
                await lookup(role, values[field])
            except IdentityNotFound:
                continue
            except AppError as e:
                logger.error(f"Uniqueness check on {field} failed: {e}")
                raise UniquenessCheckFailed(cause=e)
            logger.info(f"Registration rejected: {role.value} {field} already exists")
            raise DuplicateIdentity(f"{field} already exists")

    async def register(self, role, username: str, email: str, password: str) -> TokenPair:
        """Register a new identity and open its first session.

        Args:
            role: customer or seller
            username: Username, unique within the role
            email: Email, unique within the role
            password: Plaintext password

        Returns:
            Access and refresh token pair

        Raises:
            UnsupportedRole: If the role is not customer or seller
            DuplicateIdentity: If the email or username is taken within the role
            UniquenessCheckFailed: If a uniqueness check fails
            HashingError: If the password cannot be hashed
            TokenGenerationError: If the tokens cannot be issued
        """
        role = _check_role(role)
        await self._ensure_available(role, email, username)

        password_hash = self.hasher.hash(password)
        identity = await self.identities.create(role, username, email, password_hash)

        pair = await self.sessions.issue_token_pair(identity)
        logger.info(f"Registered {role.value} {identity.id}")
        return pair

    async def login(
        self,
        role,
        password: str,
        username: Optional[str] = None,
        email: Optional[str] = None
    ) -> TokenPair:
        """Authenticate by username or email and issue a fresh token pair.

        Issuing the pair replaces the user's previous refresh token.

        Raises:
            AmbiguousIdentifier: If both username and email are given
            MissingIdentifier: If neither is given
            UnsupportedRole: If the role is not customer or seller
            InvalidCredentials: If the user is unknown or the password is wrong
        """
        if username and email:
            raise AmbiguousIdentifier()
        if not username and not email:
            raise MissingIdentifier()
        role = _check_role(role)

        try:
            if email:
                identity = await self.identities.get_by_email(role, email)
            else:
                identity = await self.identities.get_by_username(role, username)
        except IdentityNotFound:
            logger.info(f"Login failed: unknown {role.value}")
            raise InvalidCredentials()

        if not self.hasher.verify(password, identity.password_hash):
            logger.info(f"Login failed: wrong password for {identity.id}")
            raise InvalidCredentials()

        pair = await self.sessions.issue_token_pair(identity)
        logger.info(f"User {identity.id} logged in")
        return pair

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a valid refresh token for a new token pair.

        Raises:
            InvalidToken: If the refresh token fails verification
            IdentityNotFound: If the user no longer exists
        """
        claims = await self.sessions.verify_refresh_token(refresh_token)
        identity = await self.identities.get_by_id(claims.user_id)
        return await self.sessions.issue_token_pair(identity)

    async def update_credentials(
        self,
        refresh_token: str,
        user_id,
        email: Optional[str] = None,
        username: Optional[str] = None,
        old_password: Optional[str] = None,
        new_password: Optional[str] = None
    ) -> None:
        """Change email, username or password, then end the current session.

        Raises:
            InvalidToken: If the refresh token fails verification or belongs to another user
            IdentityNotFound: If the user does not exist
            ValidationError: If new_password is given without old_password
            InvalidCredentials: If old_password is wrong
            DuplicateIdentity: If the new email or username is taken within the role
        """
        claims = await self.sessions.verify_refresh_token(refresh_token)
        if str(claims.user_id) != str(user_id):
            raise RefreshTokenMismatch()

        identity = await self.identities.get_by_id(user_id)

        password_hash = None
        if new_password:
            if not old_password:
                raise ValidationError("old password required")
            if not self.hasher.verify(old_password, identity.password_hash):
                logger.info(f"Credential update rejected: wrong old password for {user_id}")
                raise InvalidCredentials("old password incorrect")
            password_hash = self.hasher.hash(new_password)

        await self.identities.update_credentials(
            identity.id,
            email=email,
            username=username,
            password_hash=password_hash
        )

        try:
            await self.sessions.revoke_refresh_token(identity.id)
        except AppError as e:
            logger.warning(f"Failed to revoke refresh token after update for {user_id}: {e}")

        logger.info(f"Updated credentials for {user_id}")

    async def update_profile(self, user_id, role, payload: ProfileFields) -> None:
        """Write the supplied profile fields of the caller's role.

        Raises:
            UnsupportedRole: If the role is not customer or seller
            PayloadTypeMismatch: If the payload belongs to the other role
        """
        role = _check_role(role)
        if not isinstance(payload, PROFILE_PAYLOADS[role]):
            logger.warning(f"Profile payload {type(payload).__name__} does not fit {role.value}")
            raise PayloadTypeMismatch()

        fields = payload.model_dump(exclude_unset=True)
        await self.identities.update_profile(user_id, role, fields)
        logger.info(f"Updated {role.value} profile for {user_id}")

    async def delete_user(self, user_id) -> None:
        """Revoke the session and delete the user.

        A missing refresh token does not stop the deletion.

        Raises:
            RepositoryError: If the token store fails
            IdentityNotFound: If the user does not exist
        """
        try:
            await self.sessions.revoke_refresh_token(user_id)
        except TokenNotFound:
            logger.info(f"No refresh token to revoke for {user_id}")

        await self.identities.delete(user_id)
        logger.info(f"Deleted user {user_id}")


__all__ = ['AuthService']
