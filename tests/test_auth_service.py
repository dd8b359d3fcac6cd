"""Tests for the account lifecycle service."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from auth.schemas import CustomerProfileFields, SellerProfileFields
from errors import (
    AmbiguousIdentifier,
    DuplicateIdentity,
    HashingError,
    IdentityNotFound,
    InvalidCredentials,
    MissingIdentifier,
    PayloadTypeMismatch,
    RefreshTokenMismatch,
    RefreshTokenRevoked,
    RepositoryError,
    UniquenessCheckFailed,
    UnsupportedRole,
    ValidationError,
)
from identity import Role

pytestmark = pytest.mark.asyncio

ALICE = {
    'username': "alice123",
    'email': "a@x.com",
    'password': "longenough",
}


async def register_alice(auth_service, role=Role.CUSTOMER):
    return await auth_service.register(role, ALICE['username'], ALICE['email'], ALICE['password'])


async def test_register_then_login_issues_a_new_pair(auth_service):
    registered = await register_alice(auth_service)

    logged_in = await auth_service.login(
        Role.CUSTOMER, ALICE['password'], username=ALICE['username']
    )

    assert registered.access_token != logged_in.access_token
    assert registered.refresh_token != logged_in.refresh_token


async def test_login_by_email(auth_service, sessions):
    await register_alice(auth_service)

    pair = await auth_service.login(Role.CUSTOMER, ALICE['password'], email=ALICE['email'])

    claims = sessions.verify_access_token(pair.access_token)
    assert claims.user_type == Role.CUSTOMER


async def test_second_login_invalidates_previous_refresh_token(auth_service, sessions):
    await register_alice(auth_service)
    first = await auth_service.login(Role.CUSTOMER, ALICE['password'], username=ALICE['username'])
    await auth_service.login(Role.CUSTOMER, ALICE['password'], username=ALICE['username'])

    with pytest.raises(RefreshTokenMismatch):
        await sessions.verify_refresh_token(first.refresh_token)


async def test_duplicate_email_within_role_is_rejected(auth_service):
    await register_alice(auth_service)

    with pytest.raises(DuplicateIdentity):
        await auth_service.register(Role.CUSTOMER, "alice_two", ALICE['email'], "longenough")


async def test_duplicate_username_within_role_is_rejected(auth_service):
    await register_alice(auth_service)

    with pytest.raises(DuplicateIdentity):
        await auth_service.register(Role.CUSTOMER, ALICE['username'], "other@x.com", "longenough")


async def test_same_credentials_may_exist_in_both_roles(auth_service):
    await register_alice(auth_service, Role.CUSTOMER)

    pair = await register_alice(auth_service, Role.SELLER)

    assert pair.access_token


async def test_uniqueness_check_failure(auth_service, identities):
    identities.get_by_email = AsyncMock(side_effect=RepositoryError("connection lost"))

    with pytest.raises(UniquenessCheckFailed):
        await register_alice(auth_service)


async def test_unsupported_role_is_rejected(auth_service):
    with pytest.raises(UnsupportedRole):
        await auth_service.register("admin", "mallory", "m@x.com", "longenough")


async def test_login_with_both_identifiers_fails_before_lookup(auth_service, identities):
    with pytest.raises(AmbiguousIdentifier):
        await auth_service.login(
            Role.CUSTOMER, ALICE['password'], username=ALICE['username'], email=ALICE['email']
        )

    assert identities.lookups == 0


async def test_login_without_identifier_fails_before_lookup(auth_service, identities):
    with pytest.raises(MissingIdentifier):
        await auth_service.login(Role.CUSTOMER, ALICE['password'])

    assert identities.lookups == 0


async def test_unknown_user_and_wrong_password_look_alike(auth_service):
    await register_alice(auth_service)

    with pytest.raises(InvalidCredentials):
        await auth_service.login(Role.CUSTOMER, ALICE['password'], username="nobody")
    with pytest.raises(InvalidCredentials):
        await auth_service.login(Role.CUSTOMER, "wrong-password", username=ALICE['username'])
    with pytest.raises(InvalidCredentials):
        await auth_service.login(Role.SELLER, ALICE['password'], username=ALICE['username'])


async def test_new_password_requires_old_password(auth_service, identities):
    pair = await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])

    with pytest.raises(ValidationError):
        await auth_service.update_credentials(
            pair.refresh_token, identity.id, new_password="brand-new-password"
        )


async def test_wrong_old_password_keeps_stored_hash(auth_service, identities):
    pair = await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])

    with pytest.raises(InvalidCredentials):
        await auth_service.update_credentials(
            pair.refresh_token,
            identity.id,
            old_password="not-my-password",
            new_password="brand-new-password"
        )

    unchanged = await identities.get_by_id(identity.id)
    assert unchanged.password_hash == identity.password_hash


async def test_password_change_revokes_session(auth_service, identities, sessions):
    pair = await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])

    await auth_service.update_credentials(
        pair.refresh_token,
        identity.id,
        email="new@x.com",
        old_password=ALICE['password'],
        new_password="brand-new-password"
    )

    with pytest.raises(RefreshTokenRevoked):
        await sessions.verify_refresh_token(pair.refresh_token)
    await auth_service.login(Role.CUSTOMER, "brand-new-password", email="new@x.com")


async def test_revoke_failure_does_not_fail_credential_update(auth_service, identities, sessions):
    pair = await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])
    sessions.token_store.revoke = AsyncMock(side_effect=RepositoryError("connection lost"))

    await auth_service.update_credentials(pair.refresh_token, identity.id, username="alice_renamed")

    updated = await identities.get_by_id(identity.id)
    assert updated.username == "alice_renamed"


async def test_refresh_token_of_another_user_is_rejected(auth_service, identities):
    await register_alice(auth_service)
    other = await auth_service.register(Role.CUSTOMER, "bob_builder", "b@x.com", "longenough")
    alice = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])

    with pytest.raises(RefreshTokenMismatch):
        await auth_service.update_credentials(other.refresh_token, alice.id, username="hijacked")


async def test_profile_update_writes_only_supplied_fields(auth_service, identities):
    await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])
    payload = CustomerProfileFields(first_name="Alice", date_birth=date(1990, 5, 17))

    await auth_service.update_profile(identity.id, Role.CUSTOMER, payload)

    assert identities.profiles[identity.id] == {
        'first_name': "Alice",
        'date_birth': date(1990, 5, 17),
    }


async def test_profile_payload_of_other_role_is_rejected(auth_service, identities):
    await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])

    with pytest.raises(PayloadTypeMismatch):
        await auth_service.update_profile(
            identity.id, Role.CUSTOMER, SellerProfileFields(company_name="Acme")
        )


async def test_profile_update_for_unknown_role_is_rejected(auth_service):
    with pytest.raises(UnsupportedRole):
        await auth_service.update_profile("any", "admin", CustomerProfileFields())


async def test_delete_without_refresh_token_still_deletes(auth_service, identities, token_store):
    await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])
    token_store.records.clear()

    await auth_service.delete_user(identity.id)

    with pytest.raises(IdentityNotFound):
        await identities.get_by_id(identity.id)


async def test_delete_aborts_on_token_store_failure(auth_service, identities, sessions):
    await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])
    sessions.token_store.revoke = AsyncMock(side_effect=RepositoryError("connection lost"))

    with pytest.raises(RepositoryError):
        await auth_service.delete_user(identity.id)

    assert await identities.get_by_id(identity.id)


async def test_deleting_twice_reports_missing_user(auth_service, identities):
    await register_alice(auth_service)
    identity = await identities.get_by_username(Role.CUSTOMER, ALICE['username'])
    await auth_service.delete_user(identity.id)

    with pytest.raises(IdentityNotFound):
        await auth_service.delete_user(identity.id)


async def test_refresh_rotates_the_session(auth_service, sessions):
    pair = await register_alice(auth_service)

    rotated = await auth_service.refresh(pair.refresh_token)

    assert rotated.refresh_token != pair.refresh_token
    with pytest.raises(RefreshTokenMismatch):
        await auth_service.refresh(pair.refresh_token)
    await sessions.verify_refresh_token(rotated.refresh_token)


async def test_over_long_password_cannot_register(auth_service, identities):
    with pytest.raises(HashingError):
        await auth_service.register(Role.CUSTOMER, "alice123", "a@x.com", "a" * 72 + "SECRET")

    assert not identities.users


async def test_password_matching_only_first_72_bytes_is_rejected(auth_service):
    await auth_service.register(Role.CUSTOMER, "alice123", "a@x.com", "a" * 72)

    with pytest.raises(InvalidCredentials):
        await auth_service.login(Role.CUSTOMER, "a" * 72 + "WRONG", username="alice123")
