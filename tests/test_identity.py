import pytest
from httpx import AsyncClient, ConnectError, MockTransport
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import update

from app.models.accounts import AdminUser, GeneralUser
from app.models.types import new_uuid
from app.schemas.identity import (
    AdministrativeIdentity,
    GeneralIdentity,
    ResolvedIdentity,
    Role,
    VerifiedIdentity,
)
from app.services.identity_provider import IdentityProvider
from app.utils.auth import classify_identity, extract_bearer_token, resolve_credential
from app.utils.errors import ForbiddenError, InternalError, UnauthenticatedError


def test_administrative_identity_rejects_general_role():
    with pytest.raises(PydanticValidationError):
        AdministrativeIdentity(
            id="a", role="general_user", status="active", approval_status="approved"
        )


def test_general_identity_rejects_admin_role():
    with pytest.raises(PydanticValidationError):
        GeneralIdentity(id="g", role="admin", status="active")


def test_resolved_identity_discriminates_on_account_class():
    adapter = TypeAdapter(ResolvedIdentity)

    admin = adapter.validate_python(
        {
            "account_class": "administrative",
            "id": "a",
            "role": "owner",
            "status": "active",
            "approval_status": "approved",
        }
    )
    general = adapter.validate_python(
        {"account_class": "general", "id": "g", "status": "active"}
    )

    assert isinstance(admin, AdministrativeIdentity)
    assert admin.role is Role.OWNER
    assert isinstance(general, GeneralIdentity)
    assert general.role is Role.GENERAL_USER


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer ", "bearer abc"])
def test_extract_bearer_token_rejects_malformed_headers(header):
    with pytest.raises(UnauthenticatedError):
        extract_bearer_token(header)


async def test_classify_prefers_admin_account(db, accounts):
    # 같은 ID로 일반 사용자 행이 있어도 관리자 계정이 우선
    db.add(
        GeneralUser(
            id=accounts.admin.id,
            email=accounts.admin.email,
            nickname="관리자닉",
            provider="google",
            status="active",
        )
    )
    await db.commit()

    identity = await classify_identity(VerifiedIdentity(id=accounts.admin.id), db)

    assert isinstance(identity, AdministrativeIdentity)
    assert identity.role is Role.ADMIN


async def test_classify_general_account(db, accounts):
    identity = await classify_identity(VerifiedIdentity(id=accounts.general.id), db)

    assert isinstance(identity, GeneralIdentity)
    assert identity.nickname == "가챠러버"


async def test_classify_unknown_user(db, accounts):
    with pytest.raises(UnauthenticatedError, match="User not found in system"):
        await classify_identity(VerifiedIdentity(id=new_uuid()), db)


@pytest.mark.parametrize(
    "values, message",
    [
        ({"status": "suspended"}, "Account is not active"),
        ({"approval_status": "pending"}, "Account is not approved"),
        ({"approval_status": "rejected"}, "Account is not approved"),
    ],
)
async def test_classify_blocks_inactive_or_unapproved_admins(db, accounts, values, message):
    await db.execute(
        update(AdminUser).where(AdminUser.id == accounts.admin.id).values(**values)
    )
    await db.commit()

    with pytest.raises(ForbiddenError, match=message):
        await classify_identity(VerifiedIdentity(id=accounts.admin.id), db)


async def test_classify_blocks_suspended_general_user(db, accounts):
    await db.execute(
        update(GeneralUser)
        .where(GeneralUser.id == accounts.general.id)
        .values(status="suspended")
    )
    await db.commit()

    with pytest.raises(ForbiddenError):
        await classify_identity(VerifiedIdentity(id=accounts.general.id), db)


async def test_resolve_credential_with_valid_token(provider, accounts):
    verified = await resolve_credential(f"Bearer {accounts.tokens['owner']}", provider)

    assert verified.id == accounts.owner.id
    assert verified.email == "owner@gachastore.kr"


async def test_resolve_credential_rejected_token(provider):
    with pytest.raises(UnauthenticatedError, match="Invalid or expired token"):
        await resolve_credential("Bearer forged", provider)


async def test_resolve_credential_when_provider_unreachable():
    def unreachable(request):
        raise ConnectError("connection refused", request=request)

    async with AsyncClient(
        transport=MockTransport(unreachable), base_url="http://auth.test"
    ) as http:
        with pytest.raises(InternalError):
            await resolve_credential("Bearer anything", IdentityProvider(http))
