import pytest

from app.schemas.identity import AdministrativeIdentity, GeneralIdentity, Role
from app.utils.errors import ForbiddenError, UnauthenticatedError
from app.utils.permissions import (
    is_admin,
    require_admin,
    require_administrative,
    require_authenticated,
    require_general,
    require_owner,
    require_role,
    require_super_admin,
)


def admin_identity(role: Role) -> AdministrativeIdentity:
    return AdministrativeIdentity(
        id=f"{role.value}-id", role=role, status="active", approval_status="approved"
    )


GENERAL = GeneralIdentity(id="general-id", status="active", nickname="가챠러버")


def test_require_authenticated():
    with pytest.raises(UnauthenticatedError, match="Authentication required"):
        require_authenticated(None)
    assert require_authenticated(GENERAL) is GENERAL


def test_require_role_lists_allowed_roles():
    with pytest.raises(ForbiddenError) as exc_info:
        require_role(admin_identity(Role.OWNER), {Role.ADMIN, Role.SUPER_ADMIN})

    assert exc_info.value.status_code == 403
    assert "admin" in exc_info.value.detail


@pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.ADMIN])
def test_require_admin_accepts_admin_roles(role):
    identity = admin_identity(role)
    assert require_admin(identity) is identity
    assert is_admin(identity)


def test_require_admin_rejects_owner_and_general():
    with pytest.raises(ForbiddenError):
        require_admin(admin_identity(Role.OWNER))
    with pytest.raises(ForbiddenError):
        require_admin(GENERAL)
    assert not is_admin(GENERAL)
    assert not is_admin(None)


def test_require_super_admin():
    require_super_admin(admin_identity(Role.SUPER_ADMIN))
    with pytest.raises(
        ForbiddenError, match="Only super_admin can perform this action"
    ):
        require_super_admin(admin_identity(Role.ADMIN))


def test_require_owner():
    require_owner(admin_identity(Role.OWNER))
    with pytest.raises(ForbiddenError):
        require_owner(admin_identity(Role.ADMIN))


def test_account_class_guards():
    require_administrative(admin_identity(Role.OWNER))
    with pytest.raises(ForbiddenError):
        require_administrative(GENERAL)

    assert require_general(GENERAL) is GENERAL
    with pytest.raises(ForbiddenError, match="Only general users can submit shops"):
        require_general(admin_identity(Role.SUPER_ADMIN))
    with pytest.raises(UnauthenticatedError):
        require_general(None)
