"""Role checks."""
import pytest

from bizsuite.core.exceptions import PermissionDenied
from bizsuite.core.permissions import ANY_ROLE, MANAGERS, OWNER_ONLY, authorize, can_modify_user, require_roles
from bizsuite.models.user import UserRole


class TestAuthorize:
    @pytest.mark.parametrize("role, allowed", [
        (UserRole.OWNER, True),
        (UserRole.ADMIN, True),
        (UserRole.STAFF, False),
    ])
    def test_managers(self, role, allowed):
        assert authorize(role, MANAGERS) is allowed

    def test_owner_only(self):
        assert authorize(UserRole.OWNER, OWNER_ONLY)
        assert not authorize(UserRole.ADMIN, OWNER_ONLY)

    def test_any_role_admits_everyone(self):
        assert all(authorize(role, ANY_ROLE) for role in UserRole)

    def test_require_roles_raises_forbidden(self):
        with pytest.raises(PermissionDenied) as exc_info:
            require_roles(UserRole.STAFF, OWNER_ONLY)
        assert exc_info.value.status_code == 403


class TestCanModifyUser:
    def test_owner_is_never_modifiable(self):
        assert not can_modify_user(UserRole.OWNER, UserRole.OWNER)
        assert not can_modify_user(UserRole.ADMIN, UserRole.OWNER)

    def test_managers_modify_others(self):
        assert can_modify_user(UserRole.OWNER, UserRole.ADMIN)
        assert can_modify_user(UserRole.ADMIN, UserRole.STAFF)

    def test_staff_modifies_nobody(self):
        assert not can_modify_user(UserRole.STAFF, UserRole.STAFF)
