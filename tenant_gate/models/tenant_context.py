"""Tenant context for request authorization."""

from dataclasses import dataclass

from tenant_gate.models.permission import WILDCARD_PERMISSION, has_any_permission, has_permission
from tenant_gate.models.role import OrgRole, can_manage


@dataclass(frozen=True)
class TenantContext:
    """
    Resolved authorization facts for one request in one organization.

    Built once by the tenant resolver and read by every later stage and
    route handler. Frozen: nothing downstream can widen it.

    Attributes:
        org_id: Organization the request is scoped to
        org_name: Organization display name
        org_slug: Organization URL slug
        user_id: Acting user
        role: The user's role within this organization
        is_owner: Whether the user is the organization's owner
        is_super_admin: Platform super admin acting through the bypass
        permissions: Permissions granted to the role, or ('*',) for super admins
    """

    org_id: str
    org_name: str
    org_slug: str
    user_id: str
    role: OrgRole
    is_owner: bool
    permissions: tuple[str, ...]
    is_super_admin: bool = False

    def has_wildcard(self) -> bool:
        return WILDCARD_PERMISSION in self.permissions

    def has_permission(self, required: str) -> bool:
        """Check a single permission, honouring the super-admin wildcard."""
        return self.has_wildcard() or has_permission(self.role, required)

    def has_any_permission(self, required: list[str] | tuple[str, ...]) -> bool:
        return self.has_wildcard() or has_any_permission(self.role, required)

    def can_manage(self, target_role: OrgRole | str) -> bool:
        """Check if this context's role outranks target_role."""
        return can_manage(self.role, target_role)

    def __repr__(self) -> str:
        return (
            f"<TenantContext(user_id={self.user_id}, org_id={self.org_id}, "
            f"role={self.role.value}, super_admin={self.is_super_admin})>"
        )
