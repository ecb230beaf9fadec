import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenant_gate.core.exceptions import ErrorCode, ForbiddenException, NotFoundException
from tenant_gate.models.attraction import Attraction
from tenant_gate.models.membership import Membership
from tenant_gate.models.organization import Organization
from tenant_gate.models.permission import WILDCARD_PERMISSION, permissions_for
from tenant_gate.models.principal import Principal
from tenant_gate.models.role import OrgRole, parse_role
from tenant_gate.models.tenant_context import TenantContext
from tenant_gate.repositories.attraction_repository import AttractionRepository
from tenant_gate.repositories.membership_repository import MembershipRepository
from tenant_gate.repositories.organization_repository import OrganizationRepository

logger = logging.getLogger(__name__)


class TenancyService:
    """Resolves which organization a request acts on, and with what authority."""

    def __init__(self, db: Session):
        self.db = db
        self.org_repo = OrganizationRepository(db)
        self.membership_repo = MembershipRepository(db)
        self.attraction_repo = AttractionRepository(db)

    def resolve_tenant_context(
        self, principal: Principal, org_identifier: str | None
    ) -> TenantContext | None:
        """
        Build the tenant context for a principal acting on an organization.

        Flow:
        1. No org identifier: nothing to resolve, return None
        2. Look up the organization by ID or slug (one query). Missing
           organizations are ORG_NOT_FOUND for every caller, super admin or not
        3. Super admins get an owner-level context with the '*' permission;
           no membership is read on this path
        4. Otherwise read the caller's active membership (one query); none
           means ORG_FORBIDDEN
        5. Attach the role's permissions

        Args:
            principal: Authenticated caller
            org_identifier: Organization ID or slug from the route

        Returns:
            TenantContext, or None when the request is not org-scoped

        Raises:
            NotFoundException: ORG_NOT_FOUND
            ForbiddenException: ORG_FORBIDDEN, also on lookup failures and unknown stored roles
        """
        if not org_identifier:
            return None

        org = self._lookup(lambda: self.org_repo.get_by_identifier(org_identifier), principal)
        if org is None:
            raise NotFoundException("Organization not found", code=ErrorCode.ORG_NOT_FOUND)

        if principal.is_super_admin:
            logger.info(
                "Super admin bypass for organization",
                extra={"org_id": org.id, "user_id": principal.id},
            )
            return self._super_admin_context(principal, org)

        membership = self._lookup(
            lambda: self.membership_repo.get_active_membership(principal.id, org.id), principal
        )
        if membership is None:
            raise ForbiddenException(
                "You do not have access to this organization", code=ErrorCode.ORG_FORBIDDEN
            )

        return self._member_context(principal, org, membership)

    def _lookup(self, query, principal: Principal):
        try:
            return query()
        # LookupError: a stored role or status outside the enumeration
        except (SQLAlchemyError, LookupError) as e:
            self.db.rollback()
            logger.exception(
                "Tenant lookup failed, denying access",
                extra={"user_id": principal.id, "error": str(e)},
            )
            raise ForbiddenException(
                "You do not have access to this organization", code=ErrorCode.ORG_FORBIDDEN
            ) from e

    @staticmethod
    def _super_admin_context(principal: Principal, org: Organization) -> TenantContext:
        return TenantContext(
            org_id=org.id,
            org_name=org.name,
            org_slug=org.slug,
            user_id=principal.id,
            role=OrgRole.OWNER,
            is_owner=False,
            is_super_admin=True,
            permissions=(WILDCARD_PERMISSION,),
        )

    @staticmethod
    def _member_context(principal: Principal, org: Organization, membership: Membership) -> TenantContext:
        role = parse_role(membership.role)
        if role is None:
            # A role outside the enumeration grants nothing
            raise ForbiddenException(
                "You do not have access to this organization", code=ErrorCode.ORG_FORBIDDEN
            )
        return TenantContext(
            org_id=org.id,
            org_name=org.name,
            org_slug=org.slug,
            user_id=principal.id,
            role=role,
            is_owner=bool(membership.is_owner),
            is_super_admin=False,
            permissions=permissions_for(role),
        )

    def resolve_org(self, identifier: str) -> Organization | None:
        """
        Resolve an organization by ID or slug.

        Used by URL routing; not an access check on its own.
        """
        return self.org_repo.get_by_identifier(identifier)

    def resolve_attraction(self, org_id: str, identifier: str) -> Attraction | None:
        """
        Resolve an attraction of an organization by ID or slug.

        Used by URL routing; not an access check on its own.
        """
        return self.attraction_repo.get_by_identifier(org_id, identifier)

    def get_user_organizations(self, user_id: str) -> list[dict]:
        """
        List all organizations a user is an active member of.

        Args:
            user_id: User ID

        Returns:
            List of organizations with the user's role in each
        """
        memberships = self.membership_repo.get_user_active_memberships(user_id)
        return [
            {
                "org_id": m.organization.id,
                "org_name": m.organization.name,
                "org_slug": m.organization.slug,
                "role": m.role,
                "is_owner": m.is_owner,
            }
            for m in memberships
        ]
