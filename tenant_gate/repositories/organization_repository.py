"""Repository for Organization model operations."""

import re

from sqlalchemy.orm import Session
from tenant_gate.models.organization import Organization

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_uuid(identifier: str) -> bool:
    """Check if an identifier has the shape of a UUID (as opposed to a slug)."""
    return bool(UUID_PATTERN.match(identifier))


class OrganizationRepository:
    """Repository for Organization model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, org_id: str) -> Organization | None:
        """
        Get organization by ID.

        Args:
            org_id: Organization ID

        Returns:
            Organization object or None if not found
        """
        return self.db.query(Organization).filter(Organization.id == org_id).first()

    def get_by_identifier(self, identifier: str) -> Organization | None:
        """
        Get organization by ID or slug in a single query.

        UUID-shaped identifiers are looked up by ID, anything else by slug.

        Args:
            identifier: Organization ID or slug from the URL

        Returns:
            Organization object or None if not found
        """
        column = Organization.id if is_uuid(identifier) else Organization.slug
        return self.db.query(Organization).filter(column == identifier).first()
