from sqlalchemy.orm import Session
from tenant_gate.models.attraction import Attraction
from tenant_gate.repositories.organization_repository import is_uuid


class AttractionRepository:
    """Repository for Attraction model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_identifier(self, org_id: str, identifier: str) -> Attraction | None:
        """
        Get an attraction of an organization by ID or slug.

        Args:
            org_id: Organization ID the attraction must belong to
            identifier: Attraction ID or slug

        Returns:
            Attraction object or None if not found in this organization
        """
        column = Attraction.id if is_uuid(identifier) else Attraction.slug
        return (
            self.db.query(Attraction)
            .filter(Attraction.org_id == org_id, column == identifier)
            .first()
        )
