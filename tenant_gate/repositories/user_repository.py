from sqlalchemy.orm import Session
from tenant_gate.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str, email: str | None = None) -> User:
        """
        Get user by ID or create if doesn't exist.

        This is called automatically when a user makes their first API
        request with a valid JWT.

        Args:
            user_id: User ID from the JWT 'sub' claim
            email: Email claim, recorded on first sight

        Returns:
            User object (either existing or newly created)
        """
        user = self.db.query(User).filter(User.id == user_id).first()

        if not user:
            user = User(id=user_id, email=email)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        return user
