import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenant_gate.core.exceptions import ErrorCode, UnauthorizedException
from tenant_gate.core.security import decode_jwt
from tenant_gate.models.principal import Principal
from tenant_gate.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Turns a bearer token into a Principal."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def authenticate(self, token: str | None) -> Principal:
        """
        Validate a JWT and build the principal for this request.

        Flow:
        1. Reject a missing token (AUTH_TOKEN_MISSING)
        2. Validate the JWT with the shared SECRET_KEY (AUTH_TOKEN_INVALID)
        3. Get or auto-create the User row for the 'sub' claim, which also
           carries the platform super admin flag

        Raises:
            UnauthorizedException: If the token is missing, invalid or expired,
                or the user record cannot be read
        """
        if not token:
            raise UnauthorizedException("Authentication token missing", code=ErrorCode.AUTH_TOKEN_MISSING)

        payload = decode_jwt(token)
        user_id = str(payload["sub"])

        try:
            user = self.user_repo.get_or_create(user_id, email=payload.get("email"))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("User lookup failed during authentication", extra={"user_id": user_id})
            raise UnauthorizedException(
                "Unable to verify credentials", code=ErrorCode.AUTH_TOKEN_INVALID
            ) from e

        return Principal(id=user.id, email=user.email, is_super_admin=bool(user.is_super_admin))
