from jose import JWTError, jwt
from tenant_gate.config import settings
from tenant_gate.core.exceptions import ErrorCode, UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}", code=ErrorCode.AUTH_TOKEN_INVALID)

    # Validate expiration (jose checks the value, we require its presence)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration", code=ErrorCode.AUTH_TOKEN_INVALID)

    # Extract user_id from 'sub' claim
    if not payload.get("sub"):
        raise UnauthorizedException("Token missing user identifier", code=ErrorCode.AUTH_TOKEN_INVALID)

    return payload
