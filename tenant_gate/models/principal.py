"""Authenticated caller for the lifetime of one request."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """
    The verified caller, built from a validated JWT.

    Attributes:
        id: User ID ('sub' claim)
        email: Email recorded for the user, if known
        is_super_admin: Platform-level flag, independent of any membership
        is_authenticated: Always True for principals built from a token
    """

    id: str
    email: str | None = None
    is_super_admin: bool = False
    is_authenticated: bool = True
