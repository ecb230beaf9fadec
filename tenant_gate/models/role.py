"""Organization roles and the role hierarchy used for access control."""

from enum import Enum as PyEnum


class OrgRole(str, PyEnum):
    """
    Organization membership roles, highest authority first.

    Role Hierarchy (level):
    1. OWNER (100) - Full control; set only when the organization is created
    2. ADMIN (90) - Runs the organization; created only by the owner
    3. MANAGER (70) - Day-to-day operations: schedules, inventory, attractions
    4. HR / BOX_OFFICE / FINANCE (50) - Department roles, peers of each other
    5. ACTOR (30) - Performers; read their schedule and assigned gear
    6. SCANNER (10) - Gate staff; read and redeem tickets
    """

    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    HR = "hr"
    BOX_OFFICE = "box_office"
    FINANCE = "finance"
    ACTOR = "actor"
    SCANNER = "scanner"


class MembershipStatus(str, PyEnum):
    """Only ACTIVE memberships grant access to an organization."""

    ACTIVE = "active"
    INVITED = "invited"
    REMOVED = "removed"


ROLE_HIERARCHY: dict[OrgRole, int] = {
    OrgRole.OWNER: 100,
    OrgRole.ADMIN: 90,
    OrgRole.MANAGER: 70,
    OrgRole.HR: 50,
    OrgRole.BOX_OFFICE: 50,
    OrgRole.FINANCE: 50,
    OrgRole.ACTOR: 30,
    OrgRole.SCANNER: 10,
}

if set(ROLE_HIERARCHY) != set(OrgRole):
    raise RuntimeError(
        f"ROLE_HIERARCHY is missing roles: {sorted(set(OrgRole) - set(ROLE_HIERARCHY))}"
    )


def parse_role(role: OrgRole | str | None) -> OrgRole | None:
    """Return the OrgRole for a role value, or None if it is not a known role."""
    if isinstance(role, OrgRole):
        return role
    try:
        return OrgRole(role)
    except ValueError:
        return None


def role_level(role: OrgRole | str | None) -> int:
    """Hierarchy level of a role. Unknown roles are level 0."""
    parsed = parse_role(role)
    if parsed is None:
        return 0
    return ROLE_HIERARCHY[parsed]


def can_manage(actor_role: OrgRole | str | None, target_role: OrgRole | str | None) -> bool:
    """
    Check if actor_role outranks target_role.

    Strict inequality: no role manages an equal role or itself. An unknown
    role on either side is level 0 and fails the check.
    """
    actor_level = role_level(actor_role)
    target_level = role_level(target_role)
    if actor_level == 0 or target_level == 0:
        return False
    return actor_level > target_level


def can_modify_role(
    actor_role: OrgRole | str | None,
    current_role: OrgRole | str | None,
    new_role: OrgRole | str | None,
    is_target_owner: bool,
) -> bool:
    """
    Check if actor_role may change a member from current_role to new_role.

    Args:
        actor_role: Role of the member performing the change
        current_role: Target member's current role
        new_role: Role the target would be given
        is_target_owner: Whether the target is the organization owner

    Returns:
        False for the owner (immutable), for promotion to owner, and for
        promotion to admin by anyone but the owner. Otherwise the actor must
        outrank both the current and the new role.
    """
    if is_target_owner:
        return False

    new = parse_role(new_role)
    if new is None or new == OrgRole.OWNER:
        return False

    if new == OrgRole.ADMIN and parse_role(actor_role) != OrgRole.OWNER:
        return False

    return can_manage(actor_role, current_role) and can_manage(actor_role, new)


def can_invite_to_role(inviter_role: OrgRole | str | None, target_role: OrgRole | str | None) -> bool:
    """
    Check if inviter_role may invite somebody as target_role.

    Nobody is invited as owner, only the owner invites admins, and
    otherwise the inviter must outrank the role being offered.
    """
    target = parse_role(target_role)
    if target is None or target == OrgRole.OWNER:
        return False

    if target == OrgRole.ADMIN and parse_role(inviter_role) != OrgRole.OWNER:
        return False

    return can_manage(inviter_role, target)
