"""
Permission model: which role may perform which action on which resource.

Permissions are strings of the form ``resource:action``. Holding
``resource:manage`` implies create, read, update and delete on that
resource, and nothing else. Everything in this module is pure.
"""

from enum import Enum as PyEnum

from tenant_gate.models.role import OrgRole, parse_role

WILDCARD_PERMISSION = "*"


class Resource(str, PyEnum):
    ORGANIZATION = "organization"
    HAUNT = "haunt"
    STAFF = "staff"
    SCHEDULE = "schedule"
    TICKET = "ticket"
    ORDER = "order"
    PAYMENT = "payment"
    INVENTORY = "inventory"
    REPORT = "report"
    SETTINGS = "settings"


class Action(str, PyEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"  # Full CRUD
    PUBLISH = "publish"
    REFUND = "refund"
    EXPORT = "export"
    IMPERSONATE = "impersonate"


CRUD_ACTIONS = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})


def permission(resource: Resource, action: Action) -> str:
    """Build a permission string from a resource and an action."""
    return f"{resource.value}:{action.value}"


def parse_permission(value: str) -> tuple[Resource, Action] | None:
    """Split a permission string, or return None if it is malformed or unknown."""
    resource, sep, action = value.partition(":")
    if not sep:
        return None
    try:
        return Resource(resource), Action(action)
    except ValueError:
        return None


def _grants(*pairs: tuple[Resource, Action]) -> frozenset[str]:
    return frozenset(permission(resource, action) for resource, action in pairs)


R, A = Resource, Action

ROLE_PERMISSIONS: dict[OrgRole, frozenset[str]] = {
    OrgRole.OWNER: _grants(
        (R.ORGANIZATION, A.MANAGE),
        (R.HAUNT, A.MANAGE),
        (R.STAFF, A.MANAGE),
        (R.SCHEDULE, A.MANAGE),
        (R.TICKET, A.MANAGE),
        (R.ORDER, A.MANAGE),
        (R.PAYMENT, A.MANAGE),
        (R.INVENTORY, A.MANAGE),
        (R.REPORT, A.READ),
        (R.REPORT, A.EXPORT),
        (R.SETTINGS, A.MANAGE),
    ),
    OrgRole.ADMIN: _grants(
        (R.ORGANIZATION, A.READ),
        (R.ORGANIZATION, A.UPDATE),
        (R.HAUNT, A.MANAGE),
        (R.STAFF, A.MANAGE),
        (R.SCHEDULE, A.MANAGE),
        (R.TICKET, A.MANAGE),
        (R.ORDER, A.MANAGE),
        (R.PAYMENT, A.MANAGE),
        (R.INVENTORY, A.MANAGE),
        (R.REPORT, A.READ),
        (R.REPORT, A.EXPORT),
        (R.SETTINGS, A.READ),
        (R.SETTINGS, A.UPDATE),
    ),
    OrgRole.MANAGER: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.HAUNT, A.UPDATE),
        (R.STAFF, A.READ),
        (R.STAFF, A.UPDATE),
        (R.SCHEDULE, A.MANAGE),
        (R.TICKET, A.READ),
        (R.ORDER, A.READ),
        (R.INVENTORY, A.MANAGE),
        (R.REPORT, A.READ),
    ),
    OrgRole.HR: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.STAFF, A.MANAGE),
        (R.SCHEDULE, A.READ),
        (R.REPORT, A.READ),
    ),
    OrgRole.BOX_OFFICE: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.TICKET, A.CREATE),
        (R.TICKET, A.READ),
        (R.TICKET, A.UPDATE),
        (R.ORDER, A.CREATE),
        (R.ORDER, A.READ),
        (R.PAYMENT, A.CREATE),
        (R.PAYMENT, A.READ),
        (R.PAYMENT, A.REFUND),
    ),
    OrgRole.FINANCE: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.TICKET, A.READ),
        (R.ORDER, A.READ),
        (R.PAYMENT, A.READ),
        (R.REPORT, A.READ),
        (R.REPORT, A.EXPORT),
    ),
    OrgRole.ACTOR: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.SCHEDULE, A.READ),
        (R.INVENTORY, A.READ),
    ),
    OrgRole.SCANNER: _grants(
        (R.ORGANIZATION, A.READ),
        (R.HAUNT, A.READ),
        (R.TICKET, A.READ),
        (R.TICKET, A.UPDATE),
    ),
}

del R, A

if set(ROLE_PERMISSIONS) != set(OrgRole):
    raise RuntimeError(
        f"ROLE_PERMISSIONS is missing roles: {sorted(set(OrgRole) - set(ROLE_PERMISSIONS))}"
    )


def permissions_for(role: OrgRole | str | None) -> tuple[str, ...]:
    """All permissions explicitly granted to a role, sorted. Unknown roles get none."""
    parsed = parse_role(role)
    if parsed is None:
        return ()
    return tuple(sorted(ROLE_PERMISSIONS[parsed]))


def has_permission(role: OrgRole | str | None, required: str) -> bool:
    """
    Check if a role holds a permission.

    An exact grant matches. Otherwise ``resource:manage`` satisfies a CRUD
    action on the same resource. No other inference is made.
    """
    parsed = parse_role(role)
    if parsed is None:
        return False

    granted = ROLE_PERMISSIONS[parsed]
    if required in granted:
        return True

    parts = parse_permission(required)
    if parts is None:
        return False
    resource, action = parts
    return action in CRUD_ACTIONS and permission(resource, Action.MANAGE) in granted


def has_any_permission(role: OrgRole | str | None, required: list[str] | tuple[str, ...]) -> bool:
    """Check if a role holds at least one of the permissions."""
    return any(has_permission(role, p) for p in required)


def has_all_permissions(role: OrgRole | str | None, required: list[str] | tuple[str, ...]) -> bool:
    """Check if a role holds every one of the permissions."""
    return all(has_permission(role, p) for p in required)
