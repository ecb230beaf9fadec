from itertools import product

import pytest

from tenant_gate.models.permission import (
    CRUD_ACTIONS,
    ROLE_PERMISSIONS,
    WILDCARD_PERMISSION,
    Action,
    Resource,
    has_all_permissions,
    has_any_permission,
    has_permission,
    parse_permission,
    permission,
    permissions_for,
)
from tenant_gate.models.role import OrgRole
from tenant_gate.models.tenant_context import TenantContext


def test_every_role_has_a_permission_set():
    """The table covers the whole role enumeration"""
    assert set(ROLE_PERMISSIONS) == set(OrgRole)


@pytest.mark.parametrize("role", list(OrgRole))
def test_configured_permissions_are_well_formed(role):
    """Every granted string names a known resource and action"""
    for granted in ROLE_PERMISSIONS[role]:
        assert parse_permission(granted) is not None, granted


@pytest.mark.parametrize("role", list(OrgRole))
def test_every_role_can_read_its_organization(role):
    assert has_permission(role, "organization:read")


def test_permission_string_format():
    assert permission(Resource.TICKET, Action.CREATE) == "ticket:create"
    assert parse_permission("payment:refund") == (Resource.PAYMENT, Action.REFUND)


@pytest.mark.parametrize("value", ["ticket", "ticket:", ":read", "ticket:fly", "castle:read", ""])
def test_parse_permission_rejects_malformed_or_unknown(value):
    assert parse_permission(value) is None


@pytest.mark.parametrize("action", sorted(CRUD_ACTIONS, key=lambda a: a.value))
def test_manage_implies_crud(action):
    """Owner holds haunt:manage only, yet every CRUD action on haunt passes"""
    assert "haunt:" + action.value not in ROLE_PERMISSIONS[OrgRole.OWNER]
    assert has_permission(OrgRole.OWNER, permission(Resource.HAUNT, action))


def test_manage_does_not_imply_other_actions():
    """manage covers CRUD and nothing else (publish, refund, export...)"""
    assert has_permission(OrgRole.OWNER, "haunt:publish") is False
    assert has_permission(OrgRole.MANAGER, "inventory:export") is False


def test_manage_does_not_cross_resources():
    assert has_permission(OrgRole.HR, "staff:delete") is True
    assert has_permission(OrgRole.HR, "schedule:update") is False


def test_exact_grant_for_non_crud_action():
    assert has_permission(OrgRole.BOX_OFFICE, "payment:refund") is True
    assert has_permission(OrgRole.FINANCE, "payment:refund") is False
    assert has_permission(OrgRole.FINANCE, "report:export") is True


def test_scanner_cannot_manage_tickets():
    """Scanner holds ticket:read and ticket:update, which never add up to manage"""
    assert has_permission(OrgRole.SCANNER, "ticket:read")
    assert has_permission(OrgRole.SCANNER, "ticket:update")
    assert has_permission(OrgRole.SCANNER, "ticket:manage") is False


def test_manager_ticket_access_matches_table():
    """Manager holds ticket:read only"""
    assert "ticket:read" in ROLE_PERMISSIONS[OrgRole.MANAGER]
    assert has_permission(OrgRole.MANAGER, "ticket:create") is False


def test_unknown_role_grants_nothing():
    assert permissions_for("janitor") == ()
    assert has_permission("janitor", "organization:read") is False
    assert has_permission(None, "organization:read") is False


def test_malformed_permission_is_denied():
    assert has_permission(OrgRole.OWNER, "everything") is False


def test_permissions_for_is_sorted_and_accepts_role_values():
    perms = permissions_for("actor")
    assert perms == tuple(sorted(ROLE_PERMISSIONS[OrgRole.ACTOR]))
    assert "schedule:read" in perms


def test_any_and_all():
    assert has_any_permission(OrgRole.ACTOR, ["ticket:read", "schedule:read"]) is True
    assert has_any_permission(OrgRole.ACTOR, ["ticket:read", "payment:read"]) is False
    assert has_any_permission(OrgRole.OWNER, []) is False

    assert has_all_permissions(OrgRole.BOX_OFFICE, ["ticket:create", "payment:refund"]) is True
    assert has_all_permissions(OrgRole.BOX_OFFICE, ["ticket:create", "report:read"]) is False


def _context(role: OrgRole, permissions: tuple[str, ...], is_super_admin: bool = False) -> TenantContext:
    return TenantContext(
        org_id="org-1",
        org_name="Nightmare Manor",
        org_slug="nightmare-manor",
        user_id="user-1",
        role=role,
        is_owner=False,
        permissions=permissions,
        is_super_admin=is_super_admin,
    )


def test_context_uses_role_table():
    context = _context(OrgRole.ACTOR, permissions_for(OrgRole.ACTOR))
    assert context.has_permission("schedule:read")
    assert not context.has_permission("schedule:update")
    assert not context.has_wildcard()


def test_context_wildcard_satisfies_anything():
    context = _context(OrgRole.OWNER, (WILDCARD_PERMISSION,), is_super_admin=True)
    assert context.has_permission("settings:impersonate")
    assert context.has_any_permission(["report:publish"])


def test_context_can_manage():
    context = _context(OrgRole.MANAGER, permissions_for(OrgRole.MANAGER))
    assert context.can_manage(OrgRole.ACTOR)
    assert not context.can_manage(OrgRole.ADMIN)


@pytest.mark.parametrize("role", list(OrgRole))
def test_has_permission_is_deterministic_and_read_only(role):
    """Every (role, permission) pair answers the same way twice and leaves the table untouched"""
    snapshot = {r: frozenset(granted) for r, granted in ROLE_PERMISSIONS.items()}
    for resource, action in product(Resource, Action):
        required = permission(resource, action)
        first = has_permission(role, required)
        assert has_permission(role, required) is first
        assert first is (required in snapshot[role] or (action in CRUD_ACTIONS and permission(resource, Action.MANAGE) in snapshot[role]))
    assert ROLE_PERMISSIONS == snapshot
