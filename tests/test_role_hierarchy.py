from itertools import product

import pytest

from tenant_gate.models.role import (
    ROLE_HIERARCHY,
    OrgRole,
    can_invite_to_role,
    can_manage,
    can_modify_role,
    parse_role,
    role_level,
)


def test_hierarchy_levels():
    assert role_level(OrgRole.OWNER) == 100
    assert role_level(OrgRole.ADMIN) == 90
    assert role_level(OrgRole.MANAGER) == 70
    assert role_level(OrgRole.HR) == 50
    assert role_level(OrgRole.BOX_OFFICE) == 50
    assert role_level(OrgRole.FINANCE) == 50
    assert role_level(OrgRole.ACTOR) == 30
    assert role_level(OrgRole.SCANNER) == 10


def test_hierarchy_covers_every_role():
    assert set(ROLE_HIERARCHY) == set(OrgRole)


def test_unknown_role_is_level_zero():
    assert role_level("janitor") == 0
    assert role_level(None) == 0
    assert parse_role("janitor") is None
    assert parse_role("owner") is OrgRole.OWNER


@pytest.mark.parametrize("role", list(OrgRole))
def test_no_role_manages_itself(role):
    assert can_manage(role, role) is False


@pytest.mark.parametrize(
    "actor,target,expected",
    [
        (OrgRole.OWNER, OrgRole.ADMIN, True),
        (OrgRole.ADMIN, OrgRole.OWNER, False),
        (OrgRole.MANAGER, OrgRole.ACTOR, True),
        (OrgRole.HR, OrgRole.SCANNER, True),
        (OrgRole.HR, OrgRole.FINANCE, False),
        (OrgRole.BOX_OFFICE, OrgRole.HR, False),
        (OrgRole.SCANNER, OrgRole.ACTOR, False),
        ("manager", "actor", True),
    ],
)
def test_can_manage(actor, target, expected):
    assert can_manage(actor, target) is expected


def test_unknown_role_fails_can_manage_on_either_side():
    assert can_manage("janitor", OrgRole.SCANNER) is False
    assert can_manage(OrgRole.OWNER, "janitor") is False


@pytest.mark.parametrize("actor,target", list(product(OrgRole, OrgRole)))
def test_can_manage_is_antisymmetric(actor, target):
    if can_manage(actor, target):
        assert can_manage(target, actor) is False


@pytest.mark.parametrize("actor,current,new_role", list(product(OrgRole, OrgRole, OrgRole)))
def test_owner_role_is_immutable(actor, current, new_role):
    """Nobody changes the owner's membership, whatever the requested role"""
    assert can_modify_role(actor, current, new_role, is_target_owner=True) is False


@pytest.mark.parametrize("actor,current,is_target_owner", list(product(OrgRole, OrgRole, [True, False])))
def test_nobody_promotes_to_owner(actor, current, is_target_owner):
    assert can_modify_role(actor, current, OrgRole.OWNER, is_target_owner) is False


@pytest.mark.parametrize("actor,current,is_target_owner", list(product(OrgRole, OrgRole, [True, False])))
def test_only_owner_can_promote_to_admin(actor, current, is_target_owner):
    if actor != OrgRole.OWNER:
        assert can_modify_role(actor, current, OrgRole.ADMIN, is_target_owner) is False


def test_only_owner_promotes_to_admin():
    assert can_modify_role(OrgRole.OWNER, OrgRole.MANAGER, OrgRole.ADMIN, False) is True
    assert can_modify_role(OrgRole.ADMIN, OrgRole.MANAGER, OrgRole.ADMIN, False) is False


@pytest.mark.parametrize(
    "actor,current,new,expected",
    [
        (OrgRole.MANAGER, OrgRole.ACTOR, OrgRole.SCANNER, True),
        (OrgRole.MANAGER, OrgRole.ACTOR, OrgRole.MANAGER, False),
        (OrgRole.MANAGER, OrgRole.HR, OrgRole.ACTOR, True),
        (OrgRole.HR, OrgRole.BOX_OFFICE, OrgRole.ACTOR, False),
        (OrgRole.ADMIN, OrgRole.ADMIN, OrgRole.MANAGER, False),
        (OrgRole.ADMIN, OrgRole.MANAGER, OrgRole.FINANCE, True),
        (OrgRole.OWNER, OrgRole.ADMIN, OrgRole.ACTOR, True),
        (OrgRole.OWNER, OrgRole.ACTOR, "janitor", False),
    ],
)
def test_can_modify_role(actor, current, new, expected):
    assert can_modify_role(actor, current, new, is_target_owner=False) is expected


@pytest.mark.parametrize(
    "inviter,target,expected",
    [
        (OrgRole.OWNER, OrgRole.ADMIN, True),
        (OrgRole.OWNER, OrgRole.OWNER, False),
        (OrgRole.ADMIN, OrgRole.ADMIN, False),
        (OrgRole.ADMIN, OrgRole.MANAGER, True),
        (OrgRole.MANAGER, OrgRole.HR, True),
        (OrgRole.HR, OrgRole.HR, False),
        (OrgRole.HR, OrgRole.ACTOR, True),
        (OrgRole.SCANNER, OrgRole.SCANNER, False),
        ("janitor", OrgRole.SCANNER, False),
        (OrgRole.OWNER, "janitor", False),
    ],
)
def test_can_invite_to_role(inviter, target, expected):
    assert can_invite_to_role(inviter, target) is expected


@pytest.mark.parametrize("inviter", list(OrgRole))
def test_nobody_invites_owner_and_only_owner_invites_admin(inviter):
    assert can_invite_to_role(inviter, OrgRole.OWNER) is False
    assert can_invite_to_role(inviter, OrgRole.ADMIN) is (inviter == OrgRole.OWNER)
