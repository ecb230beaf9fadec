from tenant_gate.models.permission import permissions_for
from tenant_gate.models.role import MembershipStatus, OrgRole


def test_list_my_organizations(client, organization, other_organization, add_member, headers_for):
    add_member("staff-user", OrgRole.HR)
    add_member("staff-user", OrgRole.ACTOR, org=other_organization, status=MembershipStatus.REMOVED)

    response = client.get("/api/organizations", headers=headers_for("staff-user"))

    assert response.status_code == 200
    assert response.json() == [
        {
            "org_id": organization.id,
            "org_name": "Nightmare Manor",
            "org_slug": "nightmare-manor",
            "role": "hr",
            "is_owner": False,
        }
    ]


def test_access_by_slug_and_id(client, organization, add_member, headers_for):
    add_member("actor-user", OrgRole.ACTOR)
    headers = headers_for("actor-user")

    by_slug = client.get("/api/organizations/nightmare-manor", headers=headers)
    by_id = client.get(f"/api/organizations/{organization.id}", headers=headers)

    assert by_slug.status_code == 200
    assert by_slug.json() == by_id.json()
    body = by_slug.json()
    assert body["org_id"] == organization.id
    assert body["role"] == "actor"
    assert body["is_owner"] is False
    assert body["is_super_admin"] is False
    assert body["permissions"] == list(permissions_for(OrgRole.ACTOR))


def test_non_member_is_forbidden(client, organization, auth_headers):
    response = client.get("/api/organizations/nightmare-manor", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "ORG_FORBIDDEN"


def test_invited_member_is_forbidden(client, organization, add_member, headers_for):
    add_member("invited-user", OrgRole.ACTOR, status=MembershipStatus.INVITED)
    response = client.get("/api/organizations/nightmare-manor", headers=headers_for("invited-user"))
    assert response.status_code == 403
    assert response.json()["code"] == "ORG_FORBIDDEN"


def test_unknown_org(client, auth_headers):
    response = client.get("/api/organizations/does-not-exist", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "ORG_NOT_FOUND"


def test_super_admin_access(client, organization, super_admin, headers_for):
    response = client.get("/api/organizations/nightmare-manor", headers=headers_for("platform-admin"))
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "owner"
    assert body["is_owner"] is False
    assert body["is_super_admin"] is True
    assert body["permissions"] == ["*"]


def test_get_attraction(client, organization, attraction, add_member, headers_for):
    add_member("scanner-user", OrgRole.SCANNER)
    headers = headers_for("scanner-user")

    response = client.get("/api/organizations/nightmare-manor/attractions/the-asylum", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == attraction.id

    response = client.get("/api/organizations/nightmare-manor/attractions/nowhere", headers=headers)
    assert response.status_code == 404
    assert response.json()["code"] == "ATTRACTION_NOT_FOUND"


def test_attraction_of_other_org_is_hidden(
    client, organization, other_organization, attraction, add_member, headers_for
):
    add_member("patch-owner", OrgRole.OWNER, is_owner=True, org=other_organization)
    response = client.get(
        f"/api/organizations/pumpkin-patch/attractions/{attraction.id}",
        headers=headers_for("patch-owner"),
    )
    assert response.status_code == 404


def test_subscription(client, organization, owner_membership, headers_for):
    response = client.get("/api/organizations/nightmare-manor/subscription", headers=headers_for("owner-user"))
    assert response.status_code == 200
    body = response.json()
    assert body["tier"] == "pro"
    assert "scheduling" in body["features"]
    assert "virtual_queue" not in body["features"]


def test_feature_status(client, organization, add_member, add_flag, headers_for):
    add_member("actor-user", OrgRole.ACTOR)
    add_flag("scheduling", metadata={"tier": "pro", "module": True})
    add_flag("virtual_queue", enabled=False, metadata={"tier": "enterprise"})
    headers = headers_for("actor-user")

    response = client.get("/api/organizations/nightmare-manor/features/scheduling", headers=headers)
    assert response.json() == {"key": "scheduling", "enabled": True, "tier": "pro", "module": True}

    response = client.get("/api/organizations/nightmare-manor/features/virtual_queue", headers=headers)
    assert response.json()["enabled"] is False
    assert response.json()["tier"] == "enterprise"

    response = client.get("/api/organizations/nightmare-manor/features/unknown", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"key": "unknown", "enabled": False, "tier": None, "module": False}
