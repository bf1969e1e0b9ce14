"""Tests de resolución de roles/permisos, políticas por ruta y seed RBAC."""

import pytest
from fastapi import HTTPException

from cashdesk.core.authorization import AccessPolicy, get_user_permissions, get_user_roles
from cashdesk.models.auth import Permission, Role, RolePermission
from cashdesk.seed import DEFAULT_GRANTS, PERMISSIONS, seed_rbac

from conftest import bearer, identity_for


class TestRoleAndPermissionResolution:
    def test_roles_are_read_through_memberships(self, db_session, make_org, make_user):
        user = make_user(make_org(), roles=["MANAGER", "OPERATOR"])
        assert sorted(get_user_roles(db_session, user.id)) == ["MANAGER", "OPERATOR"]

    def test_admin_gets_the_whole_catalog(self, db_session, tenant):
        assert get_user_permissions(db_session, tenant.admin.id) == set(PERMISSIONS)
        assert len(PERMISSIONS) == 9

    def test_manager_default_grants(self, db_session, tenant):
        assert get_user_permissions(db_session, tenant.manager.id) == {
            "branches.read",
            "cashMovements.read",
            "cashMovements.approve",
            "cashMovements.deliver",
            "cashflow.stats.read",
        }

    def test_operator_default_grants(self, db_session, tenant):
        assert get_user_permissions(db_session, tenant.operator.id) == {
            "cashMovements.create",
            "cashMovements.read",
            "cashflow.stats.read",
        }

    def test_user_role_has_no_permissions(self, db_session, tenant):
        assert get_user_permissions(db_session, tenant.plain.id) == set()

    def test_permissions_union_across_roles(self, db_session, make_org, make_user):
        user = make_user(make_org(), roles=["MANAGER", "OPERATOR"])
        assert get_user_permissions(db_session, user.id) == set(DEFAULT_GRANTS["MANAGER"]) | set(
            DEFAULT_GRANTS["OPERATOR"]
        )


class TestAccessPolicy:
    def test_passes_with_role_and_permission(self, db_session, tenant):
        policy = AccessPolicy("approve", roles=["MANAGER", "ADMIN"], permissions=["cashMovements.approve"])
        identity = identity_for(tenant.manager)
        assert policy(identity=identity, db=db_session) is identity

    def test_role_check_runs_before_permission_check(self, db_session, tenant):
        policy = AccessPolicy("approve", roles=["MANAGER"], permissions=["cashMovements.approve"])

        with pytest.raises(HTTPException) as exc_info:
            policy(identity=identity_for(tenant.plain), db=db_session)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "ROLE_REQUIRED"

    def test_missing_permission_is_forbidden(self, db_session, tenant):
        policy = AccessPolicy("branches", permissions=["branches.write"])

        with pytest.raises(HTTPException) as exc_info:
            policy(identity=identity_for(tenant.manager), db=db_session)

        assert exc_info.value.detail["code"] == "PERMISSION_REQUIRED"

    def test_both_checks_must_pass(self, db_session, tenant):
        # OPERATOR tiene el rol pero no el permiso de aprobar
        policy = AccessPolicy("odd", roles=["OPERATOR"], permissions=["cashMovements.approve"])

        with pytest.raises(HTTPException) as exc_info:
            policy(identity=identity_for(tenant.operator), db=db_session)

        assert exc_info.value.detail["code"] == "PERMISSION_REQUIRED"

    def test_policy_without_requirements_only_needs_authentication(self, db_session, tenant):
        policy = AccessPolicy("authenticated")
        identity = identity_for(tenant.plain)
        assert policy(identity=identity, db=db_session) is identity


class TestRoutePolicies:
    def test_manager_cannot_create_branches(self, client, tenant):
        response = client.post("/api/v1/branches", json={"name": "South"}, headers=bearer(tenant.manager))
        assert response.status_code == 403
        assert response.json()["code"] == "ROLE_REQUIRED"

    def test_plain_user_cannot_list_branches(self, client, tenant):
        response = client.get("/api/v1/branches", headers=bearer(tenant.plain))
        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_REQUIRED"

    def test_operator_cannot_approve(self, client, tenant, make_movement):
        movement = make_movement(tenant.org, tenant.main, tenant.operator)
        response = client.patch(
            f"/api/v1/cash-movements/{movement.id}/approve", headers=bearer(tenant.operator)
        )
        assert response.status_code == 403

    def test_manager_cannot_create_movements(self, client, tenant):
        response = client.post(
            "/api/v1/cash-movements/",
            json={"type": "INCOME", "amount": "10.00", "branchId": str(tenant.main.id)},
            headers=bearer(tenant.manager),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "ROLE_REQUIRED"


class TestSeed:
    def test_seed_is_idempotent(self, db_session):
        before = db_session.query(RolePermission).count()

        seed_rbac(db_session)

        assert db_session.query(RolePermission).count() == before
        assert db_session.query(Role).count() == 4
        assert db_session.query(Permission).count() == 9

    def test_seed_strips_grants_from_user_role(self, db_session):
        user_role = db_session.query(Role).filter(Role.name == "USER").one()
        users_read = db_session.query(Permission).filter(Permission.key == "users.read").one()
        db_session.add(RolePermission(role_id=user_role.id, permission_id=users_read.id))
        db_session.commit()

        seed_rbac(db_session)

        assert db_session.query(RolePermission).filter(RolePermission.role_id == user_role.id).count() == 0
