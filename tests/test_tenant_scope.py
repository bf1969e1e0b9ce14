"""Tests del guard de alcance por organización."""

from uuid import uuid4

import pytest
from fastapi import HTTPException

from cashdesk.core.tenant import (
    TenantUserContext,
    assert_same_organization,
    require_user_branch_id,
    scoped_query,
    with_organization_scope,
)
from cashdesk.models.platform import Branch


class TestWithOrganizationScope:
    def test_adds_organization_to_empty_filter(self):
        org_id = uuid4()
        assert with_organization_scope(org_id) == {"organization_id": org_id}

    def test_merges_base_filter_without_mutating_it(self):
        org_id = uuid4()
        base = {"id": "b1", "name": "Main"}

        scoped = with_organization_scope(org_id, base)

        assert scoped == {"id": "b1", "name": "Main", "organization_id": org_id}
        assert "organization_id" not in base

    def test_base_filter_with_organization_is_a_programming_error(self):
        with pytest.raises(ValueError):
            with_organization_scope(uuid4(), {"organization_id": uuid4()})


class TestAssertSameOrganization:
    def test_same_organization_passes(self):
        org_id = uuid4()
        assert_same_organization(org_id, org_id)

    def test_mismatch_is_access_denied(self):
        with pytest.raises(HTTPException) as exc_info:
            assert_same_organization(uuid4(), uuid4())

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "ACCESS_DENIED"


class TestRequireUserBranchId:
    def test_returns_assigned_branch(self):
        branch_id = uuid4()
        user = TenantUserContext(sub=uuid4(), organization_id=uuid4(), branch_id=branch_id)
        assert require_user_branch_id(user) == branch_id

    def test_missing_branch_is_forbidden(self):
        user = TenantUserContext(sub=uuid4(), organization_id=uuid4())
        with pytest.raises(HTTPException) as exc_info:
            require_user_branch_id(user)
        assert exc_info.value.status_code == 403


class TestScopedQuery:
    def test_only_returns_rows_of_the_organization(self, db_session, make_org, make_branch):
        org_a = make_org()
        org_b = make_org()
        branch_a = make_branch(org_a, "Main")
        make_branch(org_b, "Main")

        rows = scoped_query(db_session, Branch, org_a.id).all()

        assert [row.id for row in rows] == [branch_a.id]

    def test_lookup_by_id_from_other_organization_finds_nothing(self, db_session, make_org, make_branch):
        org_a = make_org()
        org_b = make_org()
        branch_b = make_branch(org_b, "Main")

        assert scoped_query(db_session, Branch, org_a.id, id=branch_b.id).first() is None
