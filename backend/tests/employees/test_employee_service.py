from uuid import uuid4

import pytest

from app.auth.access import AccessRole, resolve_access
from app.employees.models import (
    EmployeeDB,
    EmployeeStatus,
    EmployeeUpdate,
    InvitedByRole,
)
from app.employees.service import (
    count_employees,
    deactivate_employee,
    get_employee,
    update_employee,
)
from app.errors import Forbidden, NotFound, ValidationError


async def _add_employee(db, workspace_id, email="hire@acme.example.com", **kwargs):
    employee = EmployeeDB(
        credential_id=f"cred-{uuid4().hex[:8]}",
        email=email,
        workspace_id=workspace_id,
        invited_by_role=InvitedByRole.client_admin,
        **kwargs,
    )
    db.add(employee)
    await db.commit()
    return employee


class TestGetEmployee:
    async def test_admin_sees_own_workspace(self, db, tenant, tenant_admin):
        employee = await _add_employee(db, tenant.id)
        found = await get_employee(employee.id, tenant_admin, db)
        assert found.id == employee.id

    async def test_other_workspace_looks_missing(
        self, db, tenant_admin, make_workspace
    ):
        other = await make_workspace(name="Other")
        employee = await _add_employee(db, other.id, email="them@other.example.com")

        with pytest.raises(NotFound) as missing:
            await get_employee(employee.id, tenant_admin, db)
        with pytest.raises(NotFound) as unknown:
            await get_employee(uuid4(), tenant_admin, db)
        assert missing.value.to_response() == unknown.value.to_response()

    async def test_super_admin_sees_any_workspace(self, db, tenant, super_admin):
        employee = await _add_employee(db, tenant.id)
        found = await get_employee(employee.id, super_admin, db)
        assert found.workspace_id == tenant.id

    async def test_employee_is_refused(self, db, tenant, make_access):
        employee = await _add_employee(db, tenant.id)
        with pytest.raises(Forbidden):
            await get_employee(
                employee.id, make_access(AccessRole.employee, tenant.id), db
            )


class TestUpdateEmployee:
    async def test_updates_profile_fields(self, db, tenant, tenant_admin):
        employee = await _add_employee(db, tenant.id, full_name="Old Name")

        updated = await update_employee(
            employee.id,
            EmployeeUpdate(full_name="New Name", phone="+1 555 0199"),
            tenant_admin,
            db,
        )

        assert updated.full_name == "New Name"
        assert updated.phone == "+1 555 0199"
        assert updated.status == EmployeeStatus.active

    async def test_workspace_and_credential_are_ignored(
        self, db, tenant, tenant_admin, make_workspace
    ):
        other = await make_workspace(name="Other")
        employee = await _add_employee(db, tenant.id)
        credential_id = employee.credential_id
        changes = EmployeeUpdate.model_validate(
            {
                "full_name": "Moved",
                "workspace_id": str(other.id),
                "credential_id": "cred-hijack",
            }
        )

        updated = await update_employee(employee.id, changes, tenant_admin, db)

        assert updated.full_name == "Moved"
        assert updated.workspace_id == tenant.id
        assert updated.credential_id == credential_id

    async def test_status_cannot_be_cleared(self, db, tenant, tenant_admin):
        employee = await _add_employee(db, tenant.id)
        with pytest.raises(ValidationError):
            await update_employee(
                employee.id, EmployeeUpdate(status=None), tenant_admin, db
            )

    async def test_cannot_update_other_workspace(
        self, db, tenant_admin, make_workspace
    ):
        other = await make_workspace(name="Other")
        employee = await _add_employee(db, other.id, email="them@other.example.com")
        with pytest.raises(NotFound):
            await update_employee(
                employee.id, EmployeeUpdate(full_name="x"), tenant_admin, db
            )


class TestDeactivateEmployee:
    async def test_deactivated_employee_loses_access(self, db, tenant, tenant_admin):
        employee = await _add_employee(db, tenant.id)
        assert (await resolve_access(employee.credential_id, db)).role == AccessRole.employee

        deactivated = await deactivate_employee(employee.id, tenant_admin, db)

        assert deactivated.status == EmployeeStatus.inactive
        with pytest.raises(Forbidden):
            await resolve_access(employee.credential_id, db)

    async def test_reactivation_restores_access(self, db, tenant, tenant_admin):
        employee = await _add_employee(db, tenant.id, status=EmployeeStatus.inactive)

        await update_employee(
            employee.id, EmployeeUpdate(status=EmployeeStatus.active), tenant_admin, db
        )

        access = await resolve_access(employee.credential_id, db)
        assert access.workspace_id == tenant.id


async def test_count_employees(db, tenant, make_workspace):
    other = await make_workspace(name="Other")
    await _add_employee(db, tenant.id, email="a@acme.example.com")
    await _add_employee(db, tenant.id, email="b@acme.example.com")
    await _add_employee(db, other.id, email="c@other.example.com")

    assert await count_employees(tenant.id, db) == 2
    assert await count_employees(other.id, db) == 1
