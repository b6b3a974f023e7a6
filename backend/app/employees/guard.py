"""Storage-layer invariants for employee and identity rows.

The listeners below run inside every flush that writes an ``EmployeeDB`` or
``IdentityDB`` row, whatever code path issued the write. The same rules are
installed as a PostgreSQL trigger by the ``employee_workspace_guard``
migration so raw SQL writes are covered too.

Rules:
    - employee.role is always "employee"
    - employee.workspace_id is never null
    - invited_by_role=super_admin  => workspace is the platform workspace
    - invited_by_role=client_admin => workspace is a tenant workspace
    - an email/credential owned by an admin or super_admin identity never
      gets an employee row, and vice versa
    - super_admin identities have no workspace, admin identities have one
    - credential_id never changes once set
"""

from sqlalchemy import Connection, event, or_, select
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.attributes import get_history

from app.employees.models import EMPLOYEE_ROLE, EmployeeDB, InvitedByRole
from app.identities.models import ADMIN_ROLES, IdentityDB, IdentityRole
from app.workspaces.models import is_platform_workspace


class WorkspaceInvariantViolation(Exception):
    """A write was rejected by the storage guard."""


class EmployeeConstraintError(WorkspaceInvariantViolation):
    pass


class IdentityConstraintError(WorkspaceInvariantViolation):
    pass


def check_employee(employee: EmployeeDB, *, owned_by_admin: bool = False) -> None:
    if employee.role != EMPLOYEE_ROLE:
        raise EmployeeConstraintError(
            f"employee role must be '{EMPLOYEE_ROLE}', got '{employee.role}'"
        )
    if employee.workspace_id is None:
        raise EmployeeConstraintError("employee workspace_id cannot be null")

    if employee.invited_by_role == InvitedByRole.super_admin:
        if not is_platform_workspace(employee.workspace_id):
            raise EmployeeConstraintError(
                "employees invited by super_admin must belong to the platform workspace"
            )
    elif employee.invited_by_role == InvitedByRole.client_admin:
        if is_platform_workspace(employee.workspace_id):
            raise EmployeeConstraintError(
                "employees invited by client_admin must belong to a tenant workspace"
            )
    else:
        raise EmployeeConstraintError(
            f"unknown invited_by_role '{employee.invited_by_role}'"
        )

    if owned_by_admin:
        raise EmployeeConstraintError(
            f"{employee.email} belongs to an admin account and cannot be an employee"
        )


def check_identity(identity: IdentityDB, *, has_employee_row: bool = False) -> None:
    if identity.role == IdentityRole.super_admin and identity.workspace_id is not None:
        raise IdentityConstraintError("super_admin identities cannot have a workspace")
    if identity.role == IdentityRole.admin and identity.workspace_id is None:
        raise IdentityConstraintError("admin identities require a workspace")
    if identity.role in ADMIN_ROLES and has_employee_row:
        raise IdentityConstraintError(
            f"{identity.email} is an employee and cannot hold an admin role"
        )


def _check_credential_immutable(target, error_cls: type[WorkspaceInvariantViolation]) -> None:
    history = get_history(target, "credential_id")
    if history.has_changes() and any(old is not None for old in history.deleted):
        raise error_cls("credential_id is immutable once assigned")


def _owned_by_admin(connection: Connection, employee: EmployeeDB) -> bool:
    row = connection.execute(
        select(IdentityDB.id).where(
            or_(
                IdentityDB.email == employee.email,
                IdentityDB.credential_id == employee.credential_id,
            ),
            IdentityDB.role.in_(ADMIN_ROLES),
        )
    ).first()
    return row is not None


def _has_employee_row(connection: Connection, identity: IdentityDB) -> bool:
    clauses = [EmployeeDB.email == identity.email]
    if identity.credential_id is not None:
        clauses.append(EmployeeDB.credential_id == identity.credential_id)
    row = connection.execute(select(EmployeeDB.id).where(or_(*clauses))).first()
    return row is not None


@event.listens_for(EmployeeDB, "before_insert")
def _guard_employee_insert(mapper: Mapper, connection: Connection, target: EmployeeDB):
    check_employee(target, owned_by_admin=_owned_by_admin(connection, target))


@event.listens_for(EmployeeDB, "before_update")
def _guard_employee_update(mapper: Mapper, connection: Connection, target: EmployeeDB):
    _check_credential_immutable(target, EmployeeConstraintError)
    check_employee(target, owned_by_admin=_owned_by_admin(connection, target))


@event.listens_for(IdentityDB, "before_insert")
def _guard_identity_insert(mapper: Mapper, connection: Connection, target: IdentityDB):
    has_employee = target.role in ADMIN_ROLES and _has_employee_row(connection, target)
    check_identity(target, has_employee_row=has_employee)


@event.listens_for(IdentityDB, "before_update")
def _guard_identity_update(mapper: Mapper, connection: Connection, target: IdentityDB):
    _check_credential_immutable(target, IdentityConstraintError)
    has_employee = target.role in ADMIN_ROLES and _has_employee_row(connection, target)
    check_identity(target, has_employee_row=has_employee)
