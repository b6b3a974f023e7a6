"""add employee workspace guard triggers

Revision ID: b2d94e0c7f51
Revises: 7f3b5d6e1a24
Create Date: 2026-09-29 16:05:27.930415

Mirrors the listeners in app/employees/guard.py so that writes made outside
the ORM are held to the same rules. Violations raise SQLSTATE 23514
(check_violation).
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'b2d94e0c7f51'
down_revision: Union[str, Sequence[str], None] = '7f3b5d6e1a24'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


EMPLOYEE_GUARD = """
CREATE OR REPLACE FUNCTION enforce_employee_workspace() RETURNS trigger AS $$
BEGIN
    IF NEW.role <> 'employee' THEN
        RAISE EXCEPTION 'employee role must be ''employee'', got %', NEW.role
            USING ERRCODE = 'check_violation';
    END IF;
    IF NEW.workspace_id IS NULL THEN
        RAISE EXCEPTION 'employee workspace_id cannot be null'
            USING ERRCODE = 'check_violation';
    END IF;
    IF NEW.invited_by_role = 'super_admin'
       AND NEW.workspace_id <> '00000000-0000-0000-0000-000000000001' THEN
        RAISE EXCEPTION 'employees invited by super_admin must belong to the platform workspace'
            USING ERRCODE = 'check_violation';
    END IF;
    IF NEW.invited_by_role = 'client_admin'
       AND NEW.workspace_id = '00000000-0000-0000-0000-000000000001' THEN
        RAISE EXCEPTION 'employees invited by client_admin must belong to a tenant workspace'
            USING ERRCODE = 'check_violation';
    END IF;
    IF TG_OP = 'UPDATE' AND OLD.credential_id IS DISTINCT FROM NEW.credential_id THEN
        RAISE EXCEPTION 'credential_id is immutable once assigned'
            USING ERRCODE = 'check_violation';
    END IF;
    IF EXISTS (
        SELECT 1 FROM identities
        WHERE (email = NEW.email OR credential_id = NEW.credential_id)
          AND role IN ('super_admin', 'admin')
    ) THEN
        RAISE EXCEPTION '% belongs to an admin account and cannot be an employee', NEW.email
            USING ERRCODE = 'check_violation';
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

IDENTITY_GUARD = """
CREATE OR REPLACE FUNCTION enforce_identity_roles() RETURNS trigger AS $$
BEGIN
    IF NEW.role = 'super_admin' AND NEW.workspace_id IS NOT NULL THEN
        RAISE EXCEPTION 'super_admin identities cannot have a workspace'
            USING ERRCODE = 'check_violation';
    END IF;
    IF NEW.role = 'admin' AND NEW.workspace_id IS NULL THEN
        RAISE EXCEPTION 'admin identities require a workspace'
            USING ERRCODE = 'check_violation';
    END IF;
    IF TG_OP = 'UPDATE' AND OLD.credential_id IS NOT NULL
       AND OLD.credential_id IS DISTINCT FROM NEW.credential_id THEN
        RAISE EXCEPTION 'credential_id is immutable once assigned'
            USING ERRCODE = 'check_violation';
    END IF;
    IF NEW.role IN ('super_admin', 'admin') AND EXISTS (
        SELECT 1 FROM employees
        WHERE email = NEW.email OR credential_id = NEW.credential_id
    ) THEN
        RAISE EXCEPTION '% is an employee and cannot hold an admin role', NEW.email
            USING ERRCODE = 'check_violation';
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""


def upgrade() -> None:
    op.execute(EMPLOYEE_GUARD)
    op.execute(
        "CREATE TRIGGER employee_workspace_guard "
        "BEFORE INSERT OR UPDATE ON employees "
        "FOR EACH ROW EXECUTE FUNCTION enforce_employee_workspace()"
    )
    op.execute(IDENTITY_GUARD)
    op.execute(
        "CREATE TRIGGER identity_role_guard "
        "BEFORE INSERT OR UPDATE ON identities "
        "FOR EACH ROW EXECUTE FUNCTION enforce_identity_roles()"
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS identity_role_guard ON identities")
    op.execute("DROP FUNCTION IF EXISTS enforce_identity_roles()")
    op.execute("DROP TRIGGER IF EXISTS employee_workspace_guard ON employees")
    op.execute("DROP FUNCTION IF EXISTS enforce_employee_workspace()")
