"""create workspaces and identities tables

Revision ID: 4c1e8a2b9d10
Revises:
Create Date: 2026-09-28 10:12:41.207113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e8a2b9d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PLATFORM_WORKSPACE_ID = '00000000-0000-0000-0000-000000000001'


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'workspaces',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('plan', sa.Enum('starter', 'pro', 'advanced', 'enterprise', name='plantype'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    # Platform staff workspace; never billed or quota-limited
    op.execute(
        f"INSERT INTO workspaces (id, name, plan) "
        f"VALUES ('{PLATFORM_WORKSPACE_ID}', 'Platform', 'enterprise')"
    )

    op.create_table(
        'identities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('super_admin', 'admin', 'none', name='identityrole'), nullable=False),
        sa.Column('workspace_id', sa.Uuid(), nullable=True),
        sa.Column('credential_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_identities_email'), 'identities', ['email'], unique=True)
    op.create_index(op.f('ix_identities_credential_id'), 'identities', ['credential_id'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_identities_credential_id'), table_name='identities')
    op.drop_index(op.f('ix_identities_email'), table_name='identities')
    op.drop_table('identities')
    op.execute("DROP TYPE IF EXISTS identityrole")
    op.drop_table('workspaces')
    op.execute("DROP TYPE IF EXISTS plantype")
