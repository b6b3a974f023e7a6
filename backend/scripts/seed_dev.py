"""Seed a local database with a super_admin and one tenant workspace.

Admins are provisioned out of band (there is no endpoint for it), so this is
how a dev environment gets its first inviters. Credential ids must match the
``sub`` of the tokens your local credential provider issues.

    python scripts/seed_dev.py
"""

import asyncio
import logging

from app.database import AsyncSessionLocal
from app.identities.models import IdentityDB, IdentityRole
from app.identities.service import get_identity_by_email
from app.workspaces.models import PLATFORM_WORKSPACE_ID, PlanType, WorkspaceDB

logger = logging.getLogger(__name__)

SUPER_ADMIN_EMAIL = "root@staffgate.dev"
SUPER_ADMIN_CREDENTIAL = "dev-root"
TENANT_NAME = "Acme"
TENANT_ADMIN_EMAIL = "owner@acme.dev"
TENANT_ADMIN_CREDENTIAL = "dev-acme-owner"


async def seed():
    async with AsyncSessionLocal() as db:
        if await db.get(WorkspaceDB, PLATFORM_WORKSPACE_ID) is None:
            db.add(
                WorkspaceDB(
                    id=PLATFORM_WORKSPACE_ID, name="Platform", plan=PlanType.enterprise
                )
            )
            await db.commit()

        if await get_identity_by_email(SUPER_ADMIN_EMAIL, db) is None:
            db.add(
                IdentityDB(
                    name="Dev Root",
                    email=SUPER_ADMIN_EMAIL,
                    role=IdentityRole.super_admin,
                    credential_id=SUPER_ADMIN_CREDENTIAL,
                )
            )
            await db.commit()
            logger.info("Created super_admin %s", SUPER_ADMIN_EMAIL)

        if await get_identity_by_email(TENANT_ADMIN_EMAIL, db) is None:
            workspace = WorkspaceDB(name=TENANT_NAME, plan=PlanType.starter)
            db.add(workspace)
            await db.commit()
            db.add(
                IdentityDB(
                    name="Acme Owner",
                    email=TENANT_ADMIN_EMAIL,
                    role=IdentityRole.admin,
                    workspace_id=workspace.id,
                    credential_id=TENANT_ADMIN_CREDENTIAL,
                )
            )
            await db.commit()
            logger.info("Created workspace %s with admin %s", workspace.id, TENANT_ADMIN_EMAIL)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
