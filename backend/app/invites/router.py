from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.access import Access
from app.auth.credentials import CredentialProvider, get_credential_provider
from app.auth.dependencies import require_inviter
from app.database import get_db
from app.errors import NotFoundOrExpired
from app.invites.acceptance import accept_invite
from app.invites.models import InviteDB
from app.invites.schemas import (
    AcceptResult,
    InviteAcceptRequest,
    InviteCreate,
    InviteCreated,
    InvitePreview,
    InviteRead,
)
from app.invites.service import (
    build_invite_url,
    create_invite,
    get_valid_invite,
    list_pending_invites,
)

router = APIRouter(prefix="/invites", tags=["invites"])


def _invite_to_read(invite: InviteDB) -> InviteRead:
    return InviteRead(
        id=invite.id,
        email=invite.email,
        role=invite.role,
        status=invite.status.value,
        workspace_id=invite.workspace_id,
        invited_by=invite.invited_by,
        expires_at=invite.expires_at,
        created_at=invite.created_at,
    )


@router.post("/", response_model=InviteCreated, status_code=201)
async def create_invite_endpoint(
    data: InviteCreate,
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> InviteCreated:
    """Create an employee invite. super_admin or workspace admin only."""
    invite = await create_invite(
        email=data.email,
        role=data.role,
        workspace_id=data.workspace_id,
        invoker=access,
        db=db,
    )
    return InviteCreated(
        id=invite.id,
        email=invite.email,
        token=invite.token,
        invite_url=build_invite_url(invite.token),
    )


@router.get("/", response_model=list[InviteRead])
async def list_invites(
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> list[InviteRead]:
    """List pending invites in the caller's scope."""
    invites = await list_pending_invites(access, db)
    return [_invite_to_read(inv) for inv in invites]


@router.get("/preview/{token}", response_model=InvitePreview)
async def preview_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> InvitePreview:
    """Public: show who an invite is for before it is accepted."""
    invite = await get_valid_invite(token, db)
    if invite is None:
        raise NotFoundOrExpired()
    return InvitePreview(
        email=invite.email,
        role=invite.role,
        workspace_id=invite.workspace_id,
        expires_at=invite.expires_at,
    )


@router.post("/accept", response_model=AcceptResult)
async def accept_invite_endpoint(
    data: InviteAcceptRequest,
    db: AsyncSession = Depends(get_db),
    provider: CredentialProvider = Depends(get_credential_provider),
) -> AcceptResult:
    """Public: accept an invite, creating the credential and employee record."""
    return await accept_invite(
        token=data.token,
        profile=data,
        password=data.password,
        db=db,
        provider=provider,
    )
