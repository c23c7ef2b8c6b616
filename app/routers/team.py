"""Team endpoints - invitations and members."""
from fastapi import APIRouter, Depends, HTTPException, status

from app.config import settings
from app.database import get_database
from app.errors import InvitationError, MemberNotFoundError
from app.models.team import InvitationAccept, InvitationCreate, TeamInvitation, TeamMember
from app.models.user import User
from app.routers.auth import get_current_user, get_current_user_id
from app.services.email_service import EmailService, get_email_service
from app.services.team_service import TeamService
from app.utils.clock import Clock, get_clock


router = APIRouter(tags=["team"])


def get_team_service(
    db=Depends(get_database),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
) -> TeamService:
    """Dependency building a TeamService from settings."""
    return TeamService(
        db,
        email_service,
        clock,
        base_url=settings.app_base_url,
        expiry_days=settings.invitation_expiry_days,
    )


@router.post(
    "/invitations",
    response_model=TeamInvitation,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(
    invitation: InvitationCreate,
    user: User = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
):
    """
    Invite someone to the authenticated user's team.

    - Requires authentication
    - Rejects existing members and pending invitations
    - Sends the invitation email
    """
    try:
        return await service.create_invitation(
            team_owner_id=user.id,
            inviter_name=user.name,
            email=invitation.email,
            name=invitation.name,
        )
    except InvitationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/invitations/{token}", response_model=TeamInvitation)
async def get_invitation(
    token: str,
    service: TeamService = Depends(get_team_service),
):
    """
    Look up a pending invitation by its token.

    - No authentication: the token is the credential
    """
    try:
        return await service.get_invitation(token)
    except InvitationError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/invitations/{token}/accept", response_model=TeamMember)
async def accept_invitation(
    token: str,
    accept: InvitationAccept,
    user: User = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
):
    """
    Accept an invitation.

    - Requires authentication
    - The signed-in email must match the invited email
    """
    try:
        return await service.accept_invitation(
            token=token,
            user_id=user.id,
            user_email=user.email,
            name=accept.name,
        )
    except InvitationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/team/members", response_model=list[TeamMember])
async def list_members(
    user: User = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
):
    """
    List the active members of the authenticated user's team.

    - Requires authentication
    """
    return await service.list_members(user.id)


@router.delete("/team/members/{member_id}")
async def remove_member(
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    """
    Remove a member from the authenticated user's team.

    - Requires authentication
    - member_id is the team member record's id
    """
    try:
        return await service.remove_member(team_owner_id=user_id, member_record_id=member_id)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
