"""Team service - invitations and team membership."""
import logging
import secrets
from datetime import datetime, timedelta

from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import InvitationError, MemberNotFoundError, StorageUnavailableError
from app.models.team import InvitationStatus, TeamInvitation, TeamMember
from app.services.email_service import EmailService
from app.utils.clock import Clock, to_local
from app.utils.email_templates import render_invitation

logger = logging.getLogger(__name__)


class TeamService:
    """Service for team invitations and membership."""

    def __init__(
        self,
        db,
        email_service: EmailService,
        clock: Clock,
        base_url: str,
        expiry_days: int = 7,
    ):
        """Initialize service with database connection and collaborators."""
        self.db = db
        self.email_service = email_service
        self.clock = clock
        self.base_url = base_url.rstrip("/")
        self.expiry_days = expiry_days
        self.invitations = db["team_invitations"]
        self.members = db["team_members"]

    def _doc_to_invitation(self, doc: dict) -> TeamInvitation:
        return TeamInvitation(
            _id=str(doc["_id"]),
            team_owner_id=doc["team_owner_id"],
            invitee_email=doc["invitee_email"],
            invitee_name=doc["invitee_name"],
            role=doc.get("role", "member"),
            status=doc["status"],
            invitation_token=doc["invitation_token"],
            expires_at=doc["expires_at"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def _doc_to_member(self, doc: dict) -> TeamMember:
        return TeamMember(
            _id=str(doc["_id"]),
            team_owner_id=doc["team_owner_id"],
            member_id=doc["member_id"],
            member_email=doc["member_email"],
            member_name=doc["member_name"],
            role=doc.get("role", "member"),
            status=doc.get("status", "active"),
            created_at=doc["created_at"],
        )

    def _is_expired(self, expires_at: datetime, now: datetime) -> bool:
        return to_local(expires_at, now.tzinfo) < now

    def invitation_url(self, token: str) -> str:
        return f"{self.base_url}/invite/{token}"

    async def create_invitation(
        self,
        team_owner_id: str,
        inviter_name: str,
        email: str,
        name: str | None = None,
    ) -> TeamInvitation:
        """
        Invite someone to the owner's team and email them a link.

        Args:
            team_owner_id: Inviting user's ID
            inviter_name: Name shown in the email
            email: Invitee email address
            name: Optional invitee name (defaults to the email's local part)

        Returns:
            Created invitation

        Raises:
            InvitationError: If the invitee is already a member or has a
                pending, unexpired invitation, or the email could not be sent
        """
        email = email.lower()
        now = self.clock.now()

        try:
            member = await self.members.find_one({
                "team_owner_id": team_owner_id,
                "member_email": email,
            })
            pending = await self.invitations.find_one({
                "team_owner_id": team_owner_id,
                "invitee_email": email,
                "status": InvitationStatus.PENDING.value,
            })
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if member:
            raise InvitationError("User is already a team member")

        if pending:
            if not self._is_expired(pending["expires_at"], now):
                raise InvitationError("Invitation already pending")
            await self._expire(pending["_id"], now)

        invitation_doc = {
            "team_owner_id": team_owner_id,
            "invitee_email": email,
            "invitee_name": name or email.split("@")[0],
            "role": "member",
            "status": InvitationStatus.PENDING.value,
            "invitation_token": secrets.token_urlsafe(32),
            "expires_at": now + timedelta(days=self.expiry_days),
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.invitations.insert_one(invitation_doc)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        invitation_doc["_id"] = result.inserted_id
        invitation = self._doc_to_invitation(invitation_doc)

        delivered = await self.email_service.send(
            email,
            f"{inviter_name} invited you to join their team",
            render_invitation(
                inviter_name,
                name,
                self.invitation_url(invitation.invitation_token),
                self.expiry_days,
            ),
        )
        if not delivered:
            # Drop the record so the owner can retry straight away
            try:
                await self.invitations.delete_one({"_id": invitation_doc["_id"]})
            except PyMongoError as e:
                raise StorageUnavailableError(str(e)) from e
            raise InvitationError("Invitation email could not be sent")

        logger.info("Invitation %s sent to %s", invitation.id, email)
        return invitation

    async def _expire(self, invitation_id, now: datetime) -> None:
        try:
            await self.invitations.update_one(
                {"_id": invitation_id},
                {"$set": {"status": InvitationStatus.EXPIRED.value, "updated_at": now}},
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

    async def get_invitation(self, token: str) -> TeamInvitation:
        """
        Look up a pending invitation by token.

        Raises:
            InvitationError: If no pending invitation matches, or it expired
        """
        try:
            doc = await self.invitations.find_one({
                "invitation_token": token,
                "status": InvitationStatus.PENDING.value,
            })
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not doc:
            raise InvitationError("Invitation not found")

        now = self.clock.now()
        if self._is_expired(doc["expires_at"], now):
            await self._expire(doc["_id"], now)
            raise InvitationError("Invitation has expired")

        return self._doc_to_invitation(doc)

    async def accept_invitation(
        self,
        token: str,
        user_id: str,
        user_email: str,
        name: str | None = None,
    ) -> TeamMember:
        """
        Accept an invitation as the signed-in user.

        The member record carries the accepting user's own ID.

        Raises:
            InvitationError: If the invitation is missing, expired, or was
                sent to a different email address
        """
        invitation = await self.get_invitation(token)

        if invitation.invitee_email.lower() != user_email.lower():
            raise InvitationError("Invitation was sent to a different email address")

        now = self.clock.now()
        member_doc = {
            "team_owner_id": invitation.team_owner_id,
            "member_id": user_id,
            "member_email": user_email.lower(),
            "member_name": name or invitation.invitee_name,
            "role": invitation.role,
            "status": "active",
            "created_at": now,
        }

        try:
            result = await self.members.insert_one(member_doc)
            await self.invitations.update_one(
                {"invitation_token": token},
                {"$set": {"status": InvitationStatus.ACCEPTED.value, "updated_at": now}},
            )
        except DuplicateKeyError as e:
            raise InvitationError("User is already a team member") from e
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        member_doc["_id"] = result.inserted_id
        logger.info("User %s joined team of %s", user_id, invitation.team_owner_id)

        return self._doc_to_member(member_doc)

    async def list_members(self, team_owner_id: str) -> list[TeamMember]:
        """List the active members of a user's team."""
        try:
            cursor = self.members.find({
                "team_owner_id": team_owner_id,
                "status": "active",
            }).sort("created_at", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return [self._doc_to_member(doc) for doc in docs]

    async def remove_member(self, team_owner_id: str, member_record_id: str) -> dict:
        """
        Remove someone from the owner's team.

        Args:
            team_owner_id: Team owner's user ID
            member_record_id: ID of the team member record (not the user ID)

        Returns:
            Dictionary with deleted_count

        Raises:
            MemberNotFoundError: If the record is missing or belongs to another team
        """
        if not ObjectId.is_valid(member_record_id):
            raise MemberNotFoundError()

        try:
            result = await self.members.delete_one({
                "_id": ObjectId(member_record_id),
                "team_owner_id": team_owner_id,
            })
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if result.deleted_count == 0:
            raise MemberNotFoundError()

        logger.info("Removed member %s from team of %s", member_record_id, team_owner_id)
        return {"deleted_count": result.deleted_count}
