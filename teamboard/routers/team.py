# teamboard/routers/team.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session, joinedload

from teamboard.database import get_db, get_session_factory
from teamboard.models.project import ProjectMember
from teamboard.models.user import User
from teamboard.schemas.team import InviteMember, InviteResult, TeamMemberOut, InvitationCheck
from teamboard.services import email_outbox, invitations
from teamboard.services.email_sender import EmailSender, get_email_sender
from teamboard.services.policy import Action, member_user_ids, require
from teamboard.services.websocket_manager import websocket_manager
from teamboard.utils.auth import get_current_user

router = APIRouter()


@router.post("/invite", response_model=InviteResult)
def invite_member(
    invite_data: InviteMember,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    session_factory=Depends(get_session_factory),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Add an existing user to a project or email them an invitation link"""
    outcome = invitations.invite(
        db,
        project_id=invite_data.project_id,
        email=invite_data.email,
        role=invite_data.role,
        actor=current_user,
    )

    # Delivery runs after the response; failures stay in the outbox for the retry job
    background_tasks.add_task(email_outbox.deliver, session_factory, email_sender, outcome.email_ids)
    if outcome.status == "added":
        background_tasks.add_task(
            websocket_manager.publish_invalidation,
            member_user_ids(db, invite_data.project_id),
            "members",
            invite_data.project_id,
        )
    return InviteResult(status=outcome.status, message=outcome.message)


@router.get("/projects/{project_id}/members", response_model=List[TeamMemberOut])
def get_project_members(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the members of a project, most recently joined first"""
    require(db, current_user, project_id, Action.VIEW_MEMBERS)

    members = (
        db.query(ProjectMember)
        .options(joinedload(ProjectMember.user))
        .filter(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.joined_at.desc(), ProjectMember.id.desc())
        .all()
    )
    return [
        TeamMemberOut(
            id=member.user.id,
            name=member.user.name or "",
            email=member.user.email or "",
            role=member.role,
            joined_at=member.joined_at,
        )
        for member in members
    ]


@router.get("/invitations/{token}", response_model=InvitationCheck)
def check_invitation(token: str, db: Session = Depends(get_db)):
    """Validate an invitation token before signup (no authentication required)"""
    invitation = invitations.validate_invitation(db, token)
    return InvitationCheck(
        email=invitation.email,
        project_id=invitation.project_id,
        project_name=invitation.project.name,
        expires_at=invitation.expires_at,
    )
