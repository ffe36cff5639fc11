# teamboard/services/invitations.py
"""
Team invitations.

``invite`` turns an email address into either a membership (the address
already has an account) or a 24 hour invitation token (it does not).
``redeem_invitation`` converts a token into an account plus membership in a
single transaction. Email is written to the outbox alongside the change and
delivered afterwards, so delivery problems never undo an invitation.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamboard.config import settings
from teamboard.errors import Conflict, EmailMismatch, ExpiredToken, NotFound
from teamboard.models.invitation import Invitation
from teamboard.models.project import Project, ProjectMember, ProjectRole
from teamboard.models.user import User
from teamboard.schemas.team import InviteRole
from teamboard.services import email_outbox
from teamboard.services.policy import Action, get_membership, require
from teamboard.utils.security import hash_password
from teamboard.utils.token import generate_token

logger = logging.getLogger(__name__)

BUTTON_STYLE = (
    "display: inline-block; background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; margin: 16px 0;"
)


@dataclass
class InviteOutcome:
    status: str  # "added" or "invited"
    message: str
    email_ids: List[int] = field(default_factory=list)
    member: Optional[ProjectMember] = None
    invitation: Optional[Invitation] = None


def _display_name(user: User) -> str:
    return html.escape(user.name or user.email)


def render_added_email(project: Project, inviter: User) -> str:
    project_url = f"{settings.APP_URL}/dashboard/projects/{project.id}"
    return f"""
        <h2>You've been added to {html.escape(project.name)}</h2>
        <p>{_display_name(inviter)} has added you to their project on Project Management.</p>
        <p>Click the button below to view the project:</p>
        <a href="{project_url}" style="{BUTTON_STYLE}">View Project</a>
        <p>If you don't want to be part of this project, you can ignore this email.</p>
    """


def render_invitation_email(project: Project, inviter: User, token: str) -> str:
    invite_url = f"{settings.APP_URL}/auth/signup?token={token}"
    return f"""
        <h2>You've been invited to join {html.escape(project.name)}</h2>
        <p>{_display_name(inviter)} has invited you to join their project on Project Management.</p>
        <p>Click the button below to accept the invitation and create your account:</p>
        <a href="{invite_url}" style="{BUTTON_STYLE}">Accept Invitation</a>
        <p>This invitation will expire in {settings.INVITATION_TTL_HOURS} hours.</p>
        <p>If you don't want to accept this invitation, you can ignore this email.</p>
    """


def invite(db: Session, project_id: int, email: str, role: InviteRole, actor: User) -> InviteOutcome:
    """Add an existing account to the project or issue an invitation token"""
    project = require(db, actor, project_id, Action.INVITE_MEMBER)
    if role is InviteRole.ADMIN:
        require(db, actor, project_id, Action.GRANT_OWNER)

    email = email.lower()
    existing_user = db.query(User).filter(User.email == email).first()

    if existing_user is not None:
        if get_membership(db, project_id, existing_user.id) is not None:
            raise Conflict("User is already a member of this project", {"email": email})

        member = ProjectMember(
            project_id=project_id,
            user_id=existing_user.id,
            role=role.project_role.value,
        )
        db.add(member)
        outbox_entry = email_outbox.enqueue(
            db,
            to=email,
            subject=f"You've been added to {project.name}",
            html=render_added_email(project, actor),
        )
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise Conflict("User is already a member of this project", {"email": email}) from e
        db.refresh(member)

        logger.info(f"User {existing_user.id} added to project {project_id} as {member.role} by user {actor.id}")
        return InviteOutcome(
            status="added",
            message="User added to project successfully",
            email_ids=[outbox_entry.id],
            member=member,
        )

    token = generate_token(settings.INVITATION_TOKEN_LENGTH)
    invitation = Invitation(
        email=email,
        token=token,
        project_id=project_id,
        invited_by_id=actor.id,
        expires_at=datetime.utcnow() + timedelta(hours=settings.INVITATION_TTL_HOURS),
    )
    db.add(invitation)
    outbox_entry = email_outbox.enqueue(
        db,
        to=email,
        subject=f"Invitation to join {project.name}",
        html=render_invitation_email(project, actor, token),
    )
    db.commit()
    db.refresh(invitation)

    logger.info(f"Invitation {invitation.id} for project {project_id} issued by user {actor.id}")
    return InviteOutcome(
        status="invited",
        message="Invitation sent successfully",
        email_ids=[outbox_entry.id],
        invitation=invitation,
    )


def _get_live_invitation(db: Session, token: str) -> Invitation:
    invitation = db.query(Invitation).filter(Invitation.token == token).first()
    if invitation is None:
        raise NotFound("Invitation")
    if invitation.is_expired():
        raise ExpiredToken("Invitation has expired", {"expires_at": invitation.expires_at.isoformat()})
    return invitation


def validate_invitation(db: Session, token: str) -> Invitation:
    """Check a token before showing the signup form"""
    invitation = _get_live_invitation(db, token)
    if db.query(User).filter(User.email == invitation.email).first() is not None:
        raise Conflict("User already exists", {"email": invitation.email})
    return invitation


def redeem_invitation(db: Session, token: str, email: str, password: str, name: str) -> User:
    """Create the account and its membership, consuming the token.

    User creation, token deletion and membership creation commit together or
    not at all. When two redemptions of one token race, the loser's delete
    affects no rows (or its user insert violates the email constraint) and
    its whole transaction is rolled back.
    """
    try:
        invitation = _get_live_invitation(db, token)
        if invitation.email.lower() != email.lower():
            raise EmailMismatch("This invitation was issued for a different email address")

        project_id = invitation.project_id
        user = User(email=email.lower(), name=name, hashed_password=hash_password(password))
        db.add(user)
        db.flush()

        deleted = db.query(Invitation).filter(Invitation.id == invitation.id).delete(synchronize_session=False)
        if deleted != 1:
            raise NotFound("Invitation")

        db.add(ProjectMember(project_id=project_id, user_id=user.id, role=ProjectRole.MEMBER.value))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("User already exists", {"email": email}) from e
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Invitation for project {project_id} redeemed by new user {user.id}")
    return user
