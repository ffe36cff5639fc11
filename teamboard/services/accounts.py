# teamboard/services/accounts.py
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamboard.errors import Conflict, Unauthenticated
from teamboard.models.project import Project, ProjectMember, ProjectRole, ProjectStatus
from teamboard.models.user import User
from teamboard.schemas.user import UserCreate, UserUpdate
from teamboard.services.invitations import redeem_invitation
from teamboard.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "My First Project"
DEFAULT_PROJECT_DESCRIPTION = "Welcome to your first project! This is where you can start managing your tasks."


@dataclass
class SignupResult:
    user: User
    default_project: Optional[Project] = None
    joined_project_id: Optional[int] = None


def bootstrap_default_project(db: Session, user: User) -> Project:
    """Give a brand new account a starter project it owns (caller commits)"""
    project = Project(
        name=DEFAULT_PROJECT_NAME,
        description=DEFAULT_PROJECT_DESCRIPTION,
        status=ProjectStatus.ACTIVE.value,
    )
    project.members.append(ProjectMember(user=user, role=ProjectRole.OWNER.value))
    db.add(project)
    db.flush()
    return project


def signup(db: Session, payload: UserCreate) -> SignupResult:
    """Register an account, either through an invitation or with a starter project"""
    if db.query(User).filter(User.email == payload.email).first() is not None:
        raise Conflict("User already exists", {"email": payload.email})

    if payload.invitation_token:
        user = redeem_invitation(
            db,
            token=payload.invitation_token,
            email=payload.email,
            password=payload.password,
            name=payload.name,
        )
        membership = db.query(ProjectMember).filter(ProjectMember.user_id == user.id).first()
        return SignupResult(user=user, joined_project_id=membership.project_id if membership else None)

    try:
        user = User(email=payload.email, name=payload.name, hashed_password=hash_password(payload.password))
        db.add(user)
        db.flush()
        project = bootstrap_default_project(db, user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("User already exists", {"email": payload.email}) from e

    db.refresh(user)
    db.refresh(project)
    logger.info(f"User {user.id} signed up with default project {project.id}")
    return SignupResult(user=user, default_project=project)


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        raise Unauthenticated("Invalid credentials")
    return user


def update_profile(db: Session, user: User, changes: UserUpdate) -> User:
    update_data = changes.model_dump(exclude_unset=True)
    # Explicit nulls only clear the nullable picture url
    update_data = {
        field: value for field, value in update_data.items()
        if value is not None or field == "profile_picture_url"
    }
    for field, value in update_data.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user
