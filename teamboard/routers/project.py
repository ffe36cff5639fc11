# teamboard/routers/project.py
import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from teamboard.database import get_db
from teamboard.errors import Conflict, NotFound
from teamboard.models.project import Project, ProjectMember, ProjectRole
from teamboard.models.user import User
from teamboard.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut, ProjectMemberAdd, ProjectMemberOut
from teamboard.services.policy import Action, get_membership, member_user_ids, require
from teamboard.services.websocket_manager import websocket_manager
from teamboard.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a new project with the current user as its owner"""
    db_project = Project(
        name=project_data.name,
        description=project_data.description,
        status=project_data.status.value,
    )
    db_project.members.append(ProjectMember(user_id=current_user.id, role=ProjectRole.OWNER.value))

    db.add(db_project)
    db.commit()
    db.refresh(db_project)

    logger.info(f"Project {db_project.id} created by user {current_user.id}")
    return db_project


@router.get("/", response_model=List[ProjectOut])
def get_all_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get the projects the current user belongs to, most recently updated first"""
    return (
        db.query(Project)
        .options(joinedload(Project.members).joinedload(ProjectMember.user))
        .filter(Project.members.any(ProjectMember.user_id == current_user.id))
        .order_by(Project.updated_at.desc(), Project.id.desc())
        .all()
    )


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get a specific project by ID"""
    return require(db, current_user, project_id, Action.VIEW_PROJECT)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a project - owners and members only"""
    db_project = require(db, current_user, project_id, Action.UPDATE_PROJECT)

    update_data = project_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "name" and value is None:
            continue
        if field == "status":
            if value is None:
                continue
            value = value.value
        setattr(db_project, field, value)

    db.commit()
    db.refresh(db_project)

    background_tasks.add_task(
        websocket_manager.publish_invalidation, member_user_ids(db, project_id), "project", project_id
    )
    return db_project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a project with its tasks, memberships and invitations - owners only"""
    db_project = require(db, current_user, project_id, Action.DELETE_PROJECT)
    affected_user_ids = member_user_ids(db, project_id)

    db.delete(db_project)
    db.commit()

    logger.info(f"Project {project_id} deleted by user {current_user.id}")
    background_tasks.add_task(websocket_manager.publish_invalidation, affected_user_ids, "project", project_id)
    return None


@router.post("/{project_id}/members", response_model=ProjectMemberOut, status_code=status.HTTP_201_CREATED)
def add_project_member(
    project_id: int,
    member_data: ProjectMemberAdd,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Add an existing user to a project - owners only"""
    require(db, current_user, project_id, Action.MANAGE_MEMBERS)

    user = db.query(User).filter(User.id == member_data.user_id).first()
    if not user:
        raise NotFound("User", member_data.user_id)

    if get_membership(db, project_id, user.id) is not None:
        raise Conflict("User is already a member of this project", {"user_id": user.id})

    member = ProjectMember(project_id=project_id, user_id=user.id, role=member_data.role.value)
    db.add(member)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("User is already a member of this project", {"user_id": user.id}) from e
    db.refresh(member)

    background_tasks.add_task(
        websocket_manager.publish_invalidation, member_user_ids(db, project_id), "members", project_id
    )
    return member


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_project_member(
    project_id: int,
    user_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Remove a member from a project - owners only"""
    require(db, current_user, project_id, Action.MANAGE_MEMBERS)

    member = get_membership(db, project_id, user_id)
    if member is None:
        raise NotFound("Project member", user_id)

    # A project must always keep at least one owner
    if member.role == ProjectRole.OWNER.value:
        owner_count = db.query(ProjectMember).filter(
            ProjectMember.project_id == project_id,
            ProjectMember.role == ProjectRole.OWNER.value
        ).count()
        if owner_count <= 1:
            raise Conflict("Cannot remove the last owner of a project")

    affected_user_ids = member_user_ids(db, project_id)
    db.delete(member)
    db.commit()

    background_tasks.add_task(websocket_manager.publish_invalidation, affected_user_ids, "members", project_id)
    return None
