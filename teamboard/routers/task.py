# teamboard/routers/task.py
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from teamboard.database import get_db
from teamboard.errors import NotFound, ValidationFailed
from teamboard.models.project import ProjectMember
from teamboard.models.task import Task, Tag, TaskStatus
from teamboard.models.user import User
from teamboard.schemas.task import TaskCreate, TaskUpdate, TaskOut
from teamboard.services.policy import Action, get_membership, member_user_ids, require
from teamboard.services.websocket_manager import websocket_manager
from teamboard.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _task_query(db: Session):
    return db.query(Task).options(
        joinedload(Task.project),
        joinedload(Task.creator),
        joinedload(Task.assignee),
        joinedload(Task.tags),
    )


def _load_tags(db: Session, tag_ids: List[int]) -> List[Tag]:
    unique_ids = list(dict.fromkeys(tag_ids))
    tags = db.query(Tag).filter(Tag.id.in_(unique_ids)).all() if unique_ids else []
    if len(tags) != len(unique_ids):
        missing = sorted(set(unique_ids) - {tag.id for tag in tags})
        raise NotFound("Tag", missing, {"tag_ids": missing})
    return tags


def _check_assignee(db: Session, project_id: int, assignee_id: Optional[int]):
    if assignee_id is not None and get_membership(db, project_id, assignee_id) is None:
        raise ValidationFailed(
            "Assignee must be a member of the project",
            {"assignee_id": assignee_id, "project_id": project_id},
        )


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.id == task_id).first()
    if not task:
        raise NotFound("Task", task_id)
    return task


def _publish(background_tasks: BackgroundTasks, db: Session, project_id: int, task_id: int):
    background_tasks.add_task(
        websocket_manager.publish_invalidation,
        member_user_ids(db, project_id),
        "tasks",
        project_id,
        task_id=task_id,
    )


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a task in a project the current user can edit"""
    require(db, current_user, task_data.project_id, Action.CREATE_TASK)
    _check_assignee(db, task_data.project_id, task_data.assignee_id)
    tags = _load_tags(db, task_data.tag_ids) if task_data.tag_ids else []

    db_task = Task(
        title=task_data.title,
        description=task_data.description,
        status=task_data.status.value,
        priority=task_data.priority.value,
        due_date=task_data.due_date,
        project_id=task_data.project_id,
        assignee_id=task_data.assignee_id,
        creator_id=current_user.id,
        tags=tags,
    )
    db.add(db_task)
    db.commit()

    logger.info(f"Task {db_task.id} created in project {db_task.project_id} by user {current_user.id}")
    _publish(background_tasks, db, db_task.project_id, db_task.id)
    return _get_task_or_404(db, db_task.id)


@router.get("/", response_model=List[TaskOut])
def get_all_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get every task in the projects the current user belongs to"""
    project_ids = db.query(ProjectMember.project_id).filter(ProjectMember.user_id == current_user.id)
    return (
        _task_query(db)
        .filter(Task.project_id.in_(project_ids.scalar_subquery()))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


@router.get("/assigned", response_model=List[TaskOut])
def get_assigned_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get tasks assigned to the current user"""
    return (
        _task_query(db)
        .filter(Task.assignee_id == current_user.id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


@router.get("/project/{project_id}", response_model=List[TaskOut])
def get_project_tasks(
    project_id: int,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all tasks of a project, newest first"""
    require(db, current_user, project_id, Action.VIEW_TASKS)

    query = _task_query(db).filter(Task.project_id == project_id)
    if status_filter:
        query = query.filter(Task.status == status_filter.value)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get a specific task by ID"""
    task = _get_task_or_404(db, task_id)
    require(db, current_user, task.project_id, Action.VIEW_TASKS)
    return task


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a task; ``tag_ids`` replaces the whole tag set"""
    db_task = _get_task_or_404(db, task_id)
    require(db, current_user, db_task.project_id, Action.UPDATE_TASK)

    update_data = task_update.model_dump(exclude_unset=True, exclude={"tag_ids"})
    if "assignee_id" in update_data:
        _check_assignee(db, db_task.project_id, update_data["assignee_id"])
    if task_update.tag_ids is not None:
        db_task.tags = _load_tags(db, task_update.tag_ids)

    for field, value in update_data.items():
        if field in ("title", "status", "priority") and value is None:
            continue
        if hasattr(value, "value"):  # Handle enums
            value = value.value
        setattr(db_task, field, value)

    db.commit()

    _publish(background_tasks, db, db_task.project_id, task_id)
    return _get_task_or_404(db, task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a task"""
    db_task = db.query(Task).filter(Task.id == task_id).first()
    if not db_task:
        raise NotFound("Task", task_id)
    project_id = db_task.project_id
    require(db, current_user, project_id, Action.DELETE_TASK)

    db.delete(db_task)
    db.commit()

    _publish(background_tasks, db, project_id, task_id)
    return None
