# teamboard/routers/dashboard.py
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from teamboard.database import get_db
from teamboard.models import Project, ProjectMember, ProjectStatus, Task, TaskStatus, User
from teamboard.schemas.dashboard import DashboardSummary
from teamboard.schemas.task import TaskOut
from teamboard.utils.auth import get_current_user

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

DUE_SOON_DAYS = 7


@router.get("/summary", response_model=DashboardSummary)
def get_dashboard_summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Project and assigned-task counts for the current user's dashboard"""

    # Projects the user belongs to, by status
    project_rows = (
        db.query(Project.status, func.count(Project.id))
        .join(ProjectMember, ProjectMember.project_id == Project.id)
        .filter(ProjectMember.user_id == current_user.id)
        .group_by(Project.status)
        .all()
    )
    projects_by_status = {s.value: 0 for s in ProjectStatus}
    projects_by_status.update({row_status: count for row_status, count in project_rows})

    # Tasks assigned to the user, by status
    task_rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(Task.assignee_id == current_user.id)
        .group_by(Task.status)
        .all()
    )
    assigned_by_status = {s.value: 0 for s in TaskStatus}
    assigned_by_status.update({row_status: count for row_status, count in task_rows})

    # Open assigned tasks due within the next week
    now = datetime.utcnow()
    due_soon = (
        db.query(Task)
        .options(
            joinedload(Task.project),
            joinedload(Task.creator),
            joinedload(Task.assignee),
            joinedload(Task.tags),
        )
        .filter(
            Task.assignee_id == current_user.id,
            Task.status != TaskStatus.COMPLETED.value,
            Task.due_date.isnot(None),
            Task.due_date <= now + timedelta(days=DUE_SOON_DAYS),
        )
        .order_by(Task.due_date.asc())
        .all()
    )

    return DashboardSummary(
        total_projects=sum(projects_by_status.values()),
        projects_by_status=projects_by_status,
        assigned_tasks=sum(assigned_by_status.values()),
        assigned_by_status=assigned_by_status,
        due_soon=[TaskOut.model_validate(task) for task in due_soon],
    )
