# teamboard/services/policy.py
"""
Project access policy.

Every handler that reads or mutates project-scoped data asks this module
whether ``actor`` may perform ``action`` on ``project_id``. Membership role
is the only input: owners may do everything, members may edit content and
invite, viewers may only read.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from teamboard.errors import Forbidden, NotFound
from teamboard.models.project import Project, ProjectMember, ProjectRole
from teamboard.models.user import User


class Action(str, enum.Enum):
    VIEW_PROJECT = "view_project"
    VIEW_TASKS = "view_tasks"
    VIEW_MEMBERS = "view_members"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    INVITE_MEMBER = "invite_member"
    MANAGE_MEMBERS = "manage_members"
    GRANT_OWNER = "grant_owner"


_READERS = frozenset({ProjectRole.OWNER, ProjectRole.MEMBER, ProjectRole.VIEWER})
_EDITORS = frozenset({ProjectRole.OWNER, ProjectRole.MEMBER})
_OWNERS = frozenset({ProjectRole.OWNER})

ALLOWED_ROLES: Dict[Action, FrozenSet[ProjectRole]] = {
    Action.VIEW_PROJECT: _READERS,
    Action.VIEW_TASKS: _READERS,
    Action.VIEW_MEMBERS: _READERS,
    Action.UPDATE_PROJECT: _EDITORS,
    Action.CREATE_TASK: _EDITORS,
    Action.UPDATE_TASK: _EDITORS,
    Action.DELETE_TASK: _EDITORS,
    Action.INVITE_MEMBER: _EDITORS,
    Action.DELETE_PROJECT: _OWNERS,
    Action.MANAGE_MEMBERS: _OWNERS,
    Action.GRANT_OWNER: _OWNERS,
}

_DENY_MESSAGES: Dict[Action, str] = {
    Action.VIEW_PROJECT: "You are not a member of this project",
    Action.VIEW_TASKS: "You are not a member of this project",
    Action.VIEW_MEMBERS: "You are not a member of this project",
    Action.UPDATE_PROJECT: "You don't have permission to update this project",
    Action.DELETE_PROJECT: "Only project owners can delete this project",
    Action.CREATE_TASK: "You don't have permission to create tasks in this project",
    Action.UPDATE_TASK: "You don't have permission to update tasks in this project",
    Action.DELETE_TASK: "You don't have permission to delete tasks in this project",
    Action.INVITE_MEMBER: "You don't have permission to invite members to this project",
    Action.MANAGE_MEMBERS: "Only project owners can manage members",
    Action.GRANT_OWNER: "Only project owners can grant the owner role",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    role: Optional[ProjectRole]
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


def get_membership(db: Session, project_id: int, user_id: int) -> Optional[ProjectMember]:
    return db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
    ).first()


def member_user_ids(db: Session, project_id: int) -> List[int]:
    rows = db.query(ProjectMember.user_id).filter(ProjectMember.project_id == project_id).all()
    return [row[0] for row in rows]


def authorize(db: Session, actor: User, project_id: int, action: Action) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on the project"""
    membership = get_membership(db, project_id, actor.id)
    if membership is None:
        return Decision(allowed=False, role=None, reason=_DENY_MESSAGES[action])

    role = ProjectRole(membership.role)
    if role in ALLOWED_ROLES[action]:
        return Decision(allowed=True, role=role)
    return Decision(allowed=False, role=role, reason=_DENY_MESSAGES[action])


def require(db: Session, actor: User, project_id: int, action: Action) -> Project:
    """Load the project and enforce the policy, raising on failure"""
    project = db.query(Project).filter(Project.id == project_id).first()
    if project is None:
        raise NotFound("Project", project_id)

    decision = authorize(db, actor, project_id, action)
    if not decision:
        raise Forbidden(decision.reason, {"action": action.value, "project_id": project_id})
    return project
