from .user import User
from .project import Project, ProjectMember, ProjectStatus, ProjectRole
from .task import Task, Tag, TaskStatus, TaskPriority, task_tags
from .invitation import Invitation
from .outbound_email import OutboundEmail, EmailStatus
