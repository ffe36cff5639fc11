from .user import UserCreate, UserLogin, UserOut, UserBasic, UserUpdate, NotificationPrefs
from .tokens import Token, SignupOut
from .project import ProjectCreate, ProjectUpdate, ProjectBase, ProjectOut, ProjectMemberOut, ProjectMemberAdd
from .tag import TagCreate, TagUpdate, TagOut
from .task import TaskCreate, TaskUpdate, TaskOut
from .team import InviteMember, InviteRole, InviteResult, TeamMemberOut, InvitationCheck
from .dashboard import DashboardSummary
