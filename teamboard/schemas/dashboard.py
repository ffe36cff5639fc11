from typing import Dict, List

from pydantic import BaseModel

from .task import TaskOut


class DashboardSummary(BaseModel):
    total_projects: int
    projects_by_status: Dict[str, int]
    assigned_tasks: int
    assigned_by_status: Dict[str, int]
    due_soon: List[TaskOut]
