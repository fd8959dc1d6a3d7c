from typing import List
from classroom.schemas.common import CamelModel

class GroupStat(CamelModel):
    group_id: str
    group_name: str
    task_count: int
    submission_count: int
    submission_rate: int
    average_score: int

class Analytics(CamelModel):
    total_groups: int
    total_tasks: int
    total_submissions: int
    average_score: int
    submission_rate: int
    group_stats: List[GroupStat]

class TeacherStats(CamelModel):
    pending_submissions: int
    total_tasks: int
    active_tasks: int
    total_groups: int
