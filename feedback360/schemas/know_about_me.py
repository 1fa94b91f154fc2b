import uuid
from datetime import datetime

from feedback360.schemas.base import CamelModel


class KnowAboutMeIn(CamelModel):
    project_contributions: str | None = None
    role_and_responsibilities: str | None = None
    key_achievements: str | None = None
    learnings: str | None = None
    certifications: str | None = None
    technologies_worked_on: str | None = None
    mentorship: str | None = None
    volunteering_activities: str | None = None
    leadership_roles: str | None = None
    team_building_activities: str | None = None
    problems_solved: str | None = None
    strengths: str | None = None
    extra_efforts: str | None = None
    improvements: str | None = None


class KnowAboutMeOut(KnowAboutMeIn):
    id: uuid.UUID
    employee_id: uuid.UUID
    appraisal_cycle_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
