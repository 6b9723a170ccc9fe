from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProjectStatus(str, Enum):
    RUNNING = "running"
    CLOSED = "closed"
    CANCELLED = "cancelled"


# 정렬 허용 필드: API 필드명 -> 모델 속성명
SORTABLE_FIELDS = {
    "priority": "priority",
    "updatedAt": "updated_at",
    "startDate": "start_date",
    "endDate": "end_date",
    "status": "status",
}

# 검색 대상 필드 (OR 조건)
SEARCHABLE_FIELDS = (
    "title",
    "location",
    "category",
    "status",
    "department",
    "division",
    "type",
    "priority",
    "reason",
)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """타임존 정보가 있는 값은 UTC로 변환 후 naive로 저장한다."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ProjectBase(BaseModel):
    title: Optional[str] = Field(None, example="Bridge Repair")
    location: Optional[str] = Field(None, example="North District")
    category: Optional[str] = Field(None, example="Infrastructure")
    department: Optional[str] = Field(None, example="Roads")
    division: Optional[str] = Field(None, example="Maintenance")
    type: Optional[str] = Field(None, example="Internal")
    priority: Optional[str] = Field(None, example="High")
    reason: Optional[str] = Field(None, example="Business")
    status: Optional[str] = Field(None, example=ProjectStatus.RUNNING.value)
    start_date: Optional[datetime] = Field(None, alias="startDate", example="2024-01-15T00:00:00")
    end_date: Optional[datetime] = Field(None, alias="endDate", example="2024-06-30T00:00:00")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True  # {"priority": 1} -> "1"


class ProjectCreate(ProjectBase):
    """새 프로젝트 요청 본문 - 모든 필드 선택 사항, 알 수 없는 키는 무시"""

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)


class Project(ProjectBase):
    id: str = Field(..., example="123e4567-e89b-12d3-a456-426614174000")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class ProjectPage(BaseModel):
    page: int = Field(..., example=1)
    per_page: int = Field(..., alias="perPage", example=8)
    total: int = Field(..., example=42)
    total_pages: int = Field(..., alias="totalPages", example=6)
    data: List[Project] = []

    class Config:
        populate_by_name = True


class ProjectCreateResponse(BaseModel):
    success: bool = True
    message: str = Field(..., example="Project saved successfully")
    project: Project


class StatusUpdate(BaseModel):
    status: str = Field(..., example=ProjectStatus.CLOSED.value)


class StatusUpdateResponse(BaseModel):
    success: bool = True
    message: str = Field(..., example="project updated successfully")


class ProjectStats(BaseModel):
    total_projects: int = Field(..., alias="totalProjects")
    running_projects: int = Field(..., alias="runningProjects")
    closed_projects: int = Field(..., alias="closedProjects")
    cancelled_projects: int = Field(..., alias="cancelledProjects")
    delayed_projects: int = Field(..., alias="delayedProjects")

    class Config:
        populate_by_name = True


class DepartmentStats(BaseModel):
    department: Optional[str] = Field(None, example="Roads")
    total_projects: int = Field(..., alias="totalProjects", example=3)
    closed_projects: int = Field(..., alias="closedProjects", example=1)
    completion_percentage: int = Field(..., alias="completionPercentage", example=33)

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    kind: str = Field(..., example="invalid_sort_field")
    message: str = Field(..., example="Invalid sort field")
