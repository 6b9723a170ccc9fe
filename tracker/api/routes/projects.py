import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi_cache.decorator import cache
from sqlalchemy.orm import Session

from tracker.api.cache import STATS_NAMESPACE, invalidate_stats, stats_key_builder
from tracker.api.database import get_db
from tracker.api.schemas.project import (
    DepartmentStats,
    ErrorResponse,
    Project,
    ProjectCreate,
    ProjectCreateResponse,
    ProjectPage,
    ProjectStats,
    StatusUpdate,
    StatusUpdateResponse,
)
from tracker.api.services.project_service import ProjectService
from tracker.config import config

router = APIRouter()
logger = logging.getLogger(__name__)

STATS_EXPIRE = config.get("cache", "stats_expire", 30)


@router.get(
    "/",
    response_model=ProjectPage,
    summary="프로젝트 목록 (페이지네이션)",
    description="한 페이지에 8개씩 프로젝트를 조회합니다. page가 없거나 숫자가 아니면 1페이지를 반환합니다.",
)
async def list_projects(page: Optional[str] = None, db: Session = Depends(get_db)):
    return ProjectService.list_projects(db, page)


@router.get(
    "/sort/{sort_by}",
    response_model=List[Project],
    summary="정렬된 전체 목록",
    description="priority, updatedAt, startDate, endDate, status 중 하나로 오름차순 정렬합니다.",
    responses={400: {"model": ErrorResponse, "description": "허용되지 않은 정렬 필드"}},
)
async def sort_projects(sort_by: str, db: Session = Depends(get_db)):
    return ProjectService.sort_projects(db, sort_by)


@router.get(
    "/search/{query}",
    response_model=List[Project],
    summary="프로젝트 검색",
    description="제목, 위치, 분류, 상태, 부서 등 9개 필드에서 대소문자 구분 없이 부분 일치 검색합니다.",
)
async def search_projects(query: str, db: Session = Depends(get_db)):
    return ProjectService.search_projects(db, query)


@router.post(
    "/new-project",
    response_model=ProjectCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="새 프로젝트 생성",
    responses={
        400: {"model": ErrorResponse, "description": "잘못된 요청 본문"},
        500: {"model": ErrorResponse, "description": "저장 실패"},
    },
)
async def create_project(payload: ProjectCreate, db: Session = Depends(get_db)):
    project = ProjectService.create_project(db, payload)
    await invalidate_stats()
    return ProjectCreateResponse(
        success=True,
        message="Project saved successfully",
        project=Project.model_validate(project),
    )


@router.put(
    "/update-status/{project_id}",
    response_model=StatusUpdateResponse,
    summary="프로젝트 상태 변경",
    description="status와 updatedAt을 갱신합니다. 존재하지 않는 id여도 성공으로 응답합니다.",
    responses={400: {"model": ErrorResponse, "description": "잘못된 상태값"}},
)
async def update_status(project_id: str, body: StatusUpdate, db: Session = Depends(get_db)):
    ProjectService.update_status(db, project_id, body.status)
    await invalidate_stats()
    return StatusUpdateResponse(success=True, message="project updated successfully")


@router.get("/project-stats", response_model=ProjectStats, summary="프로젝트 상태 통계")
@cache(expire=STATS_EXPIRE, namespace=STATS_NAMESPACE, key_builder=stats_key_builder)
async def project_stats(db: Session = Depends(get_db)):
    return ProjectService.project_stats(db)


@router.get(
    "/department-stats",
    response_model=List[DepartmentStats],
    summary="부서별 완료율 통계",
)
@cache(expire=STATS_EXPIRE, namespace=STATS_NAMESPACE, key_builder=stats_key_builder)
async def department_stats(db: Session = Depends(get_db)):
    return ProjectService.department_stats(db)
