"""
프로젝트 조회/통계 서비스 레이어
"""

import logging
import math
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.api.exceptions import InvalidSortFieldError, InvalidStatusError
from tracker.api.models import ProjectModel
from tracker.api.schemas.project import (
    SEARCHABLE_FIELDS,
    SORTABLE_FIELDS,
    DepartmentStats,
    Project,
    ProjectCreate,
    ProjectPage,
    ProjectStats,
    ProjectStatus,
)
from tracker.config import config

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 8

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page(raw: Optional[str]) -> int:
    """page 쿼리 파라미터 해석 - 숫자가 아니거나 1 미만이면 1페이지"""
    if raw is None:
        return 1
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 1
    page = int(match.group(1))
    return page if page >= 1 else 1


def escape_like(value: str, escape_char: str = "\\") -> str:
    """LIKE 와일드카드를 문자 그대로 취급하도록 이스케이프"""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


def check_status(status: Optional[str]) -> None:
    if status is None or not config.get("projects", "strict_status", False):
        return
    allowed = {s.value for s in ProjectStatus}
    if status not in allowed:
        raise InvalidStatusError(
            detail=f"Invalid project status: {status!r} (allowed: {', '.join(sorted(allowed))})"
        )


class ProjectService:
    @staticmethod
    def list_projects(db: Session, page: Optional[str] = None) -> ProjectPage:
        """
        프로젝트 목록 페이지 조회

        범위를 벗어난 페이지는 에러 없이 빈 목록을 반환한다.
        """
        page_number = parse_page(page)
        limit = config.get("pagination", "page_size", DEFAULT_PAGE_SIZE)
        skip = (page_number - 1) * limit

        total_count = db.query(func.count(ProjectModel.id)).scalar()

        # 마지막 페이지 이후는 조회하지 않는다 (큰 offset은 DB 정수 범위를 넘을 수 있음)
        projects = []
        if skip < total_count:
            projects = (
                db.query(ProjectModel)
                .order_by(ProjectModel.created_at.asc(), ProjectModel.id.asc())
                .offset(skip)
                .limit(limit)
                .all()
            )

        return ProjectPage(
            page=page_number,
            per_page=limit,
            total=total_count,
            total_pages=math.ceil(total_count / limit),
            data=[Project.model_validate(p) for p in projects],
        )

    @staticmethod
    def sort_projects(db: Session, sort_by: str) -> List[ProjectModel]:
        """허용된 필드 기준 오름차순 전체 목록 (페이지네이션 없음)"""
        attr = SORTABLE_FIELDS.get(sort_by)
        if attr is None:
            raise InvalidSortFieldError()

        column = getattr(ProjectModel, attr)
        return (
            db.query(ProjectModel)
            .order_by(column.asc().nulls_first(), ProjectModel.created_at.asc(), ProjectModel.id.asc())
            .all()
        )

    @staticmethod
    def search_projects(db: Session, keywords: str) -> List[ProjectModel]:
        """
        9개 텍스트 필드 대상 대소문자 무시 부분 일치 검색

        사용자 입력은 패턴으로 해석하지 않고 문자열 그대로 비교한다.
        """
        columns = [getattr(ProjectModel, field) for field in SEARCHABLE_FIELDS]
        if db.get_bind().dialect.name == "sqlite":
            pattern = f"%{escape_like(keywords.casefold())}%"
            conditions = [func.casefold(column).like(pattern, escape="\\") for column in columns]
        else:
            pattern = f"%{escape_like(keywords)}%"
            conditions = [column.ilike(pattern, escape="\\") for column in columns]
        return (
            db.query(ProjectModel)
            .filter(or_(*conditions))
            .order_by(ProjectModel.created_at.asc(), ProjectModel.id.asc())
            .all()
        )

    @staticmethod
    def create_project(db: Session, payload: ProjectCreate) -> ProjectModel:
        data = payload.model_dump(exclude_unset=True)
        check_status(data.get("status"))

        now = datetime.utcnow()
        project = ProjectModel(**data, created_at=now, updated_at=now)

        db.add(project)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(project)

        logger.info(f"Project created: {project.id} ({project.title})")
        return project

    @staticmethod
    def update_status(db: Session, project_id: str, status: str) -> bool:
        """
        상태값과 updated_at 갱신

        일치하는 프로젝트가 없어도 에러로 취급하지 않는다. 반환값은 실제 갱신 여부.
        """
        check_status(status)

        try:
            matched = (
                db.query(ProjectModel)
                .filter(ProjectModel.id == project_id)
                .update(
                    {ProjectModel.status: status, ProjectModel.updated_at: datetime.utcnow()},
                    synchronize_session=False,
                )
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        if matched:
            logger.info(f"Project {project_id} status -> {status}")
        else:
            logger.warning(f"Status update for unknown project {project_id} ignored")
        return matched > 0

    @staticmethod
    def project_stats(db: Session, now: Optional[datetime] = None) -> ProjectStats:
        """상태별 카운트 - 각 카운트는 독립 쿼리 (스냅샷 일관성 없음)"""
        now = now or datetime.utcnow()

        def count(*criteria) -> int:
            return db.query(func.count(ProjectModel.id)).filter(*criteria).scalar()

        return ProjectStats(
            total_projects=count(),
            running_projects=count(ProjectModel.status == ProjectStatus.RUNNING.value),
            closed_projects=count(ProjectModel.status == ProjectStatus.CLOSED.value),
            cancelled_projects=count(ProjectModel.status == ProjectStatus.CANCELLED.value),
            delayed_projects=count(
                ProjectModel.status == ProjectStatus.RUNNING.value,
                ProjectModel.end_date < now,
            ),
        )

    @staticmethod
    def department_stats(db: Session) -> List[DepartmentStats]:
        closed_sum = func.sum(case((ProjectModel.status == ProjectStatus.CLOSED.value, 1), else_=0))
        rows = (
            db.query(
                ProjectModel.department,
                func.count(ProjectModel.id).label("total"),
                closed_sum.label("closed"),
            )
            .group_by(ProjectModel.department)
            .order_by(ProjectModel.department.asc().nulls_first())
            .all()
        )

        stats = []
        for department, total, closed in rows:
            closed = closed or 0
            stats.append(
                DepartmentStats(
                    department=department,
                    total_projects=total,
                    closed_projects=closed,
                    completion_percentage=round(closed / total * 100) if total else 0,
                )
            )
        return stats
