import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, String

from tracker.api.database import Base


def generate_project_id() -> str:
    return str(uuid.uuid4())


class ProjectModel(Base):
    """프로젝트 모델 - 대시보드에서 추적하는 사업/공사 단위"""

    __tablename__ = "projects"

    id = Column(String, primary_key=True, index=True, default=generate_project_id)
    title = Column(String, nullable=True)
    location = Column(String, nullable=True)
    category = Column(String, nullable=True)
    department = Column(String, nullable=True)
    division = Column(String, nullable=True)
    type = Column(String, nullable=True)
    priority = Column(String, nullable=True)
    reason = Column(String, nullable=True)
    status = Column(String, nullable=True)  # 'running', 'closed', 'cancelled' 등 자유 문자열

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    # 통계 쿼리(상태별 카운트, 부서별 그룹핑)용 인덱스
    __table_args__ = (
        Index("idx_projects_status", "status"),
        Index("idx_projects_department", "department"),
    )
