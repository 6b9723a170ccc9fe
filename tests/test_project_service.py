from datetime import datetime

import pytest

from tracker.api.exceptions import InvalidSortFieldError, InvalidStatusError
from tracker.api.schemas.project import ProjectCreate
from tracker.api.services.project_service import ProjectService, escape_like, parse_page


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 1),
        ("3", 3),
        (" 4", 4),
        ("2abc", 2),
        ("abc", 1),
        ("", 1),
        ("0", 1),
        ("-1", 1),
    ],
)
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    assert escape_like("plain") == "plain"


def test_list_projects_page_size(db, make_project):
    for i in range(17):
        make_project(title=f"P{i}")

    page = ProjectService.list_projects(db, "3")
    assert page.total == 17
    assert page.total_pages == 3
    assert page.per_page == 8
    assert [p.title for p in page.data] == ["P16"]


def test_sort_projects_rejects_unknown_field(db):
    with pytest.raises(InvalidSortFieldError) as exc_info:
        ProjectService.sort_projects(db, "title")
    assert exc_info.value.status_code == 400


def test_create_project_sets_timestamps(db):
    project = ProjectService.create_project(db, ProjectCreate(title="New", status="running"))

    assert project.id
    assert project.created_at is not None
    assert project.updated_at == project.created_at


def test_create_project_ignores_unknown_keys(db):
    payload = ProjectCreate.model_validate({"title": "New", "budget": 1000})
    project = ProjectService.create_project(db, payload)

    assert project.title == "New"
    assert not hasattr(project, "budget")


def test_update_status_reports_match(db, make_project):
    project = make_project(title="T", status="running")

    assert ProjectService.update_status(db, project.id, "closed") is True
    assert ProjectService.update_status(db, "missing-id", "closed") is False


def test_update_status_logs_missing_id(db, caplog):
    with caplog.at_level("WARNING", logger="tracker"):
        ProjectService.update_status(db, "missing-id", "closed")
    assert "missing-id" in caplog.text


def test_strict_status_validation(db, strict_status):
    with pytest.raises(InvalidStatusError):
        ProjectService.create_project(db, ProjectCreate(title="X", status="paused"))


def test_project_stats_uses_given_time(db, make_project):
    make_project(status="running", end_date=datetime(2024, 5, 1))
    make_project(status="running", end_date=datetime(2024, 7, 1))

    assert ProjectService.project_stats(db, now=datetime(2024, 6, 1)).delayed_projects == 1
    assert ProjectService.project_stats(db, now=datetime(2024, 8, 1)).delayed_projects == 2
    # 종료일과 같은 시각은 지연이 아니다
    assert ProjectService.project_stats(db, now=datetime(2024, 5, 1)).delayed_projects == 0


def test_department_stats(db, make_project):
    make_project(department="Roads", status="closed")
    make_project(department="Roads", status="running")
    make_project(department="Roads", status="running")

    stats = ProjectService.department_stats(db)
    assert len(stats) == 1
    assert stats[0].department == "Roads"
    assert stats[0].total_projects == 3
    assert stats[0].closed_projects == 1
    assert stats[0].completion_percentage == 33
