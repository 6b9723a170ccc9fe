from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class TrackerException(HTTPException):
    """Project Tracker 전용 기본 예외 클래스

    모든 에러 응답은 {"kind": ..., "message": ...} 형태로 내려간다.
    """

    kind = "internal_error"

    def __init__(
        self, status_code: int, detail: Any = None, headers: Optional[Dict[str, str]] = None
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class InvalidSortFieldError(TrackerException):
    """허용되지 않은 정렬 필드일 때"""

    kind = "invalid_sort_field"

    def __init__(self, detail: str = "Invalid sort field"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidStatusError(TrackerException):
    """strict_status 모드에서 알 수 없는 상태값일 때"""

    kind = "invalid_status"

    def __init__(self, detail: str = "Invalid project status"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StorageError(TrackerException):
    """데이터베이스 접근 중 에러 발생 시"""

    kind = "storage_error"

    def __init__(self, detail: str = "An error occurred while accessing the project store"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def error_body(kind: str, message: Any) -> Dict[str, Any]:
    return {"kind": kind, "message": message if isinstance(message, str) else str(message)}
