from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class UnknownModeError(LookupError):
    """A project references a tracking mode the registry does not know."""

    def __init__(self, mode: object):
        super().__init__(f"Unknown tracking mode: {mode!r}")
        self.mode = mode


class MalformedEventOrderError(ValueError):
    """A paired exit does not come after its entry."""

    def __init__(self, project_id: int, entry_ts, exit_ts):  # type: ignore[no-untyped-def]
        super().__init__(
            f"Exit at {exit_ts.isoformat()} does not follow entry at {entry_ts.isoformat()} "
            f"for project {project_id}"
        )
        self.project_id = project_id
        self.entry_ts = entry_ts
        self.exit_ts = exit_ts


class DuplicateJustificationError(ValueError):
    def __init__(self, employee_id: int, day_date):  # type: ignore[no-untyped-def]
        super().__init__(f"More than one justification for employee {employee_id} on {day_date.isoformat()}")
        self.employee_id = employee_id
        self.day_date = day_date


class InvalidMonthError(ValueError):
    pass


class DateOutOfRangeError(ValueError):
    def __init__(self, day_date):  # type: ignore[no-untyped-def]
        super().__init__(f"Date {day_date.isoformat()} is outside the supported range")
        self.day_date = day_date


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
