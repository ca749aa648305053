from rest_framework import exceptions, status

# SQLSTATE codes for serialization failure, deadlock and NOWAIT lock failure
WRITE_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


class TaskNotFound(exceptions.NotFound):
    default_detail = "Task not found."
    default_code = "task_not_found"


class ProjectNotFound(exceptions.NotFound):
    default_detail = "Project not found."
    default_code = "project_not_found"


class SubtaskNotFound(exceptions.NotFound):
    default_detail = "Subtask not found."
    default_code = "subtask_not_found"


class MoveValidationError(exceptions.ValidationError):
    default_code = "invalid_move"


class ConflictError(exceptions.APIException):
    """The board changed underneath a write. Re-read and retry the whole call."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The board changed while the task was being written. Re-fetch and retry."
    default_code = "order_conflict"


def is_write_conflict(exc) -> bool:
    cause = exc.__cause__
    sqlstate = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if sqlstate in WRITE_CONFLICT_SQLSTATES:
        return True
    return "database is locked" in str(exc)
