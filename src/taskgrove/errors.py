"""
Error taxonomy for TaskGrove.

Every error carries a stable ``kind`` (shown to API clients next to a short
human-readable message) and the HTTP status it maps to. The opaque cause,
when there is one, is chained via ``raise ... from`` and only logged.
"""


class TaskGroveError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ExtractionFailed(TaskGroveError):
    kind = "extraction_failed"
    status_code = 502


class StructuringFailed(TaskGroveError):
    kind = "structuring_failed"
    status_code = 502


class InvalidCandidate(TaskGroveError):
    kind = "invalid_candidate"
    status_code = 422


class PersistenceFailed(TaskGroveError):
    kind = "persistence_failed"
    status_code = 503


class NotFoundOrForbidden(TaskGroveError):
    kind = "not_found"
    status_code = 404

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found or access denied")
        self.task_id = task_id


class StatsUnavailable(TaskGroveError):
    kind = "stats_unavailable"
    status_code = 503
