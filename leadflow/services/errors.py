from typing import Any, Dict


class ServiceError(Exception):
    """Failure reported by a backend collaborator (users, sellers, products, uploads)."""
    status_code: int = 400
    error: str = "Request failed"

    def __init__(self, error: str = "", **details: Any):
        super().__init__(error or self.error)
        self.error = error or self.error
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.error}
        out.update(self.details)
        return out


class ValidationFailed(ServiceError):
    status_code = 400
    error = "Validation error"


class NotFound(ServiceError):
    status_code = 404
    error = "Not found"


class UploadRejected(ServiceError):
    status_code = 400
    error = "Upload rejected"
