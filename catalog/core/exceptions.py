"""카탈로그 서비스 공통 예외.

모든 core 연산은 아래 네 종류 중 하나만 발생시키고,
HTTP 변환은 api 레이어에서 한다.
"""
from typing import Any, Dict, Optional


class CatalogError(Exception):
    status_code = 400
    default_code = "ERROR"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None, **details: Any):
        self.code = code or self.default_code
        self.message = message or self.code
        self.details = details
        super().__init__(self.message)

    def to_detail(self) -> Dict[str, Any]:
        detail = {"error": self.code, "message": self.message}
        detail.update(self.details)
        return detail


class NotFoundError(CatalogError):
    status_code = 404
    default_code = "NOT_FOUND"


class ValidationError(CatalogError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class ConflictError(CatalogError):
    status_code = 409
    default_code = "CONFLICT"


class InvalidReferenceError(CatalogError):
    status_code = 400
    default_code = "INVALID_REFERENCE"
