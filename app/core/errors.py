"""练习区业务异常。服务层抛出，由 app.main 中的异常处理器统一转为 JSON 响应。"""


class PracticeZoneError(Exception):
    code = "practice_zone_error"
    status_code = 500
    default_message = "Failed to save practice material"

    def __init__(self, message: str | None = None, *, errors: list[str] | None = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.message, "errors": self.errors}


class ValidationFailed(PracticeZoneError):
    """表单校验失败，errors 中包含全部违规项（非 fail-fast）。"""
    code = "validation_failed"
    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: list[str], message: str | None = None):
        super().__init__(message or "; ".join(errors) or self.default_message, errors=errors)


class UploadRejected(ValidationFailed):
    """上传文件被拒绝。reason: wrong-type / too-large / name-collision。"""
    code = "upload_rejected"
    status_code = 422

    WRONG_TYPE = "wrong-type"
    TOO_LARGE = "too-large"
    NAME_COLLISION = "name-collision"

    def __init__(self, errors: list[str], reason: str, message: str | None = None):
        super().__init__(errors, message)
        self.reason = reason

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


class AuthenticationRequired(PracticeZoneError):
    code = "authentication_required"
    status_code = 401
    default_message = "Authentication required. Please sign in."


class AuthorizationDenied(PracticeZoneError):
    code = "authorization_denied"
    status_code = 403
    default_message = "Admin privileges required to manage practice materials."


class CategoryResolutionFailed(PracticeZoneError):
    code = "category_resolution_failed"
    status_code = 500
    default_message = "Failed to create default category. Please refresh and try again."


class StorageUnavailable(PracticeZoneError):
    code = "storage_unavailable"
    status_code = 503
    default_message = "Storage bucket not found. Please contact administrator."


class ForeignKeyViolation(PracticeZoneError):
    code = "invalid_category"
    status_code = 400
    default_message = "Invalid category selected."


class RequiredFieldMissing(PracticeZoneError):
    code = "required_field_missing"
    status_code = 400
    default_message = "Required fields are missing."


class GenericPersistenceFailure(PracticeZoneError):
    code = "persistence_failure"
    status_code = 500
    default_message = "Failed to save practice material"


class MaterialNotFound(PracticeZoneError):
    code = "not_found"
    status_code = 404
    default_message = "Practice material not found"


class PdfNotAvailable(PracticeZoneError):
    code = "pdf_not_available"
    status_code = 404
    default_message = "PDF not available"
