from fastapi import HTTPException
from typing import Any, List, Optional
from rdcredit.schemas import ApiResponse, ApiMeta, ApiError
from rdcredit.engine import ExpenseValidationError
from datetime import datetime

def wrap_response(data: Any, meta: Optional[dict] = None, errors: Optional[List[ApiError]] = None) -> ApiResponse:
    """Wraps data in the standardized API envelope."""
    meta = meta or {}
    return ApiResponse(
        data=data,
        meta=ApiMeta(
            timestamp=datetime.utcnow(),
            engine_version=meta.get("engine_version"),
            pricing_version=meta.get("pricing_version"),
            legislative_version=meta.get("legislative_version"),
        ),
        errors=errors
    )

def raise_validation_error(exc: ExpenseValidationError):
    """Surfaces field-level input errors to the caller for inline correction."""
    raise HTTPException(
        status_code=422,
        detail={
            "code": "INVALID_INPUT",
            "message": "Please correct the highlighted fields and try again.",
            "errors": [e.to_dict() for e in exc.errors]
        }
    )
