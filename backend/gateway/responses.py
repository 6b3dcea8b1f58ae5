from __future__ import annotations
from fastapi.responses import JSONResponse
from gateway.schemas.submission import ActionResult

STATUS_BY_REASON = {
    "validation": 422,
    "not_found": 404,
    "invalid_transition": 409,
    "persistence": 503,
    "storage": 503,
}

def envelope(result: ActionResult, success_status: int = 200) -> JSONResponse:
    """Render a workflow result as JSON with a status code matching its outcome."""
    code = success_status if result.success else STATUS_BY_REASON.get(result.reason or "", 400)
    return JSONResponse(status_code=code, content=result.model_dump(mode="json", by_alias=True, exclude_none=True))
