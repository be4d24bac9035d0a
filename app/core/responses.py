# ============================================================================
# FILE: app/core/responses.py
# ============================================================================
from typing import Any
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Wrap a payload in the standard success envelope"""
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data, by_alias=True)},
    )

def message_response(message: str, status_code: int = 200, **extra: Any) -> JSONResponse:
    return success_response({"message": message, **extra}, status_code)
