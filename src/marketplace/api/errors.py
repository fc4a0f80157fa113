"""HTTP mapping for marketplace errors.

Protean's handlers cover validation (400) and missing aggregates (404).
Authorization and allocation failures get their own status codes.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import Forbidden, StockConflict


def _error_response(status_code):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


def register_marketplace_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(Forbidden, _error_response(403))
    app.add_exception_handler(StockConflict, _error_response(409))
