"""
Gestionnaires d'exceptions utilisés par la factory.
- AppError (concours.errors): {"error": kind, "message", ...extra} avec le code HTTP de l'erreur.
- HTTPException (429 du rate limiter, 404/405 du routage): {"error": "HTTPError", "message", "detail"}.
- RequestValidationError: 400 {"error": "ValidationError", ...}.
- Exception: 500 {"error": "InternalError", "message": str(exc)}, sans trace.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from concours.errors import AppError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers JSON de l'API.
    - Les erreurs métier attendues sont journalisées en info (5xx en error).
    """
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.kind, exc.message)
        else:
            logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.kind)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        content = {"error": "HTTPError", "message": str(exc.detail), "detail": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": "ValidationError", "message": "Requête invalide", "fields": fields},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Erreur non gérée %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "InternalError", "message": str(exc) or exc.__class__.__name__})
