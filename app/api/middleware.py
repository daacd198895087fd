import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings

logger = logging.getLogger(__name__)


def setup_middlewares(app: FastAPI) -> None:
    """Installe CORS et le handler d'exceptions global"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Exception non gérée sur {request.method} {request.url.path}: {exc}")
        message = str(exc) if settings.DEBUG and str(exc) else "Internal server error"
        return JSONResponse(status_code=500, content={"success": False, "error": message})
