"""
Exception handlers globali.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.pdf import DocumentGenerationError

logger = logging.getLogger(__name__)


def add_exception_handlers(app: FastAPI) -> None:
    """Registra i gestori: errori PDF ed eccezioni non gestite diventano 500."""

    @app.exception_handler(DocumentGenerationError)
    async def document_generation_error_handler(request: Request, exc: DocumentGenerationError):
        logger.error(f"❌ Generazione documento fallita su {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to generate document"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Errore non gestito su {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
