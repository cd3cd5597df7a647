"""
Router Documenti
Lista e download dei PDF generati dai calcoli.
"""
import logging
import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import FileResponse

from app.database import Collections, Database
from app.routers.calcoli import current_user_id

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def lista_documenti(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
    """Documenti dell'utente, dal più recente."""
    db = Database.get_db()
    documents = await db[Collections.DOCUMENTS].find(
        {"user_id": current_user_id(x_user_id)},
        {"_id": 0, "id": 1, "type": 1, "created_at": 1, "calculation_id": 1, "file_name": 1}
    ).sort("created_at", -1).to_list(1000)
    return {"documents": documents}


@router.get("/{doc_id}/download")
async def download_documento(doc_id: str, x_user_id: Optional[str] = Header(None)):
    """Scarica il PDF con il nome file suggerito (pratica_cliente.pdf)."""
    db = Database.get_db()

    doc = await db[Collections.DOCUMENTS].find_one(
        {"id": doc_id, "user_id": current_user_id(x_user_id)}, {"_id": 0}
    )
    if not doc:
        raise HTTPException(status_code=404, detail="Not found")

    file_path = doc.get("file_path")
    if not file_path or not os.path.exists(file_path):
        logger.warning(f"File mancante per documento {doc_id}: {file_path}")
        raise HTTPException(status_code=404, detail="File non trovato su disco")

    is_pdf = doc.get("type") == "pdf"
    return FileResponse(
        path=file_path,
        filename=doc.get("file_name") or f"{doc_id}.{'pdf' if is_pdf else 'bin'}",
        media_type="application/pdf" if is_pdf else "application/octet-stream"
    )
