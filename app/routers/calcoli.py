"""
Router Calcoli Compenso
Salvataggio dei calcoli Tabella C, generazione del PDF e anteprima.
"""
import asyncio
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, HTTPException, Query
from pydantic import BaseModel, ValidationError

from app.config import settings
from app.database import Collections, Database
from app.services.pdf import generate_calculation_pdf
from app.services.tariffe import (
    CalculationInput,
    ComputationResult,
    compare_compliance,
    compute_modifiers,
    compute_tiers,
    normative_reference_for,
)
from app.utils.filenames import suggested_filename

logger = logging.getLogger(__name__)
router = APIRouter()


class CalcoloCreate(BaseModel):
    professione: Optional[str] = None
    riquadro: Optional[str] = None
    criterio: Optional[str] = None
    input: Optional[Dict[str, Any]] = None
    result: Optional[Dict[str, Any]] = None


class CalcoloPreview(BaseModel):
    riquadro: str
    criterio: Optional[str] = None
    input: Dict[str, Any] = {}
    result: Dict[str, Any] = {}


class RenameRequest(BaseModel):
    name: Optional[str] = None


def current_user_id(x_user_id: Optional[str]) -> str:
    return (x_user_id or "").strip() or settings.DEFAULT_USER_ID


def _validate_payload(raw_input: Dict[str, Any], raw_result: Dict[str, Any]):
    try:
        return CalculationInput.model_validate(raw_input), ComputationResult.model_validate(raw_result)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))


def _rows(rows) -> List[Dict[str, str]]:
    return [{"label": r.label, "description": r.description, "amount": r.amount} for r in rows]


# ============================================
# LISTA / RICERCA
# ============================================

@router.get("")
async def lista_calcoli(
    q: Optional[str] = Query(None, description="Cerca per nome o data (YYYY-MM-DD)"),
    x_user_id: Optional[str] = Header(None),
) -> Dict[str, Any]:
    """Calcoli non eliminati dell'utente, dal più recente."""
    db = Database.get_db()
    user_id = current_user_id(x_user_id)

    query: Dict[str, Any] = {"user_id": user_id, "deleted_at": None}
    q = (q or "").strip()
    if q:
        pattern = re.escape(q)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"created_at": {"$regex": pattern, "$options": "i"}},
        ]

    calcoli = await db[Collections.CALCULATIONS].find(
        query, {"_id": 0}
    ).sort("created_at", -1).to_list(1000)

    for calc in calcoli:
        docs = await db[Collections.DOCUMENTS].find(
            {"calculation_id": calc["id"], "user_id": user_id}, {"_id": 0, "id": 1}
        ).sort("created_at", -1).to_list(1)
        calc["document_id"] = docs[0]["id"] if docs else None

    return {"calculations": calcoli}


# ============================================
# CREAZIONE + PDF
# ============================================

@router.post("", status_code=201)
async def crea_calcolo(
    payload: CalcoloCreate,
    x_user_id: Optional[str] = Header(None),
) -> Dict[str, Any]:
    """
    Salva il calcolo e genera il documento PDF.

    Se la generazione fallisce il calcolo appena inserito viene rimosso:
    non restano calcoli senza documento.
    """
    # input e result vuoti ({}) sono ammessi, solo l'assenza è un errore
    if not (payload.professione and payload.riquadro and payload.criterio) \
            or payload.input is None or payload.result is None:
        raise HTTPException(status_code=400, detail="Missing fields")

    inp, result = _validate_payload(payload.input, payload.result)

    db = Database.get_db()
    user_id = current_user_id(x_user_id)
    user = await db[Collections.USERS].find_one({"id": user_id}, {"_id": 0})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    calc_id = str(uuid.uuid4())
    doc_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()

    calculation = {
        "id": calc_id,
        "user_id": user_id,
        "professione": payload.professione,
        "riquadro": payload.riquadro,
        "criterio": payload.criterio,
        "input_json": payload.input,
        "result_json": payload.result,
        "name": inp.nome_pratica or None,
        "created_at": now,
        "deleted_at": None,
    }
    await db[Collections.CALCULATIONS].insert_one(calculation.copy())

    file_path = settings.STORAGE_DIR / f"{doc_id}.pdf"
    file_name = suggested_filename(inp.nome_pratica, inp.cliente_nome, doc_id)
    try:
        # reportlab è sincrono: fuori dall'event loop
        await asyncio.to_thread(generate_calculation_pdf, file_path, user, calculation, result)
        await db[Collections.DOCUMENTS].insert_one({
            "id": doc_id,
            "user_id": user_id,
            "calculation_id": calc_id,
            "type": "pdf",
            "file_path": str(file_path),
            "file_name": file_name,
            "created_at": now,
        })
    except Exception:
        logger.error(f"❌ Creazione calcolo {calc_id} annullata")
        await db[Collections.CALCULATIONS].delete_one({"id": calc_id})
        if os.path.exists(file_path):
            os.remove(file_path)
        raise

    logger.info(f"✅ Calcolo {calc_id} salvato (riquadro {payload.riquadro}), documento {doc_id}")
    return {"calculationId": calc_id, "documentId": doc_id, "fileName": file_name}


@router.post("/anteprima")
async def anteprima_calcolo(payload: CalcoloPreview) -> Dict[str, Any]:
    """Calcolo senza salvataggio: scaglioni, modificatori e conformità."""
    inp, result = _validate_payload(payload.input, payload.result)

    tiers = compute_tiers(payload.riquadro, inp, payload.criterio)
    verdict = compare_compliance(result.chosen, result.min, inp.corrispettivo_pattuito)
    aggregate = None
    if tiers.aggregate is not None:
        aggregate = {"min": round(tiers.aggregate.min, 2), "max": round(tiers.aggregate.max, 2)}

    return {
        "riquadro": payload.riquadro,
        "normativa": normative_reference_for(payload.riquadro, inp.document_type),
        "input_rows": _rows(tiers.input_rows),
        "tier_rows": _rows(tiers.tier_rows),
        "aggregate": aggregate,
        "modificatori": compute_modifiers(payload.riquadro, inp),
        "conformita": {
            "reference": verdict.reference,
            "minimum": verdict.minimum,
            "agreed_fee": verdict.agreed_fee,
            "delta": verdict.delta,
            "percent_delta": verdict.percent_delta,
            "status": verdict.status.value,
            "label": verdict.status_label,
        },
    }


# ============================================
# RINOMINA / ELIMINAZIONE
# ============================================

@router.patch("/{calc_id}/rename")
async def rinomina_calcolo(
    calc_id: str,
    payload: RenameRequest,
    x_user_id: Optional[str] = Header(None),
) -> Dict[str, Any]:
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Missing name")

    db = Database.get_db()
    filtro = {"id": calc_id, "user_id": current_user_id(x_user_id), "deleted_at": None}
    res = await db[Collections.CALCULATIONS].update_one(filtro, {"$set": {"name": name}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Not found")

    calc = await db[Collections.CALCULATIONS].find_one({"id": calc_id}, {"_id": 0, "id": 1, "name": 1, "created_at": 1})
    return {"calculation": calc}


@router.delete("/{calc_id}")
async def elimina_calcolo(calc_id: str, x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
    """Eliminazione logica: imposta deleted_at."""
    db = Database.get_db()
    filtro = {"id": calc_id, "user_id": current_user_id(x_user_id), "deleted_at": None}
    res = await db[Collections.CALCULATIONS].update_one(
        filtro, {"$set": {"deleted_at": datetime.now(timezone.utc).isoformat()}}
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Not found")
    logger.info(f"Calcolo {calc_id} eliminato")
    return {"ok": True}
