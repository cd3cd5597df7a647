"""
Router Profilo
Dati anagrafici del professionista usati nell'intestazione dei documenti.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.database import Collections, Database
from app.routers.calcoli import current_user_id

logger = logging.getLogger(__name__)
router = APIRouter()

PROFILE_PROJECTION = {
    "_id": 0, "id": 1, "email": 1, "nome": 1, "cognome": 1,
    "data_nascita": 1, "professione": 1, "created_at": 1,
}


class ProfiloUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nome: Optional[str] = None
    cognome: Optional[str] = None
    data_nascita: Optional[str] = Field(None, alias="dataNascita")
    professione: Optional[str] = None
    email: Optional[str] = None


@router.get("")
async def get_profilo(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
    db = Database.get_db()
    user = await db[Collections.USERS].find_one({"id": current_user_id(x_user_id)}, PROFILE_PROJECTION)
    if not user:
        raise HTTPException(status_code=404, detail="Not found")
    return {"user": user}


@router.put("")
async def aggiorna_profilo(
    payload: ProfiloUpdate,
    x_user_id: Optional[str] = Header(None),
) -> Dict[str, Any]:
    """
    Aggiorna nome, cognome, data di nascita e professione.

    Il profilo viene creato al primo salvataggio: senza profilo non si
    possono salvare calcoli.
    """
    if not (payload.nome and payload.cognome and payload.data_nascita and payload.professione):
        raise HTTPException(status_code=400, detail="Missing fields")

    db = Database.get_db()
    user_id = current_user_id(x_user_id)
    fields = {
        "nome": payload.nome.strip(),
        "cognome": payload.cognome.strip(),
        "data_nascita": payload.data_nascita,
        "professione": payload.professione.strip(),
    }
    if payload.email:
        fields["email"] = payload.email.strip()

    res = await db[Collections.USERS].update_one(
        {"id": user_id},
        {"$set": fields, "$setOnInsert": {"created_at": datetime.now(timezone.utc).isoformat()}},
        upsert=True,
    )
    if res.upserted_id is not None:
        logger.info(f"✅ Profilo {user_id} creato")

    user = await db[Collections.USERS].find_one({"id": user_id}, PROFILE_PROJECTION)
    return {"user": user}
