"""
Fixture condivise: database MongoDB in memoria al posto di motor,
cartella documenti temporanea e TestClient dell'app.
"""
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.database import Collections, Database


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, cond in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
            continue
        value = doc.get(key)
        if isinstance(cond, dict) and "$regex" in cond:
            flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
            if value is None or not re.search(cond["$regex"], str(value), flags):
                return False
        elif value != cond:
            return False
    return True


def _project(doc: Dict[str, Any], projection: Optional[Dict[str, int]]) -> Dict[str, Any]:
    if not projection:
        return dict(doc)
    included = [k for k, v in projection.items() if v and k != "_id"]
    if included:
        return {k: doc[k] for k in included if k in doc}
    return {k: v for k, v in doc.items() if k != "_id"}


class FakeCursor:
    """Ordina sui documenti completi e proietta solo in to_list, come il server."""

    def __init__(self, docs: List[Dict[str, Any]], projection: Optional[Dict[str, int]] = None):
        self.docs = docs
        self.projection = projection

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self.docs = sorted(self.docs, key=lambda d: d.get(key) or "", reverse=direction == -1)
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        docs = self.docs if length is None else self.docs[:length]
        return [_project(d, self.projection) for d in docs]


class FakeCollection:
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []

    async def insert_one(self, doc: Dict[str, Any]):
        stored = dict(doc)
        stored.setdefault("_id", f"oid-{len(self.docs) + 1}")
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query: Dict[str, Any], projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query: Optional[Dict[str, Any]] = None, projection=None) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, query or {})], projection)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            stored = {k: v for k, v in query.items() if not k.startswith("$")}
            stored.update(update.get("$setOnInsert", {}))
            stored.update(update.get("$set", {}))
            result = await self.insert_one(stored)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=result.inserted_id)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query: Dict[str, Any]):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


DEFAULT_USER = {
    "id": "admin",
    "email": "mario.rossi@studiorossi.it",
    "nome": "Mario",
    "cognome": "Rossi",
    "professione": "Dottore Commercialista",
}


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDatabase()
    db[Collections.USERS].docs.append(dict(DEFAULT_USER))
    monkeypatch.setattr(Database, "db", db)
    return db


@pytest.fixture
def storage_dir(tmp_path, monkeypatch):
    path = tmp_path / "docs"
    monkeypatch.setattr(settings, "STORAGE_DIR", path)
    monkeypatch.setattr(settings, "LOGO_PATH", tmp_path / "logo-mancante.png")
    return path


@pytest.fixture
def client(fake_db, storage_dir):
    from app.main import app
    return TestClient(app)


@pytest.fixture
def user():
    return dict(DEFAULT_USER)
