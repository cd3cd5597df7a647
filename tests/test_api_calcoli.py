# -*- coding: utf-8 -*-
"""
Test API calcoli e documenti.

Endpoints testati:
- POST /api/calcoli - salvataggio calcolo + PDF
- GET /api/calcoli - lista e ricerca
- POST /api/calcoli/anteprima - calcolo senza salvataggio
- PATCH /api/calcoli/{id}/rename
- DELETE /api/calcoli/{id}
- GET /api/documenti, GET /api/documenti/{id}/download
"""
import fitz

from app.database import Collections
from app.services.pdf import DocumentGenerationError

PAYLOAD = {
    "professione": "commercialista",
    "riquadro": "r3",
    "criterio": "medio",
    "input": {
        "valore": "2.000.000",
        "nome_pratica": "Perizia Alfa",
        "cliente_nome": "Alfa S.r.l.",
        "corrispettivoPattuito": "9.000",
    },
    "result": {"min": 13000, "mid": 15000, "max": 17000, "chosen": 15000},
}


def crea(client, **overrides):
    payload = {**PAYLOAD, **overrides}
    return client.post("/api/calcoli", json=payload)


class TestCreaCalcolo:
    """POST /api/calcoli"""

    def test_create_returns_ids(self, client, fake_db, storage_dir):
        response = crea(client)
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["fileName"] == "Perizia_Alfa_Alfa_Srl.pdf"

        calc = fake_db[Collections.CALCULATIONS].docs[0]
        assert calc["id"] == data["calculationId"]
        assert calc["name"] == "Perizia Alfa"
        assert calc["deleted_at"] is None

        doc = fake_db[Collections.DOCUMENTS].docs[0]
        assert doc["id"] == data["documentId"]
        assert doc["calculation_id"] == data["calculationId"]
        assert (storage_dir / f"{data['documentId']}.pdf").read_bytes().startswith(b"%PDF")

    def test_missing_fields(self, client, fake_db):
        response = crea(client, criterio="")
        assert response.status_code == 400
        assert fake_db[Collections.CALCULATIONS].docs == []

    def test_empty_input_accepted(self, client, fake_db):
        """Un oggetto input vuoto è valido: manca solo se assente"""
        response = crea(client, input={}, result={})
        assert response.status_code == 201, response.text
        assert fake_db[Collections.CALCULATIONS].docs[0]["input_json"] == {}
        assert fake_db[Collections.CALCULATIONS].docs[0]["name"] is None

    def test_missing_input(self, client, fake_db):
        payload = {k: v for k, v in PAYLOAD.items() if k != "input"}
        assert client.post("/api/calcoli", json=payload).status_code == 400

    def test_unknown_user(self, client, fake_db):
        response = client.post("/api/calcoli", json=PAYLOAD, headers={"X-User-Id": "sconosciuto"})
        assert response.status_code == 404

    def test_invalid_input_shape(self, client):
        response = crea(client, input={"valore": ["non", "valido"]})
        assert response.status_code == 422

    def test_generation_failure_rolls_back(self, client, fake_db, monkeypatch):
        """Se il PDF non viene scritto il calcolo viene rimosso"""
        def fail(*args, **kwargs):
            raise DocumentGenerationError("disco pieno")

        monkeypatch.setattr("app.routers.calcoli.generate_calculation_pdf", fail)
        response = crea(client)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate document"}
        assert fake_db[Collections.CALCULATIONS].docs == []
        assert fake_db[Collections.DOCUMENTS].docs == []


class TestListaCalcoli:
    """GET /api/calcoli"""

    def seed(self, fake_db):
        calcs = fake_db[Collections.CALCULATIONS].docs
        calcs.extend([
            {"id": "c1", "user_id": "admin", "name": "Perizia Alfa", "created_at": "2025-01-10T10:00:00+00:00", "deleted_at": None},
            {"id": "c2", "user_id": "admin", "name": "Bilancio Beta", "created_at": "2025-02-20T10:00:00+00:00", "deleted_at": None},
            {"id": "c3", "user_id": "admin", "name": "Eliminato", "created_at": "2025-03-01T10:00:00+00:00", "deleted_at": "2025-03-02T00:00:00+00:00"},
            {"id": "c4", "user_id": "altro", "name": "Perizia Gamma", "created_at": "2025-03-05T10:00:00+00:00", "deleted_at": None},
        ])
        fake_db[Collections.DOCUMENTS].docs.extend([
            {"id": "d1", "user_id": "admin", "calculation_id": "c1", "created_at": "2025-01-10T10:00:00+00:00"},
            {"id": "d1b", "user_id": "admin", "calculation_id": "c1", "created_at": "2025-01-11T10:00:00+00:00"},
        ])

    def test_newest_first_without_deleted(self, client, fake_db):
        self.seed(fake_db)
        data = client.get("/api/calcoli").json()["calculations"]
        assert [c["id"] for c in data] == ["c2", "c1"]

    def test_latest_document_id(self, client, fake_db):
        self.seed(fake_db)
        data = {c["id"]: c for c in client.get("/api/calcoli").json()["calculations"]}
        assert data["c1"]["document_id"] == "d1b"
        assert data["c2"]["document_id"] is None

    def test_latest_document_id_any_insert_order(self, client, fake_db):
        """Il documento più recente vince anche se inserito per primo"""
        self.seed(fake_db)
        fake_db[Collections.DOCUMENTS].docs.reverse()
        data = {c["id"]: c for c in client.get("/api/calcoli").json()["calculations"]}
        assert data["c1"]["document_id"] == "d1b"
        assert set(data["c1"]) >= {"id", "name", "document_id"}

    def test_search_by_name_case_insensitive(self, client, fake_db):
        self.seed(fake_db)
        data = client.get("/api/calcoli", params={"q": "perizia"}).json()["calculations"]
        assert [c["id"] for c in data] == ["c1"]

    def test_search_by_date(self, client, fake_db):
        self.seed(fake_db)
        data = client.get("/api/calcoli", params={"q": "2025-02-20"}).json()["calculations"]
        assert [c["id"] for c in data] == ["c2"]

    def test_other_user(self, client, fake_db):
        self.seed(fake_db)
        data = client.get("/api/calcoli", headers={"X-User-Id": "altro"}).json()["calculations"]
        assert [c["id"] for c in data] == ["c4"]


class TestAnteprima:
    """POST /api/calcoli/anteprima"""

    def test_preview(self, client, fake_db):
        response = client.post("/api/calcoli/anteprima", json={
            "riquadro": "r10_1",
            "input": {"dichiarazioniMulti": ["pf_no_piva", "iva"], "corrispettivoPattuito": 300},
            "result": {"min": 400, "chosen": 400},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["aggregate"] == {"min": 400, "max": 400}
        assert data["tier_rows"][-1]["amount"] == "400,00 €"
        assert data["modificatori"] == ["Calcolo a tariffe fisse: somma delle voci selezionate."]
        assert data["conformita"]["status"] == "sotto_soglia"
        assert data["conformita"]["label"] == "SOTTO SOGLIA (-25.00%)"
        assert fake_db[Collections.CALCULATIONS].docs == []

    def test_preview_unknown_schedule(self, client):
        data = client.post("/api/calcoli/anteprima", json={"riquadro": "r99"}).json()
        assert data["tier_rows"] == []
        assert data["aggregate"] is None
        assert data["conformita"]["label"] == "N/D"


class TestRinominaElimina:
    """PATCH rename e DELETE"""

    def test_rename(self, client, fake_db):
        calc_id = crea(client).json()["calculationId"]
        response = client.patch(f"/api/calcoli/{calc_id}/rename", json={"name": "  Nuovo nome "})
        assert response.status_code == 200
        assert response.json()["calculation"]["name"] == "Nuovo nome"

    def test_rename_empty_name(self, client):
        calc_id = crea(client).json()["calculationId"]
        assert client.patch(f"/api/calcoli/{calc_id}/rename", json={"name": "   "}).status_code == 400

    def test_rename_missing(self, client, fake_db):
        assert client.patch("/api/calcoli/non-esiste/rename", json={"name": "x"}).status_code == 404

    def test_soft_delete(self, client, fake_db):
        calc_id = crea(client).json()["calculationId"]
        assert client.delete(f"/api/calcoli/{calc_id}").json() == {"ok": True}
        assert fake_db[Collections.CALCULATIONS].docs[0]["deleted_at"] is not None
        assert client.get("/api/calcoli").json()["calculations"] == []
        assert client.delete(f"/api/calcoli/{calc_id}").status_code == 404
        assert client.patch(f"/api/calcoli/{calc_id}/rename", json={"name": "x"}).status_code == 404


class TestDocumenti:
    """GET /api/documenti"""

    def test_list_and_download(self, client):
        created = crea(client).json()
        docs = client.get("/api/documenti").json()["documents"]
        assert [d["id"] for d in docs] == [created["documentId"]]

        response = client.get(f"/api/documenti/{created['documentId']}/download")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Perizia_Alfa_Alfa_Srl.pdf"' in response.headers["content-disposition"]

        with fitz.open(stream=response.content, filetype="pdf") as pdf:
            text = pdf[0].get_text()
        assert "Perizia Alfa" in text
        assert "Pagina 1 di" in text

    def test_download_other_user(self, client):
        created = crea(client).json()
        response = client.get(f"/api/documenti/{created['documentId']}/download", headers={"X-User-Id": "altro"})
        assert response.status_code == 404

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
