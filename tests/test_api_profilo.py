# -*- coding: utf-8 -*-
"""
Test API profilo.

Endpoints testati:
- GET /api/me
- PUT /api/me
"""
from app.database import Collections

PAYLOAD = {
    "professione": "commercialista",
    "riquadro": "r3",
    "criterio": "medio",
    "input": {"valore": "500.000", "nome_pratica": "Perizia Beta"},
    "result": {"min": 5000, "chosen": 6000},
}

PROFILO = {
    "nome": "Giulia",
    "cognome": "Bianchi",
    "dataNascita": "1985-06-21",
    "professione": "Dottore Commercialista",
}


class TestGetProfilo:
    """GET /api/me"""

    def test_default_user(self, client):
        response = client.get("/api/me")
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == "admin"
        assert user["nome"] == "Mario"
        assert "_id" not in user

    def test_unknown_user(self, client):
        response = client.get("/api/me", headers={"X-User-Id": "sconosciuto"})
        assert response.status_code == 404


class TestAggiornaProfilo:
    """PUT /api/me"""

    def test_update_existing(self, client, fake_db):
        response = client.put("/api/me", json=PROFILO)
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["nome"] == "Giulia"
        assert user["data_nascita"] == "1985-06-21"
        assert user["email"] == "mario.rossi@studiorossi.it"
        assert len(fake_db[Collections.USERS].docs) == 1

    def test_missing_fields(self, client, fake_db):
        for field in PROFILO:
            payload = {k: v for k, v in PROFILO.items() if k != field}
            response = client.put("/api/me", json=payload)
            assert response.status_code == 400, field
        assert fake_db[Collections.USERS].docs[0]["nome"] == "Mario"

    def test_empty_field(self, client):
        assert client.put("/api/me", json={**PROFILO, "cognome": ""}).status_code == 400

    def test_creates_profile(self, client, fake_db):
        """Su un database vuoto il primo PUT crea il profilo"""
        headers = {"X-User-Id": "nuovo"}
        response = client.put("/api/me", json={**PROFILO, "email": "giulia@studio.it"}, headers=headers)
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == "nuovo"
        assert user["email"] == "giulia@studio.it"
        assert user["created_at"]
        assert client.get("/api/me", headers=headers).json()["user"]["cognome"] == "Bianchi"


class TestProfiloECalcoli:
    """Il profilo abilita il salvataggio dei calcoli"""

    def test_fresh_database(self, client, fake_db):
        fake_db[Collections.USERS].docs.clear()
        assert client.post("/api/calcoli", json=PAYLOAD).status_code == 404

        assert client.put("/api/me", json=PROFILO).status_code == 200
        response = client.post("/api/calcoli", json=PAYLOAD)
        assert response.status_code == 201, response.text
        assert fake_db[Collections.DOCUMENTS].docs[0]["calculation_id"] == response.json()["calculationId"]
