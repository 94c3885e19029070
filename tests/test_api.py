def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_icd10_search(client):
    resp = client.get("/icd10/search", params={"q": "i10"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["results"][0]["code"] == "I10"
    assert body["total"] == len(body["results"])
    assert body["truncated"] is False
    assert body["version"]


def test_icd10_blank_search(client):
    body = client.get("/icd10/search", params={"q": "  "}).json()
    assert body["results"] == []
    assert body["total"] == 0
    assert client.get("/icd10/recent").json() == []


def test_icd10_search_truncation(client):
    body = client.get("/icd10/search", params={"q": "e", "limit": 3}).json()
    assert len(body["results"]) == 3
    assert body["total"] > 3
    assert body["truncated"] is True


def test_icd10_recent_searches(client):
    client.get("/icd10/search", params={"q": "fever"})
    client.get("/icd10/search", params={"q": "asthma"})
    assert client.get("/icd10/recent").json() == ["asthma", "fever"]


def test_icd10_lookup(client):
    assert client.get("/icd10/J00").json()["description"] == "Acute nasopharyngitis [common cold]"
    assert client.get("/icd10/XYZ").status_code == 404


def test_icd10_favorites(client):
    assert client.post("/icd10/favorites", json={"code": "I10"}).status_code == 201
    assert [f["code"] for f in client.get("/icd10/favorites").json()] == ["I10"]
    results = client.get("/icd10/search", params={"q": "I10"}).json()["results"]
    assert results[0]["favorite"] is True
    assert client.delete("/icd10/favorites/I10").json() == []
    assert client.post("/icd10/favorites", json={"code": "NOPE"}).status_code == 404


def test_patients_crud(client):
    assert len(client.get("/patients").json()) == 5

    resp = client.post("/patients", json={"name": "Thandi", "surname": "Nkosi", "cellNumber": "0821234567"})
    assert resp.status_code == 201
    patient = resp.json()
    assert patient["cellNumber"] == "+27821234567"

    resp = client.put(f"/patients/{patient['id']}", json={"name": "Thandi", "surname": "Dlamini"})
    assert resp.json()["surname"] == "Dlamini"
    assert [p["surname"] for p in client.get("/patients", params={"q": "thandi"}).json()] == ["Dlamini"]

    assert client.delete(f"/patients/{patient['id']}").status_code == 204
    assert client.get(f"/patients/{patient['id']}").status_code == 404


def test_patient_validation(client):
    assert client.post("/patients", json={"name": "", "surname": "Nkosi"}).status_code == 422


def test_presets_crud(client):
    payload = {
        "diagnosis": "Migraine",
        "icd10Codes": [{"code": "G43.9", "description": "Migraine, unspecified"}],
        "medications": [{"name": "Sumatriptan", "dose": "50mg", "direction": "At onset", "quantity": "6 tablets"}],
    }
    resp = client.post("/presets", json=payload)
    assert resp.status_code == 201
    preset = resp.json()
    assert preset["medications"][0]["id"] == 1

    assert [p["id"] for p in client.get("/presets", params={"q": "sumatriptan"}).json()] == [preset["id"]]
    assert client.delete(f"/presets/{preset['id']}").status_code == 204
    assert client.get(f"/presets/{preset['id']}").status_code == 404
    assert client.post("/presets", json={**payload, "medications": []}).status_code == 422


def test_prescription_preview(client):
    resp = client.post("/prescriptions/preview", json={"patient_id": 1, "preset_id": 2, "repeats": 1})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_prescription_validation_errors(client):
    resp = client.post("/prescriptions/preview", json={"custom_prescription": "Rest"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please select a patient or use custom name."
    assert client.post("/prescriptions/preview", json={"patient_id": 99, "preset_id": 1}).status_code == 404
    assert client.post("/prescriptions/preview", json={"patient_id": 1, "repeats": 9}).status_code == 422


def test_prescription_export(client, export_dir):
    resp = client.post(
        "/prescriptions/export",
        json={"custom_patient_name": "Baby Smith", "custom_prescription": "Rest", "date": "2024-05-01"},
    )
    assert resp.status_code == 201
    assert (export_dir / resp.json()["filename"]).is_file()


def test_prescription_share(client, outbox):
    resp = client.post("/prescriptions/share", json={"patient_id": 2, "preset_id": 1, "channel": "email"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Prescription for Sarah Johnson"
    assert (outbox / body["filename"]).is_file()


def test_settings(client):
    client.get("/patients")
    assert client.get("/settings/summary").json()["patients"] == 5
    assert client.post("/settings/delete-all", json={"confirmation": "nope"}).status_code == 400
    assert client.post("/settings/delete-all", json={"confirmation": "delete"}).status_code == 200
    assert client.get("/settings/summary").json() == {"patients": 0, "presets": 0, "total": 0}
    assert client.get("/settings/info").json()["name"]
