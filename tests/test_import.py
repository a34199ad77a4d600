import pytest


EXPORT = (
    "Name,Size,Type,CR,AC,HP,Traits,Actions\n"
    '"Goblin","Small","humanoid","1/4 (50 XP)","15 (leather armor, shield)","7 (2d6)","Nimble Escape.","Scimitar."\n'
    '"Young Green Dragon","Large","dragon","8 (3,900 XP)","18 (natural armor)","136 (16d10 + 48)",'
    '"Amphibious.","Poison Breath (Recharge 5–6). The dragon exhales poisonous gas."\n'
)


@pytest.fixture
def parsed(client, auth_headers):
    response = client.post("/import/parse", headers=auth_headers, json={"text": EXPORT})
    assert response.status_code == 200
    return response.json()["creatures"]


class TestParse:
    def test_parse_text(self, client, auth_headers):
        response = client.post("/import/parse", headers=auth_headers, json={"text": EXPORT})
        data = response.json()
        assert data["count"] == 2
        goblin, dragon = data["creatures"]
        assert goblin["name"] == "Goblin"
        assert goblin["challenge_rating"] == "1/4"
        assert goblin["ac"] == 15
        assert dragon["max_hp"] == 136
        assert dragon["recharge_abilities"] == [{"name": "Poison Breath", "recharge_on": 5}]

    def test_empty_text(self, client, auth_headers):
        response = client.post("/import/parse", headers=auth_headers, json={"text": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Please paste CSV data first"

    def test_header_only(self, client, auth_headers):
        response = client.post("/import/parse", headers=auth_headers, json={"text": "Name,HP,AC\n"})
        assert response.status_code == 400

    def test_requires_auth(self, client):
        assert client.post("/import/parse", json={"text": EXPORT}).status_code == 401


class TestUpload:
    def test_csv_upload(self, client, auth_headers):
        response = client.post(
            "/import/upload",
            headers=auth_headers,
            files={"file": ("monsters.csv", EXPORT.encode("utf-8"), "text/csv")},
        )
        assert response.status_code == 200
        assert response.json()["count"] == 2

    def test_byte_order_mark_stripped(self, client, auth_headers):
        content = "\ufeffName,HP,AC\nDrake,30,14\n".encode("utf-8")
        response = client.post(
            "/import/upload",
            headers=auth_headers,
            files={"file": ("drake.TXT", content, "text/plain")},
        )
        assert response.status_code == 200
        assert response.json()["creatures"][0]["name"] == "Drake"

    def test_mojibake_repaired(self, client, auth_headers):
        # en dash from a UTF-8 file that was re-read as cp1252
        content = "Name,HP,AC,Actions\nDrake,30,14,Fire Breath (Recharge 5\u00e2\u20ac\u201c6). Hot.\n".encode("utf-8")
        response = client.post(
            "/import/upload",
            headers=auth_headers,
            files={"file": ("drake.csv", content, "text/csv")},
        )
        drake = response.json()["creatures"][0]
        assert drake["recharge_abilities"] == [{"name": "Fire Breath", "recharge_on": 5}]

    def test_rejects_other_extensions(self, client, auth_headers):
        response = client.post(
            "/import/upload",
            headers=auth_headers,
            files={"file": ("monsters.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Please upload a CSV or TXT file"


class TestImportToEncounter:
    def test_new_encounter_default_name(self, client, auth_headers, parsed):
        response = client.post("/import/encounter", headers=auth_headers, json={"creatures": parsed})
        assert response.status_code == 201
        data = response.json()
        assert data["encounter_name"] == "Imported Encounter (2 types)"
        assert data["combatants_added"] == 2

    def test_copies_per_creature(self, client, auth_headers, parsed):
        data = client.post("/import/encounter", headers=auth_headers, json={
            "creatures": parsed,
            "copies": [3, 1],
            "new_encounter_name": "Forest Road",
        }).json()
        assert data["encounter_name"] == "Forest Road"
        assert data["combatants_added"] == 4

        encounter = client.get(f"/encounters/{data['encounter_id']}", headers=auth_headers).json()
        assert [c["display_name"] for c in encounter["combatants"]] == [
            "Goblin #1",
            "Goblin #2",
            "Goblin #3",
            "Young Green Dragon",
        ]
        dragon = encounter["combatants"][3]
        assert dragon["trackers"]["recharge"][0]["available"] is True

    def test_copies_clamped(self, client, auth_headers, parsed):
        data = client.post("/import/encounter", headers=auth_headers, json={
            "creatures": parsed,
            "copies": [0, 500],
        }).json()
        assert data["combatants_added"] == 1 + 20

    def test_into_existing_encounter(self, client, auth_headers, parsed):
        encounter = client.post("/encounters/", headers=auth_headers, json={"name": "Camp"}).json()
        client.post(f"/encounters/{encounter['id']}/combatants", headers=auth_headers, json={
            "name": "Wolf",
            "hp": "11",
            "ac": "13",
        })

        data = client.post("/import/encounter", headers=auth_headers, json={
            "creatures": parsed[:1],
            "encounter_id": encounter["id"],
        }).json()
        assert data["encounter_id"] == encounter["id"]

        combatants = client.get(f"/encounters/{encounter['id']}", headers=auth_headers).json()["combatants"]
        assert [(c["display_name"], c["position"]) for c in combatants] == [("Wolf", 0), ("Goblin", 1)]

    def test_into_someone_elses_encounter(self, client, auth_headers, other_auth_headers, parsed):
        encounter = client.post("/encounters/", headers=auth_headers, json={"name": "Camp"}).json()
        response = client.post("/import/encounter", headers=other_auth_headers, json={
            "creatures": parsed,
            "encounter_id": encounter["id"],
        })
        assert response.status_code == 404

    def test_nothing_to_import(self, client, auth_headers):
        response = client.post("/import/encounter", headers=auth_headers, json={"creatures": []})
        assert response.status_code == 422
