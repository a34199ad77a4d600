import pytest


LICH = {
    "name": "Lich",
    "hp": "135 (18d8 + 54)",
    "ac": "17 (natural armor)",
    "challenge_rating": "21",
    "stats": {"strength": 11, "dexterity": 16, "constitution": 16, "intelligence": 20, "wisdom": 14, "charisma": 16},
    "is_spellcaster": True,
    "spell_dc": 20,
    "spell_attack": 12,
    "spell_slots": {"1": 4, "3": 2, "12": 1, "5": 0},
    "has_legendary": True,
    "legendary_actions_count": 3,
    "has_legendary_resistance": True,
    "legendary_resistance_count": 3,
    "recharge_abilities": [{"name": "Frost Breath", "recharge_on": 5}],
    "limited_abilities": [{"name": "Dimension Door", "max_uses": 2}],
}


@pytest.fixture
def encounter(client, auth_headers):
    response = client.post("/encounters/", headers=auth_headers, json={
        "name": "Crypt",
        "description": "Lower level",
    })
    assert response.status_code == 201
    return response.json()


def add_npc(client, headers, encounter_id, **entry) -> dict:
    response = client.post(f"/encounters/{encounter_id}/combatants", headers=headers, json=entry)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def goblins(client, auth_headers, encounter):
    """Three goblins followed by an orc."""
    add_npc(client, auth_headers, encounter["id"], name="Goblin", hp="7 (2d6)", ac="15", copies=3)
    return add_npc(client, auth_headers, encounter["id"], name="Orc", hp="15", ac="13")


@pytest.fixture
def lich(client, auth_headers, encounter):
    data = add_npc(client, auth_headers, encounter["id"], **LICH)
    return data["combatants"][0]


class TestEncounters:
    def test_create(self, encounter):
        assert encounter["name"] == "Crypt"
        assert encounter["description"] == "Lower level"
        assert encounter["combatants"] == []

    def test_blank_name_rejected(self, client, auth_headers):
        response = client.post("/encounters/", headers=auth_headers, json={"name": "  "})
        assert response.status_code == 422

    def test_list(self, client, auth_headers, goblins):
        client.post("/encounters/", headers=auth_headers, json={"name": "Bridge"})

        data = client.get("/encounters/", headers=auth_headers).json()
        assert [e["name"] for e in data] == ["Bridge", "Crypt"]
        assert data[1]["combatant_count"] == 4

    def test_update(self, client, auth_headers, encounter):
        response = client.put(f"/encounters/{encounter['id']}", headers=auth_headers, json={"name": "Tomb"})
        assert response.status_code == 200
        assert response.json()["name"] == "Tomb"
        assert response.json()["description"] == "Lower level"

    def test_delete_removes_combatants(self, client, auth_headers, goblins):
        combatant_id = goblins["combatants"][0]["id"]
        assert client.delete(f"/encounters/{goblins['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/encounters/{goblins['id']}", headers=auth_headers).status_code == 404
        response = client.post(f"/encounters/combatants/{combatant_id}/hp", headers=auth_headers, json={"amount": -1})
        assert response.status_code == 404

    def test_private(self, client, other_auth_headers, goblins):
        assert client.get(f"/encounters/{goblins['id']}", headers=other_auth_headers).status_code == 404
        combatant_id = goblins["combatants"][0]["id"]
        response = client.post(
            f"/encounters/combatants/{combatant_id}/hp", headers=other_auth_headers, json={"amount": -1}
        )
        assert response.status_code == 404


class TestManualEntry:
    def test_copies_are_numbered(self, goblins):
        names = [c["display_name"] for c in goblins["combatants"]]
        assert names == ["Goblin #1", "Goblin #2", "Goblin #3", "Orc"]
        assert [c["position"] for c in goblins["combatants"]] == [0, 1, 2, 3]

    def test_hp_and_ac_parsed(self, goblins):
        goblin = goblins["combatants"][0]
        assert goblin["max_hp"] == 7
        assert goblin["current_hp"] == 7
        assert goblin["temp_hp"] == 0
        assert goblin["template"]["ac"] == 15
        assert goblin["template"]["hp_formula"] == "7 (2d6)"

    @pytest.mark.parametrize("entry", [
        {"name": "", "hp": "7", "ac": "15"},
        {"name": "Goblin", "hp": "", "ac": "15"},
        {"name": "Goblin", "hp": "7", "ac": " "},
    ])
    def test_required_fields(self, client, auth_headers, encounter, entry):
        response = client.post(f"/encounters/{encounter['id']}/combatants", headers=auth_headers, json=entry)
        assert response.status_code == 422
        assert response.json()["detail"] == "Please fill in required fields (Name, HP, AC)"

    @pytest.mark.parametrize("hp", ["lots", "0"])
    def test_invalid_hp(self, client, auth_headers, encounter, hp):
        response = client.post(
            f"/encounters/{encounter['id']}/combatants",
            headers=auth_headers,
            json={"name": "Goblin", "hp": hp, "ac": "15"},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Invalid HP value"

    def test_copies_limit(self, client, auth_headers, encounter):
        response = client.post(
            f"/encounters/{encounter['id']}/combatants",
            headers=auth_headers,
            json={"name": "Rat", "hp": "1", "ac": "10", "copies": 51},
        )
        assert response.status_code == 422

    def test_trackers_start_full(self, lich):
        trackers = lich["trackers"]
        assert trackers["spell_slots"] == {"1": {"max": 4, "current": 4}, "3": {"max": 2, "current": 2}}
        assert trackers["legendary_actions_remaining"] == 3
        assert trackers["legendary_resistance_remaining"] == 3
        assert trackers["recharge"] == [{"name": "Frost Breath", "recharge_on": 5, "available": True}]
        assert trackers["limited"] == [{"name": "Dimension Door", "max_uses": 2, "current_uses": 2}]

    def test_single_copy_keeps_name(self, lich):
        assert lich["display_name"] == "Lich"
        assert lich["template"]["stats"]["intelligence"] == 20


class TestHitPoints:
    def test_damage_and_heal(self, client, auth_headers, goblins):
        combatant_id = goblins["combatants"][0]["id"]
        url = f"/encounters/combatants/{combatant_id}/hp"

        assert client.post(url, headers=auth_headers, json={"amount": -5}).json()["current_hp"] == 2
        assert client.post(url, headers=auth_headers, json={"amount": -5}).json()["current_hp"] == 0
        assert client.post(url, headers=auth_headers, json={"amount": 20}).json()["current_hp"] == 7

    def test_temp_hp_absorbs_damage(self, client, auth_headers, goblins):
        combatant_id = goblins["combatants"][3]["id"]  # orc, 15 hp
        base = f"/encounters/combatants/{combatant_id}"

        data = client.put(f"{base}/temp-hp", headers=auth_headers, json={"value": 5}).json()
        assert data["temp_hp"] == 5

        data = client.post(f"{base}/hp", headers=auth_headers, json={"amount": -8}).json()
        assert data["temp_hp"] == 0
        assert data["current_hp"] == 12

    def test_temp_hp_replaced_not_added(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/temp-hp"
        client.put(url, headers=auth_headers, json={"value": 5})
        assert client.put(url, headers=auth_headers, json={"value": 3}).json()["temp_hp"] == 3

    def test_hp_input(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][3]['id']}/hp-input"

        assert client.post(url, headers=auth_headers, json={"value": "-6"}).json()["current_hp"] == 9
        assert client.post(url, headers=auth_headers, json={"value": "+2"}).json()["current_hp"] == 11
        assert client.post(url, headers=auth_headers, json={"value": "4"}).json()["current_hp"] == 4

    def test_hp_input_rejected(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][3]['id']}/hp-input"
        assert client.post(url, headers=auth_headers, json={"value": "2d6"}).status_code == 422

    def test_copies_are_independent(self, client, auth_headers, goblins):
        first, second = goblins["combatants"][0]["id"], goblins["combatants"][1]["id"]
        client.post(f"/encounters/combatants/{first}/hp", headers=auth_headers, json={"amount": -3})

        data = client.get(f"/encounters/{goblins['id']}", headers=auth_headers).json()
        by_id = {c["id"]: c for c in data["combatants"]}
        assert by_id[first]["current_hp"] == 4
        assert by_id[second]["current_hp"] == 7


class TestTrackerEndpoints:
    def test_spell_slot(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/spell-slots/1/toggle"
        data = client.post(url, headers=auth_headers, json={"index": 1}).json()
        assert data["trackers"]["spell_slots"]["1"]["current"] == 1

        data = client.post(url, headers=auth_headers, json={"index": 2}).json()
        assert data["trackers"]["spell_slots"]["1"]["current"] == 3

    def test_spell_slot_unknown_level(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/spell-slots/2/toggle"
        assert client.post(url, headers=auth_headers, json={"index": 0}).status_code == 422

    def test_pip_out_of_range(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/spell-slots/3/toggle"
        assert client.post(url, headers=auth_headers, json={"index": 2}).status_code == 422

    def test_legendary_actions(self, client, auth_headers, lich):
        base = f"/encounters/combatants/{lich['id']}/legendary-actions"
        data = client.post(f"{base}/toggle", headers=auth_headers, json={"index": 0}).json()
        assert data["trackers"]["legendary_actions_remaining"] == 0

        data = client.post(f"{base}/refill", headers=auth_headers).json()
        assert data["trackers"]["legendary_actions_remaining"] == 3

    def test_legendary_resistance(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/legendary-resistance/toggle"
        data = client.post(url, headers=auth_headers, json={"index": 1}).json()
        assert data["trackers"]["legendary_resistance_remaining"] == 1

    def test_legendary_on_plain_creature(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/legendary-actions/refill"
        assert client.post(url, headers=auth_headers).status_code == 422

    def test_recharge(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/recharge/0/toggle"
        assert client.post(url, headers=auth_headers).json()["trackers"]["recharge"][0]["available"] is False
        assert client.post(url, headers=auth_headers).json()["trackers"]["recharge"][0]["available"] is True

    def test_recharge_bad_index(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/recharge/4/toggle"
        assert client.post(url, headers=auth_headers).status_code == 422

    def test_limited(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/limited/0/toggle"
        data = client.post(url, headers=auth_headers, json={"index": 1}).json()
        assert data["trackers"]["limited"][0]["current_uses"] == 1

    def test_negative_pip_index(self, client, auth_headers, lich):
        url = f"/encounters/combatants/{lich['id']}/limited/0/toggle"
        assert client.post(url, headers=auth_headers, json={"index": -1}).status_code == 422


class TestCombatantManagement:
    def test_duplicate_lands_after_siblings(self, client, auth_headers, goblins):
        source = goblins["combatants"][0]
        client.post(f"/encounters/combatants/{source['id']}/hp", headers=auth_headers, json={"amount": -4})

        response = client.post(f"/encounters/combatants/{source['id']}/duplicate", headers=auth_headers)
        assert response.status_code == 201
        copy = response.json()
        assert copy["display_name"] == "Goblin #4"
        assert copy["position"] == 3
        assert copy["current_hp"] == 7

        data = client.get(f"/encounters/{goblins['id']}", headers=auth_headers).json()
        names = [c["display_name"] for c in data["combatants"]]
        assert names == ["Goblin #1", "Goblin #2", "Goblin #3", "Goblin #4", "Orc"]

    def test_duplicate_refills_trackers(self, client, auth_headers, lich):
        client.post(
            f"/encounters/combatants/{lich['id']}/legendary-actions/toggle",
            headers=auth_headers,
            json={"index": 0},
        )
        copy = client.post(f"/encounters/combatants/{lich['id']}/duplicate", headers=auth_headers).json()
        assert copy["display_name"] == "Lich #2"
        assert copy["trackers"]["legendary_actions_remaining"] == 3

    def test_rename(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/rename"
        data = client.put(url, headers=auth_headers, json={"display_name": "  Boss Goblin "}).json()
        assert data["display_name"] == "Boss Goblin"
        assert data["base_name"] == "Goblin"

    def test_rename_blank(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/rename"
        assert client.put(url, headers=auth_headers, json={"display_name": "   "}).status_code == 422

    def test_delete(self, client, auth_headers, goblins):
        combatant_id = goblins["combatants"][1]["id"]
        assert client.delete(f"/encounters/combatants/{combatant_id}", headers=auth_headers).status_code == 204

        data = client.get(f"/encounters/{goblins['id']}", headers=auth_headers).json()
        assert [c["display_name"] for c in data["combatants"]] == ["Goblin #1", "Goblin #3", "Orc"]

    def test_send_to_battle_needs_active_battle(self, client, auth_headers, goblins):
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/send-to-battle"
        assert client.post(url, headers=auth_headers, json={"initiative": 14}).status_code == 404

    def test_send_to_battle(self, client, auth_headers, goblins):
        client.post("/battles/", headers=auth_headers, json={"name": "Crypt Fight"})
        url = f"/encounters/combatants/{goblins['combatants'][0]['id']}/send-to-battle"

        response = client.post(url, headers=auth_headers, json={"initiative": 14})
        assert response.status_code == 200
        npc = response.json()["characters"][0]
        assert npc["name"] == "Goblin #1"
        assert npc["initiative"] == 14
        assert npc["is_npc"] is True
        assert npc["is_revealed"] is False

        public = client.get("/public/battle").json()
        assert public["battle"]["characters"][0]["name"] == "?"
