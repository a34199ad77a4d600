class TestGroups:
    def test_create_group(self, client, auth_headers):
        response = client.post("/groups/", headers=auth_headers, json={
            "name": "Tuesday Party",
            "characters": [{"name": "Aria", "image_url": "aria.png"}, {"name": "Brom"}],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Tuesday Party"
        assert [c["name"] for c in data["characters"]] == ["Aria", "Brom"]
        assert data["characters"][1]["image_url"] == ""

    def test_list_groups(self, client, auth_headers):
        client.post("/groups/", headers=auth_headers, json={"name": "One"})
        client.post("/groups/", headers=auth_headers, json={"name": "Two"})

        response = client.get("/groups/", headers=auth_headers)
        assert response.status_code == 200
        assert [g["name"] for g in response.json()] == ["Two", "One"]

    def test_update_group(self, client, auth_headers):
        group_id = client.post("/groups/", headers=auth_headers, json={"name": "Old"}).json()["id"]

        response = client.put(f"/groups/{group_id}", headers=auth_headers, json={
            "name": "New",
            "characters": [{"name": "Cass"}],
        })
        assert response.status_code == 200
        assert response.json()["name"] == "New"
        assert response.json()["characters"][0]["name"] == "Cass"

    def test_delete_group(self, client, auth_headers):
        group_id = client.post("/groups/", headers=auth_headers, json={"name": "Gone"}).json()["id"]

        assert client.delete(f"/groups/{group_id}", headers=auth_headers).status_code == 204
        assert client.get(f"/groups/{group_id}", headers=auth_headers).status_code == 404

    def test_groups_are_private(self, client, auth_headers, other_auth_headers):
        group_id = client.post("/groups/", headers=auth_headers, json={"name": "Mine"}).json()["id"]

        assert client.get(f"/groups/{group_id}", headers=other_auth_headers).status_code == 404
        assert client.get("/groups/", headers=other_auth_headers).json() == []

    def test_empty_name_rejected(self, client, auth_headers):
        response = client.post("/groups/", headers=auth_headers, json={"name": ""})
        assert response.status_code == 422
