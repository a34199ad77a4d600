class TestRegister:
    def test_register(self, client):
        response = client.post("/auth/register", json={
            "email": "New@Example.com",
            "password": "secret123",
            "username": "newbie",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["email"] == "new@example.com"

    def test_duplicate_email(self, client, auth_headers):
        response = client.post("/auth/register", json={
            "email": "dm@example.com",
            "password": "another1",
            "username": "copycat",
        })
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post("/auth/register", json={
            "email": "a@example.com",
            "password": "123",
            "username": "a",
        })
        assert response.status_code == 422

    def test_bad_email(self, client):
        response = client.post("/auth/register", json={
            "email": "not-an-email",
            "password": "secret123",
            "username": "a",
        })
        assert response.status_code == 422


class TestLogin:
    def test_login(self, client, auth_headers):
        response = client.post("/auth/login", json={"email": "dm@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "Dungeon Master"

    def test_wrong_password(self, client, auth_headers):
        response = client.post("/auth/login", json={"email": "dm@example.com", "password": "wrong"})
        assert response.status_code == 401

    def test_unknown_user(self, client):
        response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 401


class TestMe:
    def test_me(self, client, auth_headers):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "dm@example.com"

    def test_missing_token(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401

    def test_protected_routes_require_token(self, client):
        assert client.get("/battles/").status_code == 401
        assert client.get("/encounters/").status_code == 401
        assert client.get("/groups/").status_code == 401
        assert client.post("/import/parse", json={"text": "a"}).status_code == 401


class TestRoot:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == "1.0.0"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
