import time

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.security import issue_token
from app.main import app
from app.services.post_service import PostService

HUGE_ID = 99999999999999999999


def assert_no_password(response):
    assert "password" not in response.text.lower()


class TestMeta:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Blog API"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_unknown_route_uses_error_body(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestRegisterAndLogin:
    def test_register(self, client):
        response = client.post(
            "/users/register",
            json={"email": "a@x.com", "name": "A", "password": "pw123456"},
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body["user"]) == {"id", "email", "name", "createdAt"}
        assert body["user"]["email"] == "a@x.com"
        assert_no_password(response)

        claims = jwt.decode(body["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert claims["id"] == body["user"]["id"]
        assert claims["email"] == "a@x.com"

    def test_register_duplicate_email(self, client, register_user):
        register_user(email="a@x.com")

        response = client.post(
            "/users/register",
            json={"email": "a@x.com", "name": "Again", "password": "other"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Email already registered"}

    def test_register_missing_password(self, client):
        response = client.post("/users/register", json={"email": "a@x.com", "name": "A"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("password")

    def test_register_empty_email(self, client):
        response = client.post("/users/register", json={"email": "", "password": "pw"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_login(self, client, register_user):
        registered = register_user(email="a@x.com", password="pw123456")

        response = client.post("/users/login", json={"email": "a@x.com", "password": "pw123456"})

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": registered["user"]["id"], "email": "a@x.com", "name": "Alice"}
        assert body["token"]
        assert_no_password(response)

    def test_login_failures_are_indistinguishable(self, client, register_user):
        register_user(email="a@x.com", password="pw123456")

        wrong_password = client.post("/users/login", json={"email": "a@x.com", "password": "nope"})
        unknown_email = client.post("/users/login", json={"email": "ghost@x.com", "password": "pw123456"})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"error": "Invalid email or password"}


class TestProfile:
    def test_profile_requires_header(self, client):
        response = client.get("/users/profile")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {"error": "Authorization header missing"}

    def test_profile_rejects_non_bearer_header(self, client):
        response = client.get("/users/profile", headers={"Authorization": "Basic dXNlcjpwdw=="})

        assert response.status_code == 401

    def test_profile_rejects_invalid_token(self, client, auth_headers):
        response = client.get("/users/profile", headers=auth_headers("not-a-token"))

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_profile_returns_user_with_posts_and_comments(self, client, register_user, auth_headers):
        registered = register_user()
        user_id = registered["user"]["id"]
        post = client.post("/posts", json={"title": "Mine", "authorId": user_id}).json()["post"]
        client.post("/comments", json={"content": "Self", "authorId": user_id, "postId": post["id"]})

        response = client.get("/users/profile", headers=auth_headers(registered["token"]))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == user_id
        assert [p["title"] for p in user["posts"]] == ["Mine"]
        assert [c["content"] for c in user["comments"]] == ["Self"]
        assert_no_password(response)

    def test_profile_for_missing_user(self, client, auth_headers):
        token = issue_token(999, "gone@x.com")

        response = client.get("/users/profile", headers=auth_headers(token))

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


class TestUsers:
    def test_list_users_with_post_titles(self, client, register_user):
        alice = register_user(email="alice@x.com")["user"]
        register_user(email="bob@x.com", name="Bob")
        client.post("/posts", json={"title": "Hi", "content": "there", "authorId": alice["id"]})

        response = client.get("/users")

        assert response.status_code == 200
        users = response.json()["users"]
        assert [u["email"] for u in users] == ["alice@x.com", "bob@x.com"]
        assert users[0]["posts"] == [{"id": 1, "title": "Hi"}]
        assert users[1]["posts"] == []
        assert_no_password(response)

    def test_get_user(self, client, register_user):
        user_id = register_user()["user"]["id"]

        response = client.get(f"/users/{user_id}")

        assert response.status_code == 200
        assert response.json()["user"]["posts"] == []
        assert_no_password(response)

    def test_get_missing_user(self, client):
        response = client.get("/users/999")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_get_user_with_non_numeric_id(self, client):
        response = client.get("/users/abc")

        assert response.status_code == 400
        assert response.json()["error"].startswith("user_id")

    def test_create_user(self, client):
        response = client.post("/users", json={"email": "c@x.com", "name": "C", "password": "pw"})

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "c@x.com"
        assert "token" not in response.json()
        assert_no_password(response)

    def test_created_user_can_log_in(self, client):
        client.post("/users", json={"email": "c@x.com", "password": "pw"})

        response = client.post("/users/login", json={"email": "c@x.com", "password": "pw"})

        assert response.status_code == 200


class TestPosts:
    def test_create_post(self, client, register_user):
        user_id = register_user()["user"]["id"]

        response = client.post("/posts", json={"title": "Hello", "content": "World", "authorId": user_id})

        assert response.status_code == 201
        post = response.json()["post"]
        assert post["title"] == "Hello"
        assert post["published"] is False
        assert post["authorId"] == user_id

    def test_create_post_with_unknown_author_is_rejected(self, client):
        response = client.post("/posts", json={"title": "Orphan", "authorId": 999})

        assert response.status_code == 400
        assert response.json() == {"error": "Author 999 does not exist"}
        assert client.get("/posts").json() == {"posts": []}

    def test_create_post_missing_title(self, client, register_user):
        user_id = register_user()["user"]["id"]

        response = client.post("/posts", json={"authorId": user_id})

        assert response.status_code == 400
        assert response.json()["error"].startswith("title")

    def test_list_posts_with_author(self, client, register_user):
        user_id = register_user(email="a@x.com", name="A")["user"]["id"]
        client.post("/posts", json={"title": "One", "authorId": user_id, "published": True})

        response = client.get("/posts")

        assert response.status_code == 200
        posts = response.json()["posts"]
        assert posts[0]["published"] is True
        assert posts[0]["author"] == {"id": user_id, "email": "a@x.com", "name": "A"}
        assert_no_password(response)

    def test_get_post_with_comments(self, client, register_user):
        author_id = register_user(email="a@x.com", name="A")["user"]["id"]
        reader_id = register_user(email="b@x.com", name="B")["user"]["id"]
        post_id = client.post("/posts", json={"title": "One", "authorId": author_id}).json()["post"]["id"]
        client.post("/comments", json={"content": "Great", "authorId": reader_id, "postId": post_id})

        response = client.get(f"/posts/{post_id}")

        assert response.status_code == 200
        post = response.json()["post"]
        assert post["author"]["id"] == author_id
        assert len(post["comments"]) == 1
        assert post["comments"][0]["author"] == {"id": reader_id, "name": "B"}
        assert_no_password(response)

    def test_get_missing_post(self, client):
        response = client.get("/posts/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}


class TestComments:
    def test_create_and_list_comments(self, client, register_user):
        user_id = register_user(name="A")["user"]["id"]
        post_id = client.post("/posts", json={"title": "One", "authorId": user_id}).json()["post"]["id"]

        created = client.post("/comments", json={"content": "Hi", "authorId": user_id, "postId": post_id})
        listed = client.get("/comments")

        assert created.status_code == 201
        assert created.json()["comment"]["postId"] == post_id
        comments = listed.json()["comments"]
        assert comments[0]["author"] == {"id": user_id, "name": "A"}
        assert comments[0]["post"] == {"id": post_id, "title": "One"}
        assert_no_password(listed)

    def test_comment_on_missing_post_is_rejected(self, client, register_user):
        user_id = register_user()["user"]["id"]

        response = client.post("/comments", json={"content": "Hi", "authorId": user_id, "postId": 42})

        assert response.status_code == 400
        assert response.json() == {"error": "Post 42 does not exist"}

    def test_comment_missing_content(self, client):
        response = client.post("/comments", json={"authorId": 1, "postId": 1})

        assert response.status_code == 400
        assert response.json()["error"].startswith("content")


class TestOutOfRangeIds:
    def test_get_post_with_huge_id(self, client):
        response = client.get(f"/posts/{HUGE_ID}")

        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    def test_get_user_with_huge_id(self, client):
        response = client.get(f"/users/{HUGE_ID}")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_create_post_with_huge_author_id(self, client):
        response = client.post("/posts", json={"title": "t", "authorId": HUGE_ID})

        assert response.status_code == 400
        assert response.json()["error"].startswith("authorId")
        assert client.get("/posts").json() == {"posts": []}

    def test_create_post_with_non_positive_author_id(self, client):
        response = client.post("/posts", json={"title": "t", "authorId": 0})

        assert response.status_code == 400

    def test_create_comment_with_huge_post_id(self, client, register_user):
        user_id = register_user()["user"]["id"]

        response = client.post("/comments", json={"content": "Hi", "authorId": user_id, "postId": HUGE_ID})

        assert response.status_code == 400
        assert response.json()["error"].startswith("postId")


class TestServerSideFailures:
    def test_slow_request_times_out(self, client, monkeypatch):
        def slow_list_posts(self):
            time.sleep(1)
            return []

        monkeypatch.setattr(settings, "REQUEST_TIMEOUT_SECONDS", 0.2)
        monkeypatch.setattr(PostService, "list_posts", slow_list_posts)

        response = client.get("/posts")

        assert response.status_code == 504
        assert response.json() == {"error": "Request timed out"}

    def test_unexpected_error_returns_generic_message(self, monkeypatch):
        def broken_list_posts(self):
            raise RuntimeError("secret internal detail")

        monkeypatch.setattr(PostService, "list_posts", broken_list_posts)

        with TestClient(app, raise_server_exceptions=False) as failing_client:
            response = failing_client.get("/posts")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret internal detail" not in response.text

    def test_database_error_returns_generic_message(self, monkeypatch):
        def broken_list_posts(self):
            raise OperationalError("SELECT * FROM posts", {}, Exception("disk I/O error"))

        monkeypatch.setattr(PostService, "list_posts", broken_list_posts)

        with TestClient(app, raise_server_exceptions=False) as failing_client:
            response = failing_client.get("/posts")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "disk I/O error" not in response.text
        assert "SELECT" not in response.text
