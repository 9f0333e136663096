"""
Integration tests for the /users endpoints.
"""

import pytest

USER_PAYLOAD = {
    "username": "ada",
    "email": "ada@example.com",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "password": "secret123",
    "phone_number": "5551234567",
}


@pytest.fixture
def user_id(client):
    response = client.post("/users/", json=USER_PAYLOAD)
    assert response.status_code == 201, response.get_data(as_text=True)
    return response.get_json()["data"]["id"]


class TestUsersApi:
    def test_create_hides_password(self, client, user_id, response_helper):
        body = response_helper.assert_json_response(client.get(f"/users/{user_id}"))
        assert body["data"]["username"] == "ada"
        assert body["data"]["funds"] == "0.00"
        assert "password" not in body["data"]
        assert "password_hash" not in body["data"]

    def test_duplicate_user(self, client, user_id, response_helper):
        response = client.post("/users/", json={**USER_PAYLOAD, "username": "other"})
        response_helper.assert_error(response, 409, "CONFLICT")

    def test_invalid_payload_lists_every_error(self, client, response_helper):
        response = client.post(
            "/users/", json={**USER_PAYLOAD, "email": "bad", "phone_number": "1", "password": "x"}
        )
        body = response_helper.assert_error(response, 400, "VALIDATION")
        assert len(body["errors"]) == 3

    def test_search(self, client, user_id, response_helper):
        body = response_helper.assert_json_response(client.get("/users/search?keyword=ada@example.com"))
        assert body["data"]["id"] == user_id
        response_helper.assert_error(client.get("/users/search?keyword=nobody"), 404, "NOT_FOUND")
        response_helper.assert_error(client.get("/users/search"), 400, "VALIDATION")

    def test_list_update_delete(self, client, user_id, response_helper):
        listed = response_helper.assert_json_response(client.get("/users/"))
        assert [u["id"] for u in listed["data"]] == [user_id]

        updated = response_helper.assert_json_response(
            client.put(f"/users/{user_id}", json={"last_name": "King"})
        )
        assert updated["data"]["last_name"] == "King"

        response_helper.assert_json_response(client.delete(f"/users/{user_id}"))
        response_helper.assert_error(client.get(f"/users/{user_id}"), 404, "NOT_FOUND")

    def test_funds_and_history(self, client, user_id, response_helper):
        response_helper.assert_error(
            client.post(f"/users/{user_id}/funds", json={"amount": "0"}), 400, "VALIDATION"
        )
        funded = response_helper.assert_json_response(
            client.post(f"/users/{user_id}/funds", json={"amount": "200"})
        )
        assert funded["data"]["funds"] == "200.00"

        book_id = client.post(
            "/books/",
            json={
                "isbn": "111",
                "title": "Cosmos",
                "author": "Carl Sagan",
                "original_price": "30",
                "category": "SCIENCE",
            },
        ).get_json()["data"]["id"]
        client.post(f"/books/{book_id}/buy", json={"user_id": user_id})

        purchased = response_helper.assert_json_response(
            client.get(f"/users/{user_id}/purchased-books")
        )
        assert [b["id"] for b in purchased["data"]] == [book_id]

        sold = response_helper.assert_json_response(client.get(f"/users/{user_id}/sold-books"))
        assert sold["data"] == []

        history = response_helper.assert_json_response(
            client.get(f"/users/{user_id}/transactions?type=buy")
        )
        assert [t["amount"] for t in history["data"]] == ["30.00"]
        response_helper.assert_error(
            client.get(f"/users/{user_id}/transactions?type=gift"), 400, "VALIDATION"
        )

    def test_unknown_user_history(self, client, response_helper):
        response_helper.assert_error(client.get("/users/77/transactions"), 404, "NOT_FOUND")
