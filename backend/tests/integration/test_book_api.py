"""
Integration tests for the /books endpoints through the Flask test client.
"""

import pytest

BOOK_PAYLOAD = {
    "isbn": "978-0441013593",
    "title": "Dune",
    "author": "Frank Herbert",
    "original_price": "100.00",
    "category": "FICTION",
    "condition": "GOOD",
}


@pytest.fixture
def user_id(client):
    response = client.post(
        "/users/",
        json={
            "username": "buyer",
            "email": "buyer@example.com",
            "first_name": "Buy",
            "last_name": "Er",
            "password": "secret123",
            "funds": "150",
        },
    )
    assert response.status_code == 201, response.get_data(as_text=True)
    return response.get_json()["data"]["id"]


@pytest.fixture
def book_id(client):
    response = client.post("/books/", json=BOOK_PAYLOAD)
    assert response.status_code == 201, response.get_data(as_text=True)
    return response.get_json()["data"]["id"]


class TestCatalogue:
    def test_add_and_lookup(self, client, book_id, response_helper):
        body = response_helper.assert_json_response(client.get(f"/books/{book_id}"))
        assert body["success"] is True
        assert body["data"]["isbn"] == BOOK_PAYLOAD["isbn"]
        assert body["data"]["quantity"] == 1
        assert body["data"]["status"] == "AVAILABLE"
        assert body["data"]["current_price"] == "100.00"

        by_isbn = response_helper.assert_json_response(
            client.get(f"/books/isbn/{BOOK_PAYLOAD['isbn']}")
        )
        assert by_isbn["data"]["id"] == book_id

    def test_duplicate_isbn_merges(self, client, book_id, response_helper):
        body = response_helper.assert_json_response(
            client.post("/books/", json=BOOK_PAYLOAD), 201
        )
        assert body["data"]["id"] == book_id
        assert body["data"]["quantity"] == 2

    def test_conflicting_isbn(self, client, book_id, response_helper):
        response = client.post("/books/", json={**BOOK_PAYLOAD, "title": "Other"})
        response_helper.assert_error(response, 409, "CONFLICT")

    def test_invalid_category_is_a_validation_error(self, client, response_helper):
        response = client.post("/books/", json={**BOOK_PAYLOAD, "category": "COMICS"})
        body = response_helper.assert_error(response, 400, "VALIDATION")
        assert any(e.startswith("category") for e in body["errors"])

    def test_missing_body(self, client, response_helper):
        response = client.post("/books/", data="nope", content_type="text/plain")
        response_helper.assert_error(response, 400, "VALIDATION")

    def test_unknown_book(self, client, response_helper):
        response_helper.assert_error(client.get("/books/999"), 404, "NOT_FOUND")

    def test_list_available_and_category(self, client, book_id, response_helper):
        available = response_helper.assert_json_response(client.get("/books/available"))
        assert [b["id"] for b in available["data"]] == [book_id]

        fiction = response_helper.assert_json_response(client.get("/books/category/fiction"))
        assert len(fiction["data"]) == 1
        response_helper.assert_error(client.get("/books/category/comics"), 400, "VALIDATION")

    def test_search(self, client, book_id, response_helper):
        body = response_helper.assert_json_response(
            client.get("/books/search?keyword=herbert&min_price=50&max_price=100&sort=author&order=desc")
        )
        assert [b["id"] for b in body["data"]] == [book_id]

        response_helper.assert_error(client.get("/books/search?order=up"), 400, "VALIDATION")
        response_helper.assert_error(client.get("/books/search?min_price=abc"), 400, "VALIDATION")

    def test_update_and_delete(self, client, book_id, response_helper):
        body = response_helper.assert_json_response(
            client.put(f"/books/{book_id}", json={"title": "Dune (Deluxe)"})
        )
        assert body["data"]["title"] == "Dune (Deluxe)"

        response_helper.assert_json_response(client.delete(f"/books/{book_id}"))
        response_helper.assert_error(client.get(f"/books/{book_id}"), 404, "NOT_FOUND")


class TestTrades:
    def test_buy_then_sell(self, client, user_id, book_id, response_helper):
        bought = response_helper.assert_json_response(
            client.post(f"/books/{book_id}/buy", json={"user_id": user_id})
        )
        assert bought["data"]["book"]["current_price"] == "90.00"
        assert bought["data"]["book"]["status"] == "SOLD"
        assert bought["data"]["user"]["funds"] == "50.00"
        assert bought["data"]["transaction"]["amount"] == "100.00"

        sold = response_helper.assert_json_response(
            client.post(f"/books/{book_id}/sell", json={"user_id": user_id})
        )
        assert sold["data"]["user"]["funds"] == "140.00"
        assert sold["data"]["book"]["quantity"] == 1
        assert sold["data"]["book"]["current_price"] == "81.00"

    def test_buy_without_funds(self, client, book_id, response_helper):
        poor = client.post(
            "/users/",
            json={
                "username": "poor",
                "email": "poor@example.com",
                "first_name": "P",
                "last_name": "Oor",
                "password": "secret123",
                "funds": "50",
            },
        ).get_json()["data"]["id"]

        body = response_helper.assert_error(
            client.post(f"/books/{book_id}/buy", json={"user_id": poor}), 400, "VALIDATION"
        )
        assert body["message"] == "Insufficient funds to purchase the book."

    def test_buy_requires_user_id(self, client, book_id, response_helper):
        response_helper.assert_error(client.post(f"/books/{book_id}/buy", json={}), 400, "VALIDATION")

    def test_sell_not_owned(self, client, user_id, book_id, response_helper):
        body = response_helper.assert_error(
            client.post(f"/books/{book_id}/sell", json={"user_id": user_id}), 400, "VALIDATION"
        )
        assert body["message"] == "Seller does not own the book with the given ID."

    def test_sell_unknown_isbn(self, client, user_id, response_helper):
        body = response_helper.assert_error(
            client.post("/books/isbn/NEW-1/sell", json={"user_id": user_id}), 400, "VALIDATION"
        )
        assert body["message"] == "New book details are required to sell an unknown ISBN."

        created = response_helper.assert_json_response(
            client.post(
                "/books/isbn/NEW-1/sell",
                json={
                    "user_id": user_id,
                    "book": {
                        "title": "New Book",
                        "author": "Someone",
                        "original_price": "20",
                        "category": "ART",
                    },
                },
            )
        )
        assert created["data"]["book"]["isbn"] == "NEW-1"
        assert created["data"]["user"]["funds"] == "170.00"


def test_health(client, response_helper):
    body = response_helper.assert_json_response(client.get("/health"))
    assert body["data"]["database"] == "ok"
    assert client.get("/health").headers.get("X-Request-ID")
