"""
Inventory rules: ISBN merge, pool cap, removal and catalogue queries.
"""

from decimal import Decimal

import pytest

from bookmarket.core.exceptions import (
    BookAlreadyExistsError,
    BookNotFoundError,
    InventoryFullError,
    ValidationFailure,
)
from bookmarket.domain.entities import BookCategory, BookStatus
from bookmarket.services.inventory_service import InventoryManager


class TestAddBook:
    def test_new_book_round_trip(self, inventory, book_factory):
        inventory.add_book(book_factory(isbn="X-1", original_price=Decimal("42.00")))

        book = inventory.get_book_by_isbn("X-1")
        assert book.quantity == 1
        assert book.status == BookStatus.AVAILABLE
        assert book.current_price == Decimal("42.00")
        assert book.original_price == Decimal("42.00")

    def test_new_book_ignores_incoming_quantity_and_price(self, inventory, book_factory):
        book = inventory.add_book(
            book_factory(
                quantity=7,
                status=BookStatus.SOLD,
                original_price=Decimal("20"),
                current_price=Decimal("5"),
            )
        )
        assert book.quantity == 1
        assert book.status == BookStatus.AVAILABLE
        assert book.current_price == Decimal("20.00")

    def test_same_isbn_same_identity_merges(self, inventory, book_factory):
        first = inventory.add_book(book_factory(isbn="X-1", title="Dune", author="Herbert"))
        merged = inventory.add_book(book_factory(isbn="X-1", title="DUNE ", author="herbert"))

        assert merged.id == first.id
        assert merged.quantity == 2
        assert inventory.count_books() == 1

    def test_merge_makes_sold_out_book_available(self, inventory, marketplace, create_user, book_factory):
        book = inventory.add_book(book_factory(isbn="X-1", title="Dune", author="Herbert"))
        buyer = create_user(funds=Decimal("500"))
        marketplace.buy_book(buyer.id, book.id)
        assert inventory.get_book(book.id).status == BookStatus.SOLD

        merged = inventory.add_book(book_factory(isbn="X-1", title="Dune", author="Herbert"))

        assert merged.quantity == 1
        assert merged.status == BookStatus.AVAILABLE

    def test_same_isbn_different_title_conflicts(self, inventory, book_factory):
        inventory.add_book(book_factory(isbn="X-1", title="Dune"))

        with pytest.raises(BookAlreadyExistsError):
            inventory.add_book(book_factory(isbn="X-1", title="Emma"))
        assert inventory.get_book_by_isbn("X-1").quantity == 1

    def test_pool_cap(self, uow_factory, book_factory):
        inventory = InventoryManager(uow_factory, max_inventory_size=3)
        for _ in range(3):
            inventory.add_book(book_factory())

        with pytest.raises(InventoryFullError):
            inventory.add_book(book_factory())
        assert inventory.count_books() == 3

    def test_merge_is_allowed_when_pool_is_full(self, uow_factory, book_factory):
        inventory = InventoryManager(uow_factory, max_inventory_size=1)
        inventory.add_book(book_factory(isbn="X-1", title="Dune", author="Herbert"))

        merged = inventory.add_book(book_factory(isbn="X-1", title="Dune", author="Herbert"))
        assert merged.quantity == 2

    def test_default_cap_of_one_hundred(self, inventory, book_factory):
        """Adding a new record to a pool of 100 fails."""
        for _ in range(100):
            inventory.add_book(book_factory())

        with pytest.raises(InventoryFullError):
            inventory.add_book(book_factory())
        assert inventory.count_books() == 100


class TestRemoveBook:
    def test_decrements_when_several_copies(self, inventory, book_factory):
        book = inventory.add_book(book_factory(isbn="X-1", title="Dune", author="A"))
        inventory.add_book(book_factory(isbn="X-1", title="Dune", author="A"))

        remaining = inventory.remove_book(book.id)

        assert remaining.quantity == 1

    def test_deletes_last_copy(self, inventory, create_book):
        book = create_book()

        assert inventory.remove_book(book.id) is None
        with pytest.raises(BookNotFoundError):
            inventory.get_book(book.id)

    def test_unknown_book(self, inventory):
        with pytest.raises(BookNotFoundError):
            inventory.remove_book(12345)


class TestUpdateBook:
    def test_resets_discontinued_book(self, inventory, create_book):
        book = create_book()
        inventory.update_book(book.id, {"status": BookStatus.DISCONTINUED})

        updated = inventory.update_book(
            book.id, {"status": BookStatus.AVAILABLE, "current_price": Decimal("30")}
        )

        assert updated.status == BookStatus.AVAILABLE
        assert updated.current_price == Decimal("30.00")

    def test_sold_out_book_cannot_be_made_available(
        self, inventory, marketplace, create_user, create_book
    ):
        book = create_book()
        buyer = create_user(funds=Decimal("500"))
        marketplace.buy_book(buyer.id, book.id)

        with pytest.raises(ValidationFailure):
            inventory.update_book(book.id, {"status": BookStatus.AVAILABLE})

        stored = inventory.get_book(book.id)
        assert (stored.status, stored.quantity) == (BookStatus.SOLD, 0)
        assert inventory.list_available_books() == []

    def test_book_in_stock_cannot_be_marked_sold(self, inventory, create_book):
        book = create_book()

        with pytest.raises(ValidationFailure):
            inventory.update_book(book.id, {"status": BookStatus.SOLD})
        assert inventory.get_book(book.id).status == BookStatus.AVAILABLE

    def test_original_price_is_fixed(self, inventory, create_book):
        book = create_book(original_price=Decimal("40"))

        with pytest.raises(ValidationFailure):
            inventory.update_book(book.id, {"original_price": Decimal("10")})
        assert inventory.get_book(book.id).original_price == Decimal("40.00")

    def test_isbn_collision(self, inventory, create_book):
        first = create_book(isbn="X-1")
        second = create_book(isbn="X-2")

        with pytest.raises(BookAlreadyExistsError):
            inventory.update_book(second.id, {"isbn": first.isbn})

    def test_quantity_is_not_updatable(self, inventory, create_book):
        book = create_book()
        with pytest.raises(ValidationFailure):
            inventory.update_book(book.id, {"quantity": 50})

    def test_unknown_book(self, inventory):
        with pytest.raises(BookNotFoundError):
            inventory.update_book(777, {"title": "New"})


class TestQueries:
    def test_get_book_missing(self, inventory):
        with pytest.raises(BookNotFoundError):
            inventory.get_book(1)
        with pytest.raises(BookNotFoundError):
            inventory.get_book_by_isbn("none")

    def test_list_available_excludes_sold_out(self, inventory, marketplace, create_book, create_user):
        sold = create_book()
        kept = create_book()
        buyer = create_user(funds=Decimal("500"))
        marketplace.buy_book(buyer.id, sold.id)

        available = inventory.list_available_books()

        assert [b.id for b in available] == [kept.id]
        assert len(inventory.list_books()) == 2

    def test_list_by_category(self, inventory, create_book):
        create_book(category=BookCategory.HISTORY)
        create_book(category=BookCategory.FICTION)

        books = inventory.list_by_category("HISTORY")
        assert [b.category for b in books] == [BookCategory.HISTORY]

        with pytest.raises(ValidationFailure):
            inventory.list_by_category("COMICS")

    def test_search_keyword_matches_title_author_category(self, inventory, create_book):
        create_book(title="The Time Machine", author="H. G. Wells", category=BookCategory.FICTION)
        create_book(title="Cosmos", author="Carl Sagan", category=BookCategory.SCIENCE)
        create_book(title="Gardening", author="Ann Timewell", category=BookCategory.ART)

        assert {b.title for b in inventory.search(keyword="time")} == {
            "The Time Machine",
            "Gardening",
        }
        assert [b.title for b in inventory.search(keyword="science")] == ["Cosmos"]

    def test_search_price_range_is_inclusive(self, inventory, create_book):
        create_book(title="A", original_price=Decimal("10"))
        create_book(title="B", original_price=Decimal("20"))
        create_book(title="C", original_price=Decimal("30"))

        books = inventory.search(min_price=Decimal("10"), max_price=Decimal("20"))
        assert [b.title for b in books] == ["A", "B"]

    def test_search_sorting(self, inventory, create_book):
        create_book(title="Beta", author="Zed")
        create_book(title="Alpha", author="Young")

        assert [b.title for b in inventory.search()] == ["Alpha", "Beta"]
        assert [b.title for b in inventory.search(sort_by="title", descending=True)] == [
            "Beta",
            "Alpha",
        ]
        assert [b.author for b in inventory.search(sort_by="author")] == ["Young", "Zed"]

    def test_search_rejects_bad_arguments(self, inventory):
        with pytest.raises(ValidationFailure):
            inventory.search(sort_by="price")
        with pytest.raises(ValidationFailure):
            inventory.search(min_price=Decimal("5"), max_price=Decimal("1"))
