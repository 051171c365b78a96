"""Unit tests for books: models, library and catalog lookup."""

import json

import httpx
import pytest

from marginalia.books import (
    Book,
    BookLibrary,
    BookNotFoundError,
    CatalogError,
    GoogleBooksCatalog,
    ReadingStatus,
)
from marginalia.books.catalog import UNKNOWN_AUTHOR, parse_volume
from marginalia.storage import InMemoryStore

DUNE_VOLUME = {
    "volumeInfo": {
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "publisher": "Chilton Books",
        "publishedDate": "1965-08-01",
        "description": "A desert planet.",
        "industryIdentifiers": [
            {"type": "ISBN_10", "identifier": "0441172717"},
            {"type": "ISBN_13", "identifier": "9780441172719"},
        ],
        "pageCount": 412,
        "categories": ["Fiction"],
        "imageLinks": {"thumbnail": "http://books.google.com/dune.jpg"},
        "language": "en",
    }
}


class TestBookModel:
    """Test Book derived values."""

    def test_progress(self) -> None:
        book = Book(title="Dune", author="Frank Herbert", page_count=400, current_page=100)

        assert book.reading_progress == 0.25
        assert book.progress_text == "100 of 400 pages"

    def test_progress_unknown_page_count(self) -> None:
        book = Book(title="Dune", author="Frank Herbert", current_page=12)

        assert book.reading_progress == 0.0
        assert book.progress_text == "12 pages"

    def test_context(self) -> None:
        """Test the AI context text."""
        book = Book(
            title="Dune",
            author="Frank Herbert",
            summary="A desert planet.",
            page_count=412,
            current_page=40,
        )

        assert book.context() == (
            'Book: "Dune" by Frank Herbert.\n'
            "Description: A desert planet.\n"
            "The reader is on page 40 of 412."
        )

    def test_status_display_name(self) -> None:
        assert ReadingStatus.WANT_TO_READ.display_name == "Want to read"

    def test_record_round_trip(self) -> None:
        book = Book(title="Dune", author="Frank Herbert", status=ReadingStatus.READING)

        decoded = Book.from_dict(book.to_dict())

        assert decoded == book


class TestBookLibrary:
    """Test the book collection."""

    @pytest.fixture
    def library(self) -> BookLibrary:
        return BookLibrary(InMemoryStore())

    def test_add_and_get(self, library: BookLibrary) -> None:
        book = library.add(Book(title="Dune", author="Frank Herbert"))

        assert library.get(book.id).title == "Dune"
        assert library.get("missing") is None

    def test_add_same_id_replaces(self, library: BookLibrary) -> None:
        book = library.add(Book(title="Dune", author="Frank Herbert"))
        book.rating = 5

        library.add(book)

        assert len(library.all()) == 1
        assert library.get(book.id).rating == 5

    def test_update_unknown(self, library: BookLibrary) -> None:
        with pytest.raises(BookNotFoundError):
            library.update(Book(title="Ghost", author="Nobody"))

    def test_delete_runs_hooks(self, library: BookLibrary) -> None:
        """Test deletion cascades through registered hooks."""
        deleted: list[str] = []
        library.on_delete(deleted.append)
        book = library.add(Book(title="Dune", author="Frank Herbert"))

        assert library.delete(book.id) is True
        assert library.delete(book.id) is False
        assert deleted == [book.id]

    def test_search_local(self, library: BookLibrary) -> None:
        library.add(Book(title="Dune", author="Frank Herbert"))
        library.add(Book(title="Emma", author="Jane Austen"))

        assert [b.title for b in library.search_local("austen")] == ["Emma"]
        assert len(library.search_local("")) == 2
        assert library.find_by_title("DUNE").author == "Frank Herbert"

    def test_apply_progress_starts_reading(self, library: BookLibrary) -> None:
        """Test the first progress marks a book as being read."""
        book = library.add(Book(title="Dune", author="Frank Herbert", page_count=412))

        updated = library.apply_progress(book.id, 40)

        assert updated.current_page == 40
        assert updated.status == ReadingStatus.READING
        assert updated.date_started is not None

    def test_apply_progress_finishes(self, library: BookLibrary) -> None:
        """Test reaching the last page finishes the book."""
        book = library.add(Book(title="Dune", author="Frank Herbert", page_count=412))

        updated = library.apply_progress(book.id, 412)

        assert updated.status == ReadingStatus.FINISHED
        assert updated.date_finished is not None

    @pytest.mark.parametrize("page", [None, 0, -3])
    def test_apply_progress_ignores_invalid(self, library: BookLibrary, page: int | None) -> None:
        book = library.add(Book(title="Dune", author="Frank Herbert", current_page=10))

        assert library.apply_progress(book.id, page) is None
        assert library.get(book.id).current_page == 10

    def test_import_csv(self, library: BookLibrary) -> None:
        """Test CSV rows become books; short rows are skipped."""
        text = "title,author,isbn\nDune,Frank Herbert,9780441172719\nbroken\nEmma, Jane Austen\n"

        added = library.import_csv(text)

        assert [(b.title, b.author, b.isbn) for b in added] == [
            ("Dune", "Frank Herbert", "9780441172719"),
            ("Emma", "Jane Austen", None),
        ]


class TestGoogleBooksCatalog:
    """Test catalog lookup with a mocked HTTP transport."""

    def make_catalog(self, handler) -> GoogleBooksCatalog:
        return GoogleBooksCatalog(client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_parse_volume(self) -> None:
        summary = parse_volume(DUNE_VOLUME)

        assert summary.title == "Dune"
        assert summary.author == "Frank Herbert"
        assert summary.isbn == "9780441172719"
        assert summary.published_year == 1965
        assert summary.page_count == 412
        assert summary.cover_url == "https://books.google.com/dune.jpg"

    def test_parse_volume_without_title(self) -> None:
        assert parse_volume({"volumeInfo": {"authors": ["Someone"]}}) is None

    def test_parse_volume_without_authors(self) -> None:
        assert parse_volume({"volumeInfo": {"title": "Anon"}}).author == UNKNOWN_AUTHOR

    def test_search(self) -> None:
        """Test free text search sends the query and parses items."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": [DUNE_VOLUME, {"volumeInfo": {}}]})

        results = self.make_catalog(handler).search_by_title_or_author("dune herbert")

        assert [r.title for r in results] == ["Dune"]
        assert seen[0].url.params["q"] == "dune herbert"

    def test_blank_search_skips_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert self.make_catalog(handler).search_by_title_or_author("  ") == []

    def test_isbn_lookup(self) -> None:
        """Test dashes are stripped from the ISBN."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params["q"])
            return httpx.Response(200, json={"items": [DUNE_VOLUME]})

        summary = self.make_catalog(handler).search_by_isbn("978-0-441-17271-9")

        assert seen == ["isbn:9780441172719"]
        assert summary.to_book().title == "Dune"

    def test_isbn_not_found(self) -> None:
        catalog = self.make_catalog(lambda request: httpx.Response(200, json={"totalItems": 0}))

        assert catalog.search_by_isbn("0000000000") is None

    def test_http_error(self) -> None:
        catalog = self.make_catalog(lambda request: httpx.Response(503))

        with pytest.raises(CatalogError, match="503"):
            catalog.search_by_title_or_author("dune")

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(CatalogError):
            self.make_catalog(handler).search_by_isbn("123")

    def test_undecodable_response(self) -> None:
        catalog = self.make_catalog(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(CatalogError):
            catalog.search_by_title_or_author("dune")

    def test_api_key_sent(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params.get("key"))
            return httpx.Response(200, content=json.dumps({"items": []}).encode())

        catalog = GoogleBooksCatalog(
            api_key="secret", client=httpx.Client(transport=httpx.MockTransport(handler))
        )
        catalog.search_by_title_or_author("dune")

        assert seen == ["secret"]
