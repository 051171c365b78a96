"""Books module for Marginalia.

Provides the book model, the reader's library and catalog lookup.
"""

from .catalog import BookCatalog, CatalogError, GoogleBooksCatalog
from .library import BookLibrary, BookNotFoundError
from .models import Book, BookSummary, ReadingStatus

__all__ = [
    "Book",
    "BookCatalog",
    "BookLibrary",
    "BookNotFoundError",
    "BookSummary",
    "CatalogError",
    "GoogleBooksCatalog",
    "ReadingStatus",
]
