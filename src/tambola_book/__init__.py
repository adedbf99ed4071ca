"""Tambola (housie) book generator."""

from .generator import BookGenerator, generate_book, generate_books
from .models import Book, Ticket
from .version import __version__

__all__ = ["Book", "BookGenerator", "Ticket", "generate_book", "generate_books", "__version__"]
