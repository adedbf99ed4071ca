from __future__ import annotations

import hashlib
import json
from typing import Iterable, Optional, Sequence

from .models import Book


def matrix_hash(matrix: Sequence[Sequence[Optional[int]]]) -> str:
    payload = json.dumps([list(row) for row in matrix], ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def book_hash(book: Book) -> str:
    hashes = [matrix_hash(ticket.rows) for ticket in book.tickets]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def books_hash(books: Iterable[Book]) -> str:
    hashes = [book_hash(b) for b in books]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
