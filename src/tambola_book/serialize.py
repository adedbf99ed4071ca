from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Sequence

from .models import Book, Ticket
from .uniqueness import book_hash, books_hash

CELL_DELIMITER = " | "
BLANK_CELL = "  "


def render_ticket(ticket: Ticket) -> str:
    lines = []
    for row in ticket.rows:
        cells = [BLANK_CELL if cell is None else f"{cell:2d}" for cell in row]
        lines.append(CELL_DELIMITER.join(cells))
    return "\n".join(lines)


def render_book(book: Book) -> str:
    """Tickets as text, separated by a blank line."""
    return "\n\n".join(render_ticket(ticket) for ticket in book.tickets)


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: int,
    rng_engine: str,
    count: int,
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "rng_engine": rng_engine,
        "count": count,
        "hash_algorithm": "sha256",
    }


def book_to_dict(book: Book) -> Dict[str, object]:
    return {
        "seed": book.seed,
        "tickets": book.as_matrices(),
        "book_hash": book_hash(book),
    }


def book_from_dict(data: Dict[str, object]) -> Book:
    tickets = data.get("tickets")
    if not isinstance(tickets, list):
        raise ValueError("book entry must contain a 'tickets' list")
    seed = data.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError(f"book seed must be an integer or null, got {seed!r}")
    return Book(
        tickets=tuple(Ticket.from_matrix(matrix) for matrix in tickets),  # type: ignore[arg-type]
        seed=seed,
    )


def emit_books_json(
    path: Path,
    *,
    books: Sequence[Book],
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = {
        "run_meta": run_meta,
        "books": [book_to_dict(book) for book in books],
        "books_hash": books_hash(books),
    }
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def load_books_json(path: Path) -> List[Book]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("books"), list):
        raise ValueError(f"{path} does not contain a 'books' list")
    if any(not isinstance(entry, dict) for entry in data["books"]):
        raise ValueError(f"{path}: every book entry must be an object")
    return [book_from_dict(entry) for entry in data["books"]]
