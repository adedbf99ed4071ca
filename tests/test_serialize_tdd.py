from __future__ import annotations

import json
from pathlib import Path

import pytest

from tambola_book.generator import generate_book, generate_books
from tambola_book.serialize import (
    build_run_meta,
    emit_books_json,
    load_books_json,
    render_book,
    render_ticket,
)
from tambola_book.uniqueness import book_hash, books_hash


def test_ticket_rendering_layout():
    ticket = generate_book(seed=3).tickets[0]
    lines = render_ticket(ticket).split("\n")
    assert len(lines) == 3
    for r, line in enumerate(lines):
        cells = line.split(" | ")
        assert len(cells) == 9
        for cell, value in zip(cells, ticket.rows[r]):
            assert len(cell) == 2
            assert cell == ("  " if value is None else f"{value:2d}")


def test_book_rendering_separates_tickets_with_blank_line():
    text = render_book(generate_book(seed=3))
    blocks = text.split("\n\n")
    assert len(blocks) == 6
    assert all(len(block.split("\n")) == 3 for block in blocks)


def test_json_emit_and_load(tmp_path: Path):
    books = generate_books(2, seed=10)
    meta = build_run_meta(
        app_version="0.1.0", params_hash="sha256:x", seed=10, rng_engine="py_random", count=2
    )
    out = tmp_path / "nested" / "books.json"
    emit_books_json(out, books=books, run_meta=meta, mkdirs=True, overwrite=False)

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["run_meta"]["seed"] == 10
    assert data["books_hash"] == books_hash(books)
    assert data["books"][0]["book_hash"] == book_hash(books[0])
    # blanks are stored as null
    assert None in data["books"][0]["tickets"][0][0]

    assert load_books_json(out) == books


def test_refuses_to_overwrite(tmp_path: Path):
    out = tmp_path / "books.json"
    out.write_text("{}", encoding="utf-8")
    meta = build_run_meta(
        app_version="0.1.0", params_hash="sha256:x", seed=1, rng_engine="py_random", count=1
    )
    with pytest.raises(FileExistsError):
        emit_books_json(out, books=[generate_book(seed=1)], run_meta=meta, mkdirs=True, overwrite=False)


def test_load_rejects_foreign_json(tmp_path: Path):
    path = tmp_path / "other.json"
    path.write_text(json.dumps({"cards": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_books_json(path)


@pytest.mark.parametrize(
    "entry",
    [
        {"tickets": [5]},
        {"tickets": [[1, 2, 3]]},
        {"tickets": [[[None] * 9, [None] * 9, [True] + [None] * 8]]},
        {"tickets": [[[None] * 9, [None] * 9, ["12"] + [None] * 8]]},
        {"tickets": [], "seed": "7"},
    ],
)
def test_load_rejects_malformed_books(tmp_path: Path, entry):
    path = tmp_path / "books.json"
    path.write_text(json.dumps({"books": [entry]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_books_json(path)
