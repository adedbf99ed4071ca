from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List

import typer

from .config import compute_params_hash, resolve_parameters
from .generator import BookGenerator, new_seed
from .logging_setup import setup_logging
from .models import Book
from .serialize import build_run_meta, emit_books_json, load_books_json, render_book
from .verify import verify_book
from .version import __version__

app = typer.Typer(help="Tambola (housie) book generator CLI")

logger = logging.getLogger(__name__)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    pass


@app.command()
def generate(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    seed: int = typer.Option(None, "--seed", min=0, help="Seed for reproducible books"),
    count: int = typer.Option(None, "--count", min=1, help="Number of books to generate"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    max_attempts: int = typer.Option(
        None, "--max-attempts", min=1, help="Allocation attempts per book"
    ),
    output_format: str = typer.Option(None, "--format", help="text|json"),
    out: str = typer.Option(None, "--out", help="books.json output path"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Generate one or more books and print them or write them as JSON."""

    cli_overrides: Dict[str, Any] = {}
    if seed is not None:
        cli_overrides["seed.value"] = seed
    if rng_engine:
        cli_overrides["seed.engine"] = rng_engine
    if count is not None:
        cli_overrides["count"] = count
    if max_attempts is not None:
        cli_overrides["max_attempts"] = max_attempts
    if output_format:
        cli_overrides["format"] = output_format
    if out:
        cli_overrides["out_books"] = out
    if log_file:
        cli_overrides["log_file"] = log_file
    if log_level:
        cli_overrides["log_level"] = log_level

    try:
        resolved, params_hash, _cfg_path_unused = resolve_parameters(
            config_path_str=config, cli_overrides=cli_overrides
        )
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)

    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
    )

    if resolved["seed"].get("value") is None:
        resolved["seed"]["value"] = new_seed()
        params_hash = compute_params_hash(resolved)

    base_seed = int(resolved["seed"]["value"])
    engine = str(resolved["seed"].get("engine", "py_random"))
    n_books = int(resolved["count"])

    if dry_run:
        typer.echo(f"Seed: {base_seed}")
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    start_time = time.time()
    generator = BookGenerator(
        seed=base_seed, rng_engine=engine, max_attempts=int(resolved["max_attempts"])
    )
    if n_books == 1:
        books: List[Book] = [generator.generate()]
    else:
        books = list(generator.generate_books(n_books))
    logger.info("Generated %d book(s) in %.3fs", len(books), time.time() - start_time)

    out_path = resolved.get("out_books")
    if resolved["format"] == "json" or out_path:
        run_meta = build_run_meta(
            app_version=__version__,
            params_hash=params_hash,
            seed=base_seed,
            rng_engine=engine,
            count=n_books,
        )
        target = Path(out_path or "books.json")
        try:
            emit_books_json(
                target,
                books=books,
                run_meta=run_meta,
                mkdirs=(not no_mkdirs),
                overwrite=force,
            )
        except FileExistsError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Wrote {len(books)} book(s) to {target}")
    else:
        typer.echo("\n\n\n".join(render_book(book) for book in books))

    raise typer.Exit(code=0)


@app.command()
def verify(
    books_path: str = typer.Option(..., "--books", help="Path to books.json"),
) -> None:
    """Check every book in a JSON file against the ticket and book rules."""
    try:
        books = load_books_json(Path(books_path))
    except (OSError, ValueError) as exc:
        typer.echo(f"Cannot read books: {exc}", err=True)
        raise typer.Exit(code=2)

    failed = 0
    for idx, book in enumerate(books, start=1):
        report = verify_book(book)
        if report["ok"]:
            continue
        failed += 1
        for violation in report["violations"]:  # type: ignore[union-attr]
            typer.echo(f"book {idx}: {violation}", err=True)

    if failed:
        typer.echo(f"{failed} of {len(books)} book(s) failed verification")
        raise typer.Exit(code=1)
    typer.echo(f"All {len(books)} book(s) are valid")
    raise typer.Exit(code=0)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
