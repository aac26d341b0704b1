"""PDF table normalizer CLI."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter
from rich.console import Console

from pdfnorm.exceptions import InputError
from pdfnorm.logger import clear_context, logger, set_context
from pdfnorm.models import DocumentItem, PageResult, Payload
from pdfnorm.pipeline import DocumentPipeline

app = typer.Typer(
    name="pdfnorm",
    help="Rebuild text lines and ruled tables from PDF page geometry",
    add_completion=False,
)
console = Console()

_pages_adapter = TypeAdapter(list[PageResult])
_items_adapter = TypeAdapter(list[DocumentItem])
_payloads_adapter = TypeAdapter(list[Payload])


def _output_path(pdf_path: Path, output_dir: Optional[Path], suffix: str) -> Path:
    directory = output_dir or pdf_path.parent
    directory.mkdir(parents=True, exist_ok=True)
    return directory / (pdf_path.stem + suffix)


def _load_pages(pdf_path: Path, skip_bad_pages: bool, verbose: bool) -> list[PageResult]:
    previous_level = logger.level
    if verbose:
        logger.set_level("DEBUG")
    set_context(document=pdf_path.name)
    try:
        return DocumentPipeline().extract_pages(pdf_path, strict=not skip_bad_pages)
    except InputError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        clear_context()
        logger.set_level(previous_level)


def _save(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")
    console.print(f"[green]Saved:[/green] {path}")


def _write_pages(pages: list[PageResult], pdf_path: Path, output_dir: Optional[Path]) -> None:
    path = _output_path(pdf_path, output_dir, ".pages.json")
    _save(path, _pages_adapter.dump_json(pages, indent=2).decode())


def _write_items(pages: list[PageResult], pdf_path: Path, output_dir: Optional[Path]) -> None:
    items = DocumentPipeline().build_items(pages)
    path = _output_path(pdf_path, output_dir, ".items.json")
    _save(path, _items_adapter.dump_json(items, indent=2, exclude_none=True).decode())
    tables = sum(1 for item in items if item.is_table)
    console.print(f"[dim]{len(items)} items, {tables} tables[/dim]")


def _write_text(
    pages: list[PageResult],
    pdf_path: Path,
    output_dir: Optional[Path],
    headers: Optional[list[str]],
    full: bool,
) -> None:
    text = DocumentPipeline().to_text(pages, set_headers=headers, just_header_and_table=not full)
    _save(_output_path(pdf_path, output_dir, ".md"), text)


def _write_payloads(
    pages: list[PageResult],
    pdf_path: Path,
    output_dir: Optional[Path],
    headers: Optional[list[str]],
    full: bool,
) -> None:
    payloads = DocumentPipeline().to_payloads(
        pages, set_headers=headers, just_header_and_table=not full
    )
    path = _output_path(pdf_path, output_dir, ".payloads.json")
    _save(path, _payloads_adapter.dump_json(payloads, indent=2).decode())


PdfArg = typer.Argument(..., help="Path to PDF file to process")
OutputOpt = typer.Option(None, "--output-dir", "-o", help="Output directory (default: next to the PDF)")
HeaderOpt = typer.Option(None, "--header", "-H", help="Column header to use instead of the first row (repeatable)")
FullOpt = typer.Option(False, "--full", help="Keep every line and table instead of header + one table per subdocument")
SkipOpt = typer.Option(False, "--skip-bad-pages", help="Skip pages that cannot be decoded")
VerboseOpt = typer.Option(False, "--verbose", "-v", help="Log per-page details")


@app.command()
def pages(
    pdf_path: Path = PdfArg,
    output_dir: Optional[Path] = OutputOpt,
    skip_bad_pages: bool = SkipOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """Write per-page cell blocks and free lines."""
    console.print(f"[bold blue]Extracting:[/bold blue] {pdf_path}")
    _write_pages(_load_pages(pdf_path, skip_bad_pages, verbose), pdf_path, output_dir)


@app.command()
def items(
    pdf_path: Path = PdfArg,
    output_dir: Optional[Path] = OutputOpt,
    skip_bad_pages: bool = SkipOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """Write the reading-order stream of lines and tables."""
    console.print(f"[bold blue]Normalizing:[/bold blue] {pdf_path}")
    _write_items(_load_pages(pdf_path, skip_bad_pages, verbose), pdf_path, output_dir)


@app.command()
def text(
    pdf_path: Path = PdfArg,
    output_dir: Optional[Path] = OutputOpt,
    header: Optional[list[str]] = HeaderOpt,
    full: bool = FullOpt,
    skip_bad_pages: bool = SkipOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """Write flat text with one labelled block per table row."""
    console.print(f"[bold blue]Rendering text:[/bold blue] {pdf_path}")
    pages_ = _load_pages(pdf_path, skip_bad_pages, verbose)
    _write_text(pages_, pdf_path, output_dir, header, full)


@app.command("json")
def json_payloads(
    pdf_path: Path = PdfArg,
    output_dir: Optional[Path] = OutputOpt,
    header: Optional[list[str]] = HeaderOpt,
    full: bool = FullOpt,
    skip_bad_pages: bool = SkipOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """Write (header, table) payloads as JSON."""
    console.print(f"[bold blue]Rendering payloads:[/bold blue] {pdf_path}")
    pages_ = _load_pages(pdf_path, skip_bad_pages, verbose)
    _write_payloads(pages_, pdf_path, output_dir, header, full)


@app.command()
def convert(
    pdf_path: Path = PdfArg,
    output_dir: Optional[Path] = OutputOpt,
    header: Optional[list[str]] = HeaderOpt,
    full: bool = FullOpt,
    skip_bad_pages: bool = SkipOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """Write pages, items, text and payloads in one pass."""
    console.print(f"[bold blue]Processing:[/bold blue] {pdf_path}")
    console.print(f"[dim]Output directory: {output_dir or pdf_path.parent}[/dim]")
    pages_ = _load_pages(pdf_path, skip_bad_pages, verbose)
    _write_pages(pages_, pdf_path, output_dir)
    _write_items(pages_, pdf_path, output_dir)
    _write_text(pages_, pdf_path, output_dir, header, full)
    _write_payloads(pages_, pdf_path, output_dir, header, full)


if __name__ == "__main__":
    app()
