"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from resume_fitter.clients.llm_client import LLMClient
from resume_fitter.config import load_config
from resume_fitter.errors import ResumeFitterError, ValidationFailed
from resume_fitter.evidence.repairer import repair_document
from resume_fitter.evidence.validator import validate_document
from resume_fitter.export.pdf_renderer import PdfRenderer, render_html
from resume_fitter.export.snapshot import load_snapshot, make_snapshot, save_snapshot
from resume_fitter.models.evidence import SourceCorpus
from resume_fitter.pipeline.generator import ClaudeGenerator
from resume_fitter.pipeline.orchestrator import TailoringOrchestrator

app = typer.Typer(
    name="resume-fitter",
    help="Evidence-grounded resume and cover letter tailoring, fitted to one page",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def _read_text(path: Path, label: str) -> str:
    if not path.exists():
        console.print(f"[red]{label} file not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _load_corpus(resume: Path, jd: Path, extra: Path | None) -> SourceCorpus:
    return SourceCorpus(
        resume=_read_text(resume, "Resume"),
        job_description=_read_text(jd, "Job description"),
        extra=_read_text(extra, "Extra information") if extra else None,
    )


def _split_terms(terms: str) -> list[str]:
    return [t.strip() for t in terms.split(",") if t.strip()]


@app.command()
def tailor(
    resume: Path = typer.Argument(help="Plain-text resume"),
    jd: Path = typer.Argument(help="Plain-text job description"),
    extra: Path = typer.Option(None, "--extra", "-e", help="Additional information file"),
    terms: str = typer.Option("", "--terms", "-t", help="Comma-separated ATS terms"),
    cover_letter: bool = typer.Option(False, "--cover-letter", help="Generate a cover letter instead"),
    out: Path = typer.Option(Path("./output"), "--out", "-o", help="Output directory"),
    html: bool = typer.Option(False, "--html", help="Also write an HTML preview"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a tailored document and fit it to one page."""
    _setup_logging(verbose)
    corpus = _load_corpus(resume, jd, extra)
    ats_terms = _split_terms(terms)
    config = load_config()

    if verbose:
        console.print(f"[dim]Resume: {len(corpus.resume)} chars[/dim]")
        console.print(f"[dim]Job description: {len(corpus.job_description)} chars[/dim]")
        console.print(f"[dim]ATS terms: {', '.join(ats_terms) or '-'}[/dim]")

    llm = LLMClient(timeout=config.llm.timeout)
    generator = ClaudeGenerator(
        llm,
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
    )
    renderer = PdfRenderer(config.render.engine)
    orchestrator = TailoringOrchestrator(generator, renderer, config=config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Starting...", total=None)

        def on_phase(phase: str, detail: str) -> None:
            progress.update(task, description=detail)

        run = orchestrator.tailor_cover_letter if cover_letter else orchestrator.tailor_resume
        try:
            result = asyncio.run(run(corpus, ats_terms, on_phase=on_phase))
        except ValidationFailed as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(2)
        except ResumeFitterError as exc:
            console.print(f"[red]Tailoring failed: {exc}[/red]")
            raise typer.Exit(1)

    kind = "cover_letter" if cover_letter else "resume"
    snapshot = make_snapshot(
        result.document, result.layout,
        status=result.status.value, page_count=result.page_count,
    )
    snapshot_path = save_snapshot(snapshot, out / f"{kind}.json")
    try:
        pdf_bytes = renderer.render_sync(result.document, result.layout).pdf_bytes
    except ResumeFitterError as exc:
        console.print(f"[red]Render failed: {exc}[/red]")
        console.print(f"[yellow]Snapshot kept: {snapshot_path}[/yellow]")
        raise typer.Exit(1)
    pdf_path = out / f"{kind}.pdf"
    pdf_path.write_bytes(pdf_bytes)

    status_color = "yellow" if result.best_effort else "green"
    table = Table(show_header=False, box=None)
    table.add_row("Status", f"[bold {status_color}]{result.status.value}[/bold {status_color}]")
    table.add_row("Pages", str(result.page_count if result.page_count is not None else "?"))
    table.add_row("Stage", result.stage.value if result.stage else "-")
    table.add_row("Matched terms", str(result.document.matched_term_count))
    table.add_row("Generator calls", str(result.generator_calls))
    table.add_row("Render calls", str(result.render_calls))
    table.add_row("Elapsed", f"{result.elapsed_seconds:.1f}s")
    console.print(Panel(table, title=kind.replace("_", " ").title()))

    tokens = llm.get_token_summary()
    console.print(f"[dim]Tokens: {tokens['input']} in / {tokens['output']} out[/dim]")

    console.print(f"[green]Snapshot saved: {snapshot_path}[/green]")
    console.print(f"[green]PDF saved: {pdf_path}[/green]")

    if html:
        html_path = out / f"{kind}.html"
        html_path.write_text(render_html(result.document, result.layout), encoding="utf-8")
        console.print(f"[green]HTML saved: {html_path}[/green]")


@app.command()
def render(
    snapshot: Path = typer.Argument(help="Snapshot JSON written by 'tailor'"),
    out: Path = typer.Option(None, "--out", "-o", help="Output PDF path"),
) -> None:
    """Re-render a saved snapshot with the layout it was fitted with."""
    if not snapshot.exists():
        console.print(f"[red]Snapshot not found: {snapshot}[/red]")
        raise typer.Exit(1)
    try:
        snap = load_snapshot(snapshot)
    except ValidationError as exc:
        console.print(f"[red]Invalid snapshot: {exc}[/red]")
        raise typer.Exit(1)

    config = load_config()
    try:
        result = PdfRenderer(config.render.engine).render_sync(snap.document, snap.layout)
    except ResumeFitterError as exc:
        console.print(f"[red]Render failed: {exc}[/red]")
        raise typer.Exit(1)

    out = out or snapshot.with_suffix(".pdf")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.pdf_bytes)
    console.print(f"[green]PDF saved: {out} ({result.page_count} page(s))[/green]")


@app.command()
def validate(
    snapshot: Path = typer.Argument(help="Snapshot JSON to check"),
    resume: Path = typer.Argument(help="Plain-text resume the document was built from"),
    jd: Path = typer.Argument(help="Plain-text job description"),
    extra: Path = typer.Option(None, "--extra", "-e", help="Additional information file"),
    repair: bool = typer.Option(False, "--repair", help="Repair spans before validating"),
) -> None:
    """Report every evidence-span issue in a saved document."""
    if not snapshot.exists():
        console.print(f"[red]Snapshot not found: {snapshot}[/red]")
        raise typer.Exit(1)
    corpus = _load_corpus(resume, jd, extra)
    try:
        document = load_snapshot(snapshot).document
    except ValidationError as exc:
        console.print(f"[red]Invalid snapshot: {exc}[/red]")
        raise typer.Exit(1)

    if repair:
        changed = repair_document(document, corpus)
        console.print("[dim]Spans repaired[/dim]" if changed else "[dim]No repairs needed[/dim]")

    result = validate_document(document, corpus)
    if result.valid:
        console.print("[green]All evidence spans are valid.[/green]")
        return

    table = Table(title=f"Validation issues ({len(result.errors)})")
    table.add_column("Location")
    table.add_column("Kind")
    table.add_column("Message")
    for issue in result.errors:
        table.add_row(issue.location, issue.kind.value, issue.message)
    console.print(table)
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
