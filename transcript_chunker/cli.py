"""CLI interface for the chunking pipeline."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

from . import __version__
from .aligners import DEFAULT_ALIGNER, create_aligner, list_aligners, resolve_aligner
from .chunker import Chunker, ChunkingReport
from .formatters import FORMATTERS, EXTENSIONS, format_json, format_txt
from .sources import discover_transcript_files, SUPPORTED_EXTENSIONS
from .types import ChunkSettings, Chunk, load_transcription
from .merger import DEFAULT_MIN_CHUNK_MS

app = typer.Typer(
    name="chunk-transcript",
    help="Split ASR transcripts into audio-synchronized learning chunks.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def parse_formats(format_str: str) -> list[str]:
    """Parse comma-separated format string into list of formats."""
    formats = []
    for part in format_str.split(","):
        fmt = part.strip().lower()
        if fmt == "all":
            return list(FORMATTERS.keys())
        if fmt and fmt in FORMATTERS:
            formats.append(fmt)
        elif fmt:
            err_console.print(f"[yellow]Warning: Unknown format '{fmt}', ignoring[/yellow]")
    return formats or ["json"]  # Default to json if nothing valid


def version_callback(value: bool) -> None:
    if value:
        console.print(f"chunk-transcript {__version__}")
        raise typer.Exit()


def list_aligners_callback(value: bool) -> None:
    """Print registered aligners and exit."""
    if value:
        console.print("[bold]Available Aligners:[/bold]\n")
        for info in list_aligners():
            default = " [green](default)[/green]" if info.name == DEFAULT_ALIGNER else ""
            console.print(f"  [cyan]{info.name}[/cyan]{default}")
            if info.aliases:
                console.print(f"    Aliases: {', '.join(info.aliases)}")
            console.print(f"    {info.description}")
            console.print()
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through rich when verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _write_outputs(
    chunks: list[Chunk],
    source_path: Path,
    formats: list[str],
    output: Path | None,
    timestamps: bool,
    settings: ChunkSettings,
    console: Console,
    verbose: bool,
) -> None:
    """Write chunks to files in all requested formats."""
    out_dir = output or source_path.parent

    for fmt in formats:
        out_file = out_dir / (source_path.stem + EXTENSIONS[fmt])

        if fmt == "txt":
            content = format_txt(chunks, timestamps=timestamps)
        elif fmt == "json":
            content = format_json(chunks, settings=settings, source=str(source_path))
        else:
            formatter = FORMATTERS[fmt]
            content = formatter(chunks)

        out_file.write_text(content, encoding="utf-8")

        if verbose:
            console.print(f"  [green]✓[/green] {out_file}")


def _show_dry_run(
    files: list[Path],
    formats: list[str],
    output: Path | None,
    console: Console,
) -> None:
    """Show what files would be processed in dry run mode."""
    console.print(f"[bold]Would process {len(files)} file(s):[/bold]")
    for source_path in files:
        out_dir = output or source_path.parent
        for fmt in formats:
            out_file = out_dir / (source_path.stem + EXTENSIONS[fmt])
            console.print(f"  {source_path} → {out_file}")


def _print_report(source_path: Path, chunks: list[Chunk], report: ChunkingReport, console: Console) -> None:
    """Print per-file alignment statistics."""
    console.print(
        f"  [cyan]{source_path.name}[/cyan]: {report.sentences} sentence(s) → "
        f"{len(chunks)} chunk(s), {report.fallbacks} fallback(s), "
        f"{report.segment_fallbacks} segment-timed, {report.skipped} skipped"
    )
    for text in report.skipped_text:
        console.print(f"    [yellow]skipped:[/yellow] {text}")


def _process_file(
    source_path: Path,
    chunker: Chunker,
    formats: list[str],
    output: Path | None,
    timestamps: bool,
    console: Console,
    err_console: Console,
    verbose: bool,
) -> bool:
    """Process a single transcript file. Returns True on success, False on error."""
    try:
        result = load_transcription(source_path)
        chunks, report = chunker.process_with_report(result)
        _write_outputs(
            chunks, source_path, formats, output, timestamps, chunker.settings, console, verbose
        )
        if verbose:
            _print_report(source_path, chunks, report, console)
        return True
    except Exception as e:
        err_console.print(f"[red]Error processing {source_path}: {e}[/red]")
        return False


def _process_files(
    files: list[Path],
    chunker: Chunker,
    formats: list[str],
    output: Path | None,
    timestamps: bool,
    console: Console,
    err_console: Console,
    verbose: bool,
    fail_fast: bool,
) -> tuple[int, int]:
    """Process all transcript files. Returns (success_count, error_count)."""
    success_count = 0
    error_count = 0

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        disable=not verbose and len(files) == 1,
    ) as progress:
        task = progress.add_task("Chunking...", total=len(files))

        for source_path in files:
            progress.update(task, description=f"[cyan]{source_path.name}[/cyan]")

            if _process_file(
                source_path,
                chunker,
                formats,
                output,
                timestamps,
                console,
                err_console,
                verbose,
            ):
                success_count += 1
            else:
                error_count += 1
                if fail_fast:
                    raise typer.Exit(1)

            progress.advance(task)

    return success_count, error_count


def _print_summary(
    files: list[Path],
    success_count: int,
    error_count: int,
    verbose: bool,
    console: Console,
) -> None:
    """Print processing summary."""
    if len(files) > 1 or verbose:
        console.print()
        console.print(
            f"[bold green]✓ {success_count} file(s) chunked[/bold green]"
            + (f", [bold red]{error_count} error(s)[/bold red]" if error_count else "")
        )


@app.command()
def main(
    inputs: Annotated[
        list[Path],
        typer.Argument(
            help="ASR JSON files or directories to chunk",
            exists=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output", "-o",
            help="Output directory (default: same as input file)",
        ),
    ] = None,
    format: Annotated[
        str,
        typer.Option(
            "--format", "-f",
            help="Output format(s): json, srt, vtt, txt, or 'all'. Comma-separated.",
        ),
    ] = "json",
    min_chunk_ms: Annotated[
        int,
        typer.Option(
            "--min-chunk-ms", "-m",
            help="Merge chunks shorter than this many milliseconds",
        ),
    ] = DEFAULT_MIN_CHUNK_MS,
    sentence_only: Annotated[
        bool,
        typer.Option(
            "--sentences/--clauses",
            help="Split on sentence punctuation only, or on commas too",
        ),
    ] = True,
    aligner: Annotated[
        str,
        typer.Option(
            "--aligner", "-a",
            help="Alignment strategy or alias (see --list-aligners)",
        ),
    ] = DEFAULT_ALIGNER,
    list_aligners_flag: Annotated[
        bool | None,
        typer.Option(
            "--list-aligners",
            callback=list_aligners_callback,
            is_eager=True,
            help="List alignment strategies and exit",
        ),
    ] = None,
    recursive: Annotated[
        bool,
        typer.Option(
            "--recursive", "-r",
            help="Search directories recursively",
        ),
    ] = False,
    timestamps: Annotated[
        bool,
        typer.Option(
            "--timestamps", "-t",
            help="Include timestamps in plain text output",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show what would be processed without chunking",
        ),
    ] = False,
    fail_fast: Annotated[
        bool,
        typer.Option(
            "--fail-fast/--continue-on-error",
            help="Stop on first error vs continue processing",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Show detailed progress and alignment diagnostics",
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Chunk ASR transcripts into JSON, SRT, VTT, or text."""
    _configure_logging(verbose)

    if min_chunk_ms < 0:
        raise typer.BadParameter("Must be 0 or greater", param_hint="--min-chunk-ms")

    try:
        resolve_aligner(aligner)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--aligner")

    formats = parse_formats(format)

    files = discover_transcript_files(inputs, recursive=recursive)

    if not files:
        err_console.print("[red]No transcript files found.[/red]")
        err_console.print(f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}")
        raise typer.Exit(1)

    # Create output directory if specified
    if output:
        output.mkdir(parents=True, exist_ok=True)

    # Dry run: just show what would be processed
    if dry_run:
        _show_dry_run(files, formats, output, console)
        raise typer.Exit(0)

    settings = ChunkSettings(sentence_only=sentence_only, min_chunk_ms=min_chunk_ms)
    chunker = Chunker(settings, create_aligner(aligner))

    if verbose:
        console.print(f"[dim]Aligner: {chunker.aligner.name}, min chunk: {min_chunk_ms}ms[/dim]")

    success_count, error_count = _process_files(
        files,
        chunker,
        formats,
        output,
        timestamps,
        console,
        err_console,
        verbose,
        fail_fast,
    )

    _print_summary(files, success_count, error_count, verbose, console)

    if error_count and not fail_fast:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
