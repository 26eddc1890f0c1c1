"""
CLI Main - Typer command-line interface.
========================================

Commands:
- status: Show pipeline status
- init: Build the vector index from the syllabus
- query: Ask a question about the course
- info: Show system configuration
"""

from typing import Optional

import typer
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from syllabus_rag.shared.logging import get_console, get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="syllabus-rag",
    help="""📚 Syllabus RAG - Course teaching-assistant Q&A over a syllabus

Answers student questions about a course syllabus by retrieving the most
relevant pieces of course text and grounding an LLM answer on them.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

COMMANDS OVERVIEW:

  status   Show whether the index is built and the model is loaded

  init     Build (or rebuild) the vector index
           --real-source      Scrape the course website (falls back to fixtures)

  query    Ask a question about the course
           -k, --top-k        Number of chunks to retrieve (default: 3)
           --no-sources       Hide source chapters
           --plain            Print the answer with its sources as plain text

  info     Show system configuration

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

QUICK START:

  syllabus-rag init                       # Step 1: Build the index
  syllabus-rag query "期中考试什么时候"      # Step 2: Ask questions

Use 'syllabus-rag <command> --help' for detailed command options.
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = get_console()


def _build_pipeline():
    """Create the configured pipeline, exiting on configuration errors."""
    from syllabus_rag.rag.pipeline import create_pipeline
    from syllabus_rag.shared.errors import ConfigurationError
    from syllabus_rag.shared.logging import setup_logging_from_settings

    setup_logging_from_settings()

    try:
        return create_pipeline()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Status Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def status():
    """
    🔎 Show pipeline status.

    A fresh process always starts uninitialized; the table also shows how
    many entries the configured vector index already holds.
    """
    pipeline = _build_pipeline()
    pipeline_status = pipeline.status()

    table = Table(title="Pipeline Status", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Initialized", "✓" if pipeline_status.is_initialized else "✗")
    table.add_row("Embedding model loaded", "✓" if pipeline_status.has_embedding_model else "✗")
    table.add_row("Phase", str(pipeline_status.phase))
    table.add_row("Indexed chunks (this run)", str(pipeline_status.indexed_chunks))
    try:
        index_count = str(pipeline.index.count)
    except Exception as e:
        logger.warning(f"Could not read index size: {e}")
        index_count = "unavailable"
    table.add_row("Index entries", index_count)

    embedder_info = pipeline.embedder.get_info()
    table.add_row(
        "Embedding provider",
        f"{embedder_info['provider']} / {embedder_info['model']} (dims={embedder_info['dimensions']})",
    )
    if "device" in embedder_info:
        table.add_row("Embedding device", str(embedder_info["device"]))
    if pipeline_status.last_error:
        table.add_row("Last error", pipeline_status.last_error)

    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Init Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def init(
    real_source: bool = typer.Option(
        False,
        "--real-source",
        help="Scrape the course website instead of using the built-in fixture sections.",
    ),
):
    """
    📊 Build the vector index from syllabus sections.

    Chunks the sections, embeds the chunks and writes them to the configured
    vector store. Re-running replaces the previous build.

    Examples:
        syllabus-rag init                 # Index the built-in fixture sections
        syllabus-rag init --real-source   # Scrape the course website
    """
    from syllabus_rag.shared.errors import SyllabusRAGError

    pipeline = _build_pipeline()

    console.print(Panel(
        f"[bold]Indexing Configuration[/bold]\n"
        f"Source: {'course website' if real_source else 'fixture sections'}\n"
        f"Embedding model: {pipeline.embedder.model_name}\n"
        f"Vector store: {pipeline.index.backend_name}",
        title="📊 Init",
    ))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Building index...", total=None)
        try:
            count = pipeline.initialize_rag(use_real_source=real_source)
        except SyllabusRAGError as e:
            progress.remove_task(task)
            console.print(f"[red]✗ Index build failed: {e}[/red]")
            raise typer.Exit(1)
        progress.remove_task(task)

    console.print(f"\n[bold green]✓ Indexed {count} chunks[/bold green]")


# ─────────────────────────────────────────────────────────────────────────────
# Query Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def query(
    question: str = typer.Argument(
        ...,
        help="Natural language question about the course (wrap in quotes).",
    ),
    top_k: Optional[int] = typer.Option(
        None,
        "--top-k", "-k",
        help="Number of chunks to retrieve. Default: retrieval.top_k from config.",
    ),
    show_sources: bool = typer.Option(
        True,
        "--sources/--no-sources",
        help="Display the source chapters used to generate the answer.",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print the answer and its sources as plain text.",
    ),
):
    """
    💬 Ask a question about the course.

    Builds the index from the fixture sections first if needed.

    Examples:
        syllabus-rag query "期中考试什么时候"
        syllabus-rag query "Lab 0 什么时候截止" -k 5
    """
    from syllabus_rag.rag.prompts import format_answer_with_sources

    pipeline = _build_pipeline()

    if plain:
        result = pipeline.query(question, top_k=top_k)
        sources = result.sources if show_sources else []
        typer.echo(format_answer_with_sources(result.answer, sources))
        return

    console.print(f"\n[bold]Question:[/bold] {question}\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Searching syllabus...", total=None)
        result = pipeline.query(question, top_k=top_k)
        progress.remove_task(task)

    console.print(Panel(result.answer, title="💬 Answer", border_style="green"))
    console.print(f"\n[dim]Confidence: {result.confidence:.3f}[/dim]")

    if show_sources and result.sources:
        console.print("\n[bold]📚 Sources:[/bold]")
        table = Table(show_header=True)
        table.add_column("#", justify="right")
        table.add_column("Chapter", style="cyan")
        table.add_column("Type")
        table.add_column("Week", justify="right")
        table.add_column("Score", justify="right")

        for i, hit in enumerate(result.sources, 1):
            metadata = hit.chunk.metadata
            table.add_row(
                str(i),
                hit.chapter,
                metadata.type.value if metadata.type else "-",
                str(metadata.week) if metadata.week is not None else "-",
                f"{hit.score:.3f}",
            )

        console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Info Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def info():
    """
    ℹ️ Show system information and configuration.

    Displays:
      • Version information
      • Embedding, vector store and completion settings
      • Whether API keys are set
    """
    from syllabus_rag import __version__
    from syllabus_rag.shared.config import DEFAULT_CONFIG_FILE, get_settings

    settings = get_settings()

    console.print(Panel(
        f"[bold]Syllabus RAG[/bold]\n"
        f"Version: {__version__}\n"
        f"Course: {settings.course.name}\n"
        f"Config: {DEFAULT_CONFIG_FILE}",
        title="ℹ️ Info",
    ))

    table = Table(show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    backend = settings.get_effective_vector_backend()
    provider = settings.get_effective_completion_provider()

    table.add_row("Chunk max length", str(settings.chunking.max_length))
    table.add_row("Embedding model", settings.get_effective_embedding_model())
    table.add_row("Embedding device", settings.embeddings.device)
    table.add_row("Vector store", backend)
    if backend == "chroma":
        chroma = settings.vector_store.chroma
        table.add_row("Chroma collection", chroma.collection_name)
        table.add_row("Chroma mode", chroma.mode)
        table.add_row("Chroma directory", str(settings.resolve_path(chroma.persist_dir)))
    elif backend == "pinecone":
        table.add_row("Pinecone index", settings.get_effective_pinecone_index() or "-")
        table.add_row("Pinecone namespace", settings.vector_store.pinecone.namespace or "-")
    table.add_row("Top-k", str(settings.get_effective_top_k()))
    table.add_row("Completion provider", provider)

    console.print(table)

    console.print("\n[bold]API Keys:[/bold]")
    for name, value in (
        ("XAI_API_KEY", settings.xai_api_key),
        ("GEMINI_API_KEY", settings.gemini_api_key),
        ("PINECONE_API_KEY", settings.pinecone_api_key),
    ):
        mark = "[green]✓ set[/green]" if value else "[yellow]✗ not set[/yellow]"
        console.print(f"  {name}: {mark}")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
