# voicerag/interface/cli.py

from typing import List
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Confirm, Prompt
from rich import box
from rich.text import Text

from voicerag.application.search_tool import SearchOutcome, SearchSuccess
from voicerag.domain.models import IndexStats, ScoredChunk


console = Console()


def display_welcome_banner() -> None:
    console.print(Panel.fit(
        "[bold cyan]🎙 Voice RAG Document Console[/bold cyan]\n"
        "[dim]Keyword retrieval over your documents[/dim]",
        box=box.DOUBLE,
        border_style="cyan",
    ))


def display_stats(stats: IndexStats) -> None:
    if stats.total_documents == 0:
        console.print(
            "\n[yellow]ℹ[/yellow] No documents indexed. Add .pdf, .docx, .doc or .txt "
            "files to the assets folder, or upload them through the API.\n"
        )
        return

    table = Table(title="Indexed documents", box=box.SIMPLE_HEAVY)
    table.add_column("Document", style="bold white")
    table.add_column("Chunks", justify="right")
    for doc in stats.documents:
        table.add_row(doc.file_name, str(doc.chunk_count))

    console.print(table)
    console.print(
        f"[green]✓[/green] [bold]{stats.total_documents}[/bold] documents, "
        f"[bold]{stats.total_chunks}[/bold] chunks ready for search.\n"
    )


def prompt_for_query() -> str:
    """Ask until the user types something other than whitespace."""
    while True:
        query = Prompt.ask("\n[bold yellow]🔎 Search your documents[/bold yellow]").strip()
        if query:
            return query
        console.print("[dim]Type a few words to search for.[/dim]")


def display_results(query: str, results: List[ScoredChunk]) -> None:
    console.print(f"\n[bold]Results for:[/bold] [italic]\"{query}\"[/italic]\n")

    if not results:
        console.print("[dim]No relevant documents found for your query.[/dim]")
        return

    for rank, result in enumerate(results, start=1):
        score_color = _score_to_color(result.relevance)
        score_display = f"[{score_color}]{result.relevance:.2f}[/{score_color}]"

        panel_content = Text()
        panel_content.append("📄 Source: ", style="dim")
        panel_content.append(result.source, style="bold white")
        panel_content.append("\n🎯 Relevance: ")
        panel_content.append_text(Text.from_markup(score_display))
        panel_content.append(f"\n\n{result.content}")

        console.print(Panel(
            panel_content,
            title=f"[bold]#{rank}[/bold]",
            border_style=score_color,
            box=box.ROUNDED,
            padding=(1, 2),
        ))


def display_tool_outcome(outcome: SearchOutcome) -> None:
    """Show what the conversation layer would receive from search_documents."""
    payload = outcome.to_payload()
    if isinstance(outcome, SearchSuccess):
        style = "green"
    elif outcome.status == "no_results":
        style = "yellow"
    else:
        style = "red"
    console.print(f"[dim]tool status:[/dim] [{style}]{payload['status']}[/{style}] - {payload['message']}")


def display_error(message: str) -> None:
    console.print(Panel(message, title="[bold red]Error[/bold red]", border_style="red", box=box.ROUNDED))


def ask_continue() -> bool:
    return Confirm.ask("\n[dim]Run another search?[/dim]", default=True)


# Lower bound of each relevance band, best first.
RELEVANCE_BANDS = ((0.75, "green"), (0.5, "yellow"))


def _score_to_color(score: float) -> str:
    for threshold, color in RELEVANCE_BANDS:
        if score >= threshold:
            return color
    return "red"
