# main.py

import argparse
import asyncio
import sys

from voicerag.application.rag_service import RAGService, build_rag_service
from voicerag.application.search_tool import build_outcome
from voicerag.config import get_settings
from voicerag.domain.interfaces import DocumentSourcePort
from voicerag.infrastructure.asset_source import DirectorySource, HttpAssetSource
from voicerag.infrastructure.logging_setup import configure_logging
from voicerag.interface.cli import (
    console,
    display_welcome_banner,
    display_stats,
    prompt_for_query,
    display_results,
    display_tool_outcome,
    display_error,
    ask_continue,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search your documents from the terminal.")
    parser.add_argument(
        "--source",
        choices=["directory", "manifest"],
        default="directory",
        help="Load documents from the local assets folder or from the HTTP manifest.",
    )
    parser.add_argument("--assets-dir", help="Override the assets folder.")
    parser.add_argument("--top-k", type=int, help="Number of results per query.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, console=console)

    display_welcome_banner()

    # ── 1. Compose the service ───────────────────────────────────────────────
    source: DocumentSourcePort
    if args.source == "manifest":
        source = HttpAssetSource(
            manifest_url=settings.manifest_url,
            assets_base_url=settings.assets_base_url,
            timeout=settings.request_timeout,
        )
    else:
        source = DirectorySource(args.assets_dir or settings.assets_directory)

    service = build_rag_service(settings, source=source)
    top_k = args.top_k or settings.default_top_k
    if top_k < 1:
        display_error("--top-k must be at least 1.")
        sys.exit(1)

    # ── 2. Initial ingestion ─────────────────────────────────────────────────
    stats = asyncio.run(service.initialize())
    display_stats(stats)

    # ── 3. Interactive search loop ────────────────────────────────────────────
    while True:
        query = prompt_for_query()
        _run_query(service, query, top_k)

        if not ask_continue():
            break


def _run_query(service: RAGService, query: str, top_k: int) -> None:
    try:
        results = asyncio.run(service.search(query, top_k))
    except ValueError as error:
        display_error(str(error))
        return

    display_results(query, results)
    display_tool_outcome(build_outcome(query, results))


if __name__ == "__main__":
    main()
