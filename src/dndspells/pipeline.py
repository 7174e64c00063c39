"""Scrape spells from the wiki and store them in Notion.

Usage:
    dndspells                         # Scrape every spell on the listing page
    dndspells fireball shield         # Scrape specific spell identifiers
    dndspells --dry-run --limit 20    # Write JSON files instead of Notion
    dndspells --list                  # Only show the discovered identifiers
"""

import argparse
import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import ConfigError, ScrapeConfig
from .discover import display_ids_summary, fetch_spell_ids
from .fetch import FetchError, fetch_spell_text
from .logger import PipelineLogger
from .parse import ParseError, SpellExcluded, extract_spell
from .store import JsonStore, NotionStore, SpellStore, StoreError

console = Console()

# Per-spell outcomes
STORED = "stored"
EXISTS = "exists"
EXCLUDED = "excluded"
REJECTED = "rejected"
FAILED = "failed"


@dataclass
class ScrapeContext:
    """Shared collaborators for a scrape run."""

    config: ScrapeConfig
    client: httpx.Client
    store: SpellStore
    logger: PipelineLogger


def process_spell(identifier: str, ctx: ScrapeContext) -> str:
    """Fetch, parse and store a single spell.

    Errors are logged against the identifier and never raised, so one bad
    page can't stop the batch.

    Returns:
        Outcome: STORED, EXISTS, EXCLUDED, REJECTED or FAILED
    """
    try:
        return _process_spell(identifier, ctx)
    except Exception as e:
        ctx.logger.log_failure(identifier, f"Unexpected error: {type(e).__name__}: {e}")
        console.print(f"[red]  ✗ {identifier}:[/red] unexpected {type(e).__name__}: {e}")
        return FAILED


def _process_spell(identifier: str, ctx: ScrapeContext) -> str:
    try:
        text = fetch_spell_text(identifier, ctx.client, ctx.config.base_url)
    except FetchError as e:
        ctx.logger.log_failure(identifier, str(e))
        console.print(f"[red]  ✗ {identifier}:[/red] {e}")
        return FAILED

    try:
        record = extract_spell(text)
    except SpellExcluded as e:
        ctx.logger.log_skip(identifier, str(e))
        console.print(f"[dim]  ⊘ {identifier}: {e}[/dim]")
        return EXCLUDED
    except ParseError as e:
        ctx.logger.log_skip(identifier, f"unparsable: {e}")
        ctx.logger.log_detail(f"### {identifier}\n\n```\n{text}\n```\n")
        console.print(f"[yellow]  ⚠ {identifier}:[/yellow] {e}")
        return REJECTED

    try:
        if ctx.store.exists(record.name):
            ctx.logger.log_skip(identifier, "already stored")
            console.print(f"[dim]  ⊘ {record.name}: already stored[/dim]")
            return EXISTS
        ctx.store.store(record)
    except StoreError as e:
        ctx.logger.log_failure(identifier, f"Error adding {record.name}: {e}")
        console.print(f"[red]  ✗ {record.name}:[/red] {e}")
        return FAILED

    ctx.logger.log_success(identifier, f"{record.name} ({record.level} {record.school})")
    console.print(f"[green]  ✓ {record.name}[/green]")
    return STORED


async def run_batch(
    identifiers: list[str],
    ctx: ScrapeContext,
    on_done: Callable[[str, str], None] | None = None,
) -> dict[str, str]:
    """Process spells concurrently, at most config.workers at a time.

    Args:
        identifiers: Spell identifiers to process
        ctx: Scrape context
        on_done: Called with (identifier, outcome) as each spell finishes

    Returns:
        Dictionary mapping identifier to outcome
    """
    semaphore = asyncio.Semaphore(ctx.config.workers)
    loop = asyncio.get_running_loop()

    async def run_one(identifier: str) -> tuple[str, str]:
        async with semaphore:
            # Blocking HTTP calls run in the thread pool
            outcome = await loop.run_in_executor(None, process_spell, identifier, ctx)
            if ctx.config.delay > 0:
                await asyncio.sleep(ctx.config.delay)
        if on_done:
            on_done(identifier, outcome)
        return identifier, outcome

    results = await asyncio.gather(*(run_one(i) for i in identifiers))
    return dict(results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape D&D 5e spells from wikidot into Notion")
    parser.add_argument("ids", nargs="*", help="Spell identifiers (default: all spells on the listing page)")
    parser.add_argument("--limit", type=int, help="Only process the first N spells")
    parser.add_argument("--workers", type=int, help="Max spells processed concurrently")
    parser.add_argument("--delay", type=float, help="Pause after each spell, in seconds")
    parser.add_argument("--dry-run", action="store_true", help="Write JSON files instead of Notion pages")
    parser.add_argument("--output-dir", type=Path, default=Path("data/spells"), help="JSON output for --dry-run")
    parser.add_argument("--log-dir", type=Path, help="Directory for run reports")
    parser.add_argument("--list", action="store_true", help="List spell identifiers and exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the dndspells command."""
    args = build_parser().parse_args(argv)
    config = ScrapeConfig.from_env(workers=args.workers, delay=args.delay, log_dir=args.log_dir)

    with httpx.Client(timeout=30, follow_redirects=True) as client:
        try:
            ids = args.ids or fetch_spell_ids(client, config.base_url)
            if args.list:
                display_ids_summary(ids)
                return
            store: SpellStore = JsonStore(args.output_dir) if args.dry_run else NotionStore(config, client)
        except (ConfigError, FetchError) as e:
            console.print(f"[red bold]Error:[/red bold] {e}")
            raise SystemExit(1) from e

        if args.limit:
            ids = ids[: args.limit]

        logger = PipelineLogger("scrape", config.log_dir)
        ctx = ScrapeContext(config=config, client=client, store=store, logger=logger)

        console.print("\n[bold]Scraping spells[/bold]")
        console.print(f"Spells to process: {len(ids)}")
        console.print(f"Destination: {args.output_dir if args.dry_run else 'Notion'}\n")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Scraping...", total=len(ids))
            results = asyncio.run(run_batch(ids, ctx, on_done=lambda _i, _o: progress.advance(task)))

    outcomes = list(results.values())
    log_path = logger.write(
        additional_summary={
            "Total spells": len(ids),
            "Excluded": outcomes.count(EXCLUDED),
            "Unparsable": outcomes.count(REJECTED),
            "Already stored": outcomes.count(EXISTS),
        }
    )

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  ✅ Stored: {len(logger.successful)}")
    console.print(f"  ❌ Failed: {len(logger.failed)}")
    console.print(f"  ⊘ Skipped: {len(logger.skipped)}")
    console.print(f"\n[dim]Log saved to: {log_path}[/dim]")

    if logger.failed:
        console.print(f"\n[red]{len(logger.failed)} spells failed[/red]")
        raise SystemExit(1)

    console.print("\n[green]✓ Scrape complete[/green]")


if __name__ == "__main__":
    main()
