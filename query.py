#!/usr/bin/env python3
"""Ad hoc query runner for the Supper Club service.

Run searches, detail lookups and topic generation without starting the API server.

Usage:
    python query.py search "tofu" --diet Vegan --have "tofu,soy sauce" --exclude peanut
    python query.py recipe local-tofu-stir-fry
    python query.py topics --vibe Friends --people 4 "Italian"
    python query.py --debug search "curry"   # Show full JSON response

Features:
- Same services as the API (provider selection, fallback, scoring)
- Results rendered as a rich table, topics as a copy-ready block
- Debug mode to display full JSON with all fields
"""

import asyncio
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from src.models.models import SearchQuery, TopicRequest
from src.recipes.registry import build_recipe_source
from src.recipes.search import RecipeSearchService
from src.topics.generator import build_topic_service
from src.topics.parsing import format_clipboard_block
from src.utils.config import config
from src.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--debug] <search|recipe|topics> [--diet X] [--have X] [--exclude X] [--vibe X] [--people N] "<text>"'
VALUE_FLAGS = ("--diet", "--have", "--exclude", "--vibe", "--people")


def parse_args(argv: List[str]) -> tuple[bool, str, Dict[str, List[str]], str]:
    """Split argv into (debug, command, flag values, free text).

    Raises:
        ValueError: On unknown flags, missing values or a missing command.
    """
    debug = False
    options: Dict[str, List[str]] = {}
    words: List[str] = []
    command: Optional[str] = None
    index = 0

    while index < len(argv):
        arg = argv[index]
        if arg == "--debug":
            debug = True
        elif arg in VALUE_FLAGS:
            index += 1
            if index >= len(argv):
                raise ValueError(f"{arg} flag requires a value")
            options.setdefault(arg[2:], []).append(argv[index])
        elif arg.startswith("--"):
            raise ValueError(f"Unknown flag: {arg}")
        elif command is None:
            command = arg
        else:
            words.append(arg)
        index += 1

    if command not in ("search", "recipe", "topics"):
        raise ValueError("Command must be one of: search, recipe, topics")
    return debug, command, options, " ".join(words)


def print_results(service: RecipeSearchService, query: SearchQuery, debug: bool) -> None:
    results = asyncio.run(service.search(query))
    if debug:
        console.print_json(data=[item.model_dump(mode="json") for item in results])
        return
    if not results:
        console.print("[yellow]No recipes found[/yellow]")
        return

    table = Table(title=f"Recipes from {service.source.name}")
    table.add_column("Score", justify="right")
    table.add_column("Title")
    table.add_column("Cuisine")
    table.add_column("Minutes", justify="right")
    table.add_column("Diet")
    table.add_column("Id", style="dim")
    for item in results:
        table.add_row(
            f"{item.match_score or 0:.3f}",
            item.title,
            item.cuisine,
            str(item.time_minutes),
            ", ".join(flag.value for flag in item.diet_flags),
            item.id,
        )
    console.print(table)


def print_recipe(service: RecipeSearchService, recipe_id: str, debug: bool) -> None:
    recipe = asyncio.run(service.get_by_id(recipe_id))
    if recipe is None:
        console.print(f"[red]✗ Recipe not found: {recipe_id}[/red]")
        sys.exit(1)
    if debug:
        console.print_json(data=recipe.model_dump(mode="json"))
        return

    console.print(f"[bold]{recipe.title}[/bold] [dim]({recipe.cuisine}, {recipe.time_minutes} min)[/dim]")
    if recipe.description:
        console.print(recipe.description)
    console.print("\n[bold cyan]Ingredients[/bold cyan]")
    for line in recipe.ingredients:
        console.print(f"  • {line}")
    console.print("\n[bold cyan]Steps[/bold cyan]")
    for number, step in enumerate(recipe.steps, start=1):
        console.print(f"  {number}. {step}")


def print_topics(request: TopicRequest, debug: bool) -> None:
    service = build_topic_service(config)
    topics = asyncio.run(service.generate(request, identifier="cli"))
    if debug:
        console.print_json(data=topics.model_dump(mode="json"))
        return
    console.print(format_clipboard_block(topics))
    console.print(f"\n[dim]source: {topics.source}[/dim]")


def run_query(argv: List[str]) -> None:
    """Execute one ad hoc command and print the result."""
    try:
        debug, command, options, text = parse_args(argv)
    except ValueError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        print(USAGE)
        sys.exit(1)

    try:
        if command == "topics":
            # Free text is a theme such as a cuisine; --vibe takes precedence
            vibe = options["vibe"][-1] if "vibe" in options else (text or "Friends")
            request = TopicRequest(vibe=vibe, people=int(options.get("people", ["2"])[-1]))
            print_topics(request, debug)
            return

        service = RecipeSearchService(build_recipe_source(config))
        if command == "recipe":
            if not text:
                raise ValueError("recipe command requires an id")
            print_recipe(service, text, debug)
            return

        query = SearchQuery(
            q=text or None,
            diet=options.get("diet", []),
            have=options.get("have", []),
            exclude=options.get("exclude", []),
            people=int(options.get("people", ["2"])[-1]),
        )
        logger.info(f"Running search: {query.model_dump(exclude_none=True)}")
        print_results(service, query, debug)

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print('  python query.py search "curry" --diet Vegan')
        print('  python query.py search --have "tofu,soy sauce" --exclude peanut')
        print("  python query.py recipe local-tofu-stir-fry")
        print('  python query.py topics --vibe Kids --people 4')
        print('  python query.py topics "Italian"')
        sys.exit(1)

    run_query(sys.argv[1:])
