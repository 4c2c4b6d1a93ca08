"""CLI interface for ItemForge."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .core.discovery import discover_existing_items, tag_item
from .core.errors import InputValidationError
from .core.generator import ItemGenerator
from .core.pricing import PRICING
from .core.prompts import build_system_prompt, build_user_prompt
from .core.schema import extract_schema, generate_json_template, generate_schema_description, import_target
from .core.strategy import resolve_strategy
from .models.config import Settings
from .models.generation import Blueprint, DuplicateStrategy, GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="itemforge",
    help="ItemForge - generate typed items from pydantic models with an LLM"
)
console = Console()


def setup_logging(log_level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler("itemforge.log"),
            logging.StreamHandler()
        ]
    )


def load_target(target: str):
    try:
        return import_target(target)
    except InputValidationError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def schema(
    target: str = typer.Argument(..., help="Target model, e.g. itemforge.samples.items:Armor")
):
    """Show the schema description and JSON template for a model."""
    type_schema = extract_schema(load_target(target))
    console.print(Panel(Text(generate_schema_description(type_schema)), title=type_schema.type_name,
                        border_style="cyan"))
    console.print(Panel(Text(generate_json_template(type_schema)), title="JSON Template", border_style="green"))


@app.command()
def prompt(
    target: str = typer.Argument(..., help="Target model import path"),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Number of items (default: DEFAULT_BATCH_SIZE)"),
    context: str = typer.Option("", "--context", "-c", help="Additional generation context"),
    strategy: Optional[DuplicateStrategy] = typer.Option(
        None, "--strategy", "-s", help="Duplicate strategy override"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Discovery scope override"),
):
    """Print the prompts a generation would send, without calling the service."""
    settings = Settings()
    defaults = settings.generator_config
    if count is None:
        count = defaults.default_batch_size
    type_schema = extract_schema(load_target(target))
    resolved = resolve_strategy(strategy, scope, defaults)

    existing = []
    if resolved.duplicate_strategy != DuplicateStrategy.IGNORE:
        existing = discover_existing_items(resolved.discovery_scope, type_schema.type_name)

    user_prompt = build_user_prompt(
        type_schema,
        count,
        additional_context=context,
        existing_items=existing,
        strategy=resolved.duplicate_strategy,
        project_context=defaults.project_context(),
    )
    console.print(Panel(Text(build_system_prompt()), title="System", border_style="blue"))
    console.print(Panel(Text(user_prompt), title="User", border_style="green"))


@app.command()
def generate(
    target: Optional[str] = typer.Argument(None, help="Target model import path"),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Number of items (default: DEFAULT_BATCH_SIZE)"),
    context: str = typer.Option("", "--context", "-c", help="Additional generation context"),
    strategy: Optional[DuplicateStrategy] = typer.Option(
        None, "--strategy", "-s", help="Duplicate strategy override"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Discovery scope override"),
    blueprint: Optional[Path] = typer.Option(None, "--blueprint", "-b", help="Blueprint JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write items to a JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Generate items and print (or save) them."""
    settings = Settings()
    setup_logging(settings.log_level if verbose else "ERROR")
    if count is None:
        count = settings.default_batch_size

    if blueprint is None and target is None:
        console.print("[red]✗[/red] Provide a TARGET or --blueprint")
        raise typer.Exit(1)

    async def _generate() -> GenerationResult:
        generator = ItemGenerator(settings)
        if blueprint is not None:
            try:
                loaded = Blueprint.load(blueprint)
            except (OSError, ValueError) as e:
                console.print(f"[red]✗[/red] Failed to load blueprint: {escape(str(e))}")
                raise typer.Exit(1)
            return await generator.generate_from_blueprint(loaded, count)

        request = GenerationRequest.batch(
            load_target(target),
            count,
            context,
            duplicate_strategy=strategy,
            discovery_scope=scope,
        )
        return await generator.generate(request)

    result = asyncio.run(_generate())
    display_result(result)

    if not result.success:
        raise typer.Exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            records = [tag_item(item.to_dict(), type(item.instance).__name__) for item in result.items]
            json.dump(records, f, indent=2, ensure_ascii=False)
        console.print(f"[green]✓[/green] Saved {len(result.items)} item(s) to {output}")


@app.command()
def models():
    """Show known models and their pricing."""
    table = Table(title="Model Pricing (USD per 1M tokens)")
    table.add_column("Model", style="cyan")
    table.add_column("Input", style="green")
    table.add_column("Output", style="yellow")
    for name, (input_price, output_price) in PRICING.items():
        table.add_row(name, f"{input_price:.2f}", f"{output_price:.2f}")
    console.print(table)


def display_result(result: GenerationResult):
    """Render a generation result."""
    if not result.success:
        console.print(f"[red]✗[/red] Generation failed: {escape(result.error_message)}")
        for line in result.diagnostics:
            console.print(f"  [dim]{escape(line)}[/dim]")
        return

    console.print(f"[green]✓[/green] Generated {len(result.items)} item(s)")
    for item in result.items:
        console.print(Panel(json.dumps(item.to_dict(), indent=2, ensure_ascii=False),
                            title=item.name, border_style="green"))

    if result.diagnostics:
        console.print(f"[yellow]⚠[/yellow] {len(result.diagnostics)} element(s) could not be recovered:")
        for line in result.diagnostics:
            console.print(f"  [dim]{escape(line)}[/dim]")

    console.print(f"Model: {result.model}  Tokens: {result.total_tokens} ({result.prompt_tokens} prompt / "
                  f"{result.completion_tokens} completion)  Cost: ${result.estimated_cost:.4f}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
