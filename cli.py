#!/usr/bin/env python3
import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from katori.core.config import settings
from katori.core.exceptions import KatoriError
from katori.core.schemas.nutrition import NUTRIENT_FIELDS, EstimationResult
from katori.services.estimation_service import EstimationService
from katori.services.ingredient_extractor import IngredientExtractor
from katori.services.llm.factory import get_llm_service
from katori.services.nutrition_csv import convert_nutrition_csv, write_nutrition_db
from katori.services.reference_store import DEFAULT_DATA_DIR, NUTRITION_DB_FILE, load_reference_store

app = typer.Typer(help="Katori Nutrition Estimator CLI")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.DEBUG if verbose else settings.LOG_LEVEL
    )


def build_service(data_dir: Path | None) -> EstimationService:
    store = load_reference_store(data_dir or settings.REFERENCE_DATA_DIR)
    return EstimationService(store, IngredientExtractor(get_llm_service()))


def print_result(result: EstimationResult):
    console.print(f"\n[bold cyan]{result.dish_name}[/bold cyan] ({result.dish_type.value})")
    console.print(f"[bold]Total weight:[/bold] {result.nutrition.total_weight:.1f} g")

    table = Table(title="Nutrition")
    table.add_column("Nutrient", style="cyan")
    table.add_column("Per 100g", style="magenta", justify="right")
    table.add_column("Per katori", style="green", justify="right")
    for nutrient in NUTRIENT_FIELDS:
        table.add_row(
            nutrient,
            f"{getattr(result.nutrition.nutrition_per_100g, nutrient):.2f}",
            f"{getattr(result.nutrition.nutrition_per_serving, nutrient):.2f}"
        )
    console.print(table)

    console.print("\n[bold]Ingredients:[/bold]")
    for ing in result.ingredients:
        console.print(f"  • {ing.ingredient}: {ing.quantity or 'N/A'} {ing.unit or 'N/A'}")

    if result.assumptions:
        console.print("\n[bold yellow]Assumptions:[/bold yellow]")
        for assumption in result.assumptions:
            console.print(f"  • {assumption}")


@app.command(name="estimate")
def estimate(
    dish_name: str = typer.Argument(..., help="Name of the dish"),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help="Reference data directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON result"),
):
    """Estimate nutrition for a single dish."""
    asyncio.run(_estimate(dish_name, data_dir, as_json))


async def _estimate(dish_name: str, data_dir: Path | None, as_json: bool):
    if not dish_name.strip():
        console.print("[red]Error: Dish name is required[/red]")
        raise typer.Exit(1)

    try:
        service = build_service(data_dir)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[cyan]Estimating {dish_name}...", total=None)
            result = await service.estimate(dish_name.strip())

    except KatoriError as e:
        console.print(f"[red]Error: {str(e)}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(result.model_dump_json(by_alias=True))
    else:
        print_result(result)


@app.command(name="batch")
def batch(
    dishes_file: Path = typer.Argument(Path("test-dishes.json"), help="JSON list of {dish, issues}"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Where to write results"),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help="Reference data directory"),
):
    """Estimate every dish in a test file and write results.json and debug-log.txt."""
    asyncio.run(_batch(dishes_file, output_dir, data_dir))


async def _batch(dishes_file: Path, output_dir: Path, data_dir: Path | None):
    if not dishes_file.exists():
        console.print(f"[red]Error: File not found: {dishes_file}[/red]")
        raise typer.Exit(1)

    try:
        test_dishes = json.loads(dishes_file.read_text(encoding="utf-8"))
        service = build_service(data_dir)
    except (json.JSONDecodeError, KatoriError) as e:
        console.print(f"[red]Error: {str(e)}[/red]")
        raise typer.Exit(1)

    results = []
    debug_log = []

    for test_case in test_dishes:
        dish = test_case["dish"]
        console.print(f"\nProcessing: [cyan]{dish}[/cyan]")
        debug_log.append(f"\n=== Processing: {dish} ===")
        debug_log.append(f"Known issues: {', '.join(test_case.get('issues', []))}")

        try:
            result = await service.estimate(dish)
        except KatoriError as e:
            console.print(f"[red]Error processing {dish}: {str(e)}[/red]")
            debug_log.append(f"\nError: {str(e)}")
            continue

        results.append(result.model_dump(mode="json", by_alias=True))

        debug_log.append("\nAssumptions made:")
        debug_log.extend(f"- {assumption}" for assumption in result.assumptions)

        debug_log.append("\nIngredients identified:")
        debug_log.extend(
            f"- {ing.ingredient}: {ing.quantity or 'N/A'} {ing.unit or 'N/A'}"
            for ing in result.ingredients
        )

        debug_log.append("\nNutrition per katori:")
        debug_log.extend(
            f"- {nutrient}: {value:.2f}"
            for nutrient, value in result.nutrition.nutrition_per_serving.model_dump().items()
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / "results.json").write_text(json.dumps(results, indent=2), encoding="utf-8")
    (output_dir / "debug-log.txt").write_text("\n".join(debug_log), encoding="utf-8")

    console.print(
        f"\n[green]Processed {len(results)}/{len(test_dishes)} dishes. "
        f"Check results.json and debug-log.txt in {output_dir}[/green]"
    )


@app.command(name="build-db")
def build_db(
    csv_path: Path = typer.Argument(..., help="Nutrition source CSV"),
    output: Path = typer.Option(
        DEFAULT_DATA_DIR / NUTRITION_DB_FILE, "--output", "-o", help="Output JSON file"
    ),
):
    """Convert the nutrition source CSV into nutrition-db.json."""
    if not csv_path.exists():
        console.print(f"[red]Error: File not found: {csv_path}[/red]")
        raise typer.Exit(1)

    try:
        records = convert_nutrition_csv(csv_path)
        write_nutrition_db(records, output)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error processing nutrition data: {str(e)}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Successfully processed {len(records)} nutrition records into {output}[/green]")


if __name__ == "__main__":
    app()
