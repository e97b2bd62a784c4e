#!/usr/bin/env python3
"""Simulate a cost segregation dialogue end-to-end in the terminal.

Builds a catalog for one property category, drives a FlowEngine through it,
and prints every question, the answer given, and the final allocation
report.  Answers are generated automatically (``--random`` on by default,
``--no-random`` for fixed answers) or typed in with ``--interactive``.

Usage::

    # Default run (combined flavor, commercial property, random answers)
    python scripts/simulate_dialogue.py

    # Tax questions only, fixed answers, pinned wording
    python scripts/simulate_dialogue.py -c industrial -f tax_only --no-random --seed 3

    # Answer the questions yourself
    python scripts/simulate_dialogue.py --interactive
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the src/ layout is importable without installing the package.
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from rich.console import Console  # noqa: E402
from rich.panel import Panel  # noqa: E402
from rich.prompt import Prompt  # noqa: E402
from rich.table import Table  # noqa: E402

from costseg_flow.allocation import AllocationCalculator  # noqa: E402
from costseg_flow.catalog import build_catalog  # noqa: E402
from costseg_flow.constants import CATEGORIES, FLAVORS  # noqa: E402
from costseg_flow.engine import FlowEngine  # noqa: E402
from costseg_flow.models.question import Question  # noqa: E402
from costseg_flow.models.session import QuestionStep  # noqa: E402
from costseg_flow.render import RenderManager, format_currency  # noqa: E402
from costseg_flow.validation import validate_answer  # noqa: E402

console = Console()

# ---------------------------------------------------------------------------
# Fixed answers for free-text and numeric questions, keyed by target field
# ---------------------------------------------------------------------------

_FIXED_ANSWERS: dict[str, str] = {
    "depreciableBasis": "500000",
    "purchasePrice": "650000",
    "placedInServiceDate": "01/15/2024",
    "improvementCosts": "25000",
    "exchangeCarryoverBasis": "310000",
    "inheritedValuation": "600000",
    "flooringTypes": "Polished concrete and carpet tile",
    "lightingTypes": "LED fixtures throughout",
    "siteWorkDetails": "Parking lot, landscaping, site lighting",
    "specialtySystemsDetails": "Security system, fire suppression",
    "specialEquipment": "Commercial kitchen equipment",
    "loadingDocks": "4",
    "craneDetails": "10-ton bridge crane",
    "commercialSpaceShare": "40",
}

_RANDOM_TEXT = [
    "None",
    "Standard finishes",
    "Mixed materials",
    "Custom installation",
]


def generate_answer(question: Question, rng: random.Random, *, randomize: bool) -> str:
    """Pick an answer for ``question`` that passes validation."""
    if question.options:
        return rng.choice(question.options) if randomize else question.options[0]

    field = question.target_field or question.id
    if question.question_type == "numeric":
        if randomize:
            low = 0 if question.allows_zero else 1
            return str(rng.randint(low, 2_000) * 1_000)
        return _FIXED_ANSWERS.get(field, "100000")
    if question.question_type == "date":
        if randomize:
            return f"{rng.randint(1, 12):02d}/{rng.randint(1, 28):02d}/{rng.randint(2018, 2025)}"
        return _FIXED_ANSWERS[field]
    if randomize:
        return rng.choice(_RANDOM_TEXT)
    return _FIXED_ANSWERS.get(field, "Not sure")


def ask(question: Question) -> str:
    """Prompt on the terminal until the answer passes validation."""
    while True:
        if question.options:
            raw = Prompt.ask("Answer", choices=list(question.options))
        else:
            raw = Prompt.ask("Answer")
        try:
            return validate_answer(question, raw)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def log_question(step: QuestionStep) -> None:
    q = step.question
    console.print(
        f"\n[bold cyan][{step.position + 1}/{step.total}] {step.phase_name}[/bold cyan]"
        f" [dim]({q.id} -- {q.question_type})[/dim]"
    )
    console.print(f" [bold]Q[/bold] {q.text}")
    if q.options:
        console.print(f"   [dim]Options: {', '.join(q.options)}[/dim]")


def print_report(report) -> None:
    table = Table(title="Cost Allocation")
    table.add_column("Bucket")
    table.add_column("Value", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Years", justify="right")
    table.add_column("Annual", justify="right")
    for name, bucket in (
        ("Personal property", report.cost_allocation.personal_property),
        ("Land improvements", report.cost_allocation.land_improvements),
        ("Real property", report.cost_allocation.real_property),
    ):
        table.add_row(
            name,
            format_currency(bucket.value),
            f"{bucket.percentage:.1f}",
            f"{bucket.depreciation_period:g}",
            format_currency(bucket.annual_depreciation),
        )
    console.print(table)

    s = report.summary
    console.print(
        f"First-year benefit: [bold]{format_currency(s.first_year_benefit)}[/bold]  "
        f"Estimated savings at {s.tax_rate:g}%: "
        f"[bold green]{format_currency(s.estimated_tax_savings)}[/bold green]"
    )
    if report.adjustments_applied:
        console.print(f"Adjustments: {', '.join(report.adjustments_applied)}")


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

def run_simulation(
    category: str,
    flavor: str,
    *,
    seed: int | None,
    randomize: bool,
    interactive: bool,
) -> int:
    rng = random.Random(seed)
    catalog = build_catalog(category, flavor, seed=seed)
    engine = FlowEngine(RenderManager())

    console.print(Panel(
        f"category=[bold]{category}[/bold]  flavor=[bold]{flavor}[/bold]  "
        f"questions={len(catalog)}  seed={seed}",
        title="Cost segregation dialogue",
    ))

    step = engine.start(catalog)
    while step.type == "question":
        log_question(step)
        question = engine.current_question
        if interactive:
            answer = ask(question)
        else:
            answer = validate_answer(
                question, generate_answer(question, rng, randomize=randomize)
            )
            console.print(f" [bold]A[/bold] {answer}")
        step = engine.submit(answer)

    console.print(Panel(step.recap, title="Recap"))
    report = AllocationCalculator().calculate(step.responses, category)
    print_report(report)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate the cost segregation dialogue in the terminal.",
    )
    parser.add_argument(
        "-c", "--category",
        default="commercial",
        help=f"Property category (default: commercial). Known: {', '.join(CATEGORIES)}",
    )
    parser.add_argument(
        "-f", "--flavor",
        choices=FLAVORS,
        default="combined",
        help="Catalog flavor (default: combined)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for wording selection and random answers",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise generated answers (default: on). Use --no-random for fixed answers.",
    )
    parser.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Type the answers instead of generating them",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show engine debug logs (skipped questions)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    sys.exit(run_simulation(
        args.category,
        args.flavor,
        seed=args.seed,
        randomize=args.random,
        interactive=args.interactive,
    ))


if __name__ == "__main__":
    main()
