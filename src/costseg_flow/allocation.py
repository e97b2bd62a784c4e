"""AllocationCalculator — turns a completed response snapshot into a cost breakdown.

Steps:
  1. Pick the category's base split from ``data/allocation.yaml``
     (unknown categories use the default category's table).
  2. Apply takeoff adjustments: each matching rule moves its points from
     real property to personal property.
  3. Split the depreciable basis: personal and land-improvement values are
     rounded half-up, real property takes the remainder.
  4. Straight-line annual depreciation per bucket (5 / 15 / 27.5 or 39 years).
  5. First-year benefit = personal annual + bonus share of the 15-year annual;
     estimated savings use the percentage parsed from the tax bracket answer.

``preliminary()`` makes a rougher estimate from the property form alone:
the building value is split by per-category percentages, with older
buildings getting a smaller personal property share.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

from costseg_flow.catalog import load_yaml, normalize_category
from costseg_flow.constants import (
    BONUS_DEPRECIATION_RATE,
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_TAX_RATE,
    EMPTY_ANSWERS,
    LAND_IMPROVEMENT_YEARS,
    NONRESIDENTIAL_REAL_PROPERTY_YEARS,
    PERSONAL_PROPERTY_YEARS,
    RESIDENTIAL_REAL_PROPERTY_YEARS,
)
from costseg_flow.models.allocation import (
    Adjustment,
    AllocationBucket,
    AllocationReport,
    AllocationSummary,
    AllocationTables,
    CostAllocation,
    PreliminaryAnalysis,
    TakeoffsBreakdown,
    TaxInformation,
)

if TYPE_CHECKING:
    from costseg_flow.models.session import PropertyDetails

logger = logging.getLogger(__name__)

DEFAULT_ALLOCATION_PATH = Path(__file__).parent / "data" / "allocation.yaml"

_LEADING_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_TAX_RATE_RE = re.compile(r"(\d+(?:\.\d+)?)%")
_NEGATIVE_ANSWER_RE = re.compile(r"^(?:none|no|n/?a|nothing)\b")
_ANSWER_PUNCTUATION = " \t.!,;:-"


def load_tables(path: str | Path | None = None) -> AllocationTables:
    """Load and validate the allocation tables YAML."""
    raw = load_yaml(Path(path) if path else DEFAULT_ALLOCATION_PATH)
    tables = AllocationTables(**raw)
    if DEFAULT_CATEGORY not in tables.categories:
        raise ValueError(f"Allocation tables must define the '{DEFAULT_CATEGORY}' category")
    if DEFAULT_CATEGORY not in tables.preliminary.categories:
        raise ValueError(
            f"Preliminary rules must define the '{DEFAULT_CATEGORY}' category"
        )
    return tables


def _real_property_years(category: str) -> float:
    if category == "residential":
        return RESIDENTIAL_REAL_PROPERTY_YEARS
    return NONRESIDENTIAL_REAL_PROPERTY_YEARS


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_whole_amount(raw: str | None) -> int:
    """Parse a raw amount answer into whole dollars; 0 when absent or unparsable.

    Currency symbols and thousands separators are ignored and any trailing
    text after the number is dropped ("500,000 USD" -> 500000).
    """
    if not raw:
        return 0
    match = _LEADING_NUMBER_RE.search(raw.replace(",", "").replace("$", ""))
    if match is None:
        return 0
    return int(float(match.group()))


def parse_tax_rate(bracket: str | None) -> float:
    """Extract the percentage from a bracket answer ("24% (Individual: ...)") as a fraction."""
    if bracket:
        match = _TAX_RATE_RE.search(bracket)
        if match:
            return float(match.group(1)) / 100
    return DEFAULT_TAX_RATE / 100


def is_empty_answer(raw: str | None) -> bool:
    """True when a free-text answer means "nothing to report".

    Surrounding punctuation is ignored ("None.") and any answer that opens
    with a negative counts as empty ("No specialized equipment").
    """
    if raw is None:
        return True
    text = raw.strip(_ANSWER_PUNCTUATION).lower()
    return text in EMPTY_ANSWERS or _NEGATIVE_ANSWER_RE.match(text) is not None


class AllocationCalculator:
    """Computes the cost allocation report for a finished dialogue.

    Args:
        tables: preloaded tables; the packaged ``allocation.yaml`` is loaded
            when omitted.
    """

    def __init__(self, tables: AllocationTables | None = None) -> None:
        self._tables = tables or load_tables()

    @property
    def tables(self) -> AllocationTables:
        return self._tables

    def calculate(self, responses: Mapping[str, str], category: str | None) -> AllocationReport:
        """Build the allocation report from raw answers and a property category."""
        cat = normalize_category(category)
        if cat not in self._tables.categories:
            if cat not in CATEGORIES:
                logger.debug("No allocation table for %r, using %s", category, DEFAULT_CATEGORY)
            cat = DEFAULT_CATEGORY
        base = self._tables.categories[cat]

        personal_pct = base.personal_property
        land_pct = base.land_improvements

        applied: list[str] = []
        for adj in self._tables.adjustments:
            if self._matches(adj, responses.get(adj.field)):
                personal_pct += adj.points
                applied.append(f"{adj.field} +{adj.points:g}%")

        basis = parse_whole_amount(responses.get("depreciableBasis"))
        allocation = self._split(basis, personal_pct, land_pct, _real_property_years(cat))
        personal = allocation.personal_property
        land = allocation.land_improvements
        real = allocation.real_property

        first_year = personal.annual_depreciation + round_half_up(
            land.annual_depreciation * BONUS_DEPRECIATION_RATE
        )
        tax_rate = parse_tax_rate(responses.get("taxBracket"))
        purchase_price = parse_whole_amount(responses.get("purchasePrice"))

        summary = AllocationSummary(
            depreciable_basis=basis,
            purchase_price=purchase_price,
            land_value=purchase_price - basis,
            category=cat,
            total_annual_depreciation=(
                personal.annual_depreciation
                + land.annual_depreciation
                + real.annual_depreciation
            ),
            first_year_benefit=first_year,
            tax_rate=tax_rate * 100,
            estimated_tax_savings=round_half_up(first_year * tax_rate),
        )

        return AllocationReport(
            summary=summary,
            cost_allocation=allocation,
            adjustments_applied=applied,
            takeoffs=TakeoffsBreakdown(
                foundation=responses.get("foundationMaterial"),
                walls=responses.get("wallMaterial"),
                roofing=responses.get("roofMaterial"),
                hvac=responses.get("hvacSystemType"),
                electrical=responses.get("electricalSystemType"),
                flooring=responses.get("flooringTypes"),
                lighting=responses.get("lightingTypes"),
                site_work=responses.get("siteWorkDetails"),
                special_systems=(
                    responses.get("specialEquipment")
                    or responses.get("specialtySystemsDetails")
                ),
            ),
            tax_information=TaxInformation(
                placed_in_service=responses.get("placedInServiceDate"),
                property_use=responses.get("propertyUse"),
                acquisition_method=responses.get("acquisitionMethod"),
                improvement_costs=parse_whole_amount(responses.get("improvementCosts")),
                tax_bracket=responses.get("taxBracket"),
            ),
        )

    def preliminary(
        self,
        details: PropertyDetails,
        *,
        as_of_year: int | None = None,
    ) -> PreliminaryAnalysis:
        """Estimate the allocation from the property details alone.

        The building value (purchase price minus land) is split by the
        category's preliminary percentages.  A missing or zero land value
        defaults to ``land_share`` percent of the price; a missing building
        value is price minus land.  Buildings older than ``age_threshold``
        years have their personal property percentage scaled by
        ``age_factor``.

        Args:
            details: the property form.
            as_of_year: year used to compute the building's age; defaults
                to the current year.
        """
        rules = self._tables.preliminary
        cat = normalize_category(details.property_type)
        if cat not in CATEGORIES:
            cat = DEFAULT_CATEGORY
        split = rules.categories.get(cat) or rules.categories[DEFAULT_CATEGORY]

        purchase_price = parse_whole_amount(details.purchase_price)
        land_value = parse_whole_amount(details.land_value) or round_half_up(
            purchase_price * rules.land_share / 100
        )
        building_value = parse_whole_amount(details.building_value) or (
            purchase_price - land_value
        )

        if as_of_year is None:
            as_of_year = datetime.now().year
        year_built = parse_whole_amount(details.year_built)
        age = as_of_year - year_built if year_built else None

        personal_pct = split.personal_property
        age_adjusted = age is not None and age > rules.age_threshold
        if age_adjusted:
            personal_pct *= rules.age_factor

        allocation = self._split(
            building_value, personal_pct, split.land_improvements, _real_property_years(cat),
        )
        personal = allocation.personal_property
        land = allocation.land_improvements
        real = allocation.real_property

        # No bonus share here: the full 15-year annual counts toward year one.
        first_year = personal.annual_depreciation + land.annual_depreciation
        tax_rate = rules.tax_rate / 100
        logger.debug(
            "Preliminary analysis: category=%s building=%d age=%s adjusted=%s",
            cat, building_value, age, age_adjusted,
        )
        return PreliminaryAnalysis(
            category=cat,
            purchase_price=purchase_price,
            land_value=land_value,
            building_value=building_value,
            property_age=age,
            age_adjusted=age_adjusted,
            cost_allocation=allocation,
            total_annual_depreciation=(
                personal.annual_depreciation
                + land.annual_depreciation
                + real.annual_depreciation
            ),
            first_year_benefit=first_year,
            tax_rate=rules.tax_rate,
            estimated_tax_savings=round_half_up(first_year * tax_rate),
        )

    @staticmethod
    def _split(
        amount: int, personal_pct: float, land_pct: float, real_years: float,
    ) -> CostAllocation:
        """Split ``amount`` into the three buckets; real property takes the remainder."""
        personal_value = round_half_up(amount * personal_pct / 100)
        land_value = round_half_up(amount * land_pct / 100)
        real_value = amount - personal_value - land_value
        return CostAllocation(
            personal_property=AllocationBucket(
                value=personal_value,
                percentage=personal_pct,
                depreciation_period=PERSONAL_PROPERTY_YEARS,
                annual_depreciation=round_half_up(personal_value / PERSONAL_PROPERTY_YEARS),
            ),
            land_improvements=AllocationBucket(
                value=land_value,
                percentage=land_pct,
                depreciation_period=LAND_IMPROVEMENT_YEARS,
                annual_depreciation=round_half_up(land_value / LAND_IMPROVEMENT_YEARS),
            ),
            real_property=AllocationBucket(
                value=real_value,
                percentage=(real_value / amount * 100) if amount else 0.0,
                depreciation_period=real_years,
                annual_depreciation=round_half_up(real_value / real_years),
            ),
        )

    @staticmethod
    def _matches(adj: Adjustment, answer: str | None) -> bool:
        if answer is None:
            return False
        if adj.match == "present":
            return not is_empty_answer(answer)
        text = answer.strip().lower()
        return any(sub.lower() in text for sub in adj.substrings)
