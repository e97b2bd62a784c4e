"""Allocation models — percentage tables in, cost breakdown out.

These models mirror ``data/allocation.yaml``:

  Tables:
    - CategoryAllocation: base percentages for one property category
    - Adjustment: a percentage shift from real property to personal property
      triggered by a takeoff answer
    - PreliminarySplit / PreliminaryRules: the property-form-only estimate
    - AllocationTables: the whole YAML document

  Results:
    - AllocationBucket: one depreciation bucket (value, %, period, annual)
    - CostAllocation: the three buckets
    - AllocationSummary / AllocationReport: the finished report
    - PreliminaryAnalysis: estimate from the property details alone
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Tables: data/allocation.yaml
# ---------------------------------------------------------------------------

class CategoryAllocation(BaseModel):
    """Base split of the depreciable basis for one category (percent)."""

    personal_property: float
    land_improvements: float
    real_property: float

    @model_validator(mode="after")
    def _chk(self):
        total = self.personal_property + self.land_improvements + self.real_property
        if abs(total - 100) > 1e-6:
            raise ValueError(f"allocation percentages must sum to 100, got {total}")
        return self


class Adjustment(BaseModel):
    """Shift ``points`` percent from real property to personal property.

    ``match: any`` fires when the answer mentions any of ``substrings``
    (case-insensitive); ``match: present`` fires when the field holds a
    non-empty answer.
    """

    field: str
    match: Literal["any", "present"] = "any"
    substrings: List[str] = []
    points: float


class PreliminarySplit(BaseModel):
    """Personal / land-improvement percent of the building value; real property is the rest."""

    personal_property: float
    land_improvements: float

    @model_validator(mode="after")
    def _chk(self):
        if self.personal_property + self.land_improvements > 100:
            raise ValueError("preliminary percentages must not exceed 100")
        return self


class PreliminaryRules(BaseModel):
    """Rules for the estimate made from the property form alone.

    ``land_share`` (percent of purchase price) stands in for a missing land
    value.  Buildings older than ``age_threshold`` years get their personal
    property percentage multiplied by ``age_factor``.
    """

    land_share: float = 20
    age_threshold: int = 20
    age_factor: float = 0.8
    tax_rate: float = 35
    categories: dict[str, PreliminarySplit] = Field(
        default_factory=lambda: {
            "residential": PreliminarySplit(personal_property=15, land_improvements=10),
        }
    )


class AllocationTables(BaseModel):
    """Top-level shape of ``data/allocation.yaml``."""

    categories: dict[str, CategoryAllocation]
    adjustments: List[Adjustment] = []
    preliminary: PreliminaryRules = Field(default_factory=PreliminaryRules)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class AllocationBucket(BaseModel):
    """One depreciation bucket of the cost allocation."""

    value: int
    percentage: float
    depreciation_period: float
    annual_depreciation: int


class CostAllocation(BaseModel):
    personal_property: AllocationBucket
    land_improvements: AllocationBucket
    real_property: AllocationBucket


class AllocationSummary(BaseModel):
    depreciable_basis: int
    purchase_price: int
    land_value: int
    category: str
    total_annual_depreciation: int
    first_year_benefit: int
    tax_rate: float
    estimated_tax_savings: int


class TakeoffsBreakdown(BaseModel):
    """Takeoff answers echoed into the report (raw text, None when unanswered)."""

    foundation: Optional[str] = None
    walls: Optional[str] = None
    roofing: Optional[str] = None
    hvac: Optional[str] = None
    electrical: Optional[str] = None
    flooring: Optional[str] = None
    lighting: Optional[str] = None
    site_work: Optional[str] = None
    special_systems: Optional[str] = None


class TaxInformation(BaseModel):
    placed_in_service: Optional[str] = None
    property_use: Optional[str] = None
    acquisition_method: Optional[str] = None
    improvement_costs: int = 0
    tax_bracket: Optional[str] = None


class AllocationReport(BaseModel):
    """Finished cost-segregation report for a completed dialogue."""

    summary: AllocationSummary
    cost_allocation: CostAllocation
    adjustments_applied: List[str] = []
    takeoffs: TakeoffsBreakdown
    tax_information: TaxInformation


class PreliminaryAnalysis(BaseModel):
    """Estimate computed from the property details before the dialogue.

    Percentages are of the building value.  ``property_age`` is None when
    the year built could not be read; no age adjustment applies then.
    """

    category: str
    purchase_price: int
    land_value: int
    building_value: int
    property_age: Optional[int] = None
    age_adjusted: bool = False
    cost_allocation: CostAllocation
    total_annual_depreciation: int
    first_year_benefit: int
    tax_rate: float
    estimated_tax_savings: int
