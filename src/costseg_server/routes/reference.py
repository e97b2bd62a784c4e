"""Reference data endpoints — categories, question catalogs, allocation tables.

These are read-only endpoints over the YAML data loaded at startup.  They
don't require the ``X-User-ID`` header since the data is not user-specific.
"""

from fastapi import APIRouter, Depends, Query

from costseg_flow.allocation import AllocationCalculator
from costseg_flow.catalog import CatalogBuilder
from costseg_flow.constants import CATEGORIES, DEFAULT_FLAVOR, PHASE_NAMES

from costseg_server.dependencies import get_builder, get_calculator

router = APIRouter(prefix="/reference", tags=["reference"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/categories")
def list_categories() -> list[str]:
    """Return the supported property categories."""
    return list(CATEGORIES)


@router.get("/catalog")
def get_catalog(
    category: str = Query(...),
    flavor: str = Query(DEFAULT_FLAVOR),
    seed: int | None = Query(None),
    builder: CatalogBuilder = Depends(get_builder),
) -> list[dict]:
    """Return the ordered question catalog for a category and flavor.

    ``conditional`` marks questions that are only shown when an earlier
    answer matches.
    """
    return [
        {
            "position": i,
            "id": q.id,
            "text": q.text,
            "question_type": q.question_type,
            "target_field": q.target_field,
            "options": list(q.options) or None,
            "allows_zero": q.allows_zero,
            "phase": q.phase,
            "phase_name": PHASE_NAMES.get(q.phase, q.phase),
            "conditional": q.skip_condition is not None,
        }
        for i, q in enumerate(builder.build(category, flavor, seed=seed))
    ]


@router.get("/allocation-tables")
def get_allocation_tables(
    calculator: AllocationCalculator = Depends(get_calculator),
) -> dict:
    """Return the base allocation percentages and the adjustment rules."""
    return calculator.tables.model_dump()
