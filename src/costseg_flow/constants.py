"""Constants shared across the cost-segregation dialogue SDK.

These values are referenced by the catalog builder, engine, and allocation
calculator.  They mirror the conventions encoded in ``data/catalog.yaml``
and ``data/allocation.yaml``.

A few constants can be overridden via environment variables so that
deployments can adjust the benefit assumptions without code changes.
"""

import os

# Closed set of property categories.  Anything else falls back to the
# residential wording (see catalog.normalize_category).
CATEGORIES: tuple[str, ...] = ("residential", "commercial", "industrial", "mixed-use")

# Category used for wording and the allocation table when the caller's
# category is not recognised.
# Overridable via COSTSEG_DEFAULT_CATEGORY env var.
DEFAULT_CATEGORY = os.getenv("COSTSEG_DEFAULT_CATEGORY", "residential")

# Key used in catalog.yaml option maps for the generic feature set offered
# to unrecognised categories.
GENERIC_OPTION_KEY = "default"

# Catalog flavors.  tax_only ends after the tax questions; combined continues
# into the property takeoffs phase.
FLAVORS: tuple[str, ...] = ("tax_only", "combined")
DEFAULT_FLAVOR = "combined"

# Human-readable phase names for step payloads and the completion recap.
PHASE_NAMES: dict[str, str] = {
    "tax": "Tax Information",
    "takeoffs": "Property Takeoffs",
}

# Question types that mark the end of a catalog.  The engine never waits for
# an answer on these; reaching one triggers completion.
COMPLETION_TYPES: frozenset[str] = frozenset({"summary", "terminal"})

# Question types whose answer must be one of the question's options.
CHOICE_TYPES: frozenset[str] = frozenset({"single_select", "confirmation"})

# Flat bonus-depreciation share applied to the 15-year bucket when estimating
# the first-year benefit.
# Overridable via COSTSEG_BONUS_RATE env var.
BONUS_DEPRECIATION_RATE = float(os.getenv("COSTSEG_BONUS_RATE", "0.5"))

# Tax rate (percent) assumed when the bracket answer carries no percentage.
# Overridable via COSTSEG_DEFAULT_TAX_RATE env var.
DEFAULT_TAX_RATE = float(os.getenv("COSTSEG_DEFAULT_TAX_RATE", "24"))

# Recovery periods (years) for the three allocation buckets.
PERSONAL_PROPERTY_YEARS = 5
LAND_IMPROVEMENT_YEARS = 15
RESIDENTIAL_REAL_PROPERTY_YEARS = 27.5
NONRESIDENTIAL_REAL_PROPERTY_YEARS = 39

# Free-text answers that count as "nothing to report" when deciding whether
# an adjustment applies (e.g. specialEquipment = "None").
EMPTY_ANSWERS: frozenset[str] = frozenset({"", "none", "n/a", "na", "no", "nothing"})
