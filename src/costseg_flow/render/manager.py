"""RenderManager — Jinja2-based text rendering for the dialogue.

Loads templates from the ``templates/`` directory and renders:

  - the completion recap the engine appends to the transcript
  - the plain-text cost segregation report for a finished session

Templates only format; every number they show is computed beforehand.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Sequence

import jinja2

from costseg_flow.allocation import round_half_up
from costseg_flow.constants import PHASE_NAMES

if TYPE_CHECKING:
    from costseg_flow.models.allocation import AllocationReport
    from costseg_flow.models.question import Question
    from costseg_flow.models.session import PropertyDetails

RECAP_TEMPLATE = "recap.jinja2"
REPORT_TEMPLATE = "report.jinja2"

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def format_currency(value) -> str:
    """Format an amount as ``$1,234``; non-numeric text is returned as-is."""
    if isinstance(value, (int, float)):
        return f"${round_half_up(value):,}"
    text = str(value).replace(",", "").replace("$", "").strip()
    match = _NUMBER_RE.fullmatch(text)
    if match is None:
        return str(value)
    return f"${round_half_up(float(text)):,}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


class RenderManager:
    """Jinja2 renderer for the completion recap and the text report.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``templates/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "templates"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self._env.filters["currency"] = format_currency
        self._env.filters["percent"] = format_percent

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)

    def render_recap(
        self,
        catalog: Sequence[Question],
        responses: Mapping[str, str],
        *,
        heading: str | None = None,
    ) -> str:
        """Render the human-readable recap of every collected field.

        Fields are listed in catalog order, grouped by phase; questions that
        were skipped (no answer in ``responses``) are left out.
        """
        sections: list[dict] = []
        for q in catalog:
            if not q.target_field or q.target_field not in responses:
                continue
            value = responses[q.target_field]
            if q.display == "currency":
                value = format_currency(value)
            if not sections or sections[-1]["phase"] != q.phase:
                sections.append({
                    "phase": q.phase,
                    "name": PHASE_NAMES.get(q.phase, q.phase),
                    "items": [],
                })
            sections[-1]["items"].append({"label": q.caption, "value": value})

        return self.render(
            RECAP_TEMPLATE,
            heading=heading,
            sections=sections,
            grouped=len(sections) > 1,
        ).strip()

    def render_report(
        self,
        report: AllocationReport,
        property_details: PropertyDetails | None = None,
    ) -> str:
        """Render the plain-text cost segregation report."""
        return self.render(
            REPORT_TEMPLATE,
            report=report,
            property=property_details,
        ).strip() + "\n"
