"""Text rendering for the dialogue.

Provides ``RenderManager``, a Jinja2-based renderer for the completion recap
and the plain-text cost segregation report.
"""

from costseg_flow.render.manager import RenderManager, format_currency

__all__ = ["RenderManager", "format_currency"]
