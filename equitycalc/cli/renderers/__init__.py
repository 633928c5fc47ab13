"""Rich renderers for CLI output."""

from .equity_renderer import (
    format_currency,
    format_percentage,
    render_vesting_table,
    render_schedule,
    render_tax_result,
    render_scenarios,
    render_portfolio_summary,
)

__all__ = [
    "format_currency",
    "format_percentage",
    "render_vesting_table",
    "render_schedule",
    "render_tax_result",
    "render_scenarios",
    "render_portfolio_summary",
]
