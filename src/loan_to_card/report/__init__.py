from __future__ import annotations

from .formatter import render_failure, render_outcome, render_strategies, render_summary
from .summary import ConfirmationSummary, build_summary

__all__ = [
    "ConfirmationSummary",
    "build_summary",
    "render_failure",
    "render_outcome",
    "render_strategies",
    "render_summary",
]
