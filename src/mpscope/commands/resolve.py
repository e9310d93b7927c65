"""Shared analysis helper for all mpscope commands."""

from __future__ import annotations

from mpscope.api import AnalysisResult, analyze
from mpscope.config import load_project_config, merge_options


def run_analysis(ctx) -> AnalysisResult:
    """Run one analysis with CLI options merged over ``mpscope.config.json``."""
    obj = ctx.obj or {}
    project = obj.get("project", ".")
    options = merge_options(obj.get("options"), load_project_config(project))
    return analyze(project, options)
