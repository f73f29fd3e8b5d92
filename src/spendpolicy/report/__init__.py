"""
Reporting module for spendpolicy.

Output formats:
    - Console: Rich table of the trace with the winner marked
    - JSON: Structured output for programmatic consumption

Example:
    from spendpolicy.report import generate_json_report, render_resolution

    render_resolution(result)
    print(generate_json_report(result))
"""

from spendpolicy.report.console import render_resolution
from spendpolicy.report.json import (
    build_resolution_dict,
    generate_json_report,
    serialize_limit_check,
    serialize_policy,
)

__all__ = [
    "build_resolution_dict",
    "generate_json_report",
    "render_resolution",
    "serialize_limit_check",
    "serialize_policy",
]
