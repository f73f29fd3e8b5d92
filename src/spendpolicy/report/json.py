"""
JSON report for spendpolicy.

Produces a stable, machine-readable view of a resolution trace. Decimal
amounts are emitted as strings so no precision is lost on the way out.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from spendpolicy.schema import LimitCheck, ResolutionResult, SpendPolicy

REPORT_VERSION = "1.0"


def generate_json_report(
    result: ResolutionResult,
    limit_check: LimitCheck | None = None,
    indent: int = 2,
) -> str:
    """
    Generate a JSON report for a resolution.

    Args:
        result: The resolution to report on
        limit_check: Optional limit check made against the winner
        indent: JSON indentation level (default: 2)

    Returns:
        JSON string with the full trace
    """
    report = build_resolution_dict(result, limit_check)
    return json.dumps(report, indent=indent, default=_json_serializer)


def build_resolution_dict(
    result: ResolutionResult,
    limit_check: LimitCheck | None = None,
) -> dict[str, Any]:
    """Build a JSON-ready dictionary describing a resolution."""
    return {
        "report_version": REPORT_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "query": {
            "user_id": result.user_id,
            "category_id": result.category_id,
        },
        "selected_policy": (
            serialize_policy(result.selected_policy)
            if result.selected_policy
            else None
        ),
        "selected_scope": (
            result.selected_scope.value if result.selected_scope else None
        ),
        "applicable_policies": [
            {
                "rank": rank,
                "scope": entry.scope.value,
                "reason": entry.reason,
                "policy": serialize_policy(entry.policy),
            }
            for rank, entry in enumerate(result.applicable_policies, start=1)
        ],
        "selection_reason": result.selection_reason,
        "limit_check": (
            serialize_limit_check(limit_check) if limit_check else None
        ),
    }


def serialize_policy(policy: SpendPolicy) -> dict[str, Any]:
    """Serialize a policy with its amount as a string."""
    data = policy.model_dump(mode="json")
    data["max_amount"] = str(policy.max_amount)
    return data


def serialize_limit_check(limit_check: LimitCheck) -> dict[str, Any]:
    return {
        "allowed": limit_check.allowed,
        "reason": limit_check.reason,
        "amount": str(limit_check.amount),
        "max_amount": (
            str(limit_check.max_amount)
            if limit_check.max_amount is not None
            else None
        ),
        "policy_id": limit_check.policy_id,
    }


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return str(obj)
