"""
Policy resolution module for spendpolicy.

Key concepts:
    - ScopeClass: How narrowly a policy targets a (user, category) query
    - resolve: Picks the single governing policy and builds a trace
    - check_limit: Compares an amount to the governing policy's ceiling
    - PolicyResolver: Both of the above bound to one organization's policies

The resolver must be:
    - Deterministic: Same candidates and query always give the same result
    - Total: Every valid query yields a result, matching or not
    - Explainable: Every applicable candidate is reported with a reason
"""

from spendpolicy.resolver.engine import (
    PolicyResolver,
    classify_policy,
    describe_match,
    resolve,
)
from spendpolicy.resolver.limits import check_limit, to_decimal

__all__ = [
    "PolicyResolver",
    "check_limit",
    "classify_policy",
    "describe_match",
    "resolve",
    "to_decimal",
]
