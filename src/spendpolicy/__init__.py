"""
spendpolicy - Scoped spend policy resolution.

Organizations define spend ceilings at four scopes: organization-wide,
per-category, per-user and per-user-per-category. spendpolicy picks the one
policy that governs a given user and category and explains the choice:
- Fixed, scope-based precedence (most specific rule wins)
- A full trace of every applicable policy, winner first
- Exact decimal limit checks with an inclusive ceiling

Example usage:
    $ spendpolicy resolve policies.yaml --user alice --category travel
    $ spendpolicy check policies.yaml 250 --user alice --category travel
    $ spendpolicy list policies.yaml
"""

__version__ = "0.1.0"
__author__ = "spendpolicy Contributors"

from spendpolicy.errors import (
    InvalidAmountError,
    InvalidQueryError,
    PolicyFileError,
    SpendPolicyError,
)
from spendpolicy.resolver import PolicyResolver, check_limit, classify_policy, resolve
from spendpolicy.schema import (
    ApplicablePolicy,
    LimitCheck,
    Period,
    PolicySet,
    ResolutionResult,
    ReviewMode,
    ScopeClass,
    SpendEvaluation,
    SpendPolicy,
    load_policy_set,
    load_policy_set_from_string,
)

__all__ = [
    "__version__",
    "__author__",
    "ApplicablePolicy",
    "InvalidAmountError",
    "InvalidQueryError",
    "LimitCheck",
    "Period",
    "PolicyFileError",
    "PolicyResolver",
    "PolicySet",
    "ResolutionResult",
    "ReviewMode",
    "ScopeClass",
    "SpendEvaluation",
    "SpendPolicy",
    "SpendPolicyError",
    "check_limit",
    "classify_policy",
    "load_policy_set",
    "load_policy_set_from_string",
    "resolve",
]
