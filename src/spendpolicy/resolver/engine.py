"""
Policy resolver for spendpolicy.

Given every policy of an organization, the resolver picks the one policy that
governs a (user, category) spend decision and explains the choice.

How it works:
    1. Each candidate is classified into a scope class relative to the query
    2. Candidates scoped to another user or another category are dropped
    3. The rest are stable-sorted by scope precedence, most specific first
    4. The first entry wins; the whole ordered list is kept as a trace

Precedence is purely scope based. Which policy is more or less permissive
never matters, and limits from several policies are never combined.

Resolution is a pure computation: no I/O besides logging, no mutation of the
inputs, no state kept between calls.
"""

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from spendpolicy.errors import InvalidQueryError
from spendpolicy.resolver.limits import check_limit
from spendpolicy.schema import (
    ApplicablePolicy,
    PolicySet,
    ResolutionResult,
    ScopeClass,
    SpendEvaluation,
    SpendPolicy,
)

logger = logging.getLogger(__name__)


def classify_policy(
    policy: SpendPolicy,
    user_id: str,
    category_id: str | None = None,
) -> ScopeClass | None:
    """
    Work out how a policy relates to a query.

    Args:
        policy: The candidate policy
        user_id: The queried user
        category_id: The queried category, or None for a category-less query

    Returns:
        The matching ScopeClass, or None when the policy is scoped to some
        other user or category (or to any category on a category-less query)
    """
    if policy.user_id is not None and policy.user_id != user_id:
        return None
    if policy.category_id is not None and policy.category_id != category_id:
        return None

    if policy.user_id is not None:
        if policy.category_id is not None:
            return ScopeClass.USER_CATEGORY
        return ScopeClass.USER_WIDE
    if policy.category_id is not None:
        return ScopeClass.ORG_CATEGORY
    return ScopeClass.ORG_WIDE


def describe_match(
    scope: ScopeClass,
    user_id: str,
    category_id: str | None = None,
) -> str:
    """Plain-language explanation of what a match in `scope` means."""
    if scope == ScopeClass.USER_CATEGORY:
        return f"User-specific policy for user {user_id} in category {category_id}"
    if scope == ScopeClass.ORG_CATEGORY:
        return f"Organization-wide policy for category {category_id}"
    if scope == ScopeClass.USER_WIDE:
        return f"User-wide policy (applies to all categories for user {user_id})"
    return "Organization-wide default policy (applies to all users and categories)"


def resolve(
    candidates: Iterable[SpendPolicy],
    user_id: str,
    category_id: str | None = None,
) -> ResolutionResult:
    """
    Select the policy that governs a user's spend, with a trace.

    Args:
        candidates: Every policy of the organization, in storage order
        user_id: The user the spend is for
        category_id: The expense category, if known

    Returns:
        ResolutionResult with the winner (or None), every applicable
        candidate in precedence order, and a summary sentence

    Raises:
        InvalidQueryError: If user_id is missing or blank
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidQueryError(argument="user_id", value=user_id)
    if category_id is None or not category_id.strip():
        category_id = None

    matches: list[ApplicablePolicy] = []
    considered = 0
    for policy in candidates:
        considered += 1
        scope = classify_policy(policy, user_id, category_id)
        if scope is None:
            continue
        matches.append(
            ApplicablePolicy(
                policy=policy,
                scope=scope,
                reason=describe_match(scope, user_id, category_id),
            )
        )

    # sorted() is stable: equal scopes keep input order
    ordered = sorted(matches, key=lambda m: m.scope.precedence)

    if ordered:
        winner = ordered[0]
        selected = winner.policy
        selection_reason = (
            f"Selected {winner.scope.value} policy {selected.id}: {winner.reason}"
        )
        _warn_on_ties(ordered, user_id, category_id)
    else:
        selected = None
        if category_id is not None:
            selection_reason = (
                f"No applicable policy found for user {user_id} "
                f"and category {category_id}"
            )
        else:
            selection_reason = f"No applicable policy found for user {user_id}"

    logger.debug(
        "Resolved user=%s category=%s: %d candidates, %d applicable, selected=%s",
        user_id,
        category_id,
        considered,
        len(ordered),
        selected.id if selected else None,
    )

    return ResolutionResult(
        user_id=user_id,
        category_id=category_id,
        selected_policy=selected,
        applicable_policies=ordered,
        selection_reason=selection_reason,
    )


def _warn_on_ties(
    ordered: Sequence[ApplicablePolicy],
    user_id: str,
    category_id: str | None,
) -> None:
    """Log when several policies share the winning scope class."""
    top = ordered[0].scope
    tied = [m.policy.id for m in ordered if m.scope == top]
    if len(tied) > 1:
        logger.warning(
            "%d %s policies apply to user=%s category=%s (%s); using %s by input order",
            len(tied),
            top.value,
            user_id,
            category_id,
            ", ".join(tied),
            tied[0],
        )


class PolicyResolver:
    """
    Resolver bound to one organization's candidate policies.

    Holds an immutable snapshot of the candidates and nothing else, so a
    single instance can serve concurrent callers.

    Usage:
        resolver = PolicyResolver(policies)
        result = resolver.resolve("alice", "travel")
        evaluation = resolver.evaluate("120.00", "alice", "travel")
        if evaluation.allowed:
            # spend is within the governing policy

    Attributes:
        policies: The candidate policies, in input order
    """

    def __init__(self, policies: Iterable[SpendPolicy]) -> None:
        self.policies: tuple[SpendPolicy, ...] = tuple(policies)

    @classmethod
    def from_policy_set(cls, policy_set: PolicySet) -> "PolicyResolver":
        """Build a resolver over the policies of a loaded policy file."""
        return cls(policy_set.policies)

    def resolve(
        self,
        user_id: str,
        category_id: str | None = None,
    ) -> ResolutionResult:
        """Resolve the governing policy for a user and optional category."""
        return resolve(self.policies, user_id, category_id)

    def evaluate(
        self,
        amount: Decimal | int | float | str,
        user_id: str,
        category_id: str | None = None,
    ) -> SpendEvaluation:
        """
        Resolve the governing policy and check an amount against it.

        Raises:
            InvalidQueryError: If user_id is missing or blank
            InvalidAmountError: If amount is not a finite decimal
        """
        resolution = self.resolve(user_id, category_id)
        limit_check = check_limit(amount, resolution.selected_policy)
        return SpendEvaluation(resolution=resolution, limit_check=limit_check)
