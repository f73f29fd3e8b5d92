"""
Schema definitions for spendpolicy.

This module defines the Pydantic models used throughout spendpolicy:
- SpendPolicy: A scoped spend ceiling for an organization
- PolicySet: The policies of one organization, as stored in a YAML file
- ScopeClass: How narrowly a policy targets a user/category query
- ApplicablePolicy/ResolutionResult: The outcome and trace of a resolution
- LimitCheck/SpendEvaluation: The outcome of comparing an amount to a policy

Design Decisions:
    - Models are immutable (frozen=True) so results can be shared freely
    - Amounts are Decimal end to end; floats are read through their string form
    - Unset and empty-string scopes are the same thing (None)
    - Descriptive fields (name, review mode, metadata) are carried, never inspected
"""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from spendpolicy.errors import PolicyFileError


# =============================================================================
# Enums
# =============================================================================


class ScopeClass(str, Enum):
    """
    Precedence tier of a policy relative to a query.

    Lower precedence numbers win: a rule that targets this exact user and
    category beats one that targets the category for everybody, which beats
    one that targets the user for every category, which beats the org default.
    """

    USER_CATEGORY = "user-category"
    ORG_CATEGORY = "org-category"
    USER_WIDE = "user-wide"
    ORG_WIDE = "org-wide"

    @property
    def precedence(self) -> int:
        """Rank of this scope class, 1 being the most specific."""
        return _PRECEDENCE[self]


_PRECEDENCE = {
    ScopeClass.USER_CATEGORY: 1,
    ScopeClass.ORG_CATEGORY: 2,
    ScopeClass.USER_WIDE: 3,
    ScopeClass.ORG_WIDE: 4,
}


class ReviewMode(str, Enum):
    """What happens to an expense that fits within its policy."""

    AUTO_APPROVE = "auto_approve"
    MANUAL_REVIEW = "manual_review"


class Period(str, Enum):
    """
    The window a policy ceiling applies to.

    Only per-expense ceilings exist; the field is kept so policy files can
    state it explicitly.
    """

    PER_EXPENSE = "per_expense"


# =============================================================================
# Policy Models
# =============================================================================


class SpendPolicy(BaseModel):
    """
    A spend-authorization rule.

    A policy may be narrowed to one user, one category, both, or neither.
    An absent scope means "everybody" (user) or "everything" (category).

    Attributes:
        id: Opaque unique identifier
        name: Human-readable name
        description: Optional longer description
        user_id: User this policy is limited to (None = all users)
        category_id: Category this policy is limited to (None = all categories)
        max_amount: Inclusive spend ceiling
        period: Window the ceiling applies to
        review_mode: Review behaviour for expenses under the ceiling
        metadata: Free-form data carried through untouched

    Unknown fields from a storage row (e.g. org_id, created_at) are kept as
    extra attributes and passed through with the policy.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = Field(
        ...,
        description="Opaque unique identifier",
        min_length=1,
    )
    name: str = Field(
        default="",
        description="Human-readable name",
        max_length=200,
    )
    description: str | None = Field(
        default=None,
        description="Optional longer description",
        max_length=1000,
    )
    user_id: str | None = Field(
        default=None,
        description="User this policy is limited to (None = all users)",
    )
    category_id: str | None = Field(
        default=None,
        description="Category this policy is limited to (None = all categories)",
    )
    max_amount: Decimal = Field(
        ...,
        description="Inclusive spend ceiling",
        ge=0,
    )
    period: Period = Field(
        default=Period.PER_EXPENSE,
        description="Window the ceiling applies to",
    )
    review_mode: ReviewMode = Field(
        default=ReviewMode.MANUAL_REVIEW,
        description="Review behaviour for expenses under the ceiling",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form data carried through untouched",
    )

    @field_validator("user_id", "category_id", mode="before")
    @classmethod
    def blank_scope_is_unset(cls, v: Any) -> Any:
        """Treat empty or whitespace-only scope references as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("max_amount", mode="before")
    @classmethod
    def float_amount_via_str(cls, v: Any) -> Any:
        """Read floats through their shortest repr so 100.01 stays 100.01."""
        if isinstance(v, bool):
            msg = "max_amount must be a number, not a boolean"
            raise ValueError(msg)
        if isinstance(v, float):
            return str(v)
        return v

    @property
    def scope_label(self) -> str:
        """
        The declared scope of this policy, independent of any query.

        Uses the same names as ScopeClass so listings and traces read alike.
        """
        if self.user_id is not None and self.category_id is not None:
            return ScopeClass.USER_CATEGORY.value
        if self.user_id is not None:
            return ScopeClass.USER_WIDE.value
        if self.category_id is not None:
            return ScopeClass.ORG_CATEGORY.value
        return ScopeClass.ORG_WIDE.value


class PolicySet(BaseModel):
    """
    The candidate policies of a single organization.

    This is the root of a policy YAML file. Every policy in a set is assumed
    to belong to the same organization.

    Attributes:
        version: Schema version for forward compatibility
        org_id: Optional organization identifier
        name: Optional organization display name
        policies: Candidate policies, in file order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(
        default="1.0",
        description="Policy file schema version",
    )
    org_id: str | None = Field(
        default=None,
        description="Organization identifier",
    )
    name: str | None = Field(
        default=None,
        description="Organization display name",
    )
    policies: list[SpendPolicy] = Field(
        default_factory=list,
        description="Candidate policies, in file order",
    )


# =============================================================================
# Resolution Models
# =============================================================================


class ApplicablePolicy(BaseModel):
    """
    One entry of a resolution trace.

    Attributes:
        policy: The candidate that matched the query
        scope: Which precedence tier it matched in
        reason: Plain-language description of the match
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    policy: SpendPolicy
    scope: ScopeClass
    reason: str


class ResolutionResult(BaseModel):
    """
    Outcome of resolving a user/category query against candidate policies.

    Attributes:
        user_id: The queried user
        category_id: The queried category, if any
        selected_policy: The governing policy, or None if nothing applies
        applicable_policies: Every matching candidate, winner first
        selection_reason: One-sentence summary of the outcome
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str
    category_id: str | None = None
    selected_policy: SpendPolicy | None = None
    applicable_policies: list[ApplicablePolicy] = Field(default_factory=list)
    selection_reason: str

    @property
    def selected_scope(self) -> ScopeClass | None:
        """Scope class of the winning policy, if there is one."""
        if not self.applicable_policies:
            return None
        return self.applicable_policies[0].scope


class LimitCheck(BaseModel):
    """
    Result of comparing a spend amount against a policy ceiling.

    Attributes:
        allowed: Whether the amount is within the ceiling
        reason: Human-readable explanation of the decision
        amount: The amount that was checked
        max_amount: The ceiling it was compared to (None without a policy)
        policy_id: The policy that supplied the ceiling
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool
    reason: str
    amount: Decimal
    max_amount: Decimal | None = None
    policy_id: str | None = None

    @classmethod
    def allow(
        cls,
        reason: str,
        amount: Decimal,
        max_amount: Decimal | None = None,
        policy_id: str | None = None,
    ) -> "LimitCheck":
        """Create an ALLOW result."""
        return cls(
            allowed=True,
            reason=reason,
            amount=amount,
            max_amount=max_amount,
            policy_id=policy_id,
        )

    @classmethod
    def deny(
        cls,
        reason: str,
        amount: Decimal,
        max_amount: Decimal | None = None,
        policy_id: str | None = None,
    ) -> "LimitCheck":
        """Create a DENY result."""
        return cls(
            allowed=False,
            reason=reason,
            amount=amount,
            max_amount=max_amount,
            policy_id=policy_id,
        )


class SpendEvaluation(BaseModel):
    """A resolution together with the limit check of its winner."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resolution: ResolutionResult
    limit_check: LimitCheck

    @property
    def allowed(self) -> bool:
        return self.limit_check.allowed


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_policy_set(path: Path | str) -> PolicySet:
    """
    Load a policy set from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated PolicySet object

    Raises:
        FileNotFoundError: If the file doesn't exist
        PolicyFileError: If the document is empty or not a mapping
        ValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)

    return _validate_policy_set(data, str(path))


def load_policy_set_from_string(content: str) -> PolicySet:
    """Load a policy set from a YAML string."""
    data = yaml.safe_load(content)
    return _validate_policy_set(data, "<string>")


def _validate_policy_set(data: Any, source: str) -> PolicySet:
    if data is None:
        raise PolicyFileError(path=source, detail="document is empty")
    if not isinstance(data, dict):
        raise PolicyFileError(
            path=source,
            detail=f"expected a mapping, got {type(data).__name__}",
        )
    return PolicySet.model_validate(data)
