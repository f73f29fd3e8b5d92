"""
Exception hierarchy for spendpolicy.

All spendpolicy exceptions inherit from SpendPolicyError, allowing callers to
catch every library-specific failure with a single except clause.

Exception Categories:
    - InvalidQueryError: Resolver called without a usable user identity
    - InvalidAmountError: Amount is not a finite decimal number
    - PolicyFileError: Policy file is empty or malformed at the top level

A query that matches no policy is not an error: the resolver reports it as a
descriptive result instead.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Query errors: 1xxx
ERROR_QUERY_INVALID_USER = 1001
ERROR_QUERY_INVALID_AMOUNT = 1002

# Policy file errors: 2xxx
ERROR_POLICY_FILE_INVALID = 2001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class SpendPolicyError(Exception):
    """
    Base exception for all spendpolicy errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Query Errors
# =============================================================================


@dataclass
class InvalidQueryError(SpendPolicyError):
    """
    Raised when a resolution query is unusable.

    Resolving against an empty identity would silently fall through to the
    org-level policies, so the resolver refuses instead.

    Attributes:
        argument: Name of the offending argument
        value: The value that was rejected
    """

    argument: str = ""
    value: Any = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid {self.argument}: {self.value!r}"
        if self.code == 0:
            self.code = ERROR_QUERY_INVALID_USER
        if not self.suggestion:
            self.suggestion = f"Pass a non-empty {self.argument}"
        self.context.update({
            "argument": self.argument,
            "value": self.value,
        })


@dataclass
class InvalidAmountError(SpendPolicyError):
    """Raised when a spend amount cannot be read as a finite decimal."""

    amount: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid amount: {self.amount}"
        if self.code == 0:
            self.code = ERROR_QUERY_INVALID_AMOUNT
        if not self.suggestion:
            self.suggestion = "Use a plain decimal number such as 120 or 99.95"
        self.context["amount"] = self.amount


# =============================================================================
# Policy File Errors
# =============================================================================


@dataclass
class PolicyFileError(SpendPolicyError):
    """
    Raised when a policy file cannot be turned into a policy set.

    Schema problems inside a well-formed document surface as pydantic
    ValidationError instead.

    Attributes:
        path: Source of the document ("<string>" for in-memory content)
        detail: What was wrong with it
    """

    path: str = ""
    detail: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid policy file {self.path}: {self.detail}"
        if self.code == 0:
            self.code = ERROR_POLICY_FILE_INVALID
        if not self.suggestion:
            self.suggestion = "The file must be a YAML mapping with a 'policies' list"
        self.context.update({
            "path": self.path,
            "detail": self.detail,
        })
