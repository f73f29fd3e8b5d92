"""
Unit tests for schema validation.

Tests cover:
- SpendPolicy parsing, scope normalization and amounts
- PolicySet parsing
- YAML loading helpers
- Result models
"""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from spendpolicy.errors import PolicyFileError
from spendpolicy.resolver import resolve
from spendpolicy.schema import (
    LimitCheck,
    Period,
    PolicySet,
    ReviewMode,
    ScopeClass,
    SpendPolicy,
    load_policy_set,
    load_policy_set_from_string,
)


# =============================================================================
# SpendPolicy Tests
# =============================================================================


class TestSpendPolicy:
    """Tests for SpendPolicy model."""

    def test_minimal_policy(self) -> None:
        """A policy only needs an id and a ceiling."""
        policy = SpendPolicy(id="p1", max_amount="50")
        assert policy.user_id is None
        assert policy.category_id is None
        assert policy.max_amount == Decimal("50")
        assert policy.period == Period.PER_EXPENSE
        assert policy.review_mode == ReviewMode.MANUAL_REVIEW
        assert policy.metadata == {}

    def test_full_policy(self) -> None:
        policy = SpendPolicy(
            id="p1",
            name="Travel for Alice",
            description="Conference trips",
            user_id="alice",
            category_id="travel",
            max_amount="1250.50",
            period="per_expense",
            review_mode="auto_approve",
            metadata={"cost_center": "R&D"},
        )
        assert policy.review_mode == ReviewMode.AUTO_APPROVE
        assert policy.metadata["cost_center"] == "R&D"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpendPolicy(id="", max_amount="1")

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpendPolicy(id="p", max_amount="-0.01")

    def test_bool_amount_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpendPolicy(id="p", max_amount=True)

    def test_float_amount_exact(self) -> None:
        policy = SpendPolicy(id="p", max_amount=100.01)
        assert policy.max_amount == Decimal("100.01")

    def test_blank_scopes_are_unset(self) -> None:
        policy = SpendPolicy(id="p", user_id="", category_id="  ", max_amount="1")
        assert policy.user_id is None
        assert policy.category_id is None

    def test_extra_fields_passed_through(self) -> None:
        """Storage columns the resolver does not know about are kept."""
        policy = SpendPolicy(
            id="p",
            max_amount="1",
            org_id="acme",
            created_at="2024-01-01T00:00:00Z",
        )
        assert policy.model_extra == {
            "org_id": "acme",
            "created_at": "2024-01-01T00:00:00Z",
        }
        assert policy.model_dump()["org_id"] == "acme"

    def test_extra_fields_survive_resolution(self) -> None:
        policy = SpendPolicy(id="p", max_amount="1", org_id="acme")
        result = resolve([policy], "alice")
        assert result.selected_policy is not None
        assert result.selected_policy.model_extra == {"org_id": "acme"}

    def test_frozen(self) -> None:
        policy = SpendPolicy(id="p", max_amount="1")
        with pytest.raises(ValidationError):
            policy.max_amount = Decimal("2")  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("user_id", "category_id", "label"),
        [
            ("alice", "travel", "user-category"),
            ("alice", None, "user-wide"),
            (None, "travel", "org-category"),
            (None, None, "org-wide"),
        ],
    )
    def test_scope_label(
        self,
        user_id: str | None,
        category_id: str | None,
        label: str,
    ) -> None:
        policy = SpendPolicy(
            id="p",
            user_id=user_id,
            category_id=category_id,
            max_amount="1",
        )
        assert policy.scope_label == label
        assert ScopeClass(label).value == label


# =============================================================================
# PolicySet / YAML Tests
# =============================================================================


class TestLoadPolicySet:
    """Tests for YAML loading helpers."""

    def test_from_string(self, sample_policy_yaml: str) -> None:
        policy_set = load_policy_set_from_string(sample_policy_yaml)
        assert policy_set.org_id == "acme"
        assert policy_set.name == "Acme Corp"
        assert [p.id for p in policy_set.policies] == [
            "org-wide",
            "org-travel",
            "alice-wide",
            "alice-travel",
        ]
        assert policy_set.policies[1].review_mode == ReviewMode.AUTO_APPROVE

    def test_from_file(self, sample_policy_file: Path) -> None:
        policy_set = load_policy_set(sample_policy_file)
        assert len(policy_set.policies) == 4

    def test_from_str_path(self, sample_policy_file: Path) -> None:
        policy_set = load_policy_set(str(sample_policy_file))
        assert policy_set.version == "1.0"

    def test_unquoted_float_amount_exact(self) -> None:
        policy_set = load_policy_set_from_string(
            "policies:\n  - id: p\n    max_amount: 100.01\n"
        )
        assert policy_set.policies[0].max_amount == Decimal("100.01")

    def test_no_policies(self) -> None:
        policy_set = load_policy_set_from_string("org_id: empty\n")
        assert policy_set.policies == []

    def test_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_policy_set(temp_dir / "missing.yaml")

    def test_empty_document(self) -> None:
        with pytest.raises(PolicyFileError) as exc_info:
            load_policy_set_from_string("")

        assert "empty" in exc_info.value.message

    def test_non_mapping_document(self) -> None:
        with pytest.raises(PolicyFileError) as exc_info:
            load_policy_set_from_string("- id: p\n  max_amount: 1\n")

        assert exc_info.value.context["path"] == "<string>"

    def test_empty_file_names_path(self, temp_dir: Path) -> None:
        path = temp_dir / "empty.yaml"
        path.write_text("")
        with pytest.raises(PolicyFileError) as exc_info:
            load_policy_set(path)

        assert str(path) in exc_info.value.message

    def test_invalid_policy(self) -> None:
        with pytest.raises(ValidationError):
            load_policy_set_from_string("policies:\n  - name: no id\n")

    def test_policy_set_defaults(self) -> None:
        policy_set = PolicySet()
        assert policy_set.version == "1.0"
        assert policy_set.org_id is None


# =============================================================================
# Result Model Tests
# =============================================================================


class TestLimitCheck:
    """Tests for LimitCheck constructors."""

    def test_allow(self) -> None:
        check = LimitCheck.allow("ok", amount=Decimal("1"), max_amount=Decimal("2"), policy_id="p")
        assert check.allowed is True
        assert check.reason == "ok"

    def test_deny(self) -> None:
        check = LimitCheck.deny("no", amount=Decimal("3"))
        assert check.allowed is False
        assert check.max_amount is None
