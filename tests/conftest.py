"""
Pytest configuration and fixtures for spendpolicy tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from spendpolicy.schema import SpendPolicy


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def org_wide() -> SpendPolicy:
    return SpendPolicy(id="org-wide", name="Org-wide", max_amount="100")


@pytest.fixture
def org_travel() -> SpendPolicy:
    return SpendPolicy(
        id="org-travel",
        name="Org-Category",
        category_id="travel",
        max_amount="200",
    )


@pytest.fixture
def alice_wide() -> SpendPolicy:
    return SpendPolicy(
        id="alice-wide",
        name="User-wide",
        user_id="alice",
        max_amount="300",
    )


@pytest.fixture
def alice_travel() -> SpendPolicy:
    return SpendPolicy(
        id="alice-travel",
        name="User-Category",
        user_id="alice",
        category_id="travel",
        max_amount="400",
    )


@pytest.fixture
def all_scopes(
    org_wide: SpendPolicy,
    org_travel: SpendPolicy,
    alice_wide: SpendPolicy,
    alice_travel: SpendPolicy,
) -> list[SpendPolicy]:
    """One policy of each scope class, least specific first."""
    return [org_wide, org_travel, alice_wide, alice_travel]


@pytest.fixture
def sample_policy_yaml() -> str:
    """Return a policy file with one policy of each scope class."""
    return """
version: "1.0"
org_id: acme
name: Acme Corp
policies:
  - id: org-wide
    name: Org-wide
    max_amount: "100"
  - id: org-travel
    name: Org-Category
    category_id: travel
    max_amount: "200"
    review_mode: auto_approve
  - id: alice-wide
    name: User-wide
    user_id: alice
    max_amount: "300"
  - id: alice-travel
    name: User-Category
    user_id: alice
    category_id: travel
    max_amount: "400"
"""


@pytest.fixture
def sample_policy_file(temp_dir: Path, sample_policy_yaml: str) -> Path:
    """Write the sample policy YAML to disk."""
    path = temp_dir / "policies.yaml"
    path.write_text(sample_policy_yaml)
    return path
