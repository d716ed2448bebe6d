"""Behaviour tests for category claim order, driven by pytest-bdd.

Each scenario in ``partition_order.feature`` partitions a small directory
with two pattern lists sharing one :class:`oeuvre.partition.ClaimedPaths`
and checks that the earlier list wins every contested file.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from oeuvre.partition import ClaimedPaths, partition

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "partition_order.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _paths(listing: str) -> list[Path]:
    return [Path(item.strip()) for item in listing.split(",") if item.strip()]


@given(parsers.parse('a root containing "{first}" and "{second}"'))
def given_root(
    first: str, second: str, tmp_path: Path, scenario_state: ScenarioState
) -> None:
    """Create two empty files under ``tmp_path``."""
    for name in (first, second):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("<x/>", encoding="utf-8")
    scenario_state["root"] = tmp_path


@when(parsers.parse('"{first}" is partitioned before "{second}"'))
def when_partitioned(first: str, second: str, scenario_state: ScenarioState) -> None:
    """Partition both patterns in order against one claimed set."""
    claimed = ClaimedPaths()
    root = scenario_state["root"]
    scenario_state["first"] = partition([first], claimed, root=root)
    scenario_state["second"] = partition([second], claimed, root=root)
    scenario_state["claimed"] = claimed


@then(parsers.parse('the first category holds "{listing}"'))
def then_first(listing: str, scenario_state: ScenarioState) -> None:
    """Assert the files claimed by the first pattern."""
    assert scenario_state["first"] == _paths(listing)


@then(parsers.parse('the second category holds "{listing}"'))
def then_second(listing: str, scenario_state: ScenarioState) -> None:
    """Assert the files claimed by the second pattern."""
    assert scenario_state["second"] == _paths(listing)


@then("the second category is empty")
def then_second_empty(scenario_state: ScenarioState) -> None:
    """Assert the second pattern found nothing left to claim."""
    assert scenario_state["second"] == []
    assert len(scenario_state["claimed"]) == len(scenario_state["first"])
