"""
tests/unit/test_node_spec.py

Unit tests for resources/node_spec.py.
Verifies defaults, boundary validation, and the host state blob shape.
"""

from __future__ import annotations

import pytest

from exceptions import InvalidNodeSpecError
from resources.node_spec import FqdnSpec, NodeSpec


def test_defaults():
    spec = NodeSpec(name="node1", address="10.0.0.5")

    assert spec.rate_limit == "disabled"
    assert spec.connection_limit == 0
    assert spec.dynamic_ratio == 0
    assert spec.ratio == 1
    assert spec.monitor == ""
    assert spec.state == "user-up"
    assert spec.fqdn is None


def test_fqdn_defaults():
    fqdn = FqdnSpec()

    assert fqdn.interval == "3600"
    assert fqdn.down_interval == 5
    assert fqdn.autopopulate == "disabled"


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"address": ""},
        {"address": "10.0.0.5 "},
        {"connection_limit": -1},
        {"ratio": "1"},
        {"dynamic_ratio": True},
        {"state": "enabled"},
        {"rate_limit": ""},
    ],
)
def test_invalid_values_raise(overrides):
    values = {"name": "node1", "address": "10.0.0.5", **overrides}
    with pytest.raises(InvalidNodeSpecError):
        NodeSpec(**values)


@pytest.mark.parametrize(
    "overrides",
    [
        {"interval": "1h"},
        {"interval": 3600},
        {"interval": "TTL"},
        {"interval": "٣٦٠٠"},
        {"down_interval": -5},
        {"autopopulate": "yes"},
    ],
)
def test_invalid_fqdn_values_raise(overrides):
    with pytest.raises(InvalidNodeSpecError):
        FqdnSpec(**overrides)


@pytest.mark.parametrize("interval", ["ttl", "0", "3600"])
def test_fqdn_interval_accepts_ttl_and_seconds(interval):
    assert FqdnSpec(interval=interval).interval == interval


# ---------------------------------------------------------------------------
# from_dict
# ---------------------------------------------------------------------------


def test_from_dict_applies_defaults_for_none():
    spec = NodeSpec.from_dict({"name": "node1", "address": "10.0.0.5", "monitor": None})

    assert spec.monitor == ""
    assert spec.ratio == 1


def test_from_dict_accepts_single_fqdn_list():
    spec = NodeSpec.from_dict(
        {
            "name": "web",
            "address": "foo.example.com",
            "fqdn": [{"interval": "60", "autopopulate": "enabled"}],
        }
    )

    assert spec.fqdn == FqdnSpec(interval="60", autopopulate="enabled")


def test_from_dict_accepts_fqdn_mapping_and_empty_list():
    mapping = NodeSpec.from_dict(
        {"name": "web", "address": "foo.example.com", "fqdn": {"down_interval": 2}}
    )
    empty = NodeSpec.from_dict({"name": "web", "address": "foo.example.com", "fqdn": []})

    assert mapping.fqdn.down_interval == 2
    assert empty.fqdn is None


def test_from_dict_rejects_multiple_fqdn_blocks():
    with pytest.raises(InvalidNodeSpecError, match="at most one"):
        NodeSpec.from_dict(
            {"name": "web", "address": "foo.example.com", "fqdn": [{}, {"interval": "60"}]}
        )


def test_from_dict_rejects_unknown_fields():
    with pytest.raises(InvalidNodeSpecError, match="priority"):
        NodeSpec.from_dict({"name": "node1", "address": "10.0.0.5", "priority": 3})


def test_from_dict_rejects_unknown_fqdn_fields():
    with pytest.raises(InvalidNodeSpecError, match="auto_populate"):
        NodeSpec.from_dict(
            {"name": "web", "address": "foo.example.com", "fqdn": {"auto_populate": "enabled"}}
        )


def test_from_dict_requires_name_and_address():
    with pytest.raises(InvalidNodeSpecError, match="address"):
        NodeSpec.from_dict({"name": "node1"})
    with pytest.raises(InvalidNodeSpecError):
        NodeSpec.from_dict({"name": None, "address": "10.0.0.5"})


def test_to_dict_round_trips_through_from_dict():
    spec = NodeSpec(
        name="web",
        address="foo.example.com",
        connection_limit=5,
        fqdn=FqdnSpec(interval="120"),
    )

    blob = spec.to_dict()

    assert blob["fqdn"]["interval"] == "120"
    assert NodeSpec.from_dict(blob) == spec
