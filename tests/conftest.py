"""
tests/conftest.py

Shared pytest fixtures for the unit test suite.
All HTTP fixtures use respx.mock and reconciler tests use an in-memory
provider, so no real network calls are made in any test.
"""

from __future__ import annotations

import dataclasses

import pytest
import respx

from bigip.ltm_provider import FqdnSettings, Node
from exceptions import LtmProviderError
from resources.node_spec import FqdnSpec, NodeSpec


# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# In-memory LtmProvider
# ---------------------------------------------------------------------------


class FakeLtmProvider:
    """
    Keeps nodes in a dict and answers like a device would.

    FQDN nodes report "any6" as their address; static nodes report an
    empty FQDN block, both matching what iControl REST returns.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, Node] = {}
        self.calls: list[str] = []

    async def create_static_node(self, node: Node) -> None:
        self.calls.append("create_static_node")
        self._insert(dataclasses.replace(node, fqdn=FqdnSettings()))

    async def create_fqdn_node(self, node: Node) -> None:
        self.calls.append("create_fqdn_node")
        self._insert(dataclasses.replace(node, address="any6"))

    async def get_node(self, name: str) -> Node | None:
        self.calls.append("get_node")
        node = self.nodes.get(name)
        return dataclasses.replace(node) if node is not None else None

    async def modify_node(self, name: str, node: Node) -> None:
        self.calls.append("modify_node")
        current = self._existing(name)
        changes = {
            f.name: getattr(node, f.name)
            for f in dataclasses.fields(node)
            if f.name != "name" and getattr(node, f.name) is not None
        }
        self.nodes[name] = dataclasses.replace(current, **changes)

    async def delete_node(self, name: str) -> None:
        self.calls.append("delete_node")
        self._existing(name)
        del self.nodes[name]

    def _insert(self, node: Node) -> None:
        if node.name in self.nodes:
            raise LtmProviderError(f"BIG-IP API error 409: node {node.name} already exists")
        self.nodes[node.name] = node

    def _existing(self, name: str) -> Node:
        if name not in self.nodes:
            raise LtmProviderError(f"BIG-IP API error 404: node {name} was not found")
        return self.nodes[name]


@pytest.fixture()
def fake_provider():
    """Yields an empty in-memory LtmProvider."""
    return FakeLtmProvider()


# ---------------------------------------------------------------------------
# Desired-state samples
# ---------------------------------------------------------------------------


@pytest.fixture()
def static_spec():
    """A static IPv4 node with non-default limits."""
    return NodeSpec(
        name="node1",
        address="192.168.1.10",
        connection_limit=10,
        dynamic_ratio=2,
        monitor="/Common/icmp",
    )


@pytest.fixture()
def fqdn_spec():
    """An FQDN node with explicit resolution settings."""
    return NodeSpec(
        name="web",
        address="foo.example.com",
        fqdn=FqdnSpec(address_family="ipv4", interval="300", down_interval=3),
    )
