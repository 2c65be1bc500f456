"""
bigip/ltm_provider.py

Responsibility: Defines the LtmProvider Protocol and the Node / FqdnSettings
value objects that describe an LTM node as the management API reports it.
Does NOT: make HTTP calls, validate desired state, or implement reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Value objects: stable shape returned by all LtmProvider implementations
# ---------------------------------------------------------------------------


@dataclass
class FqdnSettings:
    """
    The dynamic-DNS block of an LTM node.

    BIG-IP returns this block for every node; on a static node ``name`` is
    empty and the remaining fields hold the system defaults.
    """

    # Fully-qualified domain name the node resolves (wire field "tmName")
    name: str = ""

    # "ipv4", "ipv6" or empty for IP-agnostic
    address_family: str = ""

    # Seconds between DNS queries, kept as a string like the API does
    interval: str = "3600"

    # Number of failed resolution attempts before the node is marked down
    down_interval: int = 5

    # "enabled" makes the node scale to every address DNS returns
    autopopulate: str = "disabled"

    def to_payload(self) -> dict[str, Any]:
        """
        Serialises the block into its iControl REST JSON shape.

        Returns:
            A dict with empty string fields omitted.
        """
        payload: dict[str, Any] = {
            "tmName": self.name,
            "addressFamily": self.address_family,
            "interval": self.interval,
            "downInterval": self.down_interval,
            "autopopulate": self.autopopulate,
        }
        return {k: v for k, v in payload.items() if v is not None and v != ""}


@dataclass
class Node:
    """
    Represents a single LTM node as sent to or returned by an LtmProvider.

    Every field except ``name`` is optional so the same shape serves both
    full create bodies and partial modify bodies.
    """

    # Node name, e.g. "node1" or "/Common/node1"
    name: str

    # Administrative partition, e.g. "Common"
    partition: str | None = None

    # Partition-qualified name as reported by the API, e.g. "/Common/node1"
    full_path: str | None = None

    # IP literal, possibly with a route-domain suffix ("10.0.0.5%2");
    # "any6" on FQDN nodes
    address: str | None = None

    connection_limit: int | None = None
    dynamic_ratio: int | None = None
    ratio: int | None = None

    # Monitor rule, e.g. "/Common/icmp"
    monitor: str | None = None

    # Connections per second, or "disabled"
    rate_limit: str | None = None

    # "user-enabled" / "user-disabled" (administrative session)
    session: str | None = None

    # "user-up" / "user-down" on write; the API may report "up", "unchecked", ...
    state: str | None = None

    fqdn: FqdnSettings | None = None

    def to_payload(self) -> dict[str, Any]:
        """
        Serialises the node into its iControl REST JSON shape.

        None and empty-string values are omitted. Integer zero is kept so a
        limit can be reset to "unlimited".

        Returns:
            The JSON body as a dict.
        """
        payload: dict[str, Any] = {
            "name": self.name,
            "partition": self.partition,
            "address": self.address,
            "connectionLimit": self.connection_limit,
            "dynamicRatio": self.dynamic_ratio,
            "ratio": self.ratio,
            "monitor": self.monitor,
            "rateLimit": self.rate_limit,
            "session": self.session,
            "state": self.state,
        }
        if self.fqdn is not None:
            payload["fqdn"] = self.fqdn.to_payload()
        return {k: v for k, v in payload.items() if v is not None and v != ""}


# ---------------------------------------------------------------------------
# Abstract interface: every LTM management API client implements this
# ---------------------------------------------------------------------------


@runtime_checkable
class LtmProvider(Protocol):
    """
    Abstract protocol for LTM node management.

    NodeReconciler depends on this abstraction, never on a concrete client.
    A node is always addressed by its name.
    """

    async def create_static_node(self, node: Node) -> None:
        """
        Creates a node backed by a static IPv4/IPv6 address.

        Args:
            node: The node to create; ``address`` must be set.

        Raises:
            LtmProviderError: If the API call fails.
        """
        ...

    async def create_fqdn_node(self, node: Node) -> None:
        """
        Creates a node backed by a domain name resolved by the device.

        Args:
            node: The node to create; ``fqdn.name`` must be set.

        Raises:
            LtmProviderError: If the API call fails.
        """
        ...

    async def get_node(self, name: str) -> Node | None:
        """
        Fetches a node by name.

        Args:
            name: The node name.

        Returns:
            The Node if it exists, or None if the device does not know it.

        Raises:
            LtmProviderError: If the API call fails for any reason other
                than the node being absent.
        """
        ...

    async def modify_node(self, name: str, node: Node) -> None:
        """
        Applies a partial update to an existing node.

        Args:
            name: The node name.
            node: Carries only the fields to change.

        Raises:
            LtmProviderError: If the API call fails.
        """
        ...

    async def delete_node(self, name: str) -> None:
        """
        Deletes a node.

        Args:
            name: The node name.

        Raises:
            LtmProviderError: If the API call fails.
        """
        ...
