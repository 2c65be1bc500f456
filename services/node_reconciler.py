"""
services/node_reconciler.py

Responsibility: Reconciles a desired NodeSpec against the LTM node stored on
the device: create, read, exists, update, delete and import passthrough.
Decides whether an address backs a static or an FQDN node and normalises the
device's representation back into the NodeSpec shape.
Does NOT: make HTTP calls directly, persist state, or retry failed calls.
"""

from __future__ import annotations

import logging
import re

from bigip.ltm_provider import FqdnSettings, LtmProvider, Node
from exceptions import (
    ImmutableFieldError,
    InvalidNodeSpecError,
    LtmProviderError,
    NodeAddressParseError,
)
from resources.node_spec import NODE_STATES, FqdnSpec, NodeSpec

logger = logging.getLogger(__name__)

# IPv4 dotted-quad at the start, or anything containing ":" (IPv6).
# re.ASCII keeps \d to 0-9.
_STATIC_ADDRESS_RE = re.compile(r"^((\d{1,3}\.){3}\d{1,3})|(.*:.*)$", re.ASCII)

# xxx.xxx.xxx.xxx(%rd); the route-domain suffix is not part of the address.
_IPV4_WITH_ROUTE_DOMAIN_RE = re.compile(r"((?:\d{1,3}\.){3}\d{1,3})(?:%\d+)?", re.ASCII)

_ROUTE_DOMAIN_SUFFIX_RE = re.compile(r"%\d+$", re.ASCII)


def is_static_address(address: str) -> bool:
    """
    Returns True if the address should back a static node.

    Args:
        address: The node address from the desired state.

    Returns:
        True for an IPv4 literal or anything containing ":", False for a
        domain name.
    """
    return _STATIC_ADDRESS_RE.search(address) is not None


class NodeReconciler:
    """
    Maps NodeSpec desired state onto LTM node calls.

    Every operation is a single awaited round trip (update adds a follow-up
    read) with no caching and no retries; errors raised by the provider reach
    the caller untouched. Not-found is reported as None / False, never as an
    exception.

    Collaborators:
        - LtmProvider: abstract interface satisfied by BigIpClient
    """

    def __init__(self, provider: LtmProvider) -> None:
        """
        Initialises the reconciler with an LTM provider.

        Args:
            provider: Any LtmProvider implementation (e.g. BigIpClient).
        """
        self._provider = provider

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def create(self, spec: NodeSpec) -> str:
        """
        Creates the node described by ``spec``.

        Args:
            spec: The desired state.

        Returns:
            The node identifier, which is the node name.

        Raises:
            LtmProviderError: If the create call fails.
        """
        logger.info("Creating node %s::%s", spec.name, spec.address)

        node = self._base_node(spec)
        if is_static_address(spec.address):
            node.address = spec.address
            create = self._provider.create_static_node
        else:
            node.fqdn = self._fqdn_settings(spec)
            create = self._provider.create_fqdn_node

        try:
            await create(node)
        except LtmProviderError as exc:
            logger.error("Unable to create node %s: %s", spec.name, exc)
            raise

        return spec.name

    async def read(self, node_id: str, desired: NodeSpec | None = None) -> NodeSpec | None:
        """
        Reads the node back from the device in NodeSpec shape.

        Fields the device does not echo back (``state`` and the FQDN tuning)
        are taken from ``desired`` when given.

        Args:
            node_id: The node identifier (its name).
            desired: The last known desired state, if any.

        Returns:
            The normalised NodeSpec, or None if the node no longer exists and
            should be dropped from tracked state.

        Raises:
            LtmProviderError: If the lookup fails.
            NodeAddressParseError: If the device's address or FQDN settings
                cannot be parsed.
        """
        logger.info("Fetching node %s", node_id)

        node = await self._get(node_id)
        if node is None:
            logger.warning("Node (%s) not found, removing from state", node_id)
            return None

        return NodeSpec(
            name=node_id,
            address=self._normalise_address(node),
            rate_limit=node.rate_limit or "disabled",
            connection_limit=node.connection_limit or 0,
            dynamic_ratio=node.dynamic_ratio or 0,
            ratio=node.ratio if node.ratio is not None else 1,
            monitor=node.monitor or "",
            state=self._resolve_state(node, desired),
            fqdn=self._resolve_fqdn(node, desired),
        )

    async def exists(self, node_id: str) -> bool:
        """
        Reports whether the node still exists on the device.

        Args:
            node_id: The node identifier (its name).

        Returns:
            True if found; False if absent and the node should be dropped.

        Raises:
            LtmProviderError: If the lookup fails.
        """
        logger.info("Fetching node %s", node_id)

        node = await self._get(node_id)
        if node is None:
            logger.warning("Node (%s) not found, removing from state", node_id)
            return False
        return True

    async def update(self, node_id: str, spec: NodeSpec) -> NodeSpec | None:
        """
        Applies the mutable fields of ``spec`` to an existing node.

        The modify call is issued for static and FQDN nodes alike. The
        address is sent unchanged for static nodes only, since FQDN nodes
        carry no literal address. ``monitor`` is always sent, so an empty
        value clears a previously set rule.

        Args:
            node_id: The node identifier (its name).
            spec: The desired state; ``spec.name`` must equal ``node_id``.

        Returns:
            The refreshed NodeSpec, or None if the node vanished meanwhile.

        Raises:
            ImmutableFieldError: If ``spec`` names a different node.
            LtmProviderError: If the modify or the follow-up read fails.
            NodeAddressParseError: If the follow-up read cannot parse the address.
        """
        if spec.name != node_id:
            raise ImmutableFieldError(
                f"Node name is immutable: {node_id!r} cannot become {spec.name!r}"
            )

        node = Node(
            name=node_id,
            connection_limit=spec.connection_limit,
            dynamic_ratio=spec.dynamic_ratio,
            monitor=spec.monitor,
            rate_limit=spec.rate_limit,
            state=spec.state,
        )
        if is_static_address(spec.address):
            node.address = spec.address

        logger.info("Modifying node %s", node_id)
        try:
            await self._provider.modify_node(node_id, node)
        except LtmProviderError as exc:
            logger.error("Unable to modify node %s: %s", node_id, exc)
            raise

        return await self.read(node_id, desired=spec)

    async def delete(self, node_id: str) -> None:
        """
        Deletes the node.

        Args:
            node_id: The node identifier (its name).

        Raises:
            LtmProviderError: If the delete call fails.
        """
        logger.info("Deleting node %s", node_id)
        try:
            await self._provider.delete_node(node_id)
        except LtmProviderError as exc:
            logger.error("Unable to delete node %s: %s", node_id, exc)
            raise

    @staticmethod
    def import_node(node_id: str) -> str:
        """
        Accepts an existing node for tracking; the identifier is used verbatim.

        Args:
            node_id: The node name as known on the device.

        Returns:
            The same identifier.

        Raises:
            InvalidNodeSpecError: If the identifier is empty.
        """
        if not node_id:
            raise InvalidNodeSpecError("Cannot import a node with an empty identifier")
        return node_id

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _get(self, node_id: str) -> Node | None:
        try:
            return await self._provider.get_node(node_id)
        except LtmProviderError as exc:
            logger.error("Unable to retrieve node %s: %s", node_id, exc)
            raise

    @staticmethod
    def _base_node(spec: NodeSpec) -> Node:
        """
        Builds the fields shared by static and FQDN create calls.

        Args:
            spec: The desired state.

        Returns:
            A Node without address or fqdn set.
        """
        return Node(
            name=spec.name,
            rate_limit=spec.rate_limit,
            connection_limit=spec.connection_limit,
            dynamic_ratio=spec.dynamic_ratio,
            ratio=spec.ratio,
            monitor=spec.monitor,
            state=spec.state,
        )

    @staticmethod
    def _fqdn_settings(spec: NodeSpec) -> FqdnSettings:
        """
        Builds the FQDN block for a create call.

        The domain name is always the node address; ``spec.fqdn`` only
        contributes the resolution tuning.

        Args:
            spec: The desired state of an FQDN-addressed node.

        Returns:
            The FqdnSettings to send.
        """
        fqdn = spec.fqdn or FqdnSpec()
        return FqdnSettings(
            name=spec.address,
            address_family=fqdn.address_family,
            interval=fqdn.interval,
            down_interval=fqdn.down_interval,
            autopopulate=fqdn.autopopulate,
        )

    @staticmethod
    def _normalise_address(node: Node) -> str:
        """
        Derives the desired-state address from the device's node.

        Args:
            node: The node as returned by the provider.

        Returns:
            The FQDN name if set, otherwise the IP literal without any
            route-domain suffix.

        Raises:
            NodeAddressParseError: If no IP literal can be extracted.
        """
        if node.fqdn is not None and node.fqdn.name:
            return node.fqdn.name

        raw = node.address or ""
        # IPv6 first: "::ffff:192.0.2.1" embeds a dotted quad.
        if ":" in raw:
            return _ROUTE_DOMAIN_SUFFIX_RE.sub("", raw)
        match = _IPV4_WITH_ROUTE_DOMAIN_RE.search(raw)
        if match is not None:
            return match.group(1)

        raise NodeAddressParseError(
            f"Cannot parse address {raw!r} reported for node {node.name}"
        )

    @staticmethod
    def _resolve_state(node: Node, desired: NodeSpec | None) -> str:
        if desired is not None:
            return desired.state
        if node.state in NODE_STATES:
            return node.state
        return "user-up"

    @staticmethod
    def _resolve_fqdn(node: Node, desired: NodeSpec | None) -> FqdnSpec | None:
        if desired is not None:
            return desired.fqdn
        if node.fqdn is None or not node.fqdn.name:
            return None
        try:
            return FqdnSpec(
                address_family=node.fqdn.address_family,
                name=node.fqdn.name,
                interval=node.fqdn.interval,
                down_interval=node.fqdn.down_interval,
                autopopulate=node.fqdn.autopopulate,
            )
        except InvalidNodeSpecError as exc:
            raise NodeAddressParseError(
                f"Cannot parse fqdn settings reported for node {node.name}: {exc}"
            ) from exc
