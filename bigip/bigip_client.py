"""
bigip/bigip_client.py

Responsibility: Implements the LtmProvider protocol using the BIG-IP iControl
REST API (https://{host}/mgmt/tm/ltm/node). All management API calls are
concentrated here; no other file may call the device directly.
Does NOT: read configuration, classify addresses, or contain reconciliation logic.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

import httpx

from bigip.ltm_provider import FqdnSettings, Node
from exceptions import LtmProviderError

logger = logging.getLogger(__name__)

# Path suffix appended to the device host to reach the node collection.
# Exported so tests can construct expected URLs without duplicating the string.
_NODE_PATH = "/mgmt/tm/ltm/node"


class BigIpClient:
    """
    Implements LtmProvider for the iControl REST node collection.

    All outbound calls go through the injected httpx.AsyncClient, making
    this class fully testable without a real device (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; kept alive externally
        - LtmProvider: this class satisfies the protocol contract
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        host: str,
        username: str,
        password: str,
    ) -> None:
        """
        Initialises the client with an HTTP client, device host, and credentials.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            host: Hostname or IP of the management interface, optionally with
                  a port, e.g. "10.1.1.245" or "bigip.local:8443".
            username: Management account name.
            password: Management account password.
        """
        self._client = http_client
        self._base = f"https://{host.rstrip('/')}{_NODE_PATH}"
        self._auth = httpx.BasicAuth(username, password)
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # ---------------------------------------------------------------------------
    # LtmProvider implementation
    # ---------------------------------------------------------------------------

    async def create_static_node(self, node: Node) -> None:
        """
        Creates a node addressed by an IP literal.

        Args:
            node: The node to create.

        Raises:
            LtmProviderError: If the API returns an error.
        """
        payload = self._with_session(node).to_payload()
        payload.pop("fqdn", None)

        logger.debug("POST %s payload=%s", self._base, payload)
        await self._request("POST", self._base, json=payload)

    async def create_fqdn_node(self, node: Node) -> None:
        """
        Creates a node addressed by a domain name.

        The device owns address resolution, so no ``address`` is sent.

        Args:
            node: The node to create; ``fqdn`` must be populated.

        Raises:
            LtmProviderError: If the API returns an error.
        """
        if node.fqdn is None or not node.fqdn.name:
            raise LtmProviderError(f"FQDN node {node.name} has no domain name to resolve")

        payload = self._with_session(node).to_payload()
        payload.pop("address", None)

        logger.debug("POST %s payload=%s", self._base, payload)
        await self._request("POST", self._base, json=payload)

    async def get_node(self, name: str) -> Node | None:
        """
        Fetches a single node by name.

        Args:
            name: The node name, e.g. "node1" or "/Common/node1".

        Returns:
            A Node if it exists, or None on HTTP 404.

        Raises:
            LtmProviderError: If the API returns any other error.
        """
        url = self._node_url(name)

        logger.debug("GET %s", url)
        data = await self._request("GET", url, allow_not_found=True)
        if data is None:
            return None

        return self._parse_node(data)

    async def modify_node(self, name: str, node: Node) -> None:
        """
        Applies a partial update to an existing node.

        Unlike a create body, an empty ``monitor`` is sent as-is so the
        device drops the current rule.

        Args:
            name: The node name.
            node: Carries only the fields to change.

        Raises:
            LtmProviderError: If the API returns an error.
        """
        url = self._node_url(name)
        payload = node.to_payload()
        # The name travels in the URL, never in a modify body.
        payload.pop("name", None)
        if node.monitor is not None:
            payload["monitor"] = node.monitor

        logger.debug("PATCH %s payload=%s", url, payload)
        await self._request("PATCH", url, json=payload)

    async def delete_node(self, name: str) -> None:
        """
        Deletes a node.

        Args:
            name: The node name.

        Raises:
            LtmProviderError: If the API returns an error.
        """
        url = self._node_url(name)

        logger.debug("DELETE %s", url)
        await self._request("DELETE", url)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _node_url(self, name: str) -> str:
        """
        Builds the resource URL for a node.

        iControl REST addresses "/Common/node1" as "~Common~node1".

        Args:
            name: The node name, with or without a partition prefix.

        Returns:
            The full URL of the node resource.
        """
        return f"{self._base}/{name.replace('/', '~')}"

    @staticmethod
    def _with_session(node: Node) -> Node:
        """
        Returns a copy of the node with ``session`` derived from ``state``.

        Args:
            node: The node about to be created.

        Returns:
            A new Node; the argument is left untouched.
        """
        if node.session is not None or not node.state:
            return node
        session = "user-enabled" if node.state == "user-up" else "user-disabled"
        return dataclasses.replace(node, session=session)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> dict[str, Any] | None:
        """
        Sends an authenticated HTTP request to the iControl REST API.

        Args:
            method: HTTP verb ("GET", "POST", "PATCH", "DELETE").
            url: Full URL of the endpoint.
            json: Optional JSON request body.
            allow_not_found: Return None instead of raising on HTTP 404.

        Returns:
            The parsed JSON response body, an empty dict for an empty body,
            or None for an allowed 404.

        Raises:
            LtmProviderError: If the HTTP call fails or returns a non-2xx status.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, auth=self._auth, json=json
            )
            if allow_not_found and response.status_code == 404:
                logger.debug("%s %s returned 404", method, url)
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise LtmProviderError(
                f"BIG-IP API error {exc.response.status_code} for {method} {url}: "
                f"{exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise LtmProviderError(
                f"Network error calling BIG-IP API ({method} {url}): {exc}"
            ) from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise LtmProviderError(
                f"BIG-IP API returned a non-JSON body for {method} {url}"
            ) from exc

    @staticmethod
    def _parse_node(raw: dict[str, Any]) -> Node:
        """
        Converts a raw iControl REST node dict into a typed Node.

        Args:
            raw: A node object from the API response.

        Returns:
            A Node populated from the raw dict.
        """
        fqdn_raw = raw.get("fqdn")
        fqdn = None
        if isinstance(fqdn_raw, dict):
            fqdn = FqdnSettings(
                name=fqdn_raw.get("tmName", ""),
                address_family=fqdn_raw.get("addressFamily", ""),
                interval=str(fqdn_raw.get("interval", "3600")),
                down_interval=int(fqdn_raw.get("downInterval", 5)),
                autopopulate=fqdn_raw.get("autopopulate", "disabled"),
            )

        return Node(
            name=raw["name"],
            partition=raw.get("partition"),
            full_path=raw.get("fullPath"),
            address=raw.get("address", ""),
            connection_limit=int(raw.get("connectionLimit", 0)),
            dynamic_ratio=int(raw.get("dynamicRatio", 0)),
            ratio=int(raw.get("ratio", 1)),
            monitor=raw.get("monitor", ""),
            rate_limit=str(raw.get("rateLimit", "disabled")),
            session=raw.get("session"),
            state=raw.get("state"),
            fqdn=fqdn,
        )

