"""
dependencies.py

Responsibility: Declares the provider functions that wire a NodeReconciler to
its collaborators.
Does NOT: contain business logic, HTTP handlers, or configuration parsing.
"""

from __future__ import annotations

import httpx

from bigip.bigip_client import BigIpClient
from bigip.ltm_provider import LtmProvider
from config import BigIpConfig
from services.node_reconciler import NodeReconciler


def get_ltm_provider(config: BigIpConfig, http_client: httpx.AsyncClient) -> LtmProvider:
    """
    Provides a BigIpClient for the configured device.

    Args:
        config: The loaded BIG-IP configuration.
        http_client: The long-lived httpx.AsyncClient from build_http_client.

    Returns:
        A BigIpClient instance satisfying the LtmProvider protocol.
    """
    return BigIpClient(
        http_client=http_client,
        host=config.host,
        username=config.username,
        password=config.password,
    )


def get_node_reconciler(config: BigIpConfig, http_client: httpx.AsyncClient) -> NodeReconciler:
    """
    Provides a fully wired NodeReconciler.

    Args:
        config: The loaded BIG-IP configuration.
        http_client: The long-lived httpx.AsyncClient from build_http_client.

    Returns:
        A NodeReconciler backed by a BigIpClient.
    """
    return NodeReconciler(get_ltm_provider(config, http_client))
