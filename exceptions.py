"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class LtmProviderError(Exception):
    """
    Raised by any LtmProvider implementation when a management API call fails.

    Covers both transport failures (connection refused, timeout) and non-2xx
    responses other than a 404 on lookup. The reconciler never catches this;
    it reaches the caller verbatim.
    """


class NodeAddressParseError(Exception):
    """
    Raised by NodeReconciler.read when the remote node's address cannot be
    normalised into an IP literal.

    This signals corrupt or unexpected remote data and must never be treated
    as "node not found".
    """


class InvalidNodeSpecError(ValueError):
    """
    Raised when desired-state values supplied by the host fail validation.
    """


class ImmutableFieldError(InvalidNodeSpecError):
    """
    Raised when an update would change a node's identity (its name).
    """


class ConfigLoadError(Exception):
    """
    Raised by BigIpConfig.from_env when a required environment variable is
    missing or a value cannot be parsed.
    """
