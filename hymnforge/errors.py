"""
Error taxonomy for HymnForge operations.

Every failure that leaves the core is one of four kinds:
- PreconditionError: missing configuration, raised before any network call
- TransportError: the provider call itself failed
- NormalizationError: a reply arrived but does not satisfy its contract
- EmptyResultError: the provider reported success but returned nothing usable

None of them is retried by the core.
"""

from __future__ import annotations

from typing import Optional


class HymnForgeError(Exception):
    """Base class for all HymnForge failures."""


class PreconditionError(HymnForgeError):
    """A required credential or capability is missing.

    Not retryable: the caller has to supply configuration first.
    """


class TransportError(HymnForgeError):
    """A provider call returned a non-success response.

    Attributes:
        provider: Provider tag ('gemini' or 'zhipu')
        status: HTTP / SDK status code, if the provider reported one
        message: Provider-reported error message
    """

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        self.provider = provider
        self.status = status
        self.message = message
        prefix = f"{provider} request failed"
        if status is not None:
            prefix += f" ({status})"
        super().__init__(f"{prefix}: {message}")


class NormalizationError(HymnForgeError):
    """The reply could not be parsed into the expected contract."""

    def __init__(self, contract: str, message: str):
        self.contract = contract
        super().__init__(f"{contract} result invalid: {message}")


class EmptyResultError(HymnForgeError):
    """The call succeeded but produced no usable payload."""
