"""
Relay Integration Layer.

Submission, simulation and tracing of bundles against the bloXroute relay.
"""

from blxr_bundle.relay.client import (
    NO_RESPONSE_MESSAGE,
    RelayClient,
    RelayMethod,
    error_response,
    is_error_response,
    to_relay_encoding,
)
from blxr_bundle.relay.simulator import RelayError, RelaySimulator, SimulationResult
from blxr_bundle.relay.submitter import RelaySubmitter
from blxr_bundle.relay.trace import TraceFetcher

__all__ = [
    "NO_RESPONSE_MESSAGE",
    "RelayClient",
    "RelayMethod",
    "error_response",
    "is_error_response",
    "to_relay_encoding",
    "RelayError",
    "RelaySimulator",
    "SimulationResult",
    "RelaySubmitter",
    "TraceFetcher",
]
