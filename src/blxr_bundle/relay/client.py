"""
Relay JSON-RPC client.

Shapes relay requests and normalizes every transport failure into an
error-shaped reply instead of raising.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog
from eth_utils import remove_0x_prefix

from blxr_bundle.config import RelayConfig, get_config

logger = structlog.get_logger(__name__)

NO_RESPONSE_MESSAGE = "rpc error: no response received from server"


class RelayMethod(str, Enum):
    """JSON-RPC methods understood by the relay."""
    SIMULATE_BUNDLE = "blxr_simulate_bundle"
    SUBMIT_BUNDLE = "blxr_submit_bundle"
    TX = "blxr_tx"
    BATCH_TX = "blxr_batch_tx"
    PRIVATE_TX = "blxr_private_tx"
    GET_BUNDLE_REFUND = "blxr_get_bundle_refund"
    GET_LATEST_BUNDLE_REFUNDS = "blxr_get_latest_bundle_refunds"
    SUBMIT_ARB_ONLY_BUNDLE = "submit_arb_only_bundle"
    SNIPE_ME = "blxr_snipe_me"
    GET_EXTERNAL_MEV_BUILDERS = "get_external_mev_builders"
    PING = "ping"


def error_response(code: int, message: str) -> Dict[str, Any]:
    """Build the uniform error reply."""
    return {"error": {"code": code, "message": message}}


def is_error_response(response: Any) -> bool:
    """Check whether a relay reply carries an error."""
    return isinstance(response, dict) and response.get("error") is not None


def to_relay_encoding(signed_bundle: Sequence[str]) -> List[str]:
    """Drop the 0x prefix the relay does not accept from each encoding."""
    return [
        remove_0x_prefix(tx) if isinstance(tx, str) else tx
        for tx in signed_bundle
    ]


class RelayClient:
    """
    HTTP client for the relay.

    Each instance owns its request id counter, so ids increase
    monotonically per client and independent clients never interfere.
    """

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the relay client.

        Args:
            config: Client configuration. Uses global config if not provided.
            api_key: Authorization header value, overrides config.api_key
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or get_config()
        self.api_key = api_key if api_key is not None else self.config.api_key
        self.timeout = self.config.request_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._next_id = 1

    @property
    def headers(self) -> dict:
        """Get request headers with API key."""
        return {
            "Content-Type": "application/json",
            "Authorization": self.api_key or "",
        }

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            headers=self.headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RelayClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def prepare_request(
        self,
        method: RelayMethod,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Wrap params into a JSON-RPC envelope.

        Args:
            method: Relay method
            params: Method params

        Returns:
            Envelope with the next request id
        """
        request = {
            "method": RelayMethod(method).value,
            "params": params if params is not None else {},
            "id": self._next_id,
            "jsonrpc": "2.0",
        }
        self._next_id += 1
        return request

    async def request(
        self,
        url: str,
        method: str = "POST",
        body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform one HTTP request against the relay.

        Args:
            url: Absolute URL
            method: "GET" or "POST"
            body: JSON body, only sent with POST
            timeout: Per-request timeout, defaults to the configured one

        Returns:
            Decoded reply, or {"error": {"code", "message"}} on failure
        """
        if not self._client:
            await self.connect()

        kwargs: Dict[str, Any] = {"timeout": timeout if timeout is not None else self.timeout}
        if body is not None and method == "POST":
            kwargs["json"] = body

        try:
            response = await self._client.request(method, url, **kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning("relay_no_response", url=url, error=str(e))
            return error_response(-1, NO_RESPONSE_MESSAGE)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("relay_request_error", url=url, error=str(e))
            return error_response(-1, f"rpc error: {e}")
        except Exception as e:
            # Body encoding and other failures before anything is sent
            logger.error("relay_request_error", url=url, error=str(e))
            return error_response(-1, f"rpc error: {e}")

        if response.is_error:
            logger.error(
                "relay_request_failed",
                url=url,
                status=response.status_code,
                error=response.text,
            )
            if not response.content:
                return error_response(-1, NO_RESPONSE_MESSAGE)
            try:
                return response.json()
            except ValueError:
                return error_response(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            logger.error("relay_invalid_reply", url=url, error=str(e))
            return error_response(-1, f"rpc error: {e}")
