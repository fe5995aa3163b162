"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from eth_account import Account

from blxr_bundle.config import BlockchainNetwork, RelayConfig
from blxr_bundle.node.interface import BlockIdentifier, BlockInfo, NodeInterface
from blxr_bundle.relay.client import RelayClient
from blxr_bundle.tx.signer import LocalAccountSigner, generate_test_key

BURN_ADDRESS = "0x000000000000000000000000000000000000dEaD"


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> RelayConfig:
    """Create a test configuration."""
    return RelayConfig(
        api_key="test-api-key",
        network=BlockchainNetwork.MAINNET,
        relay_url="https://relay.test",
        trace_url="https://tools.test",
        request_timeout_seconds=5,
        node_rpc_url="http://node.test:8545",
        log_level="DEBUG",
    )


# ============================================================================
# Test Data Generators
# ============================================================================

def sign_raw_transaction(
    account,
    nonce: int,
    eip1559: bool = False,
    to: str = BURN_ADDRESS,
) -> str:
    """Sign a simple transfer and return its 0x-prefixed encoding."""
    if eip1559:
        tx = {
            "type": 2,
            "chainId": 1,
            "nonce": nonce,
            "to": to,
            "value": 1,
            "gas": 21000,
            "maxFeePerGas": 30_000_000_000,
            "maxPriorityFeePerGas": 1_000_000_000,
        }
    else:
        tx = {
            "chainId": 1,
            "nonce": nonce,
            "to": to,
            "value": 1,
            "gas": 21000,
            "gasPrice": 20_000_000_000,
        }
    signed = account.sign_transaction(tx)
    return "0x" + bytes(signed.raw_transaction).hex()


@pytest.fixture
def sign_raw():
    """Signer of raw transfers, see sign_raw_transaction."""
    return sign_raw_transaction


@pytest.fixture
def transfer_request():
    """Build a transfer request without nonce or gas."""
    def build(**extra) -> dict:
        tx = {"to": BURN_ADDRESS, "value": 1, "chainId": 1}
        tx.update(extra)
        return tx
    return build


# ============================================================================
# Mock Node Interface
# ============================================================================

class MockNodeInterface(NodeInterface):
    """Mock node interface for testing."""

    def __init__(self):
        self.nonces: Dict[str, int] = {}
        self.nonce_queries: List[str] = []
        self.gas_estimate = 21000
        self.estimate_requests: List[dict] = []
        self.blocks: Dict[BlockIdentifier, BlockInfo] = {}
        self.block_number = 100
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "pending",
    ) -> int:
        self.nonce_queries.append(address)
        return self.nonces.get(address, 0)

    async def estimate_gas(self, transaction) -> int:
        self.estimate_requests.append(dict(transaction))
        return self.gas_estimate

    async def get_block(self, block_identifier: BlockIdentifier) -> Optional[BlockInfo]:
        return self.blocks.get(block_identifier)

    async def get_block_number(self) -> int:
        return self.block_number

    def add_block(self, tag: BlockIdentifier, number: int, base_fee: Optional[int] = None) -> BlockInfo:
        """Register a block under a tag or number."""
        block = BlockInfo(
            number=number,
            hash="0x" + f"{number:064x}",
            timestamp=1_700_000_000 + number * 12,
            base_fee_per_gas=base_fee,
        )
        self.blocks[tag] = block
        return block


@pytest.fixture
def mock_node() -> MockNodeInterface:
    """Create a mock node interface."""
    return MockNodeInterface()


# ============================================================================
# Test Signers
# ============================================================================

class RecordingSigner(LocalAccountSigner):
    """Local signer that keeps the transactions it was asked to sign."""

    def __init__(self, account, node):
        super().__init__(account, node)
        self.signed: List[dict] = []

    async def sign_transaction(self, transaction) -> bytes:
        self.signed.append(dict(transaction))
        return await super().sign_transaction(transaction)


@pytest.fixture
def test_signer(mock_node) -> LocalAccountSigner:
    """Create a test signer with a random key."""
    return generate_test_key(mock_node)


@pytest.fixture
def recording_signer(mock_node) -> RecordingSigner:
    """Create a recording signer with a random key."""
    return RecordingSigner(Account.create(), mock_node)


@pytest.fixture
def signer_factory(mock_node) -> Callable[[], RecordingSigner]:
    """Create recording signers with fresh keys on demand."""
    return lambda: RecordingSigner(Account.create(), mock_node)


# ============================================================================
# Mock Relay
# ============================================================================

class MockRelay:
    """Records relay requests and answers them with a configurable handler."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {}})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def reply(self, status_code: int = 200, **kwargs: Any) -> None:
        """Answer every request with the same response."""
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def raise_error(self, error_cls: type, message: str = "boom") -> None:
        """Fail every request with an httpx error."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise error_cls(message, request=request)
        self.handler = handler

    @property
    def bodies(self) -> List[dict]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def mock_relay() -> MockRelay:
    """Create a mock relay."""
    return MockRelay()


@pytest.fixture
def relay_client(test_config, mock_relay) -> RelayClient:
    """Create a relay client wired to the mock relay."""
    return RelayClient(test_config, transport=httpx.MockTransport(mock_relay))
