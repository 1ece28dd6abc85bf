import logging
import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# Set test environment variables before imports
os.environ['ANKR_API_KEY'] = 'test'
os.environ['RETRY_BASE_DELAY'] = '0'

from core.environment.config import TokenSettings  # noqa: E402
from token_events.abi import EVENT_TOPICS  # noqa: E402
from token_events.entities import EventKind  # noqa: E402
from token_events.normalizer import EventNormalizer  # noqa: E402
from token_events.registry import TokenRegistry  # noqa: E402
from token_events.services import EventRetrievalService  # noqa: E402

from addresses import DAI, USDC  # noqa: E402


class FakeChainClient:
    """
    In-memory ChainClient.

    ``logs`` maps ``(address.lower(), topic)`` to a list of logs or to an
    exception raised on every call; ``blocks`` maps heights to timestamps
    or exceptions.
    """

    def __init__(self):
        self.tip = 10_000
        self.logs = {}
        self.blocks = {}
        self.chain_id = 11155111
        self.balances = {}
        self.allowances = {}
        self.log_calls = []
        self.block_calls = []
        self.tip_calls = 0

    async def get_tip(self):
        self.tip_calls += 1
        if isinstance(self.tip, Exception):
            raise self.tip
        return self.tip

    async def get_logs(self, address, topic, from_block, to_block):
        self.log_calls.append((address, topic, from_block, to_block))
        result = self.logs.get((address.lower(), topic), [])
        if isinstance(result, Exception):
            raise result
        return result

    async def get_block_timestamp(self, block_number):
        self.block_calls.append(block_number)
        result = self.blocks.get(block_number, 1_700_000_000 + block_number)
        if isinstance(result, Exception):
            raise result
        return result

    async def get_chain_id(self):
        return self.chain_id

    async def call_balance_of(self, token_address, account):
        result = self.balances.get(token_address.lower(), 0)
        if isinstance(result, Exception):
            raise result
        return result

    async def call_allowance(self, token_address, owner, spender):
        return self.allowances.get((token_address.lower(), owner.lower(), spender.lower()), 0)

    def add_log(self, token_address, kind, log):
        key = (token_address.lower(), EVENT_TOPICS[kind])
        self.logs.setdefault(key, []).append(log)


def _topic(address: str) -> str:
    return "0x" + "0" * 24 + address[2:].lower()


def build_log(
    kind: EventKind,
    source: str,
    target: str,
    value: int,
    block_number: int = 9_900,
    log_index: int = 0,
    tx_hash: str | None = None
) -> dict:
    return {
        "address": DAI,
        "topics": [EVENT_TOPICS[kind], _topic(source), _topic(target)],
        "data": "0x" + value.to_bytes(32, "big").hex(),
        "blockNumber": block_number,
        "transactionHash": tx_hash or "0x" + f"{block_number:x}{log_index:x}".rjust(64, "1"),
        "logIndex": log_index,
    }


@pytest.fixture
def make_log():
    """Factory for raw ERC20 logs."""
    return build_log


@pytest.fixture
def logger():
    return logging.getLogger("token_events.tests")


@pytest.fixture
def registry():
    return TokenRegistry({
        "DAI": TokenSettings(address=DAI, decimals=18),
        "USDC": TokenSettings(address=USDC, decimals=6),
    })


@pytest.fixture
def normalizer(logger):
    return EventNormalizer(
        display_precision=4,
        explorer_tx_url="https://sepolia.etherscan.io/tx/",
        logger=logger
    )


@pytest.fixture
def chain():
    return FakeChainClient()


@pytest.fixture
def sleeps():
    """Delays requested by the retry loop."""
    return []


@pytest.fixture
def events_service(chain, registry, normalizer, logger, sleeps):
    async def fake_sleep(delay):
        sleeps.append(delay)

    return EventRetrievalService(
        chain_client=chain,
        registry=registry,
        normalizer=normalizer,
        logger=logger,
        block_window=500,
        max_attempts=3,
        base_delay=1.0,
        sleep=fake_sleep
    )


@pytest_asyncio.fixture
async def client():
    """
    Fixture for async test client.

    Yields
    ------
    AsyncClient
        Async HTTP client for testing
    """
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
