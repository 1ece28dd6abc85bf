import asyncio
import logging
from typing import Awaitable, Callable
from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError

from core.exceptions import (
    EventsFetchException,
    InsufficientFundsException,
    InvalidAddressException,
    InvalidAmountException,
    RPCException,
)
from core.retry import retry, linear_backoff
from token_events.abi import EVENT_TOPICS, FUNCTION_SELECTORS
from token_events.chain import ChainClient, RawLog
from token_events.entities import (
    ActiveAccount,
    BlockRange,
    CycleState,
    EventCycle,
    EventKind,
    EventRecord,
    NetworkStatus,
    PreparedTransaction,
    TokenAmount,
    TokenConfig,
)
from token_events.formatting import format_units, parse_units
from token_events.normalizer import EventNormalizer
from token_events.registry import TokenRegistry

FETCHED_KINDS = (EventKind.TRANSFER, EventKind.APPROVAL)


def resolve_range(tip: int, window: int) -> BlockRange:
    """
    Block range to scan: the last ``window`` blocks up to the tip.

    Parameters
    ----------
    tip : int
        Current chain height
    window : int
        Number of blocks to look back

    Returns
    -------
    BlockRange
        ``max(tip - window, 0)`` to ``tip``
    """
    return BlockRange(from_block=max(tip - window, 0), to_block=tip)


def sort_events(events: list[EventRecord]) -> list[EventRecord]:
    """Newest first; events of one block by log index, highest first."""
    return sorted(events, key=lambda e: (e.block_number, e.log_index), reverse=True)


class EventRetrievalService:
    """
    Service collecting recent token events of an account.

    One call to :meth:`run` is one cycle: resolve the block range, fetch
    Transfer and Approval logs of every token, normalize them, look up
    block timestamps and return the sorted records. Failed log or block
    lookups are retried and then dropped; only a failed tip lookup (or an
    unexpected error) fails the whole cycle.

    Parameters
    ----------
    chain_client : ChainClient
        Chain access
    registry : TokenRegistry
        Monitored tokens
    normalizer : EventNormalizer
        Log decoder and filter
    logger : logging.Logger
        Logger instance
    block_window : int
        Blocks scanned back from the tip
    max_attempts : int
        Attempts per log or block lookup
    base_delay : float
        Backoff unit in seconds
    sleep : Callable[[float], Awaitable]
        Sleep used between attempts
    """

    def __init__(
        self,
        chain_client: ChainClient,
        registry: TokenRegistry,
        normalizer: EventNormalizer,
        logger: logging.Logger,
        block_window: int = 500,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable] = asyncio.sleep
    ):
        self.chain = chain_client
        self.registry = registry
        self.normalizer = normalizer
        self.logger = logger
        self.block_window = block_window
        self.max_attempts = max_attempts
        self.backoff = linear_backoff(base_delay)
        self.sleep = sleep

    async def run(self, account: ActiveAccount) -> EventCycle:
        """
        Execute one retrieval cycle.

        Parameters
        ----------
        account : ActiveAccount
            Tracked account

        Returns
        -------
        EventCycle
            Sorted events, or an empty list and an error message if the
            cycle failed
        """
        if not account.is_trackable:
            return EventCycle(events=[], state=CycleState.DONE)

        state = CycleState.IDLE
        block_range = None
        try:
            state = CycleState.RESOLVING_RANGE
            block_range = await self._resolve_range()

            state = CycleState.FETCHING_LOGS
            fetched = await self._fetch_all_logs(block_range)

            state = CycleState.NORMALIZING
            events = self._normalize_all(fetched, account.address)

            state = CycleState.ENRICHING_TIMESTAMPS
            events = await self.enrich_timestamps(events)
        except Exception as e:
            self.logger.exception(f"Event cycle for {account.address} failed in state {state.value}: {e}")
            return EventCycle(
                events=[],
                state=CycleState.ERRORED,
                error=EventsFetchException().message,
                from_block=block_range.from_block if block_range else None,
                to_block=block_range.to_block if block_range else None,
            )

        self.logger.info(
            f"Collected {len(events)} events for {account.address} "
            f"in blocks {block_range.from_block}-{block_range.to_block}"
        )
        return EventCycle(
            events=sort_events(events),
            state=CycleState.DONE,
            from_block=block_range.from_block,
            to_block=block_range.to_block,
        )

    async def _resolve_range(self) -> BlockRange:
        try:
            tip = await self.chain.get_tip()
        except Exception as e:
            raise EventsFetchException() from e
        return resolve_range(tip, self.block_window)

    async def fetch_logs(
        self,
        token: TokenConfig,
        kind: EventKind,
        block_range: BlockRange
    ) -> list[RawLog]:
        """
        Fetch logs of one token and event kind, retrying on failure.

        Parameters
        ----------
        token : TokenConfig
            Token contract to query
        kind : EventKind
            Transfer or Approval
        block_range : BlockRange
            Blocks to scan

        Returns
        -------
        list[RawLog]
            Logs, or an empty list if every attempt failed
        """
        result = await retry(
            lambda: self.chain.get_logs(
                token.address, EVENT_TOPICS[kind], block_range.from_block, block_range.to_block
            ),
            self.max_attempts,
            self.backoff,
            sleep=self.sleep
        )
        if not result.ok:
            self.logger.error(
                f"Failed to fetch {kind.value} logs for {token.symbol} ({token.address}) "
                f"after {result.attempts} attempts: {result.error}"
            )
        return result.value_or([])

    async def _fetch_all_logs(
        self,
        block_range: BlockRange
    ) -> list[tuple[TokenConfig, EventKind, list[RawLog]]]:
        pairs = [(token, kind) for token in self.registry for kind in FETCHED_KINDS]
        results = await asyncio.gather(
            *(self.fetch_logs(token, kind, block_range) for token, kind in pairs)
        )
        return [(token, kind, logs) for (token, kind), logs in zip(pairs, results)]

    def _normalize_all(
        self,
        fetched: list[tuple[TokenConfig, EventKind, list[RawLog]]],
        account: str
    ) -> list[EventRecord]:
        events = []
        seen = set()
        for token, kind, logs in fetched:
            for event in self.normalizer.normalize(logs, token, kind, account):
                key = (event.transaction_hash, event.log_index, event.token)
                if key in seen:
                    continue
                seen.add(key)
                events.append(event)
        return events

    async def fetch_block_timestamp(self, block_number: int) -> int | None:
        """
        Look up a block timestamp, retrying on failure.

        A block without a timestamp counts as a failed attempt.

        Parameters
        ----------
        block_number : int
            Block height

        Returns
        -------
        int | None
            Unix timestamp, or None if every attempt failed
        """
        async def lookup() -> int:
            timestamp = await self.chain.get_block_timestamp(block_number)
            if not timestamp:
                raise ValueError(f"block {block_number} has no timestamp")
            return int(timestamp)

        result = await retry(lookup, self.max_attempts, self.backoff, sleep=self.sleep)
        if not result.ok:
            self.logger.error(
                f"Failed to fetch block {block_number} after {result.attempts} attempts: {result.error}"
            )
        return result.value_or(None)

    async def enrich_timestamps(self, events: list[EventRecord]) -> list[EventRecord]:
        """
        Attach block timestamps, one lookup per distinct non-zero block.

        Parameters
        ----------
        events : list[EventRecord]
            Records without timestamps

        Returns
        -------
        list[EventRecord]
            New records, ``timestamp`` stays None where the lookup failed
        """
        block_numbers = sorted({e.block_number for e in events if e.block_number != 0})
        timestamps = await asyncio.gather(
            *(self.fetch_block_timestamp(number) for number in block_numbers)
        )
        by_block = {
            number: ts for number, ts in zip(block_numbers, timestamps) if ts is not None
        }
        return [
            event.model_copy(update={"timestamp": by_block.get(event.block_number)})
            for event in events
        ]


class TokenService:
    """
    Service for token balances, allowances and prepared calls.

    Parameters
    ----------
    chain_client : ChainClient
        Chain access
    registry : TokenRegistry
        Monitored tokens
    required_chain_id : int
        Chain the tokens live on
    logger : logging.Logger
        Logger instance
    """

    ACTIONS = ("mint", "approve", "transfer")

    def __init__(
        self,
        chain_client: ChainClient,
        registry: TokenRegistry,
        required_chain_id: int,
        logger: logging.Logger
    ):
        self.chain = chain_client
        self.registry = registry
        self.required_chain_id = required_chain_id
        self.logger = logger

    async def get_balances(self, account: str) -> list[TokenAmount]:
        """
        Get balances of every registered token.

        Parameters
        ----------
        account : str
            Wallet address

        Returns
        -------
        list[TokenAmount]
            Balances in registry order

        Raises
        ------
        RPCException
            If any balance call fails
        """
        tokens = list(self.registry)
        try:
            raw_balances = await asyncio.gather(
                *(self.chain.call_balance_of(token.address, account) for token in tokens)
            )
        except Exception as e:
            self.logger.error(f"Failed to fetch balances for {account}: {e}")
            raise RPCException() from e

        return [
            TokenAmount(
                symbol=token.symbol,
                value=format_units(raw, token.decimals),
                raw_value=raw,
                decimals=token.decimals
            )
            for token, raw in zip(tokens, raw_balances)
        ]

    async def get_allowance(self, symbol: str, owner: str, spender: str) -> TokenAmount:
        """
        Get how much ``spender`` may move from ``owner``.

        Parameters
        ----------
        symbol : str
            Token symbol
        owner : str
            Token owner
        spender : str
            Approved spender

        Returns
        -------
        TokenAmount
            Allowance
        """
        token = self.registry.get(symbol)
        try:
            raw = await self.chain.call_allowance(token.address, owner, spender)
        except Exception as e:
            self.logger.error(f"Failed to fetch {token.symbol} allowance {owner} -> {spender}: {e}")
            raise RPCException() from e

        return TokenAmount(
            symbol=token.symbol,
            value=format_units(raw, token.decimals),
            raw_value=raw,
            decimals=token.decimals
        )

    async def prepare_transaction(
        self,
        action: str,
        symbol: str,
        recipient: str,
        amount: str,
        sender: str | None = None
    ) -> PreparedTransaction:
        """
        Build an unsigned mint, approve or transfer call.

        Transfers must move a positive amount that the sender holds.

        Parameters
        ----------
        action : str
            ``mint``, ``approve`` or ``transfer``
        symbol : str
            Token symbol
        recipient : str
            Receiver for mint/transfer, spender for approve
        amount : str
            Human decimal amount
        sender : str | None
            Wallet that signs the call, required for ``transfer``

        Returns
        -------
        PreparedTransaction
            Calldata addressed to the token contract

        Raises
        ------
        InvalidAmountException
            If the amount is malformed or a transfer amount is zero
        InsufficientFundsException
            If a transfer exceeds the sender balance
        """
        if action not in self.ACTIONS:
            raise ValueError(f"Unsupported action {action}")
        token = self.registry.get(symbol)
        raw_amount = parse_units(amount, token.decimals)

        if action == "transfer":
            await self._check_transferable(token, sender, raw_amount)

        try:
            args = abi_encode(["address", "uint256"], [recipient, raw_amount])
        except EncodingError as e:
            raise InvalidAddressException() from e

        data = "0x" + (FUNCTION_SELECTORS[action] + args).hex()
        self.logger.info(f"Prepared {action} of {amount} {token.symbol} to {recipient}")
        return PreparedTransaction(
            chain_id=self.required_chain_id,
            to=token.address,
            data=data
        )

    async def _check_transferable(self, token: TokenConfig, sender: str | None, raw_amount: int) -> None:
        if raw_amount <= 0:
            raise InvalidAmountException("Transfer amount must be greater than 0")
        if sender is None:
            raise InvalidAddressException("Sender is required for transfer")

        try:
            balance = await self.chain.call_balance_of(token.address, sender)
        except Exception as e:
            self.logger.error(f"Failed to fetch {token.symbol} balance of {sender}: {e}")
            raise RPCException() from e

        if raw_amount > balance:
            raise InsufficientFundsException()

    async def get_network_status(self) -> NetworkStatus:
        try:
            chain_id = await self.chain.get_chain_id()
        except Exception as e:
            raise RPCException() from e
        return NetworkStatus(
            chain_id=chain_id,
            required_chain_id=self.required_chain_id,
            is_supported=chain_id == self.required_chain_id
        )
