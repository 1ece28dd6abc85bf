import logging
from dataclasses import dataclass
from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import Web3

from token_events.abi import EVENT_TOPICS, ZERO_ADDRESS
from token_events.chain import RawLog
from token_events.entities import EventKind, EventRecord, TokenConfig
from token_events.formatting import explorer_tx_link, format_display_amount, format_units


@dataclass(frozen=True)
class DecodedLog:
    """
    ERC20 Transfer or Approval log with its arguments decoded.

    For Approval, ``source`` is the owner and ``target`` the spender.
    """
    kind: EventKind
    source: str
    target: str
    value: int
    transaction_hash: str
    block_number: int
    log_index: int


def _topic_address(topic: bytes) -> str:
    return Web3.to_checksum_address("0x" + bytes(topic)[-20:].hex())


def decode_log(log: RawLog, kind: EventKind) -> DecodedLog:
    """
    Decode a raw ERC20 log of the given kind.

    Parameters
    ----------
    log : RawLog
        Log entry with ``topics``, ``data``, ``transactionHash``,
        ``blockNumber`` and ``logIndex``
    kind : EventKind
        Expected event, Transfer or Approval

    Returns
    -------
    DecodedLog
        Decoded log

    Raises
    ------
    ValueError
        If the log does not have the expected shape
    DecodingError
        If the value cannot be decoded
    """
    topics = [HexBytes(t) for t in log['topics']]
    if len(topics) != 3:
        raise ValueError(f"expected 3 topics, got {len(topics)}")
    if Web3.to_hex(topics[0]) != EVENT_TOPICS[kind]:
        raise ValueError(f"topic0 does not match {kind.value}")

    (value,) = abi_decode(["uint256"], HexBytes(log['data']))

    return DecodedLog(
        kind=kind,
        source=_topic_address(topics[1]),
        target=_topic_address(topics[2]),
        value=value,
        transaction_hash=Web3.to_hex(HexBytes(log['transactionHash'])),
        block_number=int(log.get('blockNumber') or 0),
        log_index=int(log.get('logIndex') or 0),
    )


def is_relevant(decoded: DecodedLog, account: str) -> bool:
    """
    Check whether a decoded log concerns the account.

    Transfers match on either side, approvals only on the owner.
    """
    account = account.lower()
    if decoded.kind == EventKind.APPROVAL:
        return decoded.source.lower() == account
    return account in (decoded.source.lower(), decoded.target.lower())


def classify(decoded: DecodedLog) -> EventKind:
    if decoded.kind == EventKind.TRANSFER and decoded.source.lower() == ZERO_ADDRESS:
        return EventKind.MINT
    return decoded.kind


class EventNormalizer:
    """
    Turns raw token logs into event records for one account.

    Parameters
    ----------
    display_precision : int
        Fraction digits of display amounts
    explorer_tx_url : str
        Prefix of transaction links
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, display_precision: int, explorer_tx_url: str, logger: logging.Logger):
        self.display_precision = display_precision
        self.explorer_tx_url = explorer_tx_url
        self.logger = logger

    def normalize(
        self,
        logs: list[RawLog],
        token: TokenConfig,
        kind: EventKind,
        account: str
    ) -> list[EventRecord]:
        """
        Decode, filter and classify logs of one token and event kind.

        Logs that fail to decode are skipped, as are zero-value transfers.
        Zero-value approvals are kept since they revoke an allowance.

        Parameters
        ----------
        logs : list[RawLog]
            Raw logs of ``token`` for event ``kind``
        token : TokenConfig
            Emitting token
        kind : EventKind
            Transfer or Approval
        account : str
            Tracked account address

        Returns
        -------
        list[EventRecord]
            Records relevant to the account, in input order
        """
        records = []
        for log in logs:
            try:
                decoded = decode_log(log, kind)
            except (KeyError, TypeError, ValueError, DecodingError) as e:
                self.logger.debug(f"Skipping undecodable {kind.value} log of {token.symbol}: {e}")
                continue

            if decoded.kind == EventKind.TRANSFER and decoded.value == 0:
                continue
            if not is_relevant(decoded, account):
                continue

            records.append(self._to_record(decoded, token))
        return records

    def _to_record(self, decoded: DecodedLog, token: TokenConfig) -> EventRecord:
        amount = format_units(decoded.value, token.decimals)
        return EventRecord(
            kind=classify(decoded),
            token=token.symbol,
            amount=amount,
            display_amount=format_display_amount(amount, self.display_precision),
            counterparty_from=decoded.source,
            counterparty_to=decoded.target,
            transaction_hash=decoded.transaction_hash,
            block_number=decoded.block_number,
            log_index=decoded.log_index,
            explorer_url=explorer_tx_link(self.explorer_tx_url, decoded.transaction_hash),
        )
