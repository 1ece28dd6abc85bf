from enum import Enum
from pydantic import BaseModel, ConfigDict, computed_field


class EventKind(str, Enum):
    TRANSFER = "Transfer"
    APPROVAL = "Approval"
    MINT = "Mint"


class CycleState(str, Enum):
    """
    Stages of one event retrieval cycle.

    ``ERRORED`` is only entered when the tip lookup fails or something
    outside the retried calls raises.
    """
    IDLE = "idle"
    RESOLVING_RANGE = "resolving_range"
    FETCHING_LOGS = "fetching_logs"
    NORMALIZING = "normalizing"
    ENRICHING_TIMESTAMPS = "enriching_timestamps"
    DONE = "done"
    ERRORED = "errored"


class TokenConfig(BaseModel):
    """
    Entity representing a monitored ERC20 token.

    Attributes
    ----------
    symbol : str
        Token symbol, registry key
    address : str
        Contract address
    decimals : int
        Decimals used to scale raw amounts
    """
    symbol: str
    address: str
    decimals: int

    model_config = ConfigDict(frozen=True)


class ActiveAccount(BaseModel):
    """
    Account whose events are tracked.

    Attributes
    ----------
    address : str | None
        Wallet address, absent while the wallet is not connected
    is_connected : bool
        Wallet connection flag
    """
    address: str | None = None
    is_connected: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_trackable(self) -> bool:
        return self.is_connected and bool(self.address)


class BlockRange(BaseModel):
    from_block: int
    to_block: int

    model_config = ConfigDict(frozen=True)


class EventRecord(BaseModel):
    """
    Entity representing a token event relevant to the tracked account.

    Attributes
    ----------
    kind : EventKind
        Transfer, Approval or Mint (Transfer from the zero address)
    token : str
        Symbol of the emitting token
    amount : str
        Exact decimal amount scaled by token decimals
    display_amount : str
        Amount rounded to display precision
    counterparty_from : str
        Source for Transfer/Mint, owner for Approval
    counterparty_to : str
        Destination for Transfer/Mint, spender for Approval
    transaction_hash : str
        Originating transaction hash
    block_number : int
        Block where the event was emitted
    log_index : int
        Position of the log in the block
    timestamp : int | None
        Block timestamp in Unix seconds, absent if lookup failed
    explorer_url : str
        Link to the transaction on the block explorer
    """
    kind: EventKind
    token: str
    amount: str
    display_amount: str
    counterparty_from: str
    counterparty_to: str
    transaction_hash: str
    block_number: int
    log_index: int
    timestamp: int | None = None
    explorer_url: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


class EventCycle(BaseModel):
    """
    Result of one event retrieval cycle.

    Attributes
    ----------
    events : list[EventRecord]
        Events sorted newest first
    state : CycleState
        Final state of the cycle
    error : str | None
        Whole-cycle error message, per-item failures never show up here
    from_block : int | None
        First scanned block
    to_block : int | None
        Last scanned block (chain tip)
    """
    events: list[EventRecord] = []
    state: CycleState = CycleState.IDLE
    error: str | None = None
    from_block: int | None = None
    to_block: int | None = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def is_loading(self) -> bool:
        return self.state not in (CycleState.DONE, CycleState.ERRORED, CycleState.IDLE)


class TokenAmount(BaseModel):
    """
    Entity representing a token balance or allowance.

    Attributes
    ----------
    symbol : str
        Token symbol
    value : str
        Exact decimal amount
    raw_value : int
        Amount in smallest units
    decimals : int
        Token decimals
    """
    symbol: str
    value: str
    raw_value: int
    decimals: int

    model_config = ConfigDict(from_attributes=True)


class PreparedTransaction(BaseModel):
    """
    Unsigned contract call for the client wallet to sign.

    Attributes
    ----------
    chain_id : int
        Chain the transaction must be sent on
    to : str
        Token contract address
    data : str
        ABI encoded calldata
    value : int
        Native value, always zero for token calls
    """
    chain_id: int
    to: str
    data: str
    value: int = 0


class NetworkStatus(BaseModel):
    chain_id: int
    required_chain_id: int
    is_supported: bool
