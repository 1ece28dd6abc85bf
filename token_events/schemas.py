from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Literal

from token_events.entities import TokenAmount


def _validate_address(v: str) -> str:
    if not v.startswith('0x') or len(v) != 42:
        raise ValueError('Invalid Ethereum address format')
    try:
        int(v[2:], 16)
    except ValueError:
        raise ValueError('Invalid Ethereum address format')
    return v.lower()


class GetEventsRequest(BaseModel):
    """
    Request schema for getting account events.

    Attributes
    ----------
    address : str | None
        Tracked wallet address, absent while disconnected
    is_connected : bool
        Wallet connection flag
    """
    address: str | None = Field(default=None, description="Tracked wallet address")
    is_connected: bool = Field(default=True, description="Whether the wallet is connected")

    @field_validator('address')
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _validate_address(v)

    model_config = ConfigDict(from_attributes=True)


class GetBalancesRequest(BaseModel):
    """
    Request schema for getting token balances.

    Attributes
    ----------
    address : str
        Wallet address to check balances for
    """
    address: str = Field(..., description="Wallet address to check balances for")

    @field_validator('address')
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _validate_address(v)


class BalancesResponse(BaseModel):
    """
    Response schema for balances query.

    Attributes
    ----------
    address : str
        Wallet address
    balances : list[TokenAmount]
        Balance per registered token
    """
    address: str
    balances: list[TokenAmount]

    model_config = ConfigDict(from_attributes=True)


class GetAllowanceRequest(BaseModel):
    """
    Request schema for getting an allowance.

    Attributes
    ----------
    symbol : str
        Token symbol
    owner : str
        Token owner
    spender : str
        Approved spender
    """
    symbol: str = Field(..., min_length=1, description="Token symbol")
    owner: str = Field(..., description="Token owner")
    spender: str = Field(..., description="Approved spender")

    @field_validator('owner', 'spender')
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _validate_address(v)


class PrepareTransactionRequest(BaseModel):
    """
    Request schema for preparing a token call.

    Attributes
    ----------
    action : Literal["mint", "approve", "transfer"]
        Call to prepare
    symbol : str
        Token symbol
    recipient : str
        Receiver for mint/transfer, spender for approve
    amount : str
        Human decimal amount, e.g. "12.5"
    sender : str | None
        Signing wallet, required for transfer
    """
    action: Literal["mint", "approve", "transfer"]
    symbol: str = Field(..., min_length=1, description="Token symbol")
    recipient: str = Field(..., description="Receiver or spender address")
    amount: str = Field(..., min_length=1, description="Amount in token units")
    sender: str | None = Field(default=None, description="Signing wallet address")

    @field_validator('recipient')
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _validate_address(v)

    @field_validator('sender')
    @classmethod
    def validate_sender(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _validate_address(v)

    @model_validator(mode='after')
    def require_sender_for_transfer(self) -> "PrepareTransactionRequest":
        if self.action == "transfer" and self.sender is None:
            raise ValueError("sender is required for transfer")
        return self
