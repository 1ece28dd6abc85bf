from fastapi import APIRouter
from dishka.integrations.fastapi import inject
from dishka import FromComponent
from typing import Annotated
from token_events.entities import EventCycle, NetworkStatus, PreparedTransaction, TokenAmount
from token_events.schemas import (
    GetEventsRequest,
    GetBalancesRequest,
    BalancesResponse,
    GetAllowanceRequest,
    PrepareTransactionRequest,
)
from token_events.usecases import (
    GetAccountEventsUseCase,
    GetAllowanceUseCase,
    GetNetworkStatusUseCase,
    GetTokenBalancesUseCase,
    PrepareTransactionUseCase,
)

router = APIRouter(
    prefix="/api",
    tags=["Tokens"]
)


@router.post("/events", response_model=EventCycle)
@inject
async def get_account_events(
    request: GetEventsRequest,
    use_case: Annotated[
        GetAccountEventsUseCase, FromComponent("events")
    ]
) -> EventCycle:
    """
    Get recent Transfer, Approval and Mint events of an account.

    Parameters
    ----------
    request : GetEventsRequest
        Request with account address and connection flag
    use_case : GetAccountEventsUseCase
        Use case for getting account events

    Returns
    -------
    EventCycle
        Events newest first, with cycle state and error
    """
    return await use_case(
        address=request.address,
        is_connected=request.is_connected
    )


@router.post("/tokens/balances", response_model=BalancesResponse)
@inject
async def get_token_balances(
    request: GetBalancesRequest,
    use_case: Annotated[
        GetTokenBalancesUseCase, FromComponent("events")
    ]
) -> BalancesResponse:
    """
    Get balances of all registered tokens.

    Parameters
    ----------
    request : GetBalancesRequest
        Request with wallet address
    use_case : GetTokenBalancesUseCase
        Use case for getting balances

    Returns
    -------
    BalancesResponse
        Token balances
    """
    return await use_case(address=request.address)


@router.post("/tokens/allowance", response_model=TokenAmount)
@inject
async def get_allowance(
    request: GetAllowanceRequest,
    use_case: Annotated[
        GetAllowanceUseCase, FromComponent("events")
    ]
) -> TokenAmount:
    """Get the allowance granted by owner to spender."""
    return await use_case(
        symbol=request.symbol,
        owner=request.owner,
        spender=request.spender
    )


@router.post("/tokens/transactions", response_model=PreparedTransaction)
@inject
async def prepare_transaction(
    request: PrepareTransactionRequest,
    use_case: Annotated[
        PrepareTransactionUseCase, FromComponent("events")
    ]
) -> PreparedTransaction:
    """
    Prepare an unsigned mint, approve or transfer call.

    Parameters
    ----------
    request : PrepareTransactionRequest
        Action, token, recipient and amount
    use_case : PrepareTransactionUseCase
        Use case for preparing calls

    Returns
    -------
    PreparedTransaction
        Calldata for the wallet to sign
    """
    return await use_case(
        action=request.action,
        symbol=request.symbol,
        recipient=request.recipient,
        amount=request.amount,
        sender=request.sender
    )


@router.get("/network", response_model=NetworkStatus)
@inject
async def get_network_status(
    use_case: Annotated[
        GetNetworkStatusUseCase, FromComponent("events")
    ]
) -> NetworkStatus:
    """Check whether the node serves the required chain."""
    return await use_case()
