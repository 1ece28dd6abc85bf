from token_events.entities import ActiveAccount, EventCycle, NetworkStatus, PreparedTransaction, TokenAmount
from token_events.schemas import BalancesResponse
from token_events.services import EventRetrievalService, TokenService


class GetAccountEventsUseCase:
    """
    Use case for getting recent token events of an account.

    Parameters
    ----------
    events_service : EventRetrievalService
        Event retrieval service instance
    """

    def __init__(self, events_service: EventRetrievalService):
        self.events_service = events_service

    async def __call__(self, address: str | None, is_connected: bool) -> EventCycle:
        """
        Execute use case.

        Parameters
        ----------
        address : str | None
            Tracked wallet address
        is_connected : bool
            Wallet connection flag

        Returns
        -------
        EventCycle
            Events of the cycle and its status
        """
        account = ActiveAccount(address=address, is_connected=is_connected)
        return await self.events_service.run(account)


class GetTokenBalancesUseCase:
    """
    Use case for getting balances of all registered tokens.

    Parameters
    ----------
    token_service : TokenService
        Token service instance
    """

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def __call__(self, address: str) -> BalancesResponse:
        balances = await self.token_service.get_balances(address)
        return BalancesResponse(address=address, balances=balances)


class GetAllowanceUseCase:
    """Use case for getting an ERC20 allowance."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def __call__(self, symbol: str, owner: str, spender: str) -> TokenAmount:
        return await self.token_service.get_allowance(symbol, owner, spender)


class PrepareTransactionUseCase:
    """Use case for building unsigned mint/approve/transfer calls."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def __call__(
        self,
        action: str,
        symbol: str,
        recipient: str,
        amount: str,
        sender: str | None = None
    ) -> PreparedTransaction:
        return await self.token_service.prepare_transaction(action, symbol, recipient, amount, sender)


class GetNetworkStatusUseCase:
    """Use case for checking the node is on the required chain."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def __call__(self) -> NetworkStatus:
        return await self.token_service.get_network_status()
