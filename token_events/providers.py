from dishka import Provider, Scope, provide, FromComponent
from typing import Annotated
from web3 import AsyncWeb3
from core.environment.config import Settings
from token_events.chain import ChainClient, Web3ChainClient
from token_events.normalizer import EventNormalizer
from token_events.registry import TokenRegistry
from token_events.services import EventRetrievalService, TokenService
from token_events.usecases import (
    GetAccountEventsUseCase,
    GetAllowanceUseCase,
    GetNetworkStatusUseCase,
    GetTokenBalancesUseCase,
    PrepareTransactionUseCase,
)
import logging


class TokenEventsProvider(Provider):
    """
    Provider for token and event dependencies.
    """

    component = "events"

    @provide(scope=Scope.APP)
    def get_web3_client(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> AsyncWeb3:
        """
        Provide Web3 client for the configured network.

        Parameters
        ----------
        settings : Settings
            Application settings

        Returns
        -------
        AsyncWeb3
            Web3 client
        """
        return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.get_rpc_url()))

    @provide(scope=Scope.APP)
    def get_chain_client(
        self,
        web3_client: Annotated[AsyncWeb3, FromComponent("events")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ChainClient:
        return Web3ChainClient(web3=web3_client, logger=logger)

    @provide(scope=Scope.APP)
    def get_token_registry(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> TokenRegistry:
        return TokenRegistry(settings.tokens)

    @provide(scope=Scope.APP)
    def get_event_normalizer(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> EventNormalizer:
        return EventNormalizer(
            display_precision=settings.display_precision,
            explorer_tx_url=settings.explorer_tx_url,
            logger=logger
        )

    @provide(scope=Scope.APP)
    def get_event_retrieval_service(
        self,
        chain_client: Annotated[ChainClient, FromComponent("events")],
        registry: Annotated[TokenRegistry, FromComponent("events")],
        normalizer: Annotated[EventNormalizer, FromComponent("events")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> EventRetrievalService:
        """
        Provide event retrieval service.

        Parameters
        ----------
        chain_client : ChainClient
            Chain access
        registry : TokenRegistry
            Monitored tokens
        normalizer : EventNormalizer
            Log decoder and filter
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        EventRetrievalService
            Event retrieval service instance
        """
        return EventRetrievalService(
            chain_client=chain_client,
            registry=registry,
            normalizer=normalizer,
            logger=logger,
            block_window=settings.event_block_window,
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay
        )

    @provide(scope=Scope.APP)
    def get_token_service(
        self,
        chain_client: Annotated[ChainClient, FromComponent("events")],
        registry: Annotated[TokenRegistry, FromComponent("events")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> TokenService:
        return TokenService(
            chain_client=chain_client,
            registry=registry,
            required_chain_id=settings.required_chain_id,
            logger=logger
        )

    @provide(scope=Scope.REQUEST)
    def get_account_events_use_case(
        self,
        events_service: Annotated[EventRetrievalService, FromComponent("events")]
    ) -> GetAccountEventsUseCase:
        return GetAccountEventsUseCase(events_service=events_service)

    @provide(scope=Scope.REQUEST)
    def get_token_balances_use_case(
        self,
        token_service: Annotated[TokenService, FromComponent("events")]
    ) -> GetTokenBalancesUseCase:
        return GetTokenBalancesUseCase(token_service=token_service)

    @provide(scope=Scope.REQUEST)
    def get_allowance_use_case(
        self,
        token_service: Annotated[TokenService, FromComponent("events")]
    ) -> GetAllowanceUseCase:
        return GetAllowanceUseCase(token_service=token_service)

    @provide(scope=Scope.REQUEST)
    def get_prepare_transaction_use_case(
        self,
        token_service: Annotated[TokenService, FromComponent("events")]
    ) -> PrepareTransactionUseCase:
        return PrepareTransactionUseCase(token_service=token_service)

    @provide(scope=Scope.REQUEST)
    def get_network_status_use_case(
        self,
        token_service: Annotated[TokenService, FromComponent("events")]
    ) -> GetNetworkStatusUseCase:
        return GetNetworkStatusUseCase(token_service=token_service)
