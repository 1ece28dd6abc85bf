import logging
from typing import Any, Mapping, Protocol
from web3 import AsyncWeb3

from token_events.abi import ERC20_ABI

RawLog = Mapping[str, Any]


class ChainClient(Protocol):
    """
    Chain capabilities consumed by the token services.
    """

    async def get_tip(self) -> int: ...

    async def get_logs(
        self,
        address: str,
        topic: str,
        from_block: int,
        to_block: int
    ) -> list[RawLog]: ...

    async def get_block_timestamp(self, block_number: int) -> int | None: ...

    async def get_chain_id(self) -> int: ...

    async def call_balance_of(self, token_address: str, account: str) -> int: ...

    async def call_allowance(self, token_address: str, owner: str, spender: str) -> int: ...


class Web3ChainClient:
    """
    ChainClient backed by an AsyncWeb3 HTTP client.

    Parameters
    ----------
    web3 : AsyncWeb3
        Web3 client instance
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, web3: AsyncWeb3, logger: logging.Logger):
        self.web3 = web3
        self.logger = logger

    async def get_tip(self) -> int:
        return await self.web3.eth.block_number

    async def get_logs(
        self,
        address: str,
        topic: str,
        from_block: int,
        to_block: int
    ) -> list[RawLog]:
        """
        Fetch logs of one contract and one event signature.

        Parameters
        ----------
        address : str
            Contract address
        topic : str
            Event signature hash (topic0)
        from_block : int
            First block, inclusive
        to_block : int
            Last block, inclusive

        Returns
        -------
        list[RawLog]
            Log entries as returned by the node
        """
        filter_params = {
            'address': self.web3.to_checksum_address(address),
            'fromBlock': from_block,
            'toBlock': to_block,
            'topics': [topic]
        }
        logs = await self.web3.eth.get_logs(filter_params)
        if logs:
            self.logger.debug(f"{address} {from_block}-{to_block}: found {len(logs)} logs")
        return list(logs)

    async def get_block_timestamp(self, block_number: int) -> int | None:
        block = await self.web3.eth.get_block(block_number)
        return block.get('timestamp') if block else None

    async def get_chain_id(self) -> int:
        return await self.web3.eth.chain_id

    async def call_balance_of(self, token_address: str, account: str) -> int:
        contract = self._contract(token_address)
        return await contract.functions.balanceOf(
            self.web3.to_checksum_address(account)
        ).call()

    async def call_allowance(self, token_address: str, owner: str, spender: str) -> int:
        contract = self._contract(token_address)
        return await contract.functions.allowance(
            self.web3.to_checksum_address(owner),
            self.web3.to_checksum_address(spender)
        ).call()

    def _contract(self, token_address: str):
        return self.web3.eth.contract(
            address=self.web3.to_checksum_address(token_address),
            abi=ERC20_ABI
        )
