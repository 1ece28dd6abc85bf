import pytest
from eth_abi import decode as abi_decode

from core.exceptions import (
    InsufficientFundsException,
    InvalidAddressException,
    InvalidAmountException,
    RPCException,
    TokenNotSupportedException,
)
from token_events.services import TokenService

from addresses import ACCOUNT, DAI, SPENDER, USDC


@pytest.fixture
def token_service(chain, registry, logger):
    return TokenService(
        chain_client=chain,
        registry=registry,
        required_chain_id=11155111,
        logger=logger
    )


class TestTokenService:
    """
    Tests for balances, allowances and prepared calls.
    """

    @pytest.mark.asyncio
    async def test_balances_in_registry_order(self, token_service, chain):
        chain.balances[DAI.lower()] = 1_500 * 10 ** 18
        chain.balances[USDC.lower()] = 2_000_001

        balances = await token_service.get_balances(ACCOUNT)

        assert [(b.symbol, b.value, b.raw_value, b.decimals) for b in balances] == [
            ("DAI", "1500", 1_500 * 10 ** 18, 18),
            ("USDC", "2.000001", 2_000_001, 6),
        ]

    @pytest.mark.asyncio
    async def test_balance_failure_raises_rpc_error(self, token_service, chain):
        chain.balances[USDC.lower()] = ConnectionError("node unavailable")

        with pytest.raises(RPCException):
            await token_service.get_balances(ACCOUNT)

    @pytest.mark.asyncio
    async def test_allowance(self, token_service, chain):
        chain.allowances[(DAI.lower(), ACCOUNT, SPENDER)] = 25 * 10 ** 17

        allowance = await token_service.get_allowance("dai", ACCOUNT, SPENDER)

        assert allowance.symbol == "DAI"
        assert allowance.value == "2.5"

    @pytest.mark.asyncio
    async def test_unknown_token(self, token_service):
        with pytest.raises(TokenNotSupportedException):
            await token_service.get_allowance("WETH", ACCOUNT, SPENDER)

    @pytest.mark.asyncio
    async def test_prepare_transfer(self, token_service, chain):
        chain.balances[USDC.lower()] = 20 * 10 ** 6

        tx = await token_service.prepare_transaction("transfer", "USDC", SPENDER, "12.5", sender=ACCOUNT)

        assert tx.chain_id == 11155111
        assert tx.to == USDC
        assert tx.value == 0
        assert tx.data.startswith("0xa9059cbb")
        recipient, amount = abi_decode(["address", "uint256"], bytes.fromhex(tx.data[10:]))
        assert recipient.lower() == SPENDER
        assert amount == 12_500_000

    @pytest.mark.asyncio
    async def test_prepare_transfer_of_whole_balance(self, token_service, chain):
        chain.balances[DAI.lower()] = 10 ** 18

        tx = await token_service.prepare_transaction("transfer", "DAI", SPENDER, "1", sender=ACCOUNT)

        assert tx.data.startswith("0xa9059cbb")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "0.000"])
    async def test_prepare_transfer_rejects_zero(self, token_service, chain, amount):
        chain.balances[DAI.lower()] = 10 ** 18

        with pytest.raises(InvalidAmountException):
            await token_service.prepare_transaction("transfer", "DAI", SPENDER, amount, sender=ACCOUNT)

    @pytest.mark.asyncio
    async def test_prepare_transfer_rejects_over_balance(self, token_service, chain):
        chain.balances[DAI.lower()] = 1

        with pytest.raises(InsufficientFundsException):
            await token_service.prepare_transaction("transfer", "DAI", SPENDER, "1000", sender=ACCOUNT)

    @pytest.mark.asyncio
    async def test_prepare_transfer_requires_sender(self, token_service):
        with pytest.raises(InvalidAddressException):
            await token_service.prepare_transaction("transfer", "DAI", SPENDER, "1")

    @pytest.mark.asyncio
    async def test_prepare_transfer_balance_failure(self, token_service, chain):
        chain.balances[DAI.lower()] = TimeoutError()

        with pytest.raises(RPCException):
            await token_service.prepare_transaction("transfer", "DAI", SPENDER, "1", sender=ACCOUNT)

    @pytest.mark.asyncio
    async def test_prepare_approve_and_mint_selectors(self, token_service):
        approve = await token_service.prepare_transaction("approve", "DAI", SPENDER, "0")
        mint = await token_service.prepare_transaction("mint", "DAI", ACCOUNT, "1000")

        assert approve.data.startswith("0x095ea7b3")
        assert mint.data.startswith("0x40c10f19")
        _, amount = abi_decode(["address", "uint256"], bytes.fromhex(mint.data[10:]))
        assert amount == 1000 * 10 ** 18

    @pytest.mark.asyncio
    async def test_prepare_rejects_excess_precision(self, token_service):
        with pytest.raises(InvalidAmountException):
            await token_service.prepare_transaction("mint", "USDC", SPENDER, "1.0000001")

    @pytest.mark.asyncio
    async def test_prepare_rejects_amount_above_uint256(self, token_service):
        with pytest.raises(InvalidAmountException):
            await token_service.prepare_transaction("mint", "DAI", SPENDER, "9" * 80)

    @pytest.mark.asyncio
    async def test_network_status(self, token_service, chain):
        status = await token_service.get_network_status()
        assert status.is_supported

        chain.chain_id = 1
        status = await token_service.get_network_status()
        assert not status.is_supported
        assert status.required_chain_id == 11155111
