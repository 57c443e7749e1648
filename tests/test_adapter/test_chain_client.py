"""
EVM Chain Client Test Suite

Tests for EVMChainClient against a mocked AsyncWeb3:
- Token metadata reads and invalid-token detection
- Balance and allowance checks
- Multicall3 execution transaction assembly in both settlement modes

The serialized transaction request is parsed as JSON and the ``aggregate3``
calldata decoded with ``eth_abi`` so assertions run on the real encoding.
"""

import json

import pytest
from eth_abi import decode as abi_decode
from eth_utils import function_signature_to_4byte_selector, to_bytes
from unittest.mock import AsyncMock

from sherry_pay.adapters.evm.adapter import EVMChainClient
from sherry_pay.adapters.evm.constants import MULTICALL3_ADDRESS
from sherry_pay.adapters.evm.multicall import hash_metadata
from sherry_pay.adapters.evm.schemas import ExecutionDetails
from sherry_pay.engine.exceptions import (
    ChainCallError,
    ConfigurationError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidTokenError,
    TokenLookupError,
)

from gateway_mocks import (
    AMOUNT_1_USDC,
    GATEWAY_ADDRESS,
    MERCHANT_ADDRESS,
    PAYER_ADDRESS,
    PAYMENT_ID,
    USDC_FUJI,
    create_mock_web3,
    make_config,
)


AGGREGATE3_SELECTOR = function_signature_to_4byte_selector("aggregate3((address,bool,bytes)[])")
TRANSFER_SELECTOR = function_signature_to_4byte_selector("transfer(address,uint256)")
APPROVE_SELECTOR = function_signature_to_4byte_selector("approve(address,uint256)")
CREATE_SELECTOR = function_signature_to_4byte_selector("createPayment(bytes32,address,address,uint256,bytes32)")
EXECUTE_SELECTOR = function_signature_to_4byte_selector("executePayment(bytes32,address)")


# ========================================================================
# Helpers
# ========================================================================

def make_details(**overrides) -> ExecutionDetails:
    values = {
        "payment_id": PAYMENT_ID,
        "payer_address": PAYER_ADDRESS,
        "merchant": MERCHANT_ADDRESS,
        "token": USDC_FUJI,
        "amount": AMOUNT_1_USDC,
        "metadata": '{"order":42}',
    }
    values.update(overrides)
    return ExecutionDetails(**values)


def decode_transaction(serialized: str):
    """Return (request, calls) of a serialized transaction request."""
    request = json.loads(serialized)
    data = to_bytes(hexstr=request["data"])
    assert data[:4] == AGGREGATE3_SELECTOR
    (calls,) = abi_decode(["(address,bool,bytes)[]"], data[4:])
    return request, calls


# ========================================================================
# Test Classes
# ========================================================================

class TestTokenInfo:
    """Test ERC-20 metadata lookups."""

    @pytest.mark.asyncio
    async def test_get_token_info_success(self):
        """symbol and decimals are read from the token contract."""
        client = EVMChainClient(make_config(), web3=create_mock_web3(symbol="USDC", decimals=6))

        info = await client.get_token_info(USDC_FUJI)

        assert info.symbol == "USDC"
        assert info.decimals == 6

    @pytest.mark.asyncio
    async def test_get_token_info_revert_raises_invalid_token(self):
        """A reverting read marks the token as invalid."""
        web3 = create_mock_web3(read_error=ValueError("execution reverted"))
        client = EVMChainClient(make_config(), web3=web3)

        with pytest.raises(InvalidTokenError):
            await client.get_token_info(USDC_FUJI)

    @pytest.mark.asyncio
    async def test_get_token_info_node_failure_is_server_side(self):
        """An unreachable node is still a token error, answered as 500."""
        web3 = create_mock_web3(read_error=ConnectionError("node down"))
        client = EVMChainClient(make_config(), web3=web3)

        with pytest.raises(TokenLookupError) as exc_info:
            await client.get_token_info(USDC_FUJI)
        assert isinstance(exc_info.value, InvalidTokenError)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_get_token_info_malformed_address(self):
        """A malformed address never reaches the node."""
        web3 = create_mock_web3()
        client = EVMChainClient(make_config(), web3=web3)

        with pytest.raises(InvalidTokenError):
            await client.get_token_info("0xnot-an-address")
        web3.eth.contract.assert_not_called()


class TestBalanceChecks:
    """Test balance and allowance reads."""

    @pytest.mark.asyncio
    async def test_sufficient_balance(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3(balance=5_000_000))

        result = await client.check_user_balance(PAYER_ADDRESS, USDC_FUJI, AMOUNT_1_USDC)

        assert result.has_balance is True
        assert result.balance == "5000000"
        assert result.required == AMOUNT_1_USDC

    @pytest.mark.asyncio
    async def test_insufficient_balance_is_reported_not_raised(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3(balance=10))

        result = await client.check_user_balance(PAYER_ADDRESS, USDC_FUJI, AMOUNT_1_USDC)

        assert result.has_balance is False

    @pytest.mark.asyncio
    async def test_balance_above_float_precision(self):
        """Amounts beyond 2**53 compare exactly."""
        required = 2**64 + 1
        client = EVMChainClient(make_config(), web3=create_mock_web3(balance=2**64))

        result = await client.check_user_balance(PAYER_ADDRESS, USDC_FUJI, str(required))

        assert result.has_balance is False
        assert result.required == str(required)

    @pytest.mark.asyncio
    async def test_balance_read_failure(self):
        web3 = create_mock_web3(read_error=ConnectionError("node down"))
        client = EVMChainClient(make_config(), web3=web3)

        with pytest.raises(ChainCallError):
            await client.check_user_balance(PAYER_ADDRESS, USDC_FUJI, AMOUNT_1_USDC)

    @pytest.mark.asyncio
    async def test_balance_invalid_amount(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3())

        with pytest.raises(InvalidAmountError):
            await client.check_user_balance(PAYER_ADDRESS, USDC_FUJI, "1.5")

    @pytest.mark.asyncio
    async def test_get_allowance(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3(allowance=123))

        assert await client.get_allowance(PAYER_ADDRESS, GATEWAY_ADDRESS, USDC_FUJI) == 123


class TestTransferSettlement:
    """Test execution transactions in the default transfer mode."""

    @pytest.mark.asyncio
    async def test_transaction_envelope(self):
        """Legacy transaction request to Multicall3, keys in wagmi order."""
        client = EVMChainClient(make_config(), web3=create_mock_web3())

        serialized = await client.build_execution_transaction(make_details())

        request, _ = decode_transaction(serialized)
        assert list(request) == ["to", "data", "chainId", "type"]
        assert request["to"] == MULTICALL3_ADDRESS
        assert request["chainId"] == 43113
        assert request["type"] == "legacy"
        assert " " not in serialized

    @pytest.mark.asyncio
    async def test_transfer_then_execute(self):
        """Exactly two calls: token transfer to the merchant, then executePayment."""
        client = EVMChainClient(make_config(), web3=create_mock_web3())

        _, calls = decode_transaction(await client.build_execution_transaction(make_details()))

        assert len(calls) == 2
        (token_target, token_fail, transfer_data), (gw_target, gw_fail, execute_data) = calls
        assert token_target.lower() == USDC_FUJI
        assert gw_target.lower() == GATEWAY_ADDRESS.lower()
        assert token_fail is False and gw_fail is False

        assert transfer_data[:4] == TRANSFER_SELECTOR
        merchant, amount = abi_decode(["address", "uint256"], transfer_data[4:])
        assert merchant.lower() == MERCHANT_ADDRESS.lower()
        assert amount == int(AMOUNT_1_USDC)

        assert execute_data[:4] == EXECUTE_SELECTOR
        payment_id, payer = abi_decode(["bytes32", "address"], execute_data[4:])
        assert payment_id == to_bytes(hexstr=PAYMENT_ID)
        assert payer.lower() == PAYER_ADDRESS.lower()

    @pytest.mark.asyncio
    async def test_transfer_mode_skips_allowance_read(self):
        web3 = create_mock_web3()
        client = EVMChainClient(make_config(), web3=web3)

        await client.build_execution_transaction(make_details())

        web3.eth.contract.return_value.functions.allowance.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_chain_id(self):
        client = EVMChainClient(make_config(chain_id=43114), web3=create_mock_web3())

        request, _ = decode_transaction(await client.build_execution_transaction(make_details()))

        assert request["chainId"] == 43114


class TestApproveSettlement:
    """Test execution transactions in the contract-mediated approve mode."""

    @pytest.mark.asyncio
    async def test_approval_included_when_allowance_short(self):
        """create, approve, execute when the allowance is below the amount."""
        client = EVMChainClient(make_config(settlement_mode="approve"), web3=create_mock_web3(allowance=0))

        _, calls = decode_transaction(await client.build_execution_transaction(make_details()))

        assert [data[:4] for _, _, data in calls] == [CREATE_SELECTOR, APPROVE_SELECTOR, EXECUTE_SELECTOR]
        assert calls[1][0].lower() == USDC_FUJI

        spender, amount = abi_decode(["address", "uint256"], calls[1][2][4:])
        assert spender.lower() == GATEWAY_ADDRESS.lower()
        assert amount == int(AMOUNT_1_USDC)

    @pytest.mark.asyncio
    async def test_approval_skipped_when_allowance_sufficient(self):
        client = EVMChainClient(
            make_config(settlement_mode="approve"),
            web3=create_mock_web3(allowance=int(AMOUNT_1_USDC)),
        )

        _, calls = decode_transaction(await client.build_execution_transaction(make_details()))

        assert [data[:4] for _, _, data in calls] == [CREATE_SELECTOR, EXECUTE_SELECTOR]

    @pytest.mark.asyncio
    async def test_create_payment_carries_metadata_hash(self):
        details = make_details()
        client = EVMChainClient(make_config(settlement_mode="approve"), web3=create_mock_web3(allowance=0))

        _, calls = decode_transaction(await client.build_execution_transaction(details))

        payment_id, merchant, token, amount, metadata_hash = abi_decode(
            ["bytes32", "address", "address", "uint256", "bytes32"], calls[0][2][4:]
        )
        assert payment_id == to_bytes(hexstr=PAYMENT_ID)
        assert merchant.lower() == MERCHANT_ADDRESS.lower()
        assert token.lower() == USDC_FUJI
        assert amount == int(AMOUNT_1_USDC)
        assert metadata_hash == hash_metadata(details.metadata)

    @pytest.mark.asyncio
    async def test_allowance_failure_raises_chain_error(self):
        web3 = create_mock_web3()
        web3.eth.contract.return_value.functions.allowance.return_value.call = AsyncMock(
            side_effect=TimeoutError("rpc timeout")
        )
        client = EVMChainClient(make_config(settlement_mode="approve"), web3=web3)

        with pytest.raises(ChainCallError):
            await client.build_execution_transaction(make_details())


class TestExecutionPreconditions:
    """Test inputs the client refuses to encode."""

    @pytest.mark.asyncio
    async def test_missing_gateway_contract(self):
        client = EVMChainClient(make_config(gateway_address=None), web3=create_mock_web3())

        with pytest.raises(ConfigurationError):
            await client.build_execution_transaction(make_details())

    @pytest.mark.asyncio
    async def test_missing_payer(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3())

        with pytest.raises(InvalidAddressError):
            await client.build_execution_transaction(make_details(payer_address=None))

    @pytest.mark.asyncio
    async def test_unencodable_payment_id(self):
        client = EVMChainClient(make_config(), web3=create_mock_web3())

        with pytest.raises(ChainCallError):
            await client.build_execution_transaction(make_details(payment_id="0x" + "ab" * 33))
