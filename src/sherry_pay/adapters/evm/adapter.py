"""
EVM Chain Client Adapter

Isolates every blockchain-specific read and encoding step of the gateway
behind a small interface.

Key Features:
    - ERC-20 metadata lookup (``symbol`` / ``decimals`` read concurrently)
    - Balance and allowance reads with arbitrary-precision comparison
    - Multicall3 ``aggregate3`` assembly of the payment execution calls
    - Unsigned transaction request serialization for client-side signing

Dependencies:
    - web3.py: For contract reads over JSON-RPC and offline calldata encoding
"""

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional

from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..bases import ChainClientFactory
from .ERC20_ABI import get_erc20_abi, get_payment_gateway_abi
from .multicall import (
    encode_aggregate3,
    encode_function_data,
    hash_metadata,
    serialize_transaction_request,
)
from .schemas import BalanceCheck, Call3, ExecutionDetails, TokenInfo
from ...engine.exceptions import (
    ChainCallError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidTokenError,
    TokenLookupError,
)

if TYPE_CHECKING:
    from ...config import GatewayConfig

logger = logging.getLogger(__name__)


class EVMChainClient(ChainClientFactory):
    """
    EVM chain client implementation.

    The node connection is created once from the configuration handed to the
    constructor; its lifetime belongs to whoever owns the client (one per
    process, or one per request).

    Attributes:
        config: Gateway configuration (RPC URL, contract addresses, chain id,
            settlement mode)
        web3: AsyncWeb3 instance used for contract reads

    Settlement modes:
        - ``transfer``: ``token.transfer(merchant, amount)`` then
          ``gateway.executePayment(paymentId, payer)``. Always two calls.
        - ``approve``: ``gateway.createPayment(...)``, then
          ``token.approve(gateway, amount)`` when the payer's allowance is
          short, then ``gateway.executePayment(paymentId, payer)``. Two or
          three calls.

    Example:
        client = EVMChainClient(GatewayConfig.from_env())
        info = await client.get_token_info("0x5425890298aed601595a70ab815c96711a31bc65")
        tx = await client.build_execution_transaction(details)
    """

    def __init__(self, config: "GatewayConfig", web3: Optional[AsyncWeb3] = None):
        """
        Initialize the client.

        Args:
            config: Gateway configuration.
            web3: Optional pre-built AsyncWeb3 instance (shared pools, tests).
                When omitted an HTTP provider for ``config.rpc_url`` is created.
        """
        self.config = config
        self.web3 = web3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            config.rpc_url,
            request_kwargs={"timeout": config.request_timeout}
        ))

    def _token_contract(self, token_address: str):
        return self.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token_address),
            abi=get_erc20_abi()
        )

    async def get_token_info(self, token_address: str) -> TokenInfo:
        """
        Read token metadata; both reads run concurrently.

        Raises:
            InvalidTokenError: If the address is malformed or a read reverts or
                returns nothing decodable.
            TokenLookupError: If the node cannot be reached or fails the request.
        """
        try:
            contract = self._token_contract(token_address)
            symbol, decimals = await asyncio.gather(
                contract.functions.symbol().call(),
                contract.functions.decimals().call(),
            )
            return TokenInfo(symbol=symbol, decimals=int(decimals))
        except (ContractLogicError, BadFunctionCallOutput, ValueError) as e:
            logger.debug("Token lookup failed for %s: %s", token_address, e)
            raise InvalidTokenError("Token inválido") from e
        except Exception as e:
            logger.warning("Token lookup for %s failed at the node: %s", token_address, e)
            raise TokenLookupError("No se pudo verificar el token") from e

    async def check_user_balance(self, user_address: str, token_address: str, amount: str) -> BalanceCheck:
        """
        Read ``balanceOf(user)`` and compare it with ``amount``.

        Returns:
            BalanceCheck: ``has_balance`` plus both amounts as decimal strings.

        Raises:
            InvalidAmountError: If ``amount`` is not an integer.
            ChainCallError: If the balance read fails.
        """
        try:
            required = int(amount)
        except (TypeError, ValueError) as e:
            raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

        try:
            contract = self._token_contract(token_address)
            balance = int(await contract.functions.balanceOf(
                AsyncWeb3.to_checksum_address(user_address)
            ).call())
        except Exception as e:
            raise ChainCallError(
                f"Failed to read balance of {user_address} for token {token_address}: {e}"
            ) from e

        return BalanceCheck(
            has_balance=balance >= required,
            balance=str(balance),
            required=str(required),
        )

    async def get_allowance(self, owner: str, spender: str, token_address: str) -> int:
        """
        Read ERC-20 ``allowance(owner, spender)``.

        Raises:
            ChainCallError: If the read fails.
        """
        try:
            contract = self._token_contract(token_address)
            allowance = await contract.functions.allowance(
                AsyncWeb3.to_checksum_address(owner),
                AsyncWeb3.to_checksum_address(spender),
            ).call()
            return int(allowance)
        except Exception as e:
            raise ChainCallError(
                f"Failed to query allowance for token {token_address}. "
                f"Owner: {owner}, Spender: {spender}. Error: {e}"
            ) from e

    async def build_execution_calls(self, details: ExecutionDetails) -> List[Call3]:
        """
        Build the ordered ``aggregate3`` sub-calls for a payment.

        Raises:
            InvalidAddressError: If no payer address is given.
            ConfigurationError: If no gateway contract is configured.
            ChainCallError: If an argument cannot be encoded or the allowance
                read fails.
        """
        if not details.payer_address:
            raise InvalidAddressError("payer address is required to execute a payment")

        gateway = self.config.require_gateway_address()

        try:
            gateway = AsyncWeb3.to_checksum_address(gateway)
            token = AsyncWeb3.to_checksum_address(details.token)
            merchant = AsyncWeb3.to_checksum_address(details.merchant)
            payer = AsyncWeb3.to_checksum_address(details.payer_address)
            amount = int(details.amount)
            payment_id = AsyncWeb3.to_bytes(hexstr=details.payment_id)
        except (TypeError, ValueError) as e:
            raise ChainCallError(f"Cannot encode payment {details.payment_id}: {e}") from e

        gateway_abi = get_payment_gateway_abi()
        erc20_abi = get_erc20_abi()
        calls: List[Call3] = []

        try:
            if self.config.settlement_mode == "approve":
                calls.append(Call3(
                    target=gateway,
                    call_data=encode_function_data(gateway_abi, "createPayment", [
                        payment_id, merchant, token, amount, hash_metadata(details.metadata),
                    ]),
                ))

                allowance = await self.get_allowance(payer, gateway, token)
                if allowance < amount:
                    calls.append(Call3(
                        target=token,
                        call_data=encode_function_data(erc20_abi, "approve", [gateway, amount]),
                    ))
            else:
                calls.append(Call3(
                    target=token,
                    call_data=encode_function_data(erc20_abi, "transfer", [merchant, amount]),
                ))

            calls.append(Call3(
                target=gateway,
                call_data=encode_function_data(gateway_abi, "executePayment", [payment_id, payer]),
            ))
        except ChainCallError:
            raise
        except Exception as e:
            raise ChainCallError(f"Failed to encode calls for payment {details.payment_id}: {e}") from e

        return calls

    async def build_execution_transaction(self, details: ExecutionDetails) -> str:
        """
        Assemble the unsigned Multicall3 transaction for a payment.

        The transaction targets ``config.multicall_address`` on
        ``config.chain_id``; nonce, gas and gas price are left for the wallet.

        Returns:
            str: JSON ``{"to", "data", "chainId", "type": "legacy"}`` request.
        """
        calls = await self.build_execution_calls(details)

        try:
            data = encode_aggregate3(calls)
            serialized = serialize_transaction_request(
                to=self.config.multicall_address,
                data=data,
                chain_id=self.config.chain_id,
            )
        except Exception as e:
            raise ChainCallError(f"Failed to serialize execution transaction: {e}") from e

        logger.debug(
            "Built %d-call execution transaction for payment %s",
            len(calls), details.payment_id,
        )
        return serialized
