"""
Abstract Base Class for Chain Clients

Defines the interface the payment service relies on when it needs the chain:
token metadata lookups, balance checks and assembly of the unsigned execution
transaction. The EVM implementation lives in ``adapters.evm``; tests plug in
mocks that implement the same methods.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .evm.schemas import BalanceCheck, ExecutionDetails, TokenInfo


class ChainClientFactory(ABC):
    """
    Abstract Base Class for chain clients.

    Key Responsibilities:
    1. get_token_info: Confirm a token contract and read its metadata
    2. check_user_balance: Compare an account balance with a required amount
    3. build_execution_transaction: Produce the unsigned transaction a payer signs

    Implementations never sign or broadcast; the payer's wallet does both.
    """

    @abstractmethod
    async def get_token_info(self, token_address: str) -> "TokenInfo":
        """
        Read ``symbol`` and ``decimals`` of a token contract.

        Args:
            token_address: ERC-20 contract address

        Returns:
            TokenInfo: Token symbol and decimals

        Raises:
            InvalidTokenError: If the address is not a conforming token or the read fails
                (``TokenLookupError`` when the node itself fails)
        """
        pass

    @abstractmethod
    async def check_user_balance(self, user_address: str, token_address: str, amount: str) -> "BalanceCheck":
        """
        Compare a user's token balance against ``amount``.

        Insufficient balance is reported through ``BalanceCheck.has_balance``,
        never raised.

        Raises:
            ChainCallError: If the balance cannot be read
        """
        pass

    @abstractmethod
    async def build_execution_transaction(self, details: "ExecutionDetails") -> str:
        """
        Assemble the batched execution transaction for a payment.

        Args:
            details: Payment fields and the payer address

        Returns:
            str: Serialized unsigned transaction request, ready for the payer to sign

        Raises:
            ChainCallError: If an on-chain read or the encoding fails
        """
        pass
