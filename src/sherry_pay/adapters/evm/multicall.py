"""
Multicall3 Transaction Encoding Helpers

Offline helpers that turn contract calls into calldata and wrap an
``aggregate3`` batch into an unsigned transaction request. Calldata comes from
web3 contract objects bound to a provider-less ``Web3`` instance, so nothing
here talks to a node.

Current coverage
----------------
encode_function_data
    ABI-encode a call (4-byte selector + arguments) through ``Contract.encode_abi``.
encode_aggregate3
    Encode a list of :class:`Call3` into Multicall3 ``aggregate3`` calldata.
serialize_transaction_request
    JSON envelope ``{"to", "data", "chainId", "type": "legacy"}`` read by the
    Sherry renderer. The wallet fills in nonce and gas before signing.
"""

import json
from typing import Any, Dict, List, Sequence

from web3 import Web3

from .ERC20_ABI import get_multicall3_abi
from .schemas import Call3

# Encoding only needs the ABI codec; no provider is ever contacted.
_offline_web3 = Web3()


def encode_function_data(abi: List[Dict[str, Any]], fn_name: str, args: Sequence[Any]) -> str:
    """
    ABI-encode a function call.

    Args:
        abi: JSON ABI containing ``fn_name``.
        fn_name: Function to call.
        args: Positional arguments (checksum address strings, ``int`` for
            uints, ``bytes`` for ``bytes``/``bytes32``, tuples for ``tuple[]``).

    Returns:
        str: 0x-prefixed calldata.

    Raises:
        web3.exceptions.Web3Exception: If the function is missing or the
            arguments do not match its inputs.

    Example:
        encode_function_data(get_erc20_abi(), "transfer", [merchant, 1_000_000])
        # '0xa9059cbb000000...'
    """
    contract = _offline_web3.eth.contract(abi=abi)
    return contract.encode_abi(fn_name, args=list(args))


def encode_aggregate3(calls: Sequence[Call3]) -> str:
    """
    Encode Multicall3 ``aggregate3(calls)`` calldata.

    Args:
        calls: Sub-calls in execution order.

    Returns:
        str: 0x-prefixed calldata for the Multicall3 contract.
    """
    payload = [
        (Web3.to_checksum_address(call.target), call.allow_failure, Web3.to_bytes(hexstr=call.call_data))
        for call in calls
    ]
    return encode_function_data(get_multicall3_abi(), "aggregate3", [payload])


def hash_metadata(metadata: str) -> bytes:
    """keccak256 of the UTF-8 metadata string (the on-chain ``bytes32 metadata``)."""
    return bytes(Web3.keccak(text=metadata))


def serialize_transaction_request(*, to: str, data: str, chain_id: int) -> str:
    """
    Serialize an unsigned legacy transaction request.

    Produces the same compact JSON as wagmi's ``serialize`` for
    ``{to, data, chainId, type: 'legacy'}``, keys in that order.

    Args:
        to: Recipient contract address.
        data: 0x-prefixed calldata.
        chain_id: EIP-155 chain id.

    Returns:
        str: JSON text, e.g. ``{"to":"0xcA11...","data":"0x82ad56cb...","chainId":43113,"type":"legacy"}``.
    """
    request = {
        "to": Web3.to_checksum_address(to),
        "data": data,
        "chainId": chain_id,
        "type": "legacy",
    }
    return json.dumps(request, separators=(",", ":"))
