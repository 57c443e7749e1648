"""
ERC20 + Payment Gateway + Multicall3 Smart Contract ABI Module

This module provides the reduced ABI definitions the gateway needs: ERC-20
metadata/balance/allowance reads, ERC-20 ``transfer``/``approve`` encoding,
the payment gateway contract and Multicall3 ``aggregate3``.

Usage:
    from ERC20_ABI import (
        get_erc20_abi,
        get_payment_gateway_abi,
        get_multicall3_abi,
    )

    # Read token metadata
    contract = web3.eth.contract(address=token_address, abi=get_erc20_abi())
    symbol = await contract.functions.symbol().call()
"""

from typing import Dict, Any, List


def get_erc20_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the ERC-20 functions the gateway reads and encodes.

    Covers ``symbol``, ``decimals``, ``balanceOf``, ``allowance``,
    ``approve`` and ``transfer``.

    Returns:
        List[Dict[str, Any]]: ERC-20 function ABI entries.
    """
    return [
        {
            "name": "symbol",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "decimals",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "uint8"}],
        },
        {
            "name": "balanceOf",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        },
        {
            "name": "allowance",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "owner", "type": "address"},
                {"name": "spender", "type": "address"},
            ],
            "outputs": [{"name": "", "type": "uint256"}],
        },
        {
            "name": "approve",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "spender", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "name": "transfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
    ]


def get_payment_gateway_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the on-chain payment gateway contract.

    ``createPayment`` registers a payment on-chain, ``executePayment`` pulls
    the approved tokens from the payer and marks the payment executed.

    Returns:
        List[Dict[str, Any]]: Payment gateway ABI entries.
    """
    return [
        {
            "name": "createPayment",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "paymentId", "type": "bytes32"},
                {"name": "merchant", "type": "address"},
                {"name": "token", "type": "address"},
                {"name": "amount", "type": "uint256"},
                {"name": "metadata", "type": "bytes32"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "name": "executePayment",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "paymentId", "type": "bytes32"},
                {"name": "payer", "type": "address"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "name": "getPayment",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "paymentId", "type": "bytes32"}],
            "outputs": [
                {"name": "merchant", "type": "address"},
                {"name": "token", "type": "address"},
                {"name": "amount", "type": "uint256"},
                {"name": "executed", "type": "bool"},
                {"name": "metadata", "type": "bytes32"},
            ],
        },
        {
            "name": "canExecutePayment",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "paymentId", "type": "bytes32"},
                {"name": "payer", "type": "address"},
            ],
            "outputs": [
                {"name": "canExecute", "type": "bool"},
                {"name": "reason", "type": "string"},
            ],
        },
    ]


def get_multicall3_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for Multicall3 ``aggregate3``.

    Each call is a ``(target, allowFailure, callData)`` tuple; the whole batch
    reverts when any call with ``allowFailure = false`` reverts.

    Returns:
        List[Dict[str, Any]]: ABI for Multicall3 ``aggregate3``.
    """
    return [
        {
            "name": "aggregate3",
            "type": "function",
            "stateMutability": "payable",
            "inputs": [
                {
                    "name": "calls",
                    "type": "tuple[]",
                    "components": [
                        {"name": "target", "type": "address"},
                        {"name": "allowFailure", "type": "bool"},
                        {"name": "callData", "type": "bytes"},
                    ],
                }
            ],
            "outputs": [
                {
                    "name": "returnData",
                    "type": "tuple[]",
                    "components": [
                        {"name": "success", "type": "bool"},
                        {"name": "returnData", "type": "bytes"},
                    ],
                }
            ],
        }
    ]
