"""
Transaction Builder - typed action + caller -> unsigned transaction

Pure and deterministic: the same action and caller always produce an
identical TransactionDescriptor. Nothing here talks to a chain.

- tip:      to=recipient, value=tip amount, no data
- nft_sale: to=contract,  value=price,      data=buy(uint256 tokenId)

The NFT contract is assumed to expose `function buy(uint256 tokenId) payable`.
That is not checked on-chain.
"""

from typing import Any

from eth_abi import encode
from web3 import Web3

from actionlink.actions.amounts import to_positive_smallest_unit
from actionlink.core.config import ChainConfig
from actionlink.core.exceptions import InvalidAddressError, UnsupportedActionTypeError
from actionlink.models.actions import (
    ActionDefinition,
    NftSaleFields,
    TipFields,
    TransactionDescriptor,
)

BUY_FUNCTION_SIGNATURE = "buy(uint256)"

# First four bytes of keccak256("buy(uint256)")
BUY_SELECTOR: bytes = bytes(Web3.keccak(text=BUY_FUNCTION_SIGNATURE))[:4]


def normalize_address(value: Any, field: str = "address") -> str:
    """
    Validate a 0x-prefixed 20-byte hex address and return its checksum form.

    Mixed-case input must carry a valid EIP-55 checksum; all-lower or
    all-upper input is accepted as-is.

    Raises:
        InvalidAddressError: malformed address
    """
    if not isinstance(value, str):
        raise InvalidAddressError(value, field)
    candidate = value.strip()
    if not candidate.startswith("0x") or not Web3.is_address(candidate):
        raise InvalidAddressError(value, field)
    body = candidate[2:]
    if body != body.lower() and body != body.upper() and not Web3.is_checksum_address(candidate):
        raise InvalidAddressError(value, field)
    return Web3.to_checksum_address(candidate)


def encode_buy_call(token_id: str) -> str:
    """ABI-encode a buy(uint256) call as 0x-prefixed calldata."""
    args = encode(["uint256"], [int(token_id)])
    return "0x" + (BUY_SELECTOR + args).hex()


def build_transaction(
    action: ActionDefinition,
    caller: str,
    config: ChainConfig
) -> TransactionDescriptor:
    """
    Build the unsigned transaction for an action.

    Args:
        action: Resolved TipAction or NftSaleAction
        caller: Address of the connected wallet
        config: Chain settings (native decimals)

    Returns:
        TransactionDescriptor with checksummed addresses and integer value

    Raises:
        InvalidAddressError: caller or target address malformed
        InvalidAmountError: amount unparseable or over-precise
        UnsupportedActionTypeError: action is neither variant
    """
    sender = normalize_address(caller, "from")

    if isinstance(action, TipFields):
        return TransactionDescriptor(
            to=normalize_address(action.recipient_address, "recipient_address"),
            from_=sender,
            value=to_positive_smallest_unit(action.tip_amount_eth, config.native_decimals),
        )

    if isinstance(action, NftSaleFields):
        return TransactionDescriptor(
            to=normalize_address(action.contract_address, "contract_address"),
            from_=sender,
            value=to_positive_smallest_unit(action.price, config.native_decimals),
            data=encode_buy_call(action.token_id),
        )

    raise UnsupportedActionTypeError(getattr(action, "action_type", type(action).__name__))
