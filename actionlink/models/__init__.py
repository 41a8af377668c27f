"""
Data models for ActionLink
"""
from .actions import (
    ActionType,
    TipFields,
    NftSaleFields,
    TipAction,
    NftSaleAction,
    ActionDefinition,
    DisplayMetadata,
    TransactionDescriptor,
)
from .requests import BuildTransactionRequest
from .responses import CreateActionResponse, ResolvedLinkResponse, ErrorDetail, ErrorResponse

__all__ = [
    # Actions
    "ActionType",
    "TipFields",
    "NftSaleFields",
    "TipAction",
    "NftSaleAction",
    "ActionDefinition",
    # Derived
    "DisplayMetadata",
    "TransactionDescriptor",
    # Request/Response
    "BuildTransactionRequest",
    "CreateActionResponse",
    "ResolvedLinkResponse",
    "ErrorDetail",
    "ErrorResponse",
]
