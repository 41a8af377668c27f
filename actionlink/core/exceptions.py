"""
Custom exceptions for the ActionLink API
Standardized error responses
"""

from fastapi import status
from typing import Optional, Dict, Any


class ActionLinkError(Exception):
    """Base exception for all ActionLink errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# Resolution Errors

class ActionNotFoundError(ActionLinkError):
    """Raised when no action exists for a short id"""

    def __init__(self, short_id: str):
        super().__init__(
            message="Action not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details={"short_id": short_id}
        )


class InvalidActionShapeError(ActionLinkError):
    """Raised when a stored or submitted action fails variant validation"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="INVALID_ACTION_SHAPE",
            details=details
        )


class UnsupportedActionTypeError(ActionLinkError):
    """Raised when an action type is neither tip nor nft_sale"""

    def __init__(self, action_type: Any):
        super().__init__(
            message="Unsupported action type",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="UNSUPPORTED_ACTION_TYPE",
            details={"action_type": action_type}
        )


class InvalidLinkError(ActionLinkError):
    """Raised when a link segment is not <actionType>-<shortId>"""

    def __init__(self, segment: str):
        super().__init__(
            message="Invalid action link",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_LINK",
            details={"segment": segment}
        )


# Transaction Errors

class InvalidAmountError(ActionLinkError):
    """Raised when a decimal amount cannot be converted exactly"""

    def __init__(self, amount: Any, reason: str):
        super().__init__(
            message=f"Invalid amount: {reason}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_AMOUNT",
            details={"amount": amount}
        )


class InvalidAddressError(ActionLinkError):
    """Raised when an address string is not a valid 20-byte hex address"""

    def __init__(self, address: Any, field: str = "address"):
        super().__init__(
            message=f"Invalid address for {field}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_ADDRESS",
            details={"field": field, "address": address}
        )


class MetadataEnrichmentError(ActionLinkError):
    """Raised inside the metadata synthesizer; always recovered there"""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="METADATA_ENRICHMENT_FAILED",
            details={"stage": stage}
        )


class SubmissionRejectedError(ActionLinkError):
    """Raised when the wallet or provider declines a submission"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="SUBMISSION_REJECTED"
        )


class ChainRevertError(ActionLinkError):
    """Raised when a submitted transaction is observed to revert"""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="CHAIN_REVERT",
            details={"tx_hash": tx_hash}
        )


# Persistence Errors

class StoreUnavailableError(ActionLinkError):
    """Raised when the action store cannot be reached or rejects a write"""

    def __init__(self, message: str = "Action store unavailable"):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="STORE_UNAVAILABLE"
        )


class ShortIdConflictError(ActionLinkError):
    """Raised by the store when a short id already exists"""

    def __init__(self, short_id: str):
        super().__init__(
            message="Short id already exists",
            status_code=status.HTTP_409_CONFLICT,
            error_code="SHORT_ID_CONFLICT",
            details={"short_id": short_id}
        )


class IdentifierGenerationError(ActionLinkError):
    """Raised when the randomness source is unavailable"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="ID_GENERATION_FAILED"
        )
