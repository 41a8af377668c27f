"""
Action models for ActionLink

An action is a tagged union of two variants, keyed on action_type:
- tip:      recipient_address, tip_amount_eth
- nft_sale: contract_address, token_id, price

Persisted column names are used as field names so rows from the actions
table validate directly.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_serializer, field_validator

from actionlink.actions.amounts import UINT256_MAX, to_positive_smallest_unit
from actionlink.core.exceptions import InvalidAmountError

_TOKEN_ID_RE = re.compile(r"[0-9]+")


class ActionType(str, Enum):
    """Persisted action_type values"""
    TIP = "tip"
    NFT_SALE = "nft_sale"


def _check_amount(value: str) -> str:
    try:
        to_positive_smallest_unit(value)
    except InvalidAmountError as e:
        raise ValueError(e.message) from e
    return value.strip()


# =============================================================================
# Variant fields (what a creator submits)
# =============================================================================

class TipFields(BaseModel):
    """Fields of a tip action"""
    action_type: Literal["tip"] = "tip"
    recipient_address: str = Field(..., min_length=1)
    tip_amount_eth: str = Field(..., min_length=1, description="Decimal amount in native units")
    description: Optional[str] = None

    @field_validator("tip_amount_eth")
    @classmethod
    def validate_tip_amount(cls, v: str) -> str:
        return _check_amount(v)


class NftSaleFields(BaseModel):
    """Fields of an NFT sale action"""
    action_type: Literal["nft_sale"] = "nft_sale"
    contract_address: str = Field(..., min_length=1)
    token_id: str = Field(..., description="uint256 token id as a base-10 string")
    price: str = Field(..., min_length=1, description="Decimal price in native units")
    description: Optional[str] = None

    @field_validator("token_id", mode="before")
    @classmethod
    def validate_token_id(cls, v: Any) -> str:
        # JSON clients sometimes send small ids as numbers
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not _TOKEN_ID_RE.fullmatch(v.strip()):
            raise ValueError("token_id must be a non-negative integer string")
        v = v.strip()
        if len(v.lstrip("0")) > 78 or int(v) > UINT256_MAX:
            raise ValueError("token_id does not fit in uint256")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return _check_amount(v)


# =============================================================================
# Persisted actions
# =============================================================================

class StoredActionMixin(BaseModel):
    """Columns assigned by the store at creation"""
    id: Optional[Union[int, str]] = None
    short_id: Optional[str] = None
    created_at: Optional[datetime] = None


class TipAction(TipFields, StoredActionMixin):
    """A persisted tip action"""


class NftSaleAction(NftSaleFields, StoredActionMixin):
    """A persisted NFT sale action"""


ActionDefinition = Annotated[Union[TipAction, NftSaleAction], Field(discriminator="action_type")]

# Columns that belong to each variant; all others must be empty
VARIANT_COLUMNS: Dict[ActionType, Tuple[str, ...]] = {
    ActionType.TIP: ("recipient_address", "tip_amount_eth"),
    ActionType.NFT_SALE: ("contract_address", "token_id", "price"),
}

VARIANT_MODELS = {
    ActionType.TIP: TipAction,
    ActionType.NFT_SALE: NftSaleAction,
}


# =============================================================================
# Derived values
# =============================================================================

class DisplayMetadata(BaseModel):
    """Human-readable display data for an action page (UI only)"""
    title: str
    description: str
    label: str
    icon: str


class TransactionDescriptor(BaseModel):
    """
    Unsigned transaction fields for a wallet to sign and submit.

    value is an integer in the smallest native unit; it is serialised as a
    base-10 string so JSON consumers do not lose precision.
    """
    to: str
    from_: str = Field(..., alias="from")
    value: int = Field(..., ge=0, le=UINT256_MAX)
    data: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True

    @field_serializer("value")
    def serialize_value(self, value: int) -> str:
        return str(value)

    def to_tx_params(self) -> Dict[str, Any]:
        """Transaction dict in the shape web3 providers accept."""
        params: Dict[str, Any] = {
            "to": self.to,
            "from": self.from_,
            "value": self.value,
        }
        if self.data is not None:
            params["data"] = self.data
        return params
