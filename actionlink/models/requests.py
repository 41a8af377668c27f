"""
Request models for the ActionLink API
"""
from pydantic import BaseModel, Field


class BuildTransactionRequest(BaseModel):
    """Caller for a server-side transaction build"""

    user_address: str = Field(..., alias="userAddress", min_length=1)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "userAddress": "0x52908400098527886E0F7030069857D2E4169EE7"
            }
        }
