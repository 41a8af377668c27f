"""
Response models for the ActionLink API
"""
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from .actions import ActionDefinition, DisplayMetadata


class CreateActionResponse(BaseModel):
    """Response from action creation"""
    id: Union[int, str]
    short_id: str
    short_url: str

    class Config:
        json_schema_extra = {
            "example": {
                "id": 42,
                "short_id": "q3Xb9_L-aZ0k",
                "short_url": "https://actions.example.com/a/tip-q3Xb9_L-aZ0k"
            }
        }


class ResolvedLinkResponse(BaseModel):
    """An action plus its display metadata, for rendering an action page"""
    action: ActionDefinition
    metadata: DisplayMetadata
    short_url: str


class ErrorDetail(BaseModel):
    """Error detail structure"""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: ErrorDetail
