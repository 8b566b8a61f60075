# app/schemas/common.py
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict


class ServiceResult(BaseModel):
    """Outcome of a service call that touches the database or a mail server"""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ServiceResult":
        return cls(success=False, error=error)


class MessageResponse(BaseModel):
    message: str
