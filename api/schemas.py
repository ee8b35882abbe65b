"""
API Schemas Module

This module defines Pydantic models for response serialisation. Field names
are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PaymentRecordOut(BaseModel):
    """A persisted capture as returned by GET /payments."""

    id: int
    order_id: str
    status: Optional[str] = None
    amount: float
    currency: str
    payer_id: Optional[str] = None
    payer_email: Optional[str] = None
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class PaymentLinkResponse(BaseModel):
    response: dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
