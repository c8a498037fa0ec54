"""Marketplace domain schemas - Pydantic models for validation"""

from datetime import date as date_type
from typing import Optional, Union

from pydantic import BaseModel

from ..sessions.schemas import OperatorRequirement


class RoleRequest(BaseModel):
    """Every state-changing request carries the caller's role"""

    role: str


class SessionRequestCreate(BaseModel):
    """
    Schema for a client's session request.

    Fields are optional at the schema level; the workflow answers missing
    ones with an INVALID_DATA envelope rather than a validation error.
    """

    clientId: Optional[str] = None
    date: Optional[Union[date_type, str]] = None
    setupIds: Optional[list[str]] = None
    regionId: Optional[str] = None
    offerId: Optional[str] = None
    operatorRequirement: Optional[OperatorRequirement] = None
    notes: Optional[str] = None


class SessionRequestBody(SessionRequestCreate, RoleRequest):
    pass


class RejectOperatorBody(RoleRequest):
    reason: Optional[str] = None
