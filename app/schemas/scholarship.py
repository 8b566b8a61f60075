# app/schemas/scholarship.py
from datetime import date, datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class ScholarshipBase(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    extended_description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    deadline: Optional[date] = None
    requirements: Optional[str] = None
    eligibility_criteria: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    custom_fields: Optional[List[Dict[str, Any]]] = None
    form_schema: Optional[Dict[str, Any]] = None
    status: str = "active"

    model_config = ConfigDict(title="ScholarshipBase")


class ScholarshipCreate(ScholarshipBase):
    pass


class ScholarshipUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    extended_description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    deadline: Optional[date] = None
    requirements: Optional[str] = None
    eligibility_criteria: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    custom_fields: Optional[List[Dict[str, Any]]] = None
    form_schema: Optional[Dict[str, Any]] = None
    status: Optional[str] = None

    model_config = ConfigDict(title="ScholarshipUpdate")


class ScholarshipResponse(ScholarshipBase):
    id: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, title="ScholarshipResponse")


class ScholarshipStats(BaseModel):
    total: int
    active: int
    inactive: int
    total_amount: float
