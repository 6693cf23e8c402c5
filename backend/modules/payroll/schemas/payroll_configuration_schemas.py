"""
Schemas for payroll parameter and IRSA bracket administration.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from ..enums.payroll_enums import ConfigDataType, ConfigCategory


class TaxParameterCreate(BaseModel):
    """Request model for creating a payroll parameter"""

    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z][a-z0-9_]*$")
    value: str = Field(..., min_length=1, max_length=255)
    data_type: ConfigDataType = ConfigDataType.STRING
    category: ConfigCategory = ConfigCategory.GENERAL
    description: Optional[str] = None
    is_active: bool = True


class TaxParameterUpdate(BaseModel):
    """Request model for updating a payroll parameter"""

    value: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class TaxParameterResponse(BaseModel):
    id: int
    key: str
    value: str
    data_type: ConfigDataType
    category: ConfigCategory
    description: Optional[str] = None
    is_active: bool
    created_by: int
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaxParameterListResponse(BaseModel):
    items: List[TaxParameterResponse]
    total: int
    limit: int
    offset: int


class IRSABracketInput(BaseModel):
    """One bracket of a submitted IRSA table"""

    bracket_name: str = Field(..., min_length=1, max_length=50)
    min_income: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    max_income: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    tax_rate: Decimal = Field(..., ge=0, le=1, max_digits=7, decimal_places=6)
    min_tax: Decimal = Field(Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    sort_order: int = Field(..., ge=0)


class IRSABracketTableReplace(BaseModel):
    """Request model replacing the IRSA table effective on a date"""

    effective_date: date
    brackets: List[IRSABracketInput] = Field(..., min_length=1)


class IRSABracketResponse(BaseModel):
    id: int
    bracket_name: str
    min_income: Decimal
    max_income: Optional[Decimal] = None
    tax_rate: Decimal
    min_tax: Decimal
    sort_order: int
    effective_date: date
    is_active: bool
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class IRSABracketListResponse(BaseModel):
    items: List[IRSABracketResponse]
    total: int
    limit: int
    offset: int


class SeedConfigurationResponse(BaseModel):
    parameters_created: List[str]
    brackets_created: int
