from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List
from datetime import datetime


# =========================
# CREATE
# =========================
class TenancyAdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = Field(None, max_length=150)


class TenancyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    slug: str = Field(..., min_length=2, max_length=63, pattern=r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
    contact_email: Optional[EmailStr] = None
    admin: TenancyAdminCreate


# =========================
# RESPONSE
# =========================
class TenancyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    contact_email: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]


class TenancyAdminOut(BaseModel):
    id: int
    username: str
    role: str


class TenancyCreatedOut(BaseModel):
    tenancy: TenancyOut
    admin: TenancyAdminOut


class TenancyListData(BaseModel):
    total: int
    items: List[TenancyOut]
