# laundry_saas/schemas/auth/activity_schemas.py

from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import date, datetime
from fastapi import Query


class UserActivityFilters(BaseModel):
    user_id: Optional[int] = Query(None)
    username: Optional[str] = Query(None)
    created_from: Optional[date] = Query(None)
    created_to: Optional[date] = Query(None)

    page: int = Query(1, ge=1)
    page_size: int = Query(20, ge=1, le=100)

    sort_by: str = Query("created_at")
    sort_order: str = Query("desc")


class UserActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenancy_id: Optional[int]
    user_id: Optional[int]
    username_snapshot: str
    message: str
    created_at: datetime


class UserActivityListData(BaseModel):
    total: int
    items: List[UserActivityOut]
