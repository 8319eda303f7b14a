from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    selected_queues: List[str] = Field(default_factory=list)
    selected_operators: List[str] = Field(default_factory=list)
    top_n: int = 15


class ErrorResponse(BaseModel):
    error: str
    type: str
    errors: List[str] = Field(default_factory=list)
