from __future__ import annotations

from datetime import date
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page_size: Union[int, Literal["all"]] = 50
    page_index: int = 1
    sort_field: str = "date"
    sort_direction: Literal["asc", "desc"] = "asc"


class DatasetMetaModel(BaseModel):
    generatedAt: Optional[str] = None
    source: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)


class SourceResponse(BaseModel):
    source_file: str
    record_count: int
    last_updated: str
    meta: DatasetMetaModel = Field(default_factory=DatasetMetaModel)
