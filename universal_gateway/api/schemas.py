from typing import Any

from pydantic import BaseModel, Field


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    api_name: str | None = None
    field: str | None = None
    status_code: int | None = None
    retry_after: float | None = None


class ToolInfo(BaseModel):
    name: str
    description: str
    inputSchema: dict[str, Any]


class CacheClearRequest(BaseModel):
    confirm: bool = False


class CacheClearResponse(BaseModel):
    removed: int


class CacheStats(BaseModel):
    hits: int
    misses: int
    sets: int
    evictions: int
    total_requests: int
    hit_rate: float
    size: int
    max_size: int
    memory_usage: int
