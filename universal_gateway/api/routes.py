"""Gateway HTTP endpoints: tools and operator actions."""

from fastapi import APIRouter, Depends, HTTPException, Request

from universal_gateway.api.schemas import (
    CacheClearRequest,
    CacheClearResponse,
    CacheStats,
    ToolCallRequest,
    ToolCallResponse,
    ToolInfo,
)
from universal_gateway.gateway.services import GatewayServices
from universal_gateway.tools.registry import ToolRegistry, UnknownToolError

router = APIRouter(prefix="/api/v1")


def get_services(request: Request) -> GatewayServices:
    return request.app.state.services


def get_tools(request: Request) -> ToolRegistry:
    return request.app.state.tools


@router.get("/health", tags=["health"])
async def health(services: GatewayServices = Depends(get_services)):
    return {
        "status": "ok",
        "targets": {name: {"credential": cfg.has_credential} for name, cfg in services.targets.items()},
    }


@router.get("/tools", response_model=list[ToolInfo], tags=["tools"])
async def list_tools(tools: ToolRegistry = Depends(get_tools)):
    return tools.list_tools()


@router.post("/tools/{name}", response_model=ToolCallResponse, tags=["tools"])
async def call_tool(name: str, body: ToolCallRequest, tools: ToolRegistry = Depends(get_tools)):
    """Run a tool. Upstream failures come back as ``success: false`` payloads."""
    try:
        return await tools.call_tool(name, body.arguments)
    except UnknownToolError:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")


@router.get("/cache/stats", response_model=CacheStats, tags=["cache"])
async def cache_stats(services: GatewayServices = Depends(get_services)):
    return services.cache.get_stats()


@router.post("/cache/clear", response_model=CacheClearResponse, tags=["cache"])
async def clear_cache(body: CacheClearRequest, tools: ToolRegistry = Depends(get_tools)):
    result = await tools.call_tool("gateway-clear-cache", {"confirm": body.confirm})
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result["message"])
    return result["data"]


@router.post("/cache/cleanup", tags=["cache"])
async def cleanup_cache(services: GatewayServices = Depends(get_services)):
    return {"removed": services.cache.cleanup()}


@router.get("/metrics/report", tags=["metrics"])
async def metrics_report(services: GatewayServices = Depends(get_services)):
    services.metrics.update_cache_stats(services.cache.get_stats())
    return services.metrics.report()


@router.post("/metrics/reset", tags=["metrics"])
async def metrics_reset(services: GatewayServices = Depends(get_services)):
    services.metrics.reset()
    return {"status": "reset"}
