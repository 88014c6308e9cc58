"""Tool declarations and dispatch.

Each tool has a name, description and JSON input schema. ``call_tool`` runs
the matching handler and folds any gateway failure into an error payload, so
one failing call never affects the next.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from universal_gateway.apis.github import GitHubApi
from universal_gateway.gateway.errors import GatewayError, ValidationFailure, describe_error
from universal_gateway.gateway.services import GatewayServices

logger = logging.getLogger(__name__)

OPERATOR_TARGET = "gateway"

_USERNAME_SCHEMA = {
    "type": "string",
    "description": "GitHub username",
    "pattern": "^[a-zA-Z0-9]([a-zA-Z0-9]|-(?=[a-zA-Z0-9])){0,38}$",
}
_REPOSITORY_SCHEMA = {
    "type": "string",
    "description": "Repository in format 'owner/repo'",
    "pattern": "^[a-zA-Z0-9._-]+/[a-zA-Z0-9._-]+$",
}
_PAGING_SCHEMA = {
    "per_page": {"type": "integer", "minimum": 1, "maximum": 100, "default": 30},
    "page": {"type": "integer", "minimum": 1, "default": 1},
}


class UnknownToolError(KeyError):
    """Raised when no tool is registered under the requested name."""


@dataclass
class ToolSpec:
    name: str
    description: str
    input_schema: dict[str, Any]
    handler: Callable[..., Awaitable[Any]] = field(repr=False)
    target: str = OPERATOR_TARGET

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


class ToolRegistry:
    """All tools exposed by the gateway."""

    def __init__(self, services: GatewayServices):
        self.services = services
        self.github = GitHubApi(services.pipeline)
        self._tools: dict[str, ToolSpec] = {}
        self._register_github_tools()
        self._register_operator_tools()

    def register(self, tool: ToolSpec) -> None:
        self._tools[tool.name] = tool

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]

    def get(self, name: str) -> ToolSpec:
        if name not in self._tools:
            raise UnknownToolError(name)
        return self._tools[name]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a tool. Returns ``{"success": True, "data": ...}`` or an error payload."""
        tool = self.get(name)
        arguments = arguments or {}
        try:
            inspect.signature(tool.handler).bind(**arguments)
        except TypeError as e:
            error = ValidationFailure(f"Invalid arguments for {name}: {e}", field="arguments", target=tool.target)
            metrics = self.services.metrics
            metrics.record_failure(metrics.start_call(tool.target, name), error)
            return {"success": False, **describe_error(error, tool.target)}

        try:
            data = await tool.handler(**arguments)
        except GatewayError as e:
            return {"success": False, **describe_error(e, e.target or tool.target)}
        return {"success": True, "data": data}

    # -- GitHub -------------------------------------------------------------

    def _register_github_tools(self) -> None:
        gh = self.github
        self.register(
            ToolSpec(
                name="github-get-user",
                description="Get GitHub user profile information",
                input_schema={
                    "type": "object",
                    "properties": {"username": _USERNAME_SCHEMA},
                    "required": ["username"],
                },
                handler=gh.get_user_profile,
                target="github",
            )
        )
        self.register(
            ToolSpec(
                name="github-list-repos",
                description="List repositories for a GitHub user",
                input_schema={
                    "type": "object",
                    "properties": {
                        "username": _USERNAME_SCHEMA,
                        "type": {"type": "string", "enum": ["all", "owner", "member"], "default": "all"},
                        "sort": {
                            "type": "string",
                            "enum": ["created", "updated", "pushed", "full_name"],
                            "default": "updated",
                        },
                        "direction": {"type": "string", "enum": ["asc", "desc"], "default": "desc"},
                        **_PAGING_SCHEMA,
                    },
                    "required": ["username"],
                },
                handler=gh.list_user_repos,
                target="github",
            )
        )
        self.register(
            ToolSpec(
                name="github-get-repo",
                description="Get detailed information about a GitHub repository",
                input_schema={
                    "type": "object",
                    "properties": {"owner_repo": _REPOSITORY_SCHEMA},
                    "required": ["owner_repo"],
                },
                handler=gh.get_repo_info,
                target="github",
            )
        )
        self.register(
            ToolSpec(
                name="github-search-repos",
                description="Search GitHub repositories",
                input_schema={
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "minLength": 1, "maxLength": 256},
                        "sort": {
                            "type": "string",
                            "enum": ["stars", "forks", "help-wanted-issues", "updated"],
                            "default": "stars",
                        },
                        "order": {"type": "string", "enum": ["asc", "desc"], "default": "desc"},
                        **_PAGING_SCHEMA,
                    },
                    "required": ["query"],
                },
                handler=gh.search_repos,
                target="github",
            )
        )
        self.register(
            ToolSpec(
                name="github-get-issues",
                description="List issues of a GitHub repository",
                input_schema={
                    "type": "object",
                    "properties": {
                        "owner_repo": _REPOSITORY_SCHEMA,
                        "state": {"type": "string", "enum": ["open", "closed", "all"], "default": "open"},
                        "sort": {
                            "type": "string",
                            "enum": ["created", "updated", "comments"],
                            "default": "created",
                        },
                        "direction": {"type": "string", "enum": ["asc", "desc"], "default": "desc"},
                        "labels": {"type": "string", "description": "Comma-separated label names"},
                        **_PAGING_SCHEMA,
                    },
                    "required": ["owner_repo"],
                },
                handler=gh.get_repo_issues,
                target="github",
            )
        )

    # -- Operator actions ---------------------------------------------------

    def _register_operator_tools(self) -> None:
        self.register(
            ToolSpec(
                name="gateway-get-metrics",
                description="Get gateway performance metrics",
                input_schema={
                    "type": "object",
                    "properties": {
                        "include_cache": {
                            "type": "boolean",
                            "description": "Include detailed cache statistics",
                            "default": False,
                        }
                    },
                },
                handler=self._get_metrics,
            )
        )
        self.register(
            ToolSpec(
                name="gateway-clear-cache",
                description="Clear the API response cache",
                input_schema={
                    "type": "object",
                    "properties": {
                        "confirm": {"type": "boolean", "description": "Confirm cache clearing action"},
                    },
                    "required": ["confirm"],
                },
                handler=self._clear_cache,
            )
        )

    async def _get_metrics(self, include_cache: bool = False) -> dict[str, Any]:
        metrics = self.services.metrics
        async with metrics.track(OPERATOR_TARGET, "gateway-get-metrics"):
            metrics.update_cache_stats(self.services.cache.get_stats())
            report = metrics.report()
            if include_cache:
                report["cache_details"] = self.services.cache.get_stats()
                report["rate_limits"] = self.services.rate_limiter.get_all_stats()
        return report

    async def _clear_cache(self, confirm: bool = False) -> dict[str, Any]:
        metrics = self.services.metrics
        async with metrics.track(OPERATOR_TARGET, "gateway-clear-cache"):
            if confirm is not True:
                raise ValidationFailure(
                    "Cache clearing requires confirmation. Set 'confirm: true' to proceed.",
                    field="confirm",
                    target=OPERATOR_TARGET,
                )
            cache = self.services.cache
            removed = len(cache)
            cache.clear()
            metrics.update_cache_stats(cache.get_stats())
            logger.info("Cache cleared via operator action (%d entries)", removed)
        return {"removed": removed}
