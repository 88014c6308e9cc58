"""GitHub REST API client on top of the request pipeline.

Validates inputs, routes every call through the pipeline (so caching, rate
limiting, retries and metrics apply) and maps GitHub's JSON into flatter
records.
"""

from __future__ import annotations

import logging
from typing import Any

from universal_gateway.apis.validators import (
    validate_github_owner_repo,
    validate_github_username,
    validate_integer,
    validate_string,
)
from universal_gateway.gateway.pipeline import RequestPipeline

logger = logging.getLogger(__name__)

API_NAME = "github"
MAX_PER_PAGE = 100


def _page_params(per_page: int, page: int) -> dict[str, int]:
    return {
        "per_page": validate_integer(per_page, "per_page", 1, MAX_PER_PAGE),
        "page": validate_integer(page, "page", 1),
    }


def _map_owner(owner: dict | None) -> dict | None:
    if not owner:
        return None
    return {
        "id": owner.get("id"),
        "username": owner.get("login"),
        "type": owner.get("type"),
        "avatar_url": owner.get("avatar_url"),
        "html_url": owner.get("html_url"),
    }


def _map_repo(repo: dict) -> dict:
    return {
        "id": repo.get("id"),
        "name": repo.get("name"),
        "full_name": repo.get("full_name"),
        "description": repo.get("description"),
        "language": repo.get("language"),
        "stars": repo.get("stargazers_count"),
        "forks": repo.get("forks_count"),
        "watchers": repo.get("watchers_count"),
        "open_issues": repo.get("open_issues_count"),
        "default_branch": repo.get("default_branch"),
        "is_private": repo.get("private"),
        "is_fork": repo.get("fork"),
        "is_archived": repo.get("archived"),
        "created_at": repo.get("created_at"),
        "updated_at": repo.get("updated_at"),
        "pushed_at": repo.get("pushed_at"),
        "html_url": repo.get("html_url"),
        "clone_url": repo.get("clone_url"),
        "homepage": repo.get("homepage"),
        "topics": repo.get("topics") or [],
        "owner": _map_owner(repo.get("owner")),
    }


def _map_issue(issue: dict) -> dict:
    return {
        "id": issue.get("id"),
        "number": issue.get("number"),
        "title": issue.get("title"),
        "state": issue.get("state"),
        "comments": issue.get("comments"),
        "created_at": issue.get("created_at"),
        "updated_at": issue.get("updated_at"),
        "closed_at": issue.get("closed_at"),
        "html_url": issue.get("html_url"),
        "labels": [label.get("name") for label in issue.get("labels") or []],
        "assignees": [a.get("login") for a in issue.get("assignees") or []],
        "author": (issue.get("user") or {}).get("login"),
        "is_pull_request": "pull_request" in issue,
    }


class GitHubApi:
    """GitHub operations exposed as gateway tools."""

    def __init__(self, pipeline: RequestPipeline):
        self.pipeline = pipeline

    async def get_user_profile(self, username: str) -> dict[str, Any]:
        data = await self.pipeline.call(
            API_NAME,
            f"/users/{username}",
            call_name="github-get-user",
            validate=lambda: validate_github_username(username),
        )
        return {
            "id": data.get("id"),
            "username": data.get("login"),
            "name": data.get("name"),
            "email": data.get("email"),
            "bio": data.get("bio"),
            "location": data.get("location"),
            "company": data.get("company"),
            "blog": data.get("blog"),
            "twitter": data.get("twitter_username"),
            "followers": data.get("followers"),
            "following": data.get("following"),
            "public_repos": data.get("public_repos"),
            "public_gists": data.get("public_gists"),
            "created_at": data.get("created_at"),
            "avatar_url": data.get("avatar_url"),
            "html_url": data.get("html_url"),
        }

    async def list_user_repos(
        self,
        username: str,
        type: str = "all",
        sort: str = "updated",
        direction: str = "desc",
        per_page: int = 30,
        page: int = 1,
    ) -> dict[str, Any]:
        # Filled in by validate(), which the pipeline runs before computing the cache key
        params: dict[str, Any] = {}

        def validate() -> None:
            validate_github_username(username)
            params.update(type=type, sort=sort, direction=direction, **_page_params(per_page, page))

        data = await self.pipeline.call(
            API_NAME,
            f"/users/{username}/repos",
            params,
            call_name="github-list-repos",
            validate=validate,
        )
        return {
            "repositories": [_map_repo(r) for r in data],
            "pagination": {
                "page": params["page"],
                "per_page": params["per_page"],
                "has_more": len(data) == params["per_page"],
            },
        }

    async def get_repo_info(self, owner_repo: str) -> dict[str, Any]:
        data = await self.pipeline.call(
            API_NAME,
            f"/repos/{owner_repo}",
            call_name="github-get-repo",
            validate=lambda: validate_github_owner_repo(owner_repo),
        )
        record = _map_repo(data)
        license_info = data.get("license")
        record["license"] = (
            {
                "key": license_info.get("key"),
                "name": license_info.get("name"),
                "spdx_id": license_info.get("spdx_id"),
            }
            if license_info
            else None
        )
        record["has_issues"] = data.get("has_issues")
        record["has_wiki"] = data.get("has_wiki")
        return record

    async def search_repos(
        self,
        query: str,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 30,
        page: int = 1,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}

        def validate() -> None:
            validate_string(query, "query", 1, 256)
            params.update(q=query, sort=sort, order=order, **_page_params(per_page, page))

        data = await self.pipeline.call(
            API_NAME,
            "/search/repositories",
            params,
            call_name="github-search-repos",
            validate=validate,
        )
        return {
            "total_count": data.get("total_count", 0),
            "incomplete_results": data.get("incomplete_results", False),
            "repositories": [_map_repo(r) for r in data.get("items", [])],
            "pagination": {
                "page": params["page"],
                "per_page": params["per_page"],
                "total_count": data.get("total_count", 0),
            },
        }

    async def get_repo_issues(
        self,
        owner_repo: str,
        state: str = "open",
        sort: str = "created",
        direction: str = "desc",
        labels: str | list[str] | None = None,
        per_page: int = 30,
        page: int = 1,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}

        def validate() -> None:
            validate_github_owner_repo(owner_repo)
            params.update(state=state, sort=sort, direction=direction, **_page_params(per_page, page))
            if labels:
                params["labels"] = ",".join(labels) if isinstance(labels, list) else labels

        data = await self.pipeline.call(
            API_NAME,
            f"/repos/{owner_repo}/issues",
            params,
            call_name="github-get-issues",
            validate=validate,
        )
        return {
            "issues": [_map_issue(i) for i in data],
            "pagination": {
                "page": params["page"],
                "per_page": params["per_page"],
                "has_more": len(data) == params["per_page"],
            },
        }
