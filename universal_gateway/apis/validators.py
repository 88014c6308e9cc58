"""Input validation for upstream API calls. Failures raise ValidationFailure."""

from __future__ import annotations

import math
import re
from typing import Any

from universal_gateway.gateway.errors import ValidationFailure

_GITHUB_USERNAME = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9]|-(?=[a-zA-Z0-9])){0,38}$")
_GITHUB_REPO = re.compile(r"^[a-zA-Z0-9._-]+$")


def validate_required(value: Any, field: str) -> None:
    if value is None or value == "" or (isinstance(value, str) and not value.strip()):
        raise ValidationFailure(f"{field} is required", field)


def validate_string(value: Any, field: str, min_length: int = 1, max_length: int = 1000) -> None:
    validate_required(value, field)

    if not isinstance(value, str):
        raise ValidationFailure(f"{field} must be a string", field)
    if len(value) < min_length:
        raise ValidationFailure(f"{field} must be at least {min_length} characters long", field)
    if len(value) > max_length:
        raise ValidationFailure(f"{field} must be no more than {max_length} characters long", field)


def validate_number(value: Any, field: str, minimum: float = 0, maximum: float = math.inf) -> None:
    """Optional numeric value within [minimum, maximum]; None is accepted."""
    if value is None:
        return
    if isinstance(value, bool):
        raise ValidationFailure(f"{field} must be a valid number", field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationFailure(f"{field} must be a valid number", field) from None
    if math.isnan(number) or number < minimum or number > maximum:
        raise ValidationFailure(f"{field} must be between {minimum} and {maximum}", field)


def validate_integer(value: Any, field: str, minimum: int = 0, maximum: float = math.inf) -> int:
    """Required whole number within [minimum, maximum], returned as int."""
    validate_required(value, field)
    validate_number(value, field, minimum, maximum)
    number = float(value)
    if math.isinf(number) or not number.is_integer():
        raise ValidationFailure(f"{field} must be a whole number", field)
    return int(number)


def validate_github_username(username: Any) -> None:
    validate_string(username, "username", 1, 39)

    if not _GITHUB_USERNAME.match(username):
        raise ValidationFailure(
            "Username may only contain alphanumeric characters or single hyphens, "
            "and cannot begin or end with a hyphen",
            "username",
        )


def validate_github_repo(repo: Any) -> None:
    validate_string(repo, "repository", 1, 100)

    if not _GITHUB_REPO.match(repo):
        raise ValidationFailure(
            "Repository name may only contain alphanumeric characters, periods, hyphens, and underscores",
            "repository",
        )


def validate_github_owner_repo(owner_repo: Any) -> None:
    validate_string(owner_repo, "owner/repo")

    if "/" not in owner_repo:
        raise ValidationFailure('Format must be "owner/repository"', "owner/repo")

    owner, _, repo = owner_repo.partition("/")
    validate_github_username(owner)
    validate_github_repo(repo)
