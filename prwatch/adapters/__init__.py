"""Fetchers for pull request data."""

from prwatch.adapters.base import (
    ApiError,
    FetchError,
    FetchTimeoutError,
    ForgeUnavailableError,
    InvalidResponseError,
    LaunchError,
    PRFetcher,
)

__all__ = [
    "ApiError",
    "FetchError",
    "FetchTimeoutError",
    "ForgeUnavailableError",
    "InvalidResponseError",
    "LaunchError",
    "PRFetcher",
]
