"""Core module for link-preview-fetch."""

from core.config import FetchDefaults
from core.errors import (
    DownloadTooLarge,
    FetchConnectionError,
    FetchError,
    FetchTimeout,
    HTTPStatusError,
    TooManyRedirects,
)
from core.models import FetchErrorCode, FetchLimits, FetchLog, HtmlDocument
from core.pipeline import FetchStage, ParseStage, PreviewPipeline

__all__ = [
    "DownloadTooLarge",
    "FetchConnectionError",
    "FetchDefaults",
    "FetchError",
    "FetchErrorCode",
    "FetchLimits",
    "FetchLog",
    "FetchStage",
    "FetchTimeout",
    "HTTPStatusError",
    "HtmlDocument",
    "ParseStage",
    "PreviewPipeline",
    "TooManyRedirects",
]
