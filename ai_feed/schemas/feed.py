"""
Feed schemas.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ai_feed.core.feed.models import FEED_FORMATS, FeedSettings
from ai_feed.core.utils import absint, clean_url, parse_bool


class FeedSettingsPayload(BaseModel):
    """
    Feed settings as stored in the settings file.

    Values are sanitized rather than rejected: unknown formats become 'json',
    unparseable flags become false, bad URLs become ''.
    """
    format: str = 'json'
    enable_search_default: bool = True
    enable_checkout_default: bool = False
    seller_name: str = ''
    seller_url: str = ''
    privacy_url: str = ''
    tos_url: str = ''
    returns_url: str = ''
    return_window: int = 0
    delivery_enabled: bool = False
    endpoint_url: str = ''
    auth_token: str = ''
    pull_endpoint_enabled: bool = False
    pull_access_token: str = ''

    @field_validator('format', mode='before')
    @classmethod
    def sanitize_format(cls, v: Any) -> str:
        v = str(v or '').strip().lower()
        return v if v in FEED_FORMATS else 'json'

    @field_validator(
        'enable_search_default',
        'enable_checkout_default',
        'delivery_enabled',
        'pull_endpoint_enabled',
        mode='before'
    )
    @classmethod
    def sanitize_flag(cls, v: Any) -> bool:
        return parse_bool(v)

    @field_validator('seller_url', 'privacy_url', 'tos_url', 'returns_url', 'endpoint_url', mode='before')
    @classmethod
    def sanitize_url(cls, v: Any) -> str:
        return clean_url(v)

    @field_validator('seller_name', 'auth_token', 'pull_access_token', mode='before')
    @classmethod
    def sanitize_text(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ''

    @field_validator('return_window', mode='before')
    @classmethod
    def sanitize_return_window(cls, v: Any) -> int:
        return absint(v)

    def to_snapshot(self) -> FeedSettings:
        return FeedSettings(**self.model_dump())


class RowReportOut(BaseModel):
    """Validation issues for one row."""
    id: str
    ok: bool
    issues: List[str] = Field(default_factory=list)


class ValidationReportResponse(BaseModel):
    """Response for the validation endpoint."""
    rows: int
    failing: int
    reports: List[RowReportOut]


class PushResponse(BaseModel):
    """Response for a manual push trigger."""
    status: str = "scheduled"
    endpoint_url: Optional[str] = None
