"""
Feed API endpoints: admin preview/download, machine pull, validation, push.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query, Response, status

from ai_feed import deps
from ai_feed.config import get_settings
from ai_feed.core.auth import require_admin, verify_pull_access
from ai_feed.core.feed.delivery import build_and_push, can_push
from ai_feed.core.feed.generator import FeedGenerator
from ai_feed.core.feed.models import FeedRow, FeedSettings
from ai_feed.core.feed.serializer import FILE_EXTENSIONS, normalize_format, serialize
from ai_feed.core.feed.validator import validate_rows
from ai_feed.core.woo_client import WooClient
from ai_feed.schemas.common import ErrorResponse
from ai_feed.schemas.feed import PushResponse, RowReportOut, ValidationReportResponse

router = APIRouter(prefix="/feed", tags=["Feed"])

AUTH_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}

logger = logging.getLogger(__name__)


async def _build_rows(settings: FeedSettings, product_id: Optional[int] = None) -> List[FeedRow]:
    """Fetch the catalog and build rows (one product when product_id is given)."""
    if product_id is not None:
        source = await deps.load_product_source([product_id])
        return FeedGenerator(source, settings).build_for_product_id(product_id)
    source = await deps.load_product_source()
    return FeedGenerator(source, settings).build_feed()


def _feed_response(rows: List[FeedRow], fmt: str, download: bool = False) -> Response:
    fmt = normalize_format(fmt)
    payload, content_type = serialize(rows, fmt)
    headers = {"X-Feed-Rows": str(len(rows))}
    if download:
        headers["Content-Disposition"] = f'attachment; filename="product-feed.{FILE_EXTENSIONS[fmt]}"'
    return Response(content=payload, media_type=content_type, headers=headers)


@router.get("", dependencies=[Depends(require_admin)], responses=AUTH_ERRORS)
async def get_feed(
    format: Optional[str] = Query(None, description="json, csv, tsv or xml"),
    product_id: Optional[int] = Query(None, description="Preview a single product"),
    download: bool = Query(False),
    settings: FeedSettings = Depends(deps.get_feed_settings)
):
    """
    Preview or download the feed.

    Rows are returned even when they fail validation.
    """
    rows = await _build_rows(settings, product_id)
    logger.info(f"Feed preview: {len(rows)} rows (product_id={product_id}, format={format or settings.format})")
    return _feed_response(rows, format or settings.format, download=download)


@router.get("/pull", responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}})
async def pull_feed(
    format: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
    settings: FeedSettings = Depends(deps.get_feed_settings)
):
    """Machine pull endpoint, enabled in feed settings and protected by the pull token."""
    verify_pull_access(settings, authorization=authorization, token=token)
    rows = await _build_rows(settings)
    logger.info(f"Feed pulled: {len(rows)} rows")
    return _feed_response(rows, format or settings.format)


@router.get(
    "/validate",
    response_model=ValidationReportResponse,
    dependencies=[Depends(require_admin)],
    responses=AUTH_ERRORS
)
async def validate_feed(
    product_id: Optional[int] = Query(None),
    only_failing: bool = Query(False),
    settings: FeedSettings = Depends(deps.get_feed_settings)
):
    """Validation report: issues per row."""
    rows = await _build_rows(settings, product_id)
    reports = validate_rows(rows)
    failing = [r for r in reports if not r.ok]
    shown = failing if only_failing else reports
    return ValidationReportResponse(
        rows=len(rows),
        failing=len(failing),
        reports=[RowReportOut(id=r.id, ok=r.ok, issues=r.issues) for r in shown]
    )


async def _run_push_task(client: WooClient, settings: FeedSettings, timeout: float):
    """Background task for a manual push."""
    try:
        await build_and_push(client, settings, timeout=timeout)
    finally:
        await client.close()


@router.post(
    "/push",
    response_model=PushResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_admin)],
    responses={**AUTH_ERRORS, 409: {"model": ErrorResponse}}
)
async def push_feed(
    background_tasks: BackgroundTasks,
    settings: FeedSettings = Depends(deps.get_feed_settings)
):
    """Schedule an immediate push; the result is only logged."""
    if not can_push(settings):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Feed delivery is disabled or endpoint_url is not set"
        )

    client = deps.create_woo_client()
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Store connection is not configured"
        )

    background_tasks.add_task(_run_push_task, client, settings, get_settings().push_timeout_seconds)
    logger.info(f"Feed push scheduled to {settings.endpoint_url}")
    return PushResponse(status="scheduled", endpoint_url=settings.endpoint_url)
