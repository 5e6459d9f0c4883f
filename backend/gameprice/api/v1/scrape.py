"""Scrape job endpoints used by the n8n workflows.

POST /scrape/sync runs a batch and answers with its items. POST
/scrape/start runs a batch in the background; progress and results are
read from the status endpoints.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from gameprice.config import settings
from gameprice.core.exceptions import RenderingEngineError
from gameprice.dependencies import OrchestratorFactory, get_orchestrator_factory, get_state
from gameprice.schemas import (
    FailedUrlsResponse,
    JobStatusResponse,
    ScrapeStartRequest,
    ScrapeStartResponse,
    ScrapeSyncRequest,
    ScrapeSyncResponse,
    valid_urls,
)
from gameprice.services.job_state import ScrapeJobState

router = APIRouter()
logger = structlog.get_logger(__name__)


def _status_payload(state: ScrapeJobState) -> JobStatusResponse:
    return JobStatusResponse(
        **state.snapshot(),
        hasFailedUrls=bool(state.failed_urls),
        failedUrlCount=len(state.failed_urls),
    )


async def run_scrape_job(
    factory: OrchestratorFactory,
    state: ScrapeJobState,
    urls: Optional[List[str]],
    resume_url: Optional[str],
) -> None:
    """Background body of POST /scrape/start.

    Every error ends up in the job state; nothing propagates to the server.
    """
    orchestrator = factory()
    log = logger.bind(job="scrape_start")
    try:
        if resume_url:
            orchestrator.set_resume_url(resume_url)
        await orchestrator.initialize()

        if urls:
            report = await orchestrator.scrape_urls(urls, state.update_progress)
        else:
            report = await orchestrator.scrape_from_file(settings.URLS_FILE, state.update_progress)

        await state.finish(report)
        log.info(
            "scrape_job_completed",
            batch_id=report.batch_id,
            total_items=report.total_item_count,
            succeeded=report.succeeded_count,
            failed=report.failed_count,
        )
    except Exception as e:
        log.error("scrape_job_failed", error=str(e), exc_info=True)
        await state.fail(str(e) or type(e).__name__)
    finally:
        await orchestrator.close()


@router.post("/scrape/sync", response_model=ScrapeSyncResponse)
async def scrape_sync(
    body: ScrapeSyncRequest,
    factory: OrchestratorFactory = Depends(get_orchestrator_factory),
):
    """Scrape the given URLs and return the extracted items directly."""
    urls = valid_urls(body.urls)
    if not urls:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid URLs provided",
        )

    orchestrator = factory()
    try:
        await orchestrator.initialize()
        report = await orchestrator.scrape_urls(urls)
    except RenderingEngineError as e:
        logger.error("scrape_sync_browser_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Browser unavailable: {e}",
        )
    finally:
        await orchestrator.close()

    items = [item.to_dict() for item in report.items]
    return ScrapeSyncResponse(
        data={
            "batchId": report.batch_id,
            "timestamp": report.started_at,
            "summary": {
                "totalUrls": report.requested_url_count,
                "successCount": report.succeeded_count,
                "failedCount": report.failed_count,
                "totalItems": report.total_item_count,
            },
            "items": items,
            "errors": list(report.error_messages),
        }
    )


@router.post("/scrape/start", response_model=ScrapeStartResponse)
async def scrape_start(
    background_tasks: BackgroundTasks,
    body: Optional[ScrapeStartRequest] = None,
    factory: OrchestratorFactory = Depends(get_orchestrator_factory),
    state: ScrapeJobState = Depends(get_state),
):
    """Start a background scrape; report the running job if there is one."""
    body = body or ScrapeStartRequest()
    urls = None
    if body.urls is not None:
        urls = valid_urls(body.urls)
        if not urls:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid URLs provided",
            )

    started = await state.try_start(total=len(urls) if urls else 0)
    if not started:
        return ScrapeStartResponse(
            message="Scraping job is already running",
            isRunning=True,
            currentStatus=_status_payload(state),
        )

    background_tasks.add_task(run_scrape_job, factory, state, urls, body.resume_url)
    logger.info("scrape_job_started", url_count=len(urls) if urls else None)
    return ScrapeStartResponse(
        message="Scraping job started - check /scrape/status for progress",
        isRunning=True,
        totalUrls=len(urls) if urls else None,
    )


@router.get("/scrape/status", response_model=JobStatusResponse)
async def scrape_status(state: ScrapeJobState = Depends(get_state)):
    return _status_payload(state)


@router.get("/scrape/failed-urls", response_model=FailedUrlsResponse)
async def scrape_failed_urls(state: ScrapeJobState = Depends(get_state)):
    return FailedUrlsResponse(
        failedUrls=state.failed_urls,
        count=len(state.failed_urls),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/scrape/last-result")
async def scrape_last_result(state: ScrapeJobState = Depends(get_state)):
    """Full report of the last completed background job."""
    if state.last_result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No batch results available",
        )
    return {
        "success": True,
        "result": state.last_result.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
