from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse

from app.core.config import Settings
from schemas.ads import ErrorResponse, FeedPayloadResponse, ListingResponse, UpstreamErrorResponse
from services.ad_feed import AdFeedService, FeedPayload
from services.feed_fetcher import UpstreamHTTPError
from services.request_gate import AuthError, ConfigError, check_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ads"])


def _error(status_code: int, payload: ErrorResponse | UpstreamErrorResponse) -> JSONResponse:
    content = payload.model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=content)


def _to_response(payload: FeedPayload) -> FeedPayloadResponse:
    return FeedPayloadResponse(
        updated_at=payload.updated_at,
        count=payload.count,
        cars=[
            ListingResponse(
                title=car.title,
                model_year=car.model_year,
                mileage=car.mileage,
                price=car.price,
                price_text=car.price_text,
                mileage_text=car.mileage_text,
                image_url=car.image_url,
                ad_url=car.ad_url,
            )
            for car in payload.cars
        ],
    )


@router.get("/ads", response_model=FeedPayloadResponse)
async def get_ads(
    request: Request,
    response: Response,
    token: str | None = Query(default=None),
) -> FeedPayloadResponse | JSONResponse:
    settings: Settings = request.app.state.settings
    service: AdFeedService = request.app.state.ad_feed

    try:
        check_request(settings, token)
    except ConfigError as exc:
        logger.error("Feed endpoint is not configured: %s", exc)
        return _error(500, ErrorResponse(error=str(exc)))
    except AuthError:
        return _error(401, ErrorResponse(error="Unauthorized"))

    try:
        payload = await service.get_payload()
    except UpstreamHTTPError as exc:
        status_code = exc.status_code if settings.passthrough_upstream_status else 500
        return _error(
            status_code,
            UpstreamErrorResponse(
                error="FINN API error",
                status=exc.status_code,
                status_text=exc.status_text,
                body=exc.body,
            ),
        )
    except Exception as exc:  # noqa: BLE001 - every other failure is reported as a server error
        logger.exception("Failed to build feed payload")
        return _error(500, ErrorResponse(error="Server error", message=str(exc)))

    response.headers["Cache-Control"] = f"public, max-age={settings.cache_seconds}"
    return _to_response(payload)
