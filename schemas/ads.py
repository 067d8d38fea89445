from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingResponse(CamelModel):
    title: str
    model_year: int | None = None
    mileage: int | None = None
    price: int | None = None
    price_text: str = ""
    mileage_text: str = ""
    image_url: str | None = None
    ad_url: str | None = None


class FeedPayloadResponse(CamelModel):
    updated_at: datetime
    count: int
    cars: list[ListingResponse]


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class UpstreamErrorResponse(CamelModel):
    error: str
    status: int
    status_text: str
    body: str
