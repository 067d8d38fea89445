from __future__ import annotations

import logging
from dataclasses import dataclass

from services import field_extractor as fields
from services.xml_decoder import XmlNode, decode_feed, iter_entries

logger = logging.getLogger(__name__)

PRICE_UNIT = "kr"
MILEAGE_UNIT = "km"


@dataclass(frozen=True)
class ListingRecord:
    title: str
    model_year: int | None
    mileage: int | None
    price: int | None
    price_text: str
    mileage_text: str
    image_url: str | None
    ad_url: str | None


class NumberFormatter:
    """Format whole numbers with grouped thousands and a unit suffix."""

    def __init__(self, thousands_separator: str = " ") -> None:
        self._separator = thousands_separator

    def format_number(self, value: int) -> str:
        return f"{value:,}".replace(",", self._separator)

    def format_with_unit(self, value: int | None, unit: str) -> str:
        if value is None:
            return ""
        return f"{self.format_number(value)} {unit}"


def normalize_entry(entry: XmlNode, formatter: NumberFormatter) -> ListingRecord:
    adata = entry.child("adata")

    model_year = fields.to_int(fields.aliased_value(adata, "modelYear"))
    mileage = fields.to_int(fields.aliased_value(adata, "mileage"))
    price = fields.to_int(fields.price_value(adata))

    return ListingRecord(
        title=fields.title(entry),
        model_year=model_year,
        mileage=mileage,
        price=price,
        price_text=formatter.format_with_unit(price, PRICE_UNIT),
        mileage_text=formatter.format_with_unit(mileage, MILEAGE_UNIT),
        image_url=fields.image_url(entry),
        ad_url=fields.ad_url(entry),
    )


def normalize_feed(
    xml: str | bytes,
    formatter: NumberFormatter,
    limit: int | None = None,
) -> list[ListingRecord]:
    entries = iter_entries(decode_feed(xml))
    if limit is not None:
        entries = entries[:limit]
    records = [normalize_entry(entry, formatter) for entry in entries]
    logger.debug("Normalized %s feed entries", len(records))
    return records
