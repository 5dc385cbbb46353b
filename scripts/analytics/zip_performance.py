"""
Zip Code Performance
====================

Health classification for a zip code's quoting results, and the zip
performance report served by the analytics_zip_performance_json RPC.

Health rules, first match wins:
    red     8+ quotes and no sales
    yellow  5-9 quotes and no sales, or 10+ quotes under 10% conversion
    green   15%+ conversion, or fewer than 5 quotes (not enough data)
    green   anything else
"""
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from models.metrics_models import ZipHealthStatus, ZipPerformanceData
from scripts.lib.errors import DecodeError
from scripts.lib.logger import setup_logger
from scripts.lib.num import to_num
from scripts.lib.supabase_client import rpc
from scripts.lib.timezone import parse_date_range

logger = setup_logger(__name__)

ZIP_PERFORMANCE_RPC = "analytics_zip_performance_json"


def calculate_zip_health_status(quotes, sales, conversion_rate) -> ZipHealthStatus:
    """Classify a zip code as green, yellow or red."""
    quotes = max(0, to_num(quotes))
    sales = max(0, to_num(sales))
    rate = max(0, to_num(conversion_rate))

    if quotes >= 8 and sales == 0:
        return "red"

    if (5 <= quotes <= 9 and sales == 0) or (quotes >= 10 and rate < 10):
        return "yellow"

    if rate >= 15 or quotes < 5:
        return "green"

    return "green"


def decode_zip_performance(payload) -> ZipPerformanceData:
    """
    Decode the RPC payload and attach a health status to each row.

    A null payload is an empty report; anything else that is not an object
    with a rows list is a DecodeError.
    """
    if payload is None:
        return ZipPerformanceData()
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected an object, got {type(payload).__name__}",
            source=ZIP_PERFORMANCE_RPC,
        )

    body = {"rows": payload.get("rows") or []}
    if payload.get("summary"):
        body["summary"] = payload["summary"]

    try:
        data = ZipPerformanceData.model_validate(body)
    except ValidationError as e:
        raise DecodeError(
            f"Zip performance payload is malformed: {e}",
            source=ZIP_PERFORMANCE_RPC,
        ) from e

    for row in data.rows:
        row.health_status = calculate_zip_health_status(
            row.quotes, row.sales, row.conversion_rate,
        )
    top = data.summary.top_zip
    if top is not None:
        top.health_status = calculate_zip_health_status(
            top.quotes, top.sales, top.conversion_rate,
        )
    return data


def get_zip_performance(
    from_date: str,
    to_date: str,
    producer_id: Optional[str] = None,
    source_id: Optional[str] = None,
    min_quotes: int = 1,
    include_unknown: bool = False,
    client=None,
) -> ZipPerformanceData:
    """Zip-level quotes, sales and conversion for a date range."""
    parse_date_range(from_date, to_date)
    payload = rpc(
        ZIP_PERFORMANCE_RPC,
        {
            "p_date_start": from_date,
            "p_date_end": to_date,
            "p_producer_id": producer_id,
            "p_source_id": source_id,
            "p_min_quotes": min_quotes,
            "p_include_unknown": include_unknown,
        },
        client=client,
    )
    data = decode_zip_performance(payload)
    logger.info(
        "Zip performance %s..%s: %d zips", from_date, to_date, len(data.rows),
    )
    return data
