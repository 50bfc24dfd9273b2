"""Exchange rate refresh tasks.

The worker fetches the full rate table upstream and publishes it to Redis
as one snapshot. API processes configured with ``rate_source=redis`` poll
that snapshot.
"""

import logging

from celery import shared_task

from pinkpay.core.config import get_settings
from pinkpay.core.redis import get_redis
from pinkpay.services.rate_service import build_rate_source, publish_snapshot

logger = logging.getLogger(__name__)


@shared_task(name="rates.refresh", ignore_result=True)
def refresh_rates() -> int:
    """Fetch the rate table and replace the shared snapshot.

    Returns:
        Number of pairs published, 0 when the fetch failed
    """
    settings = get_settings()
    kind = "http" if settings.rate_source_url else "static"
    source = build_rate_source(
        kind,
        url=settings.rate_source_url,
        response_path=settings.rate_response_path,
        timeout=settings.rate_http_timeout,
    )

    try:
        rates = source.fetch()
    except Exception as e:
        logger.warning("Rate refresh from %s failed: %s", source.name, e)
        return 0

    if not rates:
        logger.warning("Rate refresh from %s returned no rates, keeping snapshot", source.name)
        return 0

    publish_snapshot(get_redis(), rates)
    logger.info("Published %d rates from %s", len(rates), source.name)
    return len(rates)
