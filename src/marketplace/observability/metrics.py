"""Prometheus metrics instrumentation for the campaign marketplace.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count plus business counters.
- ``CAMPAIGNS_CREATED``, ``APPLICATIONS_SUBMITTED``, ``INVITATIONS_SENT``,
  ``APPLICATIONS_REVIEWED``: counters incremented by the lifecycle engine
  after each committed operation.
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

CAMPAIGNS_CREATED: Counter = Counter(
    "marketplace_campaigns_created_total",
    "Total number of campaigns created",
)

APPLICATIONS_SUBMITTED: Counter = Counter(
    "marketplace_applications_submitted_total",
    "Total number of applications submitted by influencers",
)

INVITATIONS_SENT: Counter = Counter(
    "marketplace_invitations_sent_total",
    "Total number of invitations sent by businesses",
)

APPLICATIONS_REVIEWED: Counter = Counter(
    "marketplace_applications_reviewed_total",
    "Total number of applications reviewed, by decision",
    ["decision"],
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
