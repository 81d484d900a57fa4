"""
Core views providing infrastructure endpoints.

Not part of the marketplace domain, but needed by deployment tooling.
"""

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for load balancers and container health checks.

    Returns:
        JsonResponse with:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - channel_layer: "configured" or "missing"

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable
    """
    from channels.layers import get_channel_layer

    health_status = {
        "status": "healthy",
        "database": "unknown",
        "channel_layer": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.warning("Health check could not reach the database", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Realtime fan-out degrades without a layer but HTTP keeps working
    if get_channel_layer() is not None:
        health_status["channel_layer"] = "configured"
    else:
        health_status["channel_layer"] = "missing"

    status_code = 200 if is_healthy else 503
    return JsonResponse(health_status, status=status_code)
