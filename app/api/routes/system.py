from fastapi import APIRouter, Request
from infrastructure.configuration import settings
from infrastructure.resilience import get_all_circuit_breaker_stats
from api.dependencies.rate_limits import get_limiter

router = APIRouter(tags=["System"])
limiter = get_limiter()


# Load balancers poll these routes, so the limit is generous
@router.get("/version")
@limiter.limit("50/minute")
def get_version(request: Request):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit("50/minute")
def get_health(request: Request):  # pylint: disable=unused-argument
    """Healthcheck endpoint.

    Reports ``degraded`` while any notification circuit breaker is open.
    """
    breakers = get_all_circuit_breaker_stats()
    open_circuits = sorted(
        name for name, stats in breakers.items() if stats["state"] == "open"
    )
    return {
        "status": "degraded" if open_circuits else "ok",
        "open_circuits": open_circuits,
    }
