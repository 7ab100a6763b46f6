"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from movie_match.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/catalog/breaker", dependencies=[Depends(require_admin)])
async def breaker_status(request: Request) -> dict[str, object]:
    """Return the catalog circuit breaker state."""
    container: AppContainer = request.app.state.container
    return asdict(container.breaker.snapshot())


@router.post("/catalog/breaker/open", dependencies=[Depends(require_admin)])
async def open_breaker(request: Request) -> dict[str, object]:
    """Force the catalog breaker open, serving cache and defaults only."""
    container: AppContainer = request.app.state.container
    container.breaker.force_open()
    return asdict(container.breaker.snapshot())


@router.post("/catalog/breaker/close", dependencies=[Depends(require_admin)])
async def close_breaker(request: Request) -> dict[str, object]:
    """Force the catalog breaker closed and reset its counters."""
    container: AppContainer = request.app.state.container
    container.breaker.force_close()
    return asdict(container.breaker.snapshot())


@router.post("/catalog/refresh", dependencies=[Depends(require_admin)])
async def refresh_catalog(
    request: Request, genre: str | None = None
) -> dict[str, object]:
    """Re-fetch a candidate list from TMDB and overwrite its cache entry."""
    container: AppContainer = request.app.state.container
    cached = await container.catalog_service.refresh_candidates(genre)
    return {"genre": genre, "cached": cached}
