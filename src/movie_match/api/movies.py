"""Movie catalog endpoints."""

from fastapi import APIRouter, Path, Request

from movie_match.api.models import MovieListResponse, MovieResponse
from movie_match.containers import AppContainer

router = APIRouter(prefix="/movies", tags=["movies"])


@router.get("")
async def list_movies(request: Request, genre: str | None = None) -> MovieListResponse:
    """Return candidate movies; never fails while defaults are available."""
    container: AppContainer = request.app.state.container
    candidates = await container.catalog_service.resolve_candidates(genre)
    return MovieListResponse(
        movies=[MovieResponse.from_candidate(candidate) for candidate in candidates]
    )


@router.get("/genres")
async def list_genres(request: Request) -> dict[str, list[str]]:
    container: AppContainer = request.app.state.container
    return {"genres": container.catalog_service.available_genres()}


@router.get("/{movie_id}")
async def get_movie(
    request: Request, movie_id: str = Path(min_length=1, max_length=64)
) -> MovieResponse:
    """Return details for a single movie."""
    container: AppContainer = request.app.state.container
    candidate = await container.catalog_service.get_candidate(movie_id)
    return MovieResponse.from_candidate(candidate)
