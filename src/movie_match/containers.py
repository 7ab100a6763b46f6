"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from movie_match.adapters.logging_event_notifier import LoggingEventNotifier
from movie_match.adapters.supabase_catalog_cache import SupabaseCatalogCache
from movie_match.adapters.supabase_membership_repository import (
    SupabaseMembershipRepository,
)
from movie_match.adapters.supabase_room_repository import SupabaseRoomRepository
from movie_match.adapters.supabase_vote_repository import SupabaseVoteRepository
from movie_match.adapters.tmdb_client import HttpxTmdbClient
from movie_match.config import Settings, resolve_cache_backend
from movie_match.services.cache import CatalogCache, InMemoryCatalogCache
from movie_match.services.catalog import CatalogService
from movie_match.services.circuit_breaker import CircuitBreaker
from movie_match.services.consensus import ConsensusService
from movie_match.services.events import EventPublisher
from movie_match.services.membership import MembershipService
from movie_match.services.rooms import RoomService
from movie_match.services.votes import VoteService
from movie_match.services.voting import VotingService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    membership_service: MembershipService
    room_service: RoomService
    vote_service: VoteService
    consensus_service: ConsensusService
    catalog_service: CatalogService
    voting_service: VotingService
    event_publisher: EventPublisher
    breaker: CircuitBreaker
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    room_repository = SupabaseRoomRepository(supabase_client)
    membership_repository = SupabaseMembershipRepository(supabase_client)
    vote_repository = SupabaseVoteRepository(supabase_client)

    cache: CatalogCache
    if resolve_cache_backend(resolved_settings.catalog_cache_backend) == "memory":
        cache = InMemoryCatalogCache()
    else:
        cache = SupabaseCatalogCache(supabase_client)

    membership_service = MembershipService(membership_repository)
    event_publisher = EventPublisher(LoggingEventNotifier(), membership_service)
    room_service = RoomService(room_repository, membership_service, event_publisher)
    vote_service = VoteService(
        room_repository,
        vote_repository,
        membership_service,
        distinct_voters=resolved_settings.distinct_voters,
    )
    consensus_service = ConsensusService(room_repository, membership_service)

    tmdb_client = HttpxTmdbClient.create(
        api_key=resolved_settings.tmdb_api_key,
        base_url=resolved_settings.tmdb_base_url,
        language=resolved_settings.tmdb_language,
        timeout_seconds=resolved_settings.tmdb_timeout_seconds,
    )
    breaker = CircuitBreaker(
        "tmdb",
        failure_threshold=resolved_settings.breaker_failure_threshold,
        reset_timeout_seconds=resolved_settings.breaker_reset_timeout_seconds,
    )
    catalog_service = CatalogService(
        tmdb_client=tmdb_client,
        cache=cache,
        breaker=breaker,
        image_base_url=resolved_settings.tmdb_image_base_url,
        cache_ttl_days=resolved_settings.catalog_cache_ttl_days,
        pages=resolved_settings.tmdb_pages,
        fetch_timeout_seconds=resolved_settings.tmdb_timeout_seconds,
    )
    voting_service = VotingService(
        vote_service=vote_service,
        consensus_service=consensus_service,
        membership_service=membership_service,
        room_repository=room_repository,
        catalog_service=catalog_service,
        event_publisher=event_publisher,
    )

    async def close_resources() -> None:
        await tmdb_client.close()

    return AppContainer(
        settings=resolved_settings,
        membership_service=membership_service,
        room_service=room_service,
        vote_service=vote_service,
        consensus_service=consensus_service,
        catalog_service=catalog_service,
        voting_service=voting_service,
        event_publisher=event_publisher,
        breaker=breaker,
        close_resources=close_resources,
    )
