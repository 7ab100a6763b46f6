"""ASGI entrypoint for the movie-match API."""

from movie_match.api.app import create_app
from movie_match.containers import build_container

app = create_app(build_container())
