"""ASGI entrypoint for the PetSpot report flow API."""

from petspot.api.app import create_app
from petspot.containers import build_container

app = create_app(build_container())
