"""ASGI entrypoint for the wedding timeline API."""

from wedding_timeline.api.app import create_app
from wedding_timeline.containers import build_container

app = create_app(build_container())
