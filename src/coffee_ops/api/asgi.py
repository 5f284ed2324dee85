"""ASGI entrypoint for the coffee_ops API."""

from coffee_ops.api.app import create_app
from coffee_ops.containers import build_container

app = create_app(build_container())
