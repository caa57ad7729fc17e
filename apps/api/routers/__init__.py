"""Routers package."""

from . import (
    health,
    auth,
    instagram,
    activity,
    automation,
    admin,
)
