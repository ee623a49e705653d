"""HTTP API for spawner-skills."""

from spawnerskills.api.app import create_app

__all__ = ["create_app"]
