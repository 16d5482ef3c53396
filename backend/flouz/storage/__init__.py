# Overview: Storage backend selection and access from request code.

from __future__ import annotations

from flask import Flask, current_app

EXTENSION_KEY = "flouz_storage"


def build_storage(backend: str):
    # Imported lazily: the database backend pulls in the models, which import records from here
    if backend == "memory":
        from .memory import MemoryStorage
        return MemoryStorage()
    if backend == "database":
        from .database import DatabaseStorage
        return DatabaseStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def init_storage(app: Flask):
    """Build the configured backend once and attach it to the app."""
    storage = build_storage(app.config["STORAGE_BACKEND"])
    app.extensions[EXTENSION_KEY] = storage
    return storage


def get_storage():
    return current_app.extensions[EXTENSION_KEY]
