# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Recognition backend factory and registry.

Live speech engines are supplied by the host application; the package ships
a replay backend for offline debugging and tests.
"""

from typing import Any

from ..transcription_provider import RecognitionBackend
from .replay_provider import ReplayBackend

# Registry of available backends
BACKEND_REGISTRY: dict[str, type[RecognitionBackend]] = {
    "replay": ReplayBackend,
}


def register_backend(name: str, backend_class: type[RecognitionBackend]) -> None:
    """Make a host-supplied backend available to create_backend()."""
    BACKEND_REGISTRY[name] = backend_class


def create_backend(backend_name: str, **kwargs: Any) -> RecognitionBackend:
    """
    Factory function to create a recognition backend.

    Args:
        backend_name: Name of the backend ("replay", or one registered by the host)
        **kwargs: Passed through to the backend constructor

    Returns:
        Backend instance

    Raises:
        ValueError: If backend_name is not registered
    """
    backend_class = BACKEND_REGISTRY.get(backend_name)
    if not backend_class:
        available = ", ".join(BACKEND_REGISTRY.keys())
        raise ValueError(
            f"Unknown backend: {backend_name}. " f"Available backends: {available}"
        )

    return backend_class(**kwargs)


__all__ = ["BACKEND_REGISTRY", "ReplayBackend", "create_backend", "register_backend"]
