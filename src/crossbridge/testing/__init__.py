"""Test doubles for the chain collaborators."""

from .chain import Call, ChainCallError, InMemoryBridge, InMemoryToken

__all__ = ["Call", "ChainCallError", "InMemoryBridge", "InMemoryToken"]
