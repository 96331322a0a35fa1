"""Repository adapters for persistence access."""

from campuscoffee.infrastructure.repositories.pos import PosRepository

__all__ = ["PosRepository"]
