"""Ports (abstract interfaces) for the collaborators the engine consumes."""

from cimatrix.ports.random import RandomPort

__all__ = ["RandomPort"]
