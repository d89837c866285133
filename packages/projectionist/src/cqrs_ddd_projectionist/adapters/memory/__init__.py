from .queue import InMemoryHandlerQueue

__all__ = ["InMemoryHandlerQueue"]
