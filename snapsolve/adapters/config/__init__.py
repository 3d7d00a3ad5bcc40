from snapsolve.adapters.config.memory import InMemoryConfigStore

__all__ = ["InMemoryConfigStore"]
