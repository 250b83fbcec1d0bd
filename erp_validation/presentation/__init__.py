"""Presentation layer of the form validation engine.

The presentation layer is the outermost layer that:
- Wires one independent engine per form instance
- Hands the engine to the UI through create_engine()

This layer depends on the application and domain layers but NOT vice versa.
"""

from .container import EngineContainer, create_container, create_engine

__all__ = ["EngineContainer", "create_container", "create_engine"]
