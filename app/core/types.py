"""Common type definitions for the application.

Shared type aliases used across modules.
"""

from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

# Async session factory used by repositories and the run coordinator
SessionFactory = Callable[[], AsyncSession]

# Awaitable sleep, injectable so tests never block
SleepFunc = Callable[[float], Awaitable[None]]

# Monotonic clock returning seconds
Clock = Callable[[], float]

__all__ = [
    "Clock",
    "SessionFactory",
    "SleepFunc",
]
