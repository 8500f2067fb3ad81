"""Post-write settle policies.

A settle policy runs after the sink acknowledged its close and before save()
reports success. The default does nothing: backends that need durability
should provide it through their close (see LocalFileProvider(fsync=True)).
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


LEGACY_SETTLE_MS = 10   # historical fixed wait after write completion


@runtime_checkable
class SettlePolicy(Protocol):
    async def settle(self) -> None:
        ...


class NoSettle:
    """Report success as soon as the sink is closed."""

    async def settle(self) -> None:
        return None

    def __repr__(self) -> str:
        return "NoSettle()"


@dataclass(frozen=True, slots=True)
class FixedDelay:
    """Wait a fixed number of seconds before reporting success."""
    seconds: float

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError("Settle delay cannot be negative")

    async def settle(self) -> None:
        await asyncio.sleep(self.seconds)


def settle_policy(ms: int | None) -> SettlePolicy:
    """Build a policy from a delay in milliseconds; 0 or None means no delay."""
    if not ms:
        return NoSettle()
    return FixedDelay(ms / 1000)
