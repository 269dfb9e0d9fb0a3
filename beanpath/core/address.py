# beanpath/core/address.py
"""
PropertyAddress: the call-scoped cursor walked by the resolver.

One address is created per public call and dropped when the call returns.
It references exactly one live graph node at a time (`bean`); descending into
a child replaces the reference, the parent is not kept.

The journal collects undo actions for every mutation made during the call so
a failing call can be rolled back as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from beanpath.core.segmenter import Step
from beanpath.utils.logging import get_logger

logger = get_logger(__name__)

Undo = Callable[[], None]
Slot = Callable[[Any], None]


@dataclass
class PropertyAddress:
    bean: Any
    path: str
    forced: bool = False
    declared: bool = False

    name: str = ""
    index: Optional[str] = None
    chained: bool = False
    first: bool = True
    last: bool = True

    # replaces the current step's container in the slot it was read from
    rebind: Optional[Slot] = None
    # writer for the value produced by the current indexed step
    slot: Optional[Slot] = None

    journal: List[Undo] = field(default_factory=list)

    @classmethod
    def simple(cls, bean: Any, name: str, *, forced: bool = False, declared: bool = False) -> "PropertyAddress":
        """Address for a single un-nested step (name may still carry one index)."""
        return cls(bean=bean, path=name, forced=forced, declared=declared, name=name)

    def enter(self, step: Step) -> None:
        self.name = step.name
        self.index = step.index
        self.chained = step.chained
        self.last = step.last

    @property
    def segment(self) -> str:
        return self.name if self.index is None else f"{self.name}[{self.index}]"

    def record(self, undo: Undo) -> None:
        self.journal.append(undo)

    def rollback(self) -> None:
        """Undo recorded mutations, newest first."""
        if self.journal:
            logger.debug("Rolling back %d mutation(s) for path %r", len(self.journal), self.path)
        while self.journal:
            undo = self.journal.pop()
            try:
                undo()
            except Exception:
                logger.warning("Rollback step failed for path %r", self.path, exc_info=True)

    def commit(self) -> None:
        self.journal.clear()


__all__ = ["PropertyAddress"]
