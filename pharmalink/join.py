# pharmalink/join.py
"""
Fan-out / fan-in for the per-identifier SPARQL branches.

Each branch ends in one of three outcomes:

    List[Triple]    success (possibly empty)
    None            benign no-match, counts as done and contributes nothing
    UpstreamError   fatal, completes the whole join with that error

JoinState holds the per-request bookkeeping. Its `record` method is the only
place the completed count moves, and it is only ever called from the task
driving `run_fan_out`, so increment-and-check happens as one step on the
event loop. `on_complete` fires exactly once per request.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar, Union

from .errors import UpstreamError
from .merge import merge_triples
from .models import Triple

log = logging.getLogger("pharmalink.join")

T = TypeVar("T")

BranchOutcome = Union[List[Triple], None, UpstreamError]
Completion = Union[List[Triple], UpstreamError]
OnComplete = Callable[[Completion], None]

FANOUT_SOURCE = "fan-out"


@dataclass
class JoinState:
    target: int
    on_complete: Optional[OnComplete] = None
    completed: int = 0
    triple_sets: List[List[Triple]] = field(default_factory=list)
    result: Optional[List[Triple]] = None
    error: Optional[UpstreamError] = None
    fired: bool = False
    discarded: int = 0

    def open(self) -> bool:
        """Complete straight away when there is nothing to wait for."""
        if self.target == 0 and not self.fired:
            self._fire(merge_triples([]))
            return True
        return False

    def record(self, outcome: BranchOutcome) -> bool:
        """Account for one branch outcome. Returns True if this call completed the join."""
        if self.fired:
            self.discarded += 1
            log.debug("Discarding branch outcome that arrived after completion (%d so far)", self.discarded)
            return False

        if isinstance(outcome, UpstreamError):
            log.warning("Branch failed, abandoning %d pending: %s", self.target - self.completed, outcome)
            self._fire(outcome)
            return True

        if self.completed >= self.target:
            raise RuntimeError(f"join received more than {self.target} branch outcomes")
        self.completed += 1
        if outcome is not None:
            self.triple_sets.append(outcome)
        log.info("We have made %d (of %d) SPARQL queries...", self.completed, self.target)

        if self.completed == self.target:
            self._fire(merge_triples(self.triple_sets))
            return True
        return False

    def _fire(self, value: Completion) -> None:
        self.fired = True
        if isinstance(value, UpstreamError):
            self.error = value
        else:
            self.result = value
        if self.on_complete is not None:
            self.on_complete(value)


async def run_fan_out(
    items: Sequence[T],
    branch: Callable[[T], Awaitable[Optional[List[Triple]]]],
    on_complete: Optional[OnComplete] = None,
    *,
    timeout: Optional[float] = None,
    max_concurrency: Optional[int] = None,
) -> List[Triple]:
    """
    Run `branch` once per item concurrently and join the outcomes.

    Returns the deduplicated union of all triple sets, or raises the first
    UpstreamError (including a timeout of the whole fan-out). Branches still
    running when the join completes are cancelled.
    """
    state = JoinState(target=len(items), on_complete=on_complete)
    if state.open():
        return state.result or []

    sem = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _guarded(item: T) -> BranchOutcome:
        try:
            if sem is None:
                return await branch(item)
            async with sem:
                return await branch(item)
        except UpstreamError as e:
            return e

    tasks = [asyncio.create_task(_guarded(item)) for item in items]
    try:
        for next_done in asyncio.as_completed(tasks, timeout=timeout):
            if state.record(await next_done):
                break
    except asyncio.TimeoutError:
        state.record(UpstreamError(
            FANOUT_SOURCE,
            f"timed out after {timeout}s with {state.completed} of {state.target} branches complete",
        ))
    finally:
        pending = [t for t in tasks if not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if state.error is not None:
        raise state.error
    assert state.result is not None
    return state.result
