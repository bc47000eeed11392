"""Composable chain stages.

A chain is a unary transformation from an input type to an output type.
Chains are strung together with ``chain()`` (or ``|``) into a linear
pipeline whose stages run sequentially on the caller's thread, each stage's
output becoming the next stage's sole input:

    qa_chain = retrieval_chain.chain(summarize_chain).chain(combine_chain)
    answer = qa_chain.run("who is john doe?")

Composition is purely structural. Side effects only happen when ``run``
executes.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, TypeVar

from .errors import ChainError, ChainExecutionError

I = TypeVar("I")
O = TypeVar("O")
O2 = TypeVar("O2")

logger = logging.getLogger(__name__)


class Chain(Generic[I, O]):
    """Base class for every pipeline stage."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def run(self, input: I) -> O:
        raise NotImplementedError

    async def arun(self, input: I) -> O:
        """Run the chain in a worker thread without blocking the event loop."""
        return await asyncio.to_thread(self.run, input)

    def chain(self, next_chain: Chain[O, O2]) -> Chain[I, O2]:
        """Return a new chain feeding this chain's output into ``next_chain``."""
        return ComposedChain(self, next_chain)

    def __or__(self, next_chain: Chain[O, O2]) -> Chain[I, O2]:
        return self.chain(next_chain)

    def close(self) -> None:
        """Release resources owned by this chain. Borrowed resources stay open."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.name}()"


class ComposedChain(Chain[I, O2]):
    """Two chains run back to back."""

    def __init__(self, first: Chain[I, O], second: Chain[O, O2]):
        self.first = first
        self.second = second

    @property
    def name(self) -> str:
        return f"{self.first.name} -> {self.second.name}"

    @property
    def stages(self) -> list[Chain]:
        """Leaf stages in execution order."""
        stages: list[Chain] = []
        for link in (self.first, self.second):
            if isinstance(link, ComposedChain):
                stages.extend(link.stages)
            else:
                stages.append(link)
        return stages

    def run(self, input: I) -> O2:
        return _run_stage(self.second, _run_stage(self.first, input))

    def close(self) -> None:
        try:
            self.first.close()
        finally:
            self.second.close()

    def __repr__(self) -> str:
        return f"ComposedChain({self.first!r}, {self.second!r})"


class FunctionChain(Chain[I, O]):
    """Lift a plain callable into a chain stage."""

    def __init__(self, function: Callable[[I], O], name: str | None = None):
        self.function = function
        self._name = name or getattr(function, "__name__", type(self).__name__)

    @property
    def name(self) -> str:
        return self._name

    def run(self, input: I) -> O:
        return self.function(input)


def _run_stage(stage: Chain, input):
    if isinstance(stage, ComposedChain):
        return stage.run(input)

    logger.debug("running stage %s", stage.name)
    try:
        return stage.run(input)
    except ChainExecutionError as exc:
        if exc.stage is None:
            exc.stage = stage.name
        raise
    except ChainError:
        raise
    except Exception as exc:
        raise ChainExecutionError(f"stage failed: {exc}", stage=stage.name, cause=exc) from exc
