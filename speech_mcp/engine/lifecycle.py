"""
Lifecycle of the single speech engine instance.

The engine is expensive to load, so it is started in the background as soon
as the server comes up and every caller that needs it awaits the same
in-flight initialization task. Loading is retried a fixed number of times,
removing cached model artifacts before each retry. After the final failure
the manager stays in the failed state until the process restarts.
"""

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..config import INIT_MAX_ATTEMPTS, INIT_RETRY_BACKOFF
from ..errors import EngineInitError

logger = logging.getLogger("speech-mcp")

EngineFactory = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class Uninitialized:
    pass


@dataclass(frozen=True)
class Initializing:
    started_at: float
    attempt: int
    retry_count: int = 0


@dataclass(frozen=True)
class Ready:
    engine: Any
    started_at: float
    ready_at: float
    retry_count: int = 0


@dataclass(frozen=True)
class Failed:
    error: EngineInitError
    attempts: int
    started_at: float
    failed_at: float


EngineState = Union[Uninitialized, Initializing, Ready, Failed]


class StatusSnapshot(BaseModel):
    """Read-only projection of the engine state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: Literal["Uninitialized", "Initializing", "Ready", "Error"]
    elapsed_ms: Optional[int] = Field(default=None, alias="elapsedMs")
    error: Optional[str] = None
    retry_count: Optional[int] = Field(default=None, alias="retryCount")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def remove_artifacts(paths: Iterable[Path]) -> None:
    """Best-effort removal of cached model files and directories."""
    for path in paths:
        try:
            if path.is_dir():
                shutil.rmtree(path)
                logger.info(f"Removed cached model directory {path}")
            elif path.exists():
                path.unlink()
                logger.info(f"Removed cached model file {path}")
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")


class EngineManager:
    """Owns the engine and its state machine.

    Args:
        factory: coroutine function that builds a ready engine.
        cleanup_paths: cached artifacts to delete before each retry.
        max_attempts: how many times to try the factory.
        backoff: seconds to sleep between attempts.
        clock: monotonic time source, in seconds.
    """

    def __init__(
        self,
        factory: EngineFactory,
        cleanup_paths: Iterable[Path] = (),
        max_attempts: int = INIT_MAX_ATTEMPTS,
        backoff: float = INIT_RETRY_BACKOFF,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._cleanup_paths: List[Path] = list(cleanup_paths)
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._clock = clock
        self._state: EngineState = Uninitialized()
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> EngineState:
        return self._state

    def _transition(self, expected: tuple, new_state: EngineState) -> None:
        if not isinstance(self._state, expected):
            raise RuntimeError(
                f"Illegal engine state transition "
                f"{type(self._state).__name__} -> {type(new_state).__name__}"
            )
        logger.debug(f"Engine state: {type(self._state).__name__} -> {type(new_state).__name__}")
        self._state = new_state

    def start_initialization(self) -> None:
        """Begin loading the engine in the background.

        Idempotent: does nothing if a load is running or has finished.
        Must be called from within a running event loop.
        """
        if self._task is not None:
            return
        loop = asyncio.get_running_loop()
        started_at = self._clock()
        self._transition((Uninitialized,), Initializing(started_at=started_at, attempt=1))
        self._task = loop.create_task(self._initialize(started_at), name="speech-engine-init")

    async def wait_for_ready(self) -> Any:
        """Return the engine once loaded.

        Raises:
            EngineInitError: if every attempt failed.
        """
        self.start_initialization()
        # Shielded so one cancelled waiter cannot abort the shared load
        await asyncio.shield(self._task)

        state = self._state
        if isinstance(state, Ready):
            return state.engine
        if isinstance(state, Failed):
            raise state.error
        raise RuntimeError(f"Engine initialization ended in state {type(state).__name__}")

    def get_status(self) -> StatusSnapshot:
        state = self._state
        now = self._clock()

        if isinstance(state, Uninitialized):
            return StatusSnapshot(status="Uninitialized")
        if isinstance(state, Initializing):
            return StatusSnapshot(
                status="Initializing",
                elapsed_ms=int((now - state.started_at) * 1000),
                retry_count=state.retry_count,
            )
        if isinstance(state, Ready):
            return StatusSnapshot(
                status="Ready",
                elapsed_ms=int((state.ready_at - state.started_at) * 1000),
                retry_count=state.retry_count,
            )
        return StatusSnapshot(
            status="Error",
            elapsed_ms=int((state.failed_at - state.started_at) * 1000),
            error=str(state.error),
            retry_count=state.attempts,
        )

    async def _initialize(self, started_at: float) -> None:
        retry_count = 0
        last_error: Optional[BaseException] = None

        for attempt in range(1, self._max_attempts + 1):
            self._transition(
                (Initializing,),
                Initializing(started_at=started_at, attempt=attempt, retry_count=retry_count),
            )

            if attempt > 1:
                remove_artifacts(self._cleanup_paths)
                await asyncio.sleep(self._backoff)

            logger.info(f"Initializing speech engine (attempt {attempt}/{self._max_attempts})")
            try:
                engine = await self._factory()
            except Exception as e:
                retry_count += 1
                last_error = e
                logger.warning(f"Speech engine initialization attempt {attempt} failed: {e}")
                continue

            self._transition(
                (Initializing,),
                Ready(engine=engine, started_at=started_at, ready_at=self._clock(), retry_count=retry_count),
            )
            logger.info(f"Speech engine ready after {attempt} attempt(s)")
            return

        error = EngineInitError(
            f"Failed to initialize speech engine after {self._max_attempts} attempts: {last_error}",
            attempts=self._max_attempts,
        )
        error.__cause__ = last_error
        self._transition(
            (Initializing,),
            Failed(error=error, attempts=retry_count, started_at=started_at, failed_at=self._clock()),
        )
        logger.error(str(error))
