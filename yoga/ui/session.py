import logging
import queue
import time
from typing import Callable, Iterable, Optional

from yoga.domain.commands import Command
from yoga.domain.events import CommandResult, Event
from yoga.infrastructure.event_bus import EventBus
from yoga.pipeline.runner import CommandRunner
from yoga.ui.model import HANDLED_EVENTS, LibraryState, init, update


class Session:
    """Single-threaded update loop for one library view.

    Worker threads publish results on the EventBus; the session forwards them
    into its inbox and applies them one at a time on the calling thread.
    Front-ends post user intents the same way via `post()`.

    Args:
        state: LibraryState to mutate.
        runner: CommandRunner executing returned commands.
        event_bus: EventBus the runner publishes on.
        on_render: Optional callback invoked with the state after every change.
    """

    def __init__(
        self,
        state: LibraryState,
        runner: CommandRunner,
        event_bus: EventBus,
        on_render: Optional[Callable[[LibraryState], None]] = None,
    ):
        self.state = state
        self.runner = runner
        self.on_render = on_render
        self.logger = logging.getLogger(__name__)
        self._inbox: "queue.Queue[Event]" = queue.Queue()
        self._outstanding = 0
        for event_type in HANDLED_EVENTS:
            event_bus.subscribe(event_type, self._inbox.put)

    @property
    def outstanding(self) -> int:
        return self._outstanding

    @property
    def idle(self) -> bool:
        return self._outstanding == 0 and self._inbox.empty()

    def post(self, event: Event):
        """Queues a user intent; safe from any thread."""
        self._inbox.put(event)

    def start(self):
        self._dispatch(init(self.state))
        self._render()

    def _dispatch(self, commands: Iterable[Command]):
        commands = list(commands)
        if not commands:
            return
        self._outstanding += len(commands)
        self.runner.dispatch(commands)

    def _render(self):
        if self.on_render is not None:
            self.on_render(self.state)

    def step(self, timeout: Optional[float] = None) -> bool:
        """Applies one queued event. Returns False when none arrived in time."""
        try:
            event = self._inbox.get(timeout=timeout)
        except queue.Empty:
            return False
        if isinstance(event, CommandResult):
            self._outstanding -= 1
        _, commands = update(self.state, event)
        self._dispatch(commands)
        self._render()
        return True

    def drain(self):
        """Applies everything already queued without waiting."""
        while not self._inbox.empty():
            self.step(timeout=0)

    def run_until_idle(self, timeout: Optional[float] = None):
        """Processes events until no command is outstanding.

        Raises TimeoutError when the deadline passes first.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        while not self.idle:
            wait = 0.5
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError(f"session still busy ({self._outstanding} commands outstanding)")
                wait = min(wait, remaining)
            self.step(timeout=wait)
