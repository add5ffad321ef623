import pytest
from pathlib import Path
from unittest.mock import MagicMock
from yoga.domain.commands import ScanLibrary, WatchProgress
from yoga.domain.events import LibraryLoaded, MoveCursor, ProgressUpdated
from yoga.domain.models import LibraryScan, VideoEntry
from yoga.ui.model import LibraryState
from yoga.ui.session import Session

ROOT = Path("/lib")


@pytest.fixture
def session(event_bus):
    runner = MagicMock()
    renders = []
    session = Session(LibraryState(root=ROOT), runner, event_bus, on_render=renders.append)
    session.renders = renders
    return session


def test_start_dispatches_initial_commands(session):
    session.start()
    session.runner.dispatch.assert_called_once_with([ScanLibrary(root=ROOT), WatchProgress()])
    assert session.outstanding == 2
    assert not session.idle
    assert len(session.renders) == 1


def test_results_from_bus_are_applied_in_order(session, event_bus):
    session.start()
    event_bus.publish(ProgressUpdated(processed=1, total=1, done=True))
    event_bus.publish(LibraryLoaded(scan=LibraryScan(entries=[VideoEntry.from_path(ROOT / "a.mp4", duration=5)])))

    assert session.step(timeout=1)
    assert session.step(timeout=1)

    assert session.idle
    assert session.state.status_text() == "Loaded 1 videos"


def test_user_intents_do_not_count_as_results(session):
    session.start()
    session.post(MoveCursor(delta=1))
    session.drain()
    assert session.outstanding == 2


def test_step_returns_false_when_nothing_arrives(session):
    assert session.step(timeout=0.01) is False


def test_run_until_idle_times_out(session):
    session.start()
    with pytest.raises(TimeoutError):
        session.run_until_idle(timeout=0.05)


def test_run_until_idle_returns_when_idle(session):
    session.run_until_idle(timeout=0.05)
    assert session.idle
