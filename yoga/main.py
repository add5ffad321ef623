import typer
from pathlib import Path
from typing import Callable, Optional, Tuple
from rich.console import Console

from yoga.meta import VERSION
from yoga.config.loader import load_config
from yoga.config.models import AppConfig
from yoga.config.root_dir import DEFAULT_ROOT, resolve_root_path
from yoga.domain.events import ApplyFilters, MoveCursor, PlaySelected, ToggleSort
from yoga.domain.models import SortField
from yoga.infrastructure.logging import setup_logging
from yoga.infrastructure.event_bus import EventBus
from yoga.infrastructure.duration_cache import DurationCache
from yoga.infrastructure.file_scanner import FileScanner
from yoga.infrastructure.ffprobe import FFprobeAdapter
from yoga.infrastructure.player import PlayerLauncher
from yoga.infrastructure.thumbnails import ThumbnailCache, ThumbnailGenerator
from yoga.pipeline.duration_pool import DurationScheduler, DurationWorkerPool
from yoga.pipeline.library_loader import LibraryLoader
from yoga.pipeline.progress import ProgressTracker
from yoga.pipeline.runner import CommandRunner
from yoga.ui.dashboard import Dashboard
from yoga.ui.filters import parse_filter_inputs
from yoga.ui.model import LibraryState
from yoga.ui.session import Session

app = typer.Typer(help="Yoga - browse, filter and play a local video library")


def library_dir(root: Path) -> Path:
    """Directory holding the cache files (the root itself, or a file root's parent)."""
    return root if root.is_dir() else root.parent


def create_session(
    root: Path,
    config: AppConfig,
    on_render: Optional[Callable[[LibraryState], None]] = None,
    ffprobe: Optional[FFprobeAdapter] = None,
    player: Optional[PlayerLauncher] = None,
    cpu_count: Optional[int] = None,
) -> Tuple[Session, CommandRunner]:
    """Wires the scanner, caches, worker pool and runner into a Session."""
    general = config.general
    base_dir = library_dir(root)
    bus = EventBus()

    ffprobe = ffprobe or FFprobeAdapter(general.ffprobe_path, timeout_s=general.probe_timeout_s)
    duration_cache = DurationCache(base_dir / general.cache_filename)
    progress = ProgressTracker()

    thumbnail_cache = None
    thumbnail_generator = None
    if config.thumbnails.enabled:
        thumbnail_cache = ThumbnailCache(base_dir / config.thumbnails.cache_filename)
        thumbnail_generator = ThumbnailGenerator(config.thumbnails, ffprobe, ffmpeg_path=general.ffmpeg_path)

    loader = LibraryLoader(
        file_scanner=FileScanner(general.extensions),
        duration_cache=duration_cache,
        progress=progress,
        thumbnail_cache=thumbnail_cache,
    )
    pool = DurationWorkerPool(
        ffprobe, duration_cache, on_result=bus.publish, max_workers=general.max_probe_workers
    )
    runner = CommandRunner(
        event_bus=bus,
        loader=loader,
        duration_pool=pool,
        progress=progress,
        player=player or PlayerLauncher(general.player_path),
        thumbnail_generator=thumbnail_generator,
        thumbnail_cache=thumbnail_cache,
        progress_interval_s=config.ui.progress_interval_s,
    )
    state = LibraryState(
        root=root,
        crop=general.crop or "",
        scheduler=DurationScheduler(max_workers=general.max_probe_workers, cpu_count=cpu_count),
        player_name=Path(general.player_path).name.upper(),
    )
    return Session(state, runner, bus, on_render=on_render), runner


@app.command()
def browse(
    root: str = typer.Option("", "--root", "-r", help=f"Directory containing videos (default {DEFAULT_ROOT}, created if absent)"),
    crop: Optional[str] = typer.Option(None, "--crop", help="Optional crop aspect for the player (e.g. 5:4)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    name: str = typer.Option("", "--name", help="Only show videos whose name contains this text"),
    min_minutes: str = typer.Option("", "--min", help="Minimum length in minutes"),
    max_minutes: str = typer.Option("", "--max", help="Maximum length in minutes"),
    tag: str = typer.Option("", "--tag", help="Only show videos with a tag containing this text"),
    sort: SortField = typer.Option(SortField.NAME, "--sort", help="Sort field"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    play: bool = typer.Option(False, "--play", help="Play the first listed video"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", help="Path to log file"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
    version: bool = typer.Option(False, "--version", help="Print version and exit"),
):
    """Scan the library, probe missing durations and print the video table."""
    if version:
        typer.echo(f"Yoga version {VERSION}")
        raise typer.Exit(code=0)

    try:
        parse_filter_inputs(name, min_minutes, max_minutes, tag)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))

    try:
        root_path = resolve_root_path(root)
        config = load_config(config_path)
    except (ValueError, FileNotFoundError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if crop is not None: config.general.crop = crop.strip() or None
    if debug: config.general.debug = True
    if log_path is not None: config.general.log_path = str(log_path)

    log_path_value = Path(config.general.log_path) if config.general.log_path else None
    logger = setup_logging(library_dir(root_path), debug=config.general.debug, log_path=log_path_value)
    logger.info(f"Yoga started: root={root_path}, crop={config.general.crop}")

    console = Console()
    dashboard = None
    runner = None
    try:
        session, runner = create_session(root_path, config)
        state = session.state
        dashboard = Dashboard(state, console=console, progress_bar_width=config.ui.progress_bar_width, max_rows=15)
        session.on_render = dashboard.refresh

        if sort != SortField.NAME:
            session.post(ToggleSort(field=sort))
        if descending:
            session.post(ToggleSort(field=sort))
        if name or min_minutes or max_minutes or tag:
            session.post(ApplyFilters(name=name, min_minutes=min_minutes, max_minutes=max_minutes, tags=tag))

        with dashboard:
            session.start()
            session.run_until_idle()
            if play and state.filtered:
                session.post(MoveCursor(delta=-len(state.filtered)))
                session.post(PlaySelected())
                session.run_until_idle()

        if state.error:
            typer.secho(f"Error: {state.error}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

        dashboard.max_rows = None
        console.print(dashboard.create_display())

    except KeyboardInterrupt:
        typer.secho("\nStopped by user (Ctrl+C)", fg=typer.colors.YELLOW)
        raise typer.Exit(code=130)

    except typer.Exit:
        raise

    except Exception as e:
        logger.exception("Fatal error")
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    finally:
        if runner is not None:
            runner.shutdown(wait=False)


if __name__ == "__main__":
    app()
