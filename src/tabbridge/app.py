"""Command-line entry point: open files as tabs and serve them over HTTP."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO

from .editor.workspace import DocumentWorkspace
from .outline.providers import SymbolProviderRegistry
from .server.app import create_app
from .server.lifecycle import ServerController
from .services.backend import TEXT_SOURCES, WorkspaceBackend
from .services.diff_presenter import TempFileDiffPresenter
from .services.settings import Settings, SettingsStore
from .utils import logging as logging_utils

_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, log_dir: str | None = None, force: bool = False) -> None:
    """Configure logging for the server process."""

    level = logging.DEBUG if debug else logging.INFO
    paths = logging_utils.setup_logging(level, log_dir=log_dir, force=force)
    _LOGGER.debug(
        "Logging configured (level=%s, log=%s, access=%s)",
        logging.getLevelName(level),
        paths.application,
        paths.access,
    )


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_backend(settings: Settings, *, root: Path | str | None = None) -> WorkspaceBackend:
    """Assemble the workspace-backed editor backend from ``settings``."""

    return WorkspaceBackend(
        DocumentWorkspace(root),
        providers=SymbolProviderRegistry.with_defaults(),
        presenter=TempFileDiffPresenter(settings.diff_dir),
        text_source=settings.text_source,  # type: ignore[arg-type]
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``tabbridge`` console script."""

    args = _parse_cli_args(argv)
    settings_path = args.settings_path or os.environ.get("TABBRIDGE_SETTINGS_PATH")
    store = SettingsStore(Path(settings_path).expanduser() if settings_path else None)
    overrides = _cli_overrides(args)
    settings = load_settings(store=store, overrides=overrides or None)

    if args.dump_settings:
        _dump_settings(settings, store, overrides=overrides)
        return 0

    configure_logging(args.debug or settings.debug_logging, log_dir=settings.log_dir)

    if settings.text_source not in TEXT_SOURCES:
        print(f"Unsupported text source: {settings.text_source}", file=sys.stderr)
        return 2

    backend = build_backend(settings, root=args.root)
    for path in args.files:
        try:
            tab = backend.workspace.open_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Cannot open {path}: {exc}", file=sys.stderr)
            return 2
        _LOGGER.info("Opened %s as tab %s", path, tab.title)

    controller = ServerController(create_app(backend, settings), host=settings.host, port=settings.port)
    controller.add_status_listener(lambda text: _LOGGER.info(text))
    stop_requested = threading.Event()
    try:
        controller.start()
        stop_requested.wait()
    except RuntimeError as exc:
        _LOGGER.error("Failed to start server: %s", exc)
        return 1
    except KeyboardInterrupt:
        _LOGGER.info("Shutdown requested by user.")
    finally:
        controller.close()
    return 0


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tabbridge",
        description="Serve open documents, their outlines and edit proposals over HTTP.",
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="Files to open as tabs.")
    parser.add_argument("--host", help="Interface to bind (default 127.0.0.1).")
    parser.add_argument("--port", type=int, help="Port to listen on (default 3000).")
    parser.add_argument("--root", metavar="DIR", help="Workspace root used for relative tab paths.")
    parser.add_argument("--assets-dir", metavar="DIR", help="Directory holding plugin manifest assets.")
    parser.add_argument("--diff-dir", metavar="DIR", help="Directory receiving proposed documents.")
    parser.add_argument(
        "--text-source",
        choices=TEXT_SOURCES,
        help="Serve in-memory buffer text or re-read files from disk.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.tabbridge/settings.json path.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    candidates = {
        "host": args.host,
        "port": args.port,
        "assets_dir": args.assets_dir,
        "diff_dir": args.diff_dir,
        "text_source": args.text_source,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": sorted(name for name in os.environ if name.startswith("TABBRIDGE_")),
    }
    json.dump({"settings": asdict(settings), "meta": metadata}, destination, indent=2)
    destination.write("\n")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
