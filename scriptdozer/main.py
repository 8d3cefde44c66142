"""Command-line launcher for a headless editor session.

Runs a Qt event loop with one ``EditorSession``: the project is loaded,
autosave ticks and notifications are logged. ``--once`` loads the project,
prints the normalized document as JSON and exits.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from PySide6.QtCore import QCoreApplication

from .config import EditorConfig
from .logging_utils import setup_logging
from .services.transport import QtTransport
from .session import EditorSession, EntryParams

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="scriptdozer", description=__doc__)
    parser.add_argument("--id", dest="project_id", help="project to load")
    parser.add_argument("--open", choices=["translate"], help="dialog to open after load")
    parser.add_argument("--url", help="editor URL or query string (id/open parameters)")
    parser.add_argument("--api-base", help="backend base URL")
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None
    )
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--once", action="store_true", help="load, print JSON, exit")
    return parser.parse_args(argv)


def _console_confirm(prompt: str) -> bool:
    try:
        return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")
    except EOFError:
        return False


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    config = EditorConfig.from_env()
    setup_logging(args.log_level or config.log_level, args.log_file)

    params = EntryParams.parse(args.url) if args.url else EntryParams()
    params = EntryParams(
        project_id=args.project_id or params.project_id,
        open=args.open or params.open,
    )
    if not params.project_id:
        logger.error("no project id given (use --id or --url)")
        return 2

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    transport = QtTransport(args.api_base or config.api_base)
    session = EditorSession(transport, config, confirm=_console_confirm)
    session.notified.connect(lambda n: logger.info("[%s] %s", n.level, n.message))
    exit_code = {"value": 0}

    if args.once:

        def dump(project):
            print(json.dumps(project.to_dict(), indent=2))
            session.close()
            app.quit()

        def failed(error):
            exit_code["value"] = 1
            app.quit()

        session.projectLoaded.connect(dump)
        session.store.loadFailed.connect(failed)

    session.start(params)
    app.exec()
    return exit_code["value"]


__all__ = ["run"]
