"""Run the dashboard API and open the browser on it.

Usage:
    python run_front_and_backend.py [--data-dir data/]
"""

from __future__ import annotations

import argparse
import logging
import threading
import time
import webbrowser
from functools import partial

from src.dashboard.session import DashboardSession
from src.data.feeds import default_sources, load_fleet_data
from src.web.fullstack_server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the fleet dashboard API and open it in a browser.")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind")
    parser.add_argument("--port", type=int, default=8787, help="Port to bind")
    parser.add_argument("--data-dir", default=None, help="Directory with local CSV feeds")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not auto-open browser",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    session = DashboardSession()
    session.reload(partial(load_fleet_data, default_sources(args.data_dir)))

    if not args.no_browser:
        browser_host = "127.0.0.1" if args.host in {"0.0.0.0", "::"} else args.host

        def open_browser() -> None:
            time.sleep(0.6)
            webbrowser.open(f"http://{browser_host}:{args.port}/")

        threading.Thread(target=open_browser, daemon=True).start()

    run_server(session, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
