"""JSON API over a dashboard session.

Serves:
- GET  /api/health
- GET  /api/filters           available vehicle ids / month codes and the active selection
- GET  /api/dashboard         all derived views (?group_by=&metric=&vehicle_sort=&driver_sort=&utilization_sort=)
- GET  /api/report            last report text / error
- POST /api/filters/toggle    {"kind": "vehicle"|"month", "value": "..."}
- POST /api/filters/reset
- POST /api/report            {"mode": "...", "vehicle_id": ..., "vehicle_ids": [...], "prompt": "..."}
- Redirects / to /api/dashboard
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Tuple
from urllib.parse import parse_qs, urlparse

from src.dashboard.session import DashboardSession
from src.report.fleet_report import ReportGenerationError, ReportRequestError

logger = logging.getLogger(__name__)

Response = Tuple[HTTPStatus, dict]

SNAPSHOT_PARAMS = ("group_by", "metric", "vehicle_sort", "driver_sort", "utilization_sort")


def _filters_payload(session: DashboardSession) -> dict:
    payload = session.available_filters()
    payload["selected"] = {
        "vehicles": sorted(session.filters.vehicles),
        "months": sorted(session.filters.months),
    }
    payload["is_filtering"] = session.is_filtering
    return payload


def handle_get(session: DashboardSession, route: str, query: Dict[str, List[str]]) -> Response:
    """Dispatch a GET route to the session."""
    if route == "/api/health":
        return HTTPStatus.OK, {
            "status": "ok" if session.load_error is None else "degraded",
            "service": "waste-fleet-dashboard",
            "trips": len(session.data.trips),
            "load_error": session.load_error,
        }

    if route == "/api/filters":
        return HTTPStatus.OK, _filters_payload(session)

    if route == "/api/dashboard":
        options = {k: query[k][0] for k in SNAPSHOT_PARAMS if query.get(k)}
        try:
            snapshot = session.snapshot(**options)
        except ValueError as exc:
            return HTTPStatus.BAD_REQUEST, {"error": str(exc)}
        return HTTPStatus.OK, snapshot.to_dict()

    if route == "/api/report":
        return HTTPStatus.OK, {"report": session.report.text, "error": session.report.error}

    return HTTPStatus.NOT_FOUND, {"error": f"Not found: {route}"}


def handle_post(session: DashboardSession, route: str, body: dict) -> Response:
    """Dispatch a POST route to the session."""
    if route == "/api/filters/toggle":
        try:
            session.toggle(str(body.get("kind", "")), str(body.get("value", "")))
        except ValueError as exc:
            return HTTPStatus.BAD_REQUEST, {"error": str(exc)}
        return HTTPStatus.OK, _filters_payload(session)

    if route == "/api/filters/reset":
        session.reset()
        return HTTPStatus.OK, _filters_payload(session)

    if route == "/api/report":
        vehicle_ids = body.get("vehicle_ids") or []
        if isinstance(vehicle_ids, str):
            vehicle_ids = vehicle_ids.split(",")
        elif not isinstance(vehicle_ids, list):
            vehicle_ids = [vehicle_ids]
        # Numeric-looking ids may arrive as JSON numbers
        vehicle_id = body.get("vehicle_id")
        try:
            text = session.generate_report(
                mode=str(body.get("mode", "general")),
                vehicle_id=str(vehicle_id) if vehicle_id is not None else None,
                vehicle_ids=[str(v) for v in vehicle_ids],
                custom_prompt=str(body.get("prompt") or ""),
            )
        except ReportRequestError as exc:
            return HTTPStatus.BAD_REQUEST, {"error": str(exc)}
        except ReportGenerationError as exc:
            return HTTPStatus.BAD_GATEWAY, {"error": str(exc)}
        return HTTPStatus.OK, {"report": text, "error": None}

    return HTTPStatus.NOT_FOUND, {"error": f"Not found: {route}"}


class FullStackHandler(BaseHTTPRequestHandler):
    """Serve the dashboard API for the session attached to the server."""

    @property
    def session(self) -> DashboardSession:
        return self.server.session  # type: ignore[attr-defined]

    def _send_json(self, payload: dict, status: HTTPStatus = HTTPStatus.OK) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> dict:
        length = int(self.headers.get("Content-Length") or 0)
        if length == 0:
            return {}
        payload = json.loads(self.rfile.read(length).decode("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
        return payload

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)

        if parsed.path == "/":
            self.send_response(HTTPStatus.FOUND)
            self.send_header("Location", "/api/dashboard")
            self.end_headers()
            return

        status, payload = handle_get(self.session, parsed.path, parse_qs(parsed.query))
        self._send_json(payload, status)

    def do_POST(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        try:
            body = self._read_json()
        except ValueError as exc:
            self._send_json({"error": f"Invalid JSON body: {exc}"}, HTTPStatus.BAD_REQUEST)
            return

        status, payload = handle_post(self.session, parsed.path, body)
        self._send_json(payload, status)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.debug(f"{self.address_string()} {format % args}")


def create_server(session: DashboardSession, host: str = "127.0.0.1", port: int = 8787) -> ThreadingHTTPServer:
    server = ThreadingHTTPServer((host, port), FullStackHandler)
    server.session = session  # type: ignore[attr-defined]
    return server


def run_server(session: DashboardSession, host: str = "127.0.0.1", port: int = 8787) -> None:
    """Run the API server until interrupted."""
    server = create_server(session, host, port)

    access_host = "127.0.0.1" if host in {"0.0.0.0", "::"} else host
    print(f"Dashboard API running at http://{host}:{port}")
    print(f"Open in browser: http://{access_host}:{port}/")
    print("API: /api/health, /api/filters, /api/dashboard, /api/report")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
