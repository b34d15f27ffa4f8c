"""HTTP query surface for the latest swap routes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import psutil
from flask import Blueprint, Flask, Response, current_app, jsonify

from swaproute.core.errors import RouteNotFoundError
from swaproute.pipeline.query import RouteQueryService
from swaproute.utils.heartbeat import read_heartbeats
from swaproute.utils.time import to_iso, utc

routes_api = Blueprint("routes_api", __name__)


@dataclass
class ApiState:
    query: RouteQueryService
    heartbeat_path: Path
    heartbeat_stale_seconds: float = 10.0


def _state() -> ApiState:
    return current_app.extensions["swaproute"]


@routes_api.route("/api/routes")
def list_routes():
    """All routes of the latest snapshot."""
    entries = _state().query.get_latest_routes()
    return jsonify([e.to_json_dict() for e in entries])


@routes_api.route("/api/routes/<from_token>/<to_token>")
def get_route(from_token: str, to_token: str):
    try:
        entry = _state().query.get_route(from_token, to_token)
    except RouteNotFoundError:
        return jsonify({"error": "No route found for this token pair"}), 404
    return jsonify(entry.to_json_dict())


@routes_api.route("/healthz")
def healthz():
    state = _state()
    try:
        status = read_heartbeats(state.heartbeat_path)
    except OSError as e:
        return jsonify({"status": "error", "message": str(e)}), 500

    if status.count == 0:
        return jsonify({"status": "fail", "reason": "no heartbeat found"}), 503
    if status.last is None:
        return jsonify({"status": "fail", "reason": "malformed heartbeat log"}), 503

    age = status.age_seconds() or 0
    healthy = age < state.heartbeat_stale_seconds
    body: dict[str, object] = {
        "status": "ok" if healthy else "fail",
        "last_heartbeat": to_iso(status.last),
        "uptime_seconds": age,
        "uptime_minutes": age // 60,
    }
    if not healthy:
        body["reason"] = "heartbeat stale"
    return jsonify(body), 200 if healthy else 503


@routes_api.route("/metrics")
def metrics():
    state = _state()
    try:
        status = read_heartbeats(state.heartbeat_path)
    except OSError as e:
        return Response(f"# ERROR reading logs: {e}", status=500, mimetype="text/plain")

    age = status.age_seconds(utc())
    latest = len(state.query.get_latest_routes())
    process = psutil.Process()
    memory = process.memory_info()
    cpu = process.cpu_times()

    body = "\n".join(
        [
            "# HELP swap_optimizer_heartbeat_count Total number of heartbeats recorded",
            "# TYPE swap_optimizer_heartbeat_count counter",
            f"swap_optimizer_heartbeat_count {status.count}",
            "",
            "# HELP swap_optimizer_last_heartbeat_seconds Seconds since last heartbeat",
            "# TYPE swap_optimizer_last_heartbeat_seconds gauge",
            f"swap_optimizer_last_heartbeat_seconds {age if age is not None else -1}",
            "",
            "# HELP swap_optimizer_latest_routes Routes in the latest snapshot",
            "# TYPE swap_optimizer_latest_routes gauge",
            f"swap_optimizer_latest_routes {latest}",
            "",
            "# HELP swap_optimizer_memory_rss_bytes Resident Set Size memory",
            "# TYPE swap_optimizer_memory_rss_bytes gauge",
            f"swap_optimizer_memory_rss_bytes {memory.rss}",
            "",
            "# HELP swap_optimizer_memory_vms_bytes Virtual memory size",
            "# TYPE swap_optimizer_memory_vms_bytes gauge",
            f"swap_optimizer_memory_vms_bytes {memory.vms}",
            "",
            "# HELP swap_optimizer_cpu_user_usec User-space CPU time (microseconds)",
            "# TYPE swap_optimizer_cpu_user_usec counter",
            f"swap_optimizer_cpu_user_usec {int(cpu.user * 1_000_000)}",
            "",
            "# HELP swap_optimizer_cpu_system_usec Kernel-space CPU time (microseconds)",
            "# TYPE swap_optimizer_cpu_system_usec counter",
            f"swap_optimizer_cpu_system_usec {int(cpu.system * 1_000_000)}",
            "",
        ]
    )
    return Response(body, mimetype="text/plain")


def create_app(query: RouteQueryService, heartbeat_path: Path, heartbeat_stale_seconds: float = 10.0) -> Flask:
    app = Flask(__name__)
    app.extensions["swaproute"] = ApiState(
        query=query,
        heartbeat_path=heartbeat_path,
        heartbeat_stale_seconds=heartbeat_stale_seconds,
    )
    app.register_blueprint(routes_api)
    return app
