"""Flask application factory for the simulator's inspection API.

The ``create_app`` function builds (or adopts) a memory manager and
returns a Flask app with these endpoints:

- ``GET /`` — plain-text dump of memory, page table, and swap.
- ``GET /api/memory`` — physical memory bytes and frame recency.
- ``GET /api/page-table`` — every descriptor, grouped by segment.
- ``GET /api/swap`` — swap bytes and slot usage.
- ``GET /api/stats`` — clock and paging counters.
- ``GET /api/log`` — the pager's event log.
- ``POST /api/load`` — read one byte: ``{"address": 1025}``.
- ``POST /api/store`` — write one byte: ``{"address": 1025, "value": "$"}``.

The GET endpoints only read snapshots.  Every call into the manager
is serialized behind one lock because the development server handles
requests on several threads.
"""

from __future__ import annotations

import threading
from dataclasses import asdict
from typing import Any

from flask import Flask, Response, jsonify, request

from py_vmem.config import DEFAULT_LAYOUT, MemoryLayout
from py_vmem.demo import create_manager
from py_vmem.dump import format_all
from py_vmem.errors import MemoryAccessError
from py_vmem.logging import Logger
from py_vmem.memory.address import Segment
from py_vmem.memory.manager import MemoryManager

_HTTP_BAD_REQUEST = 400


def _error(message: str, kind: str = "bad_request") -> tuple[Response, int]:
    return jsonify({"error": message, "kind": kind}), _HTTP_BAD_REQUEST


def _address_from(data: Any) -> int | None:
    if not isinstance(data, dict):
        return None
    address = data.get("address")
    if not isinstance(address, int) or isinstance(address, bool):
        return None
    return address


def create_app(
    manager: MemoryManager | None = None,
    *,
    layout: MemoryLayout = DEFAULT_LAYOUT,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        manager: The manager to expose.  If None, a fresh one is built
            over the demo program image for ``layout``.
        layout: Geometry used when no manager is given.

    Returns:
        A configured Flask application ready to serve.

    """
    mm = manager if manager is not None else create_manager(layout, logger=Logger())
    lock = threading.Lock()

    app = Flask(__name__)

    @app.route("/")
    def index() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the text dump of every table."""
        with lock:
            text = format_all(mm)
        return Response(text, mimetype="text/plain")

    @app.route("/api/memory")
    def memory() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return physical memory and per-frame state."""
        with lock:
            raw = mm.physical_memory()
            frames = mm.frames()
        return jsonify(
            {
                "page_size": mm.layout.page_size,
                "bytes": list(raw),
                "frames": [{"occupied": occ, "last_access": last} for occ, last in frames],
            }
        )

    @app.route("/api/page-table")
    def page_table() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return every page descriptor, keyed by segment label."""
        with lock:
            table = mm.page_table()
        return jsonify(
            {segment.label: [asdict(pd) for pd in table[segment]] for segment in Segment}
        )

    @app.route("/api/swap")
    def swap() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return swap bytes and how many slots are in use."""
        with lock:
            raw = mm.swap()
            used = mm.swap_slots_used
        return jsonify({"bytes": list(raw), "slots": mm.layout.swap_slots, "used": used})

    @app.route("/api/stats")
    def stats() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the logical clock and paging counters."""
        with lock:
            return jsonify({"clock": mm.clock, **asdict(mm.stats)})

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the pager's event log (empty if logging is off)."""
        logger = mm.logger
        with lock:
            entries = [] if logger is None else logger.entries
        return jsonify(
            [
                {"level": e.level.name, "message": e.message, "source": e.source, "clock": e.clock}
                for e in entries
            ]
        )

    @app.route("/api/load", methods=["POST"])
    def load() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Read one byte.

        Expects JSON body: ``{"address": <int>}``

        Returns:
            JSON with ``address`` and ``value`` fields, or an error.

        """
        address = _address_from(request.get_json(silent=True))
        if address is None:
            return _error("Missing or non-integer 'address' field")
        try:
            with lock:
                value = mm.load(address)
        except MemoryAccessError as e:
            return _error(str(e), e.kind)
        return jsonify({"address": address, "value": value})

    @app.route("/api/store", methods=["POST"])
    def store() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Write one byte.

        Expects JSON body: ``{"address": <int>, "value": <int or 1-char str>}``

        Returns:
            JSON with ``address`` and ``value`` fields, or an error.

        """
        data = request.get_json(silent=True)
        address = _address_from(data)
        if address is None or "value" not in data:
            return _error("Missing 'address' or 'value' field")
        try:
            with lock:
                mm.store(address, data["value"])
        except ValueError as e:
            return _error(str(e))
        except MemoryAccessError as e:
            return _error(str(e), e.kind)
        return jsonify({"address": address, "value": data["value"]})

    return app


def main() -> None:
    """Run the inspection API development server.

    This is the ``py-vmem-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
