"""Tests for the Flask inspection API.

Tests use ``pytest.importorskip`` so they are skipped gracefully when
Flask is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from py_vmem.config import DEFAULT_LAYOUT  # noqa: E402
from py_vmem.demo import create_manager  # noqa: E402
from py_vmem.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


def _create_client() -> Any:
    """Create a test client from a fresh app."""
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify app factory and text dump."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)

    def test_index_is_text_dump(self) -> None:
        """GET / should return the plain-text table dump."""
        response = _create_client().get("/")
        assert response.status_code == HTTP_OK
        assert "text/plain" in response.content_type
        assert b"Physical memory" in response.data

    def test_adopts_given_manager(self) -> None:
        """A supplied manager is the one exposed."""
        mm = create_manager(DEFAULT_LAYOUT)
        mm.store(1025, "$")
        client = create_app(mm).test_client()
        data = client.get("/api/stats").get_json()
        assert data["clock"] == 1


class TestAccessEndpoints:
    """Verify /api/load and /api/store."""

    def test_store_then_load(self) -> None:
        """A stored byte is returned by a later load."""
        client = _create_client()
        response = client.post("/api/store", json={"address": 1025, "value": "$"})
        assert response.status_code == HTTP_OK
        response = client.post("/api/load", json={"address": 1025})
        assert response.status_code == HTTP_OK
        assert response.get_json()["value"] == ord("$")

    def test_load_missing_address(self) -> None:
        """A body without an address is a bad request."""
        response = _create_client().post("/api/load", json={})
        assert response.status_code == HTTP_BAD_REQUEST
        assert "address" in response.get_json()["error"]

    def test_load_non_json(self) -> None:
        """A non-JSON body is a bad request."""
        response = _create_client().post("/api/load", data="nope")
        assert response.status_code == HTTP_BAD_REQUEST

    def test_out_of_bounds_kind(self) -> None:
        """Simulation errors report their kind."""
        response = _create_client().post("/api/load", json={"address": 16})
        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["kind"] == "out_of_bounds"

    def test_read_only_kind(self) -> None:
        """Writing to text is reported as a read-only violation."""
        response = _create_client().post("/api/store", json={"address": 0, "value": "x"})
        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["kind"] == "read_only_violation"

    def test_uninitialized_heap_kind(self) -> None:
        """Reading an unwritten heap/stack page is reported."""
        response = _create_client().post("/api/load", json={"address": 3072})
        assert response.get_json()["kind"] == "uninitialized_heap_stack_read"

    def test_store_bad_value(self) -> None:
        """A value that is not one byte is a bad request."""
        response = _create_client().post("/api/store", json={"address": 1025, "value": "xy"})
        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["kind"] == "bad_request"

    def test_store_missing_value(self) -> None:
        """A store without a value is a bad request."""
        response = _create_client().post("/api/store", json={"address": 1025})
        assert response.status_code == HTTP_BAD_REQUEST


class TestSnapshotEndpoints:
    """Verify the read-only views."""

    def test_memory(self) -> None:
        """Memory lists every byte and frame."""
        data = _create_client().get("/api/memory").get_json()
        assert len(data["bytes"]) == DEFAULT_LAYOUT.physical_size
        assert data["frames"] == [{"occupied": False, "last_access": None}] * 2

    def test_page_table(self) -> None:
        """The page table is keyed by segment label."""
        client = _create_client()
        client.post("/api/store", json={"address": 3079, "value": "%"})
        data = client.get("/api/page-table").get_json()
        assert set(data) == {"text", "data", "bss", "heap/stack"}
        assert data["heap/stack"][0] == {"resident": True, "frame": 0, "dirty": True, "swap_slot": None}

    def test_swap_after_eviction(self) -> None:
        """An evicted dirty page shows up in the swap view."""
        client = _create_client()
        client.post("/api/store", json={"address": 1025, "value": "$"})
        client.post("/api/load", json={"address": 0})
        client.post("/api/load", json={"address": 8})
        data = client.get("/api/swap").get_json()
        assert data["used"] == 1
        assert data["bytes"][1] == ord("$")

    def test_snapshots_do_not_tick_clock(self) -> None:
        """Reading the views never counts as a memory access."""
        client = _create_client()
        for path in ("/", "/api/memory", "/api/page-table", "/api/swap", "/api/log"):
            client.get(path)
        assert client.get("/api/stats").get_json()["clock"] == 0

    def test_log(self) -> None:
        """The event log lists page faults."""
        client = _create_client()
        client.post("/api/load", json={"address": 0})
        entries = client.get("/api/log").get_json()
        assert entries[0]["level"] == "INFO"
        assert "page fault" in entries[0]["message"]
