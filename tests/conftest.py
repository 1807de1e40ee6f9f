"""Shared pytest fixtures for the agent-ranker test suite.

Provides:
    tmp_db          -- in-memory SQLite connection with full schema applied
    golden_dataset  -- the fixed 3-agent dataset as a JSON-style dict
    golden_snapshot -- the same dataset as a MetricSnapshot
    seeded_db       -- tmp_db loaded with golden_dataset
    sarah_profile   -- the golden end-to-end customer profile
"""

import pathlib
import sqlite3

import pytest

from agent_ranker.models import (
    AgentRecord,
    AssignmentRecord,
    BookingRecord,
    CustomerProfile,
    MetricSnapshot,
)


# ---------------------------------------------------------------------------
# Golden dataset
# ---------------------------------------------------------------------------
#
# Agent 1 (Alice)  rating 4.5, 10 yrs -- strong, matches every dimension,
#                  but 1 of 3 bookings cancelled.
# Agent 2 (Bruno)  rating 4.0,  0 yrs -- only the communication method
#                  matches; one confirmed and one pending booking.
# Agent 3 (Chiara) rating 3.8, 20 yrs -- no history at all.

GOLDEN_DATASET = {
    "agents": [
        {"agent_id": 1, "name": "Alice Moreau",
         "average_customer_service_rating": 4.5,
         "department_name": "Outer Planets", "years_of_service": 10},
        {"agent_id": 2, "name": "Bruno Castillo",
         "average_customer_service_rating": 4.0,
         "department_name": "Inner Planets", "years_of_service": 0},
        {"agent_id": 3, "name": "Chiara Lindqvist",
         "average_customer_service_rating": 3.8,
         "department_name": "Outer Planets", "years_of_service": 20},
    ],
    "assignments": [
        {"assignment_id": 101, "agent_id": 1, "lead_source": "Organic",
         "communication_method": "Phone Call"},
        {"assignment_id": 102, "agent_id": 1, "lead_source": "Bought",
         "communication_method": "Text"},
        {"assignment_id": 103, "agent_id": 1, "lead_source": "Organic",
         "communication_method": "Text"},
        {"assignment_id": 104, "agent_id": 2, "lead_source": "Bought",
         "communication_method": "Phone Call"},
        {"assignment_id": 105, "agent_id": 2, "lead_source": "Bought",
         "communication_method": "Text"},
    ],
    "bookings": [
        {"booking_id": 201, "assignment_id": 101, "destination": "Europa",
         "booking_status": "Confirmed"},
        {"booking_id": 202, "assignment_id": 102, "destination": "Mars",
         "booking_status": "Cancelled"},
        {"booking_id": 203, "assignment_id": 103, "destination": "Europa",
         "booking_status": "Confirmed"},
        {"booking_id": 204, "assignment_id": 104, "destination": "Venus",
         "booking_status": "Confirmed"},
        {"booking_id": 205, "assignment_id": 105, "destination": "Titan",
         "booking_status": "Pending"},
    ],
}


def snapshot_from_dataset(dataset: dict) -> MetricSnapshot:
    """Build a MetricSnapshot the same way the LEFT JOIN read would."""
    bookings = {
        b["assignment_id"]: BookingRecord(**b)
        for b in dataset.get("bookings", [])
    }
    return MetricSnapshot(
        agents=tuple(AgentRecord(**a) for a in dataset["agents"]),
        assignments=tuple(
            AssignmentRecord(**a, booking=bookings.get(a["assignment_id"]))
            for a in dataset.get("assignments", [])
        ),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def tmp_db():
    """Create an in-memory SQLite connection with the full schema applied.

    Yields the connection and closes it after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    schema_path = (
        pathlib.Path(__file__).resolve().parent.parent
        / "src" / "agent_ranker" / "db" / "schema.sql"
    )
    conn.executescript(schema_path.read_text(encoding="utf-8"))

    yield conn
    conn.close()


@pytest.fixture()
def golden_dataset() -> dict:
    return {key: [dict(row) for row in rows]
            for key, rows in GOLDEN_DATASET.items()}


@pytest.fixture()
def golden_snapshot(golden_dataset) -> MetricSnapshot:
    return snapshot_from_dataset(golden_dataset)


@pytest.fixture()
def seeded_db(tmp_db, golden_dataset):
    from agent_ranker.db.manager import load_dataset

    load_dataset(tmp_db, golden_dataset)
    return tmp_db


@pytest.fixture()
def sarah_profile() -> CustomerProfile:
    return CustomerProfile(
        communication_method="Phone Call",
        lead_source="Organic",
        destination="Europa",
        launch_location="Kennedy Space Center",
        customer_name="Sarah Johnson",
    )
