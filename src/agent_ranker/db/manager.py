"""Database manager for the agent-ranker metric store.

Provides connection management, schema initialization, seed-data loading
and the read-only snapshot query the scoring engine consumes.  All
functions take a connection object as their first parameter and do not
manage global state.
"""

import logging
import pathlib
import sqlite3

from agent_ranker.models import (
    AgentRecord,
    AssignmentRecord,
    BookingRecord,
    MetricSnapshot,
)

logger = logging.getLogger(__name__)


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with Row factory enabled.

    Args:
        db_path: Filesystem path to the SQLite database file, or ":memory:"
                 for an in-memory database.

    Returns:
        A ``sqlite3.Connection`` configured with ``sqlite3.Row`` as
        ``row_factory`` and foreign-key enforcement turned on.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes by executing ``schema.sql``.

    Args:
        conn: An open SQLite connection.
    """
    schema_path = pathlib.Path(__file__).with_name("schema.sql")
    schema_sql = schema_path.read_text(encoding="utf-8")
    conn.executescript(schema_sql)
    logger.info("Database schema initialized from %s", schema_path)


# ---------------------------------------------------------------------------
# Writes (seed / fixture data only)
# ---------------------------------------------------------------------------

def _write_agents(conn: sqlite3.Connection, agents: list[dict]) -> int:
    sql = """
        INSERT INTO agents
            (agent_id, name, average_customer_service_rating,
             department_name, years_of_service)
        VALUES
            (:agent_id, :name, :average_customer_service_rating,
             :department_name, :years_of_service)
        ON CONFLICT (agent_id) DO UPDATE SET
            name = excluded.name,
            average_customer_service_rating =
                excluded.average_customer_service_rating,
            department_name = excluded.department_name,
            years_of_service = excluded.years_of_service
    """
    for agent in agents:
        conn.execute(sql, {
            "agent_id": agent.get("agent_id"),
            "name": agent.get("name"),
            "average_customer_service_rating":
                agent.get("average_customer_service_rating"),
            "department_name": agent.get("department_name"),
            "years_of_service": agent.get("years_of_service", 0),
        })
    logger.info("Wrote %d agent rows", len(agents))
    return len(agents)


def _write_assignments(conn: sqlite3.Connection, assignments: list[dict]) -> int:
    sql = """
        INSERT INTO assignments
            (assignment_id, agent_id, lead_source, communication_method)
        VALUES
            (:assignment_id, :agent_id, :lead_source, :communication_method)
        ON CONFLICT (assignment_id) DO UPDATE SET
            agent_id = excluded.agent_id,
            lead_source = excluded.lead_source,
            communication_method = excluded.communication_method
    """
    for assignment in assignments:
        conn.execute(sql, {
            "assignment_id": assignment.get("assignment_id"),
            "agent_id": assignment.get("agent_id"),
            "lead_source": assignment.get("lead_source"),
            "communication_method": assignment.get("communication_method"),
        })
    logger.info("Wrote %d assignment rows", len(assignments))
    return len(assignments)


def _write_bookings(conn: sqlite3.Connection, bookings: list[dict]) -> int:
    sql = """
        INSERT INTO bookings
            (booking_id, assignment_id, destination, booking_status)
        VALUES
            (:booking_id, :assignment_id, :destination, :booking_status)
        ON CONFLICT (booking_id) DO UPDATE SET
            assignment_id = excluded.assignment_id,
            destination = excluded.destination,
            booking_status = excluded.booking_status
    """
    for booking in bookings:
        conn.execute(sql, {
            "booking_id": booking.get("booking_id"),
            "assignment_id": booking.get("assignment_id"),
            "destination": booking.get("destination"),
            "booking_status": booking.get("booking_status"),
        })
    logger.info("Wrote %d booking rows", len(bookings))
    return len(bookings)


def insert_agents(conn: sqlite3.Connection, agents: list[dict]) -> int:
    """Insert or update agent rows in one transaction.

    Args:
        conn: An open SQLite connection.
        agents: Dicts with ``agent_id``, ``name``,
                ``average_customer_service_rating`` and optionally
                ``department_name`` and ``years_of_service``.

    Returns:
        The number of rows written.
    """
    with conn:
        return _write_agents(conn, agents)


def insert_assignments(conn: sqlite3.Connection, assignments: list[dict]) -> int:
    """Insert or update historical assignment rows in one transaction.

    Returns:
        The number of rows written.
    """
    with conn:
        return _write_assignments(conn, assignments)


def insert_bookings(conn: sqlite3.Connection, bookings: list[dict]) -> int:
    """Insert or update booking outcome rows in one transaction.

    Each booking must reference an existing assignment; SQLite enforces
    this through the ``bookings.assignment_id`` foreign key.

    Returns:
        The number of rows written.
    """
    with conn:
        return _write_bookings(conn, bookings)


def load_dataset(conn: sqlite3.Connection, dataset: dict) -> dict[str, int]:
    """Load a dataset of the shape ``{"agents": [...], "assignments": [...],
    "bookings": [...]}`` into the store.

    All three tables are written in a single transaction: if any row is
    rejected nothing from the dataset is kept.  Assignments are written
    before bookings so the foreign key holds.

    Raises:
        TypeError: If *dataset* is not a mapping.
        sqlite3.Error: If a row violates the schema.

    Returns:
        Row counts written per table.
    """
    if not isinstance(dataset, dict):
        raise TypeError(
            f"dataset must be an object, got {type(dataset).__name__}"
        )
    with conn:
        return {
            "agents": _write_agents(conn, dataset.get("agents", [])),
            "assignments": _write_assignments(
                conn, dataset.get("assignments", [])
            ),
            "bookings": _write_bookings(conn, dataset.get("bookings", [])),
        }


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def fetch_agents(conn: sqlite3.Connection) -> list[AgentRecord]:
    """Return every agent row as an :class:`AgentRecord`."""
    rows = conn.execute(
        """
        SELECT agent_id, name, average_customer_service_rating,
               department_name, years_of_service
        FROM agents
        ORDER BY agent_id
        """
    ).fetchall()
    return [
        AgentRecord(
            agent_id=row["agent_id"],
            name=row["name"],
            average_customer_service_rating=row["average_customer_service_rating"],
            department_name=row["department_name"],
            years_of_service=row["years_of_service"],
        )
        for row in rows
    ]


def fetch_assignments(conn: sqlite3.Connection) -> list[AssignmentRecord]:
    """Return every assignment with its linked booking, if any."""
    rows = conn.execute(
        """
        SELECT a.assignment_id,
               a.agent_id,
               a.lead_source,
               a.communication_method,
               b.booking_id,
               b.destination,
               b.booking_status
        FROM assignments a
        LEFT JOIN bookings b ON b.assignment_id = a.assignment_id
        ORDER BY a.assignment_id
        """
    ).fetchall()

    assignments = []
    for row in rows:
        booking = None
        if row["booking_id"] is not None:
            booking = BookingRecord(
                booking_id=row["booking_id"],
                assignment_id=row["assignment_id"],
                destination=row["destination"],
                booking_status=row["booking_status"],
            )
        assignments.append(
            AssignmentRecord(
                assignment_id=row["assignment_id"],
                agent_id=row["agent_id"],
                lead_source=row["lead_source"],
                communication_method=row["communication_method"],
                booking=booking,
            )
        )
    return assignments


def fetch_snapshot(conn: sqlite3.Connection) -> MetricSnapshot:
    """Read agents and assignments inside a single read transaction.

    If the caller already holds an open transaction it is reused and left
    open; otherwise one is started here and released once both reads are
    done.

    Args:
        conn: An open SQLite connection.

    Returns:
        A :class:`MetricSnapshot` of the whole store.
    """
    owns_transaction = not conn.in_transaction
    if owns_transaction:
        conn.execute("BEGIN")
    try:
        agents = fetch_agents(conn)
        assignments = fetch_assignments(conn)
    finally:
        if owns_transaction:
            conn.rollback()

    logger.info(
        "Read snapshot: %d agents, %d assignments",
        len(agents), len(assignments),
    )
    return MetricSnapshot(agents=tuple(agents), assignments=tuple(assignments))


def get_agent_count(conn: sqlite3.Connection) -> int:
    """Return the total number of rows in the ``agents`` table."""
    row = conn.execute("SELECT COUNT(*) AS cnt FROM agents").fetchone()
    return row["cnt"]
