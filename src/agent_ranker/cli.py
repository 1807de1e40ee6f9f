"""Click CLI for agent-ranker.

Commands:
    init-db  -- Create the metric store schema.
    load     -- Load agents, assignments and bookings from a JSON file.
    rank     -- Rank every agent for one customer profile.
    pipeline -- Invoke the pypyr ranking pipeline.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3

import click
from dotenv import load_dotenv

from agent_ranker import DEFAULT_DB_PATH
from agent_ranker.models import (
    COMMUNICATION_METHODS,
    DESTINATIONS,
    LAUNCH_LOCATIONS,
    LEAD_SOURCES,
)
from agent_ranker.scoring.config import PRESETS

logger = logging.getLogger("agent_ranker.cli")


def _resolve_db_path(ctx_db: str | None) -> str:
    """Return the database path from --db flag, env var, or default."""
    if ctx_db:
        return ctx_db
    env_path = os.environ.get("AGENT_RANKER_DB")
    if env_path:
        return env_path
    return DEFAULT_DB_PATH


def _ensure_db_dir(db_path: str) -> None:
    """Create parent directory for the database file if it does not exist."""
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _fail(message: str) -> None:
    click.echo(click.style(message, fg="red"))
    raise SystemExit(1)


@click.group()
@click.option(
    "--db",
    default=None,
    envvar="AGENT_RANKER_DB",
    help="Path to the SQLite metric store.",
)
@click.pass_context
def main(ctx: click.Context, db: str | None) -> None:
    """agent-ranker: rank service agents for an incoming customer."""
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = _resolve_db_path(db)


@main.command("init-db")
@click.pass_context
def init_db_command(ctx: click.Context) -> None:
    """Create the metric store tables."""
    from agent_ranker.db.manager import get_connection, init_db

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    conn = get_connection(db_path)
    init_db(conn)
    conn.close()
    click.echo(click.style(f"Initialised {db_path}", fg="green"))


@main.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def load(ctx: click.Context, dataset: str) -> None:
    """Load agents, assignments and bookings from a JSON DATASET file."""
    from agent_ranker.db.manager import get_connection, init_db, load_dataset

    with open(dataset, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            _fail(f"Invalid JSON in {dataset}: {exc}")

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    conn = get_connection(db_path)
    init_db(conn)
    try:
        counts = load_dataset(conn, data)
    except (sqlite3.Error, AttributeError, TypeError) as exc:
        logger.error("Dataset load failed: %s", exc)
        _fail(f"Could not load {dataset}: {exc}")
    finally:
        conn.close()

    click.echo(
        click.style(
            f"Loaded {counts['agents']} agents, {counts['assignments']} "
            f"assignments, {counts['bookings']} bookings.",
            fg="green",
        )
    )


@main.command()
@click.option(
    "--communication-method",
    required=True,
    type=click.Choice(COMMUNICATION_METHODS),
    help="How the customer wants to be contacted.",
)
@click.option(
    "--lead-source",
    required=True,
    type=click.Choice(LEAD_SOURCES),
    help="Where the customer lead came from.",
)
@click.option(
    "--destination",
    required=True,
    type=click.Choice(DESTINATIONS),
    help="Requested destination.",
)
@click.option(
    "--launch-location",
    required=True,
    type=click.Choice(LAUNCH_LOCATIONS),
    help="Requested launch location.",
)
@click.option("--customer-name", required=True, help="Customer full name.")
@click.option(
    "--preset",
    default="refined",
    show_default=True,
    type=click.Choice(sorted(PRESETS)),
    help="Named scoring configuration.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar="AGENT_RANKER_CONFIG",
    type=click.Path(dir_okay=False),
    help="JSON scoring configuration (overrides --preset).",
)
@click.option(
    "--top",
    default=None,
    type=click.IntRange(min=1),
    help="Only print the best N agents.",
)
@click.option("--json", "as_json", is_flag=True, help="Print JSON output.")
@click.pass_context
def rank(
    ctx: click.Context,
    communication_method: str,
    lead_source: str,
    destination: str,
    launch_location: str,
    customer_name: str,
    preset: str,
    config_path: str | None,
    top: int | None,
    as_json: bool,
) -> None:
    """Rank every agent for one customer profile."""
    from agent_ranker.db.manager import get_connection, init_db
    from agent_ranker.errors import AgentRankerError
    from agent_ranker.models import CustomerProfile
    from agent_ranker.scoring.config import get_preset, load_config
    from agent_ranker.scoring.engine import rank_agents_from_db

    try:
        profile = CustomerProfile.from_dict({
            "communication_method": communication_method,
            "lead_source": lead_source,
            "destination": destination,
            "launch_location": launch_location,
            "customer_name": customer_name,
        })
        config = load_config(config_path) if config_path else get_preset(preset)
    except AgentRankerError as exc:
        logger.error("Invalid ranking request: %s", exc)
        _fail(f"Error: {exc}")

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    conn = get_connection(db_path)
    init_db(conn)
    try:
        result = rank_agents_from_db(conn, profile, config)
    finally:
        conn.close()

    agents = result.top(top) if top else result.agents

    if as_json:
        payload = result.to_dict()
        payload["agents"] = [agent.to_dict() for agent in agents]
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(
        click.style(
            f"Ranking for {profile.customer_name} "
            f"({result.config_name}, {result.computed_at.isoformat()})",
            fg="cyan",
        )
    )
    if not agents:
        click.echo(click.style("No agents in the metric store.", fg="yellow"))
        return
    click.echo(f"  {'#':<4} {'Agent':<28} {'Base':>7} {'Cancel':>7} {'Final':>7}")
    for agent in agents:
        click.echo(
            f"  {agent.rank:<4} {agent.name[:28]:<28} "
            f"{agent.base_score:>7.3f} {agent.cancellation_rate:>7.1%} "
            f"{agent.final_score:>7.3f}"
        )


@main.command()
@click.argument("name", type=click.Choice(["rank"]))
@click.option(
    "--profile",
    "profile_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file holding the customer profile.",
)
@click.pass_context
def pipeline(ctx: click.Context, name: str, profile_path: str) -> None:
    """Run a pypyr pipeline (currently only ``rank``)."""
    from pypyr import pipelinerunner
    from agent_ranker import PACKAGE_DIR

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    with open(profile_path, encoding="utf-8") as fh:
        try:
            customer_profile = json.load(fh)
        except json.JSONDecodeError as exc:
            _fail(f"Invalid JSON in {profile_path}: {exc}")

    pipeline_map = {
        "rank": "rank_customer",
    }

    pipeline_name = pipeline_map[name]
    click.echo(
        click.style(f"Running pipeline: {pipeline_name}", fg="cyan")
    )

    try:
        pipelinerunner.run(
            pipeline_name=str(PACKAGE_DIR / "pipelines" / pipeline_name),
            dict_in={
                "db_path": db_path,
                "customer_profile": customer_profile,
            },
        )
        click.echo(
            click.style(f"Pipeline '{pipeline_name}' completed.", fg="green")
        )
    except Exception as exc:
        logger.error("Pipeline failed: %s", exc)
        click.echo(
            click.style(f"Pipeline failed: {exc}", fg="red")
        )
        raise SystemExit(1)
