#!/usr/bin/env python3
"""
sugarbit - glucose readings on a rotating-timescale terminal graph

Usage:
    sugarbit show
    sugarbit show --file BG.json --now "2024.01.01 - 10:06:00" --json
    sugarbit watch --interval 60 --rotate-every 5

For more information: sugarbit --help
"""

import sys
import time
from pathlib import Path
from typing import Optional

import click
import requests

from . import __version__
from .core.config import Config, load_config
from .core.exceptions import FetchFailed, InvalidScale, MalformedPayload, MalformedTimestamp
from .core.graph import Viewport
from .core.logging import get_logger, setup_logging
from .core.state import AppState
from .core.timeparse import parse_time
from .core.timescale import ROTATION, Timescale, TimescaleCycler
from .display import render_dashboard
from .fetch import fetch_payload, load_payload_file
from .scheduler import UpdateScheduler
from .utils.output import console, handle_error, print_json

logger = get_logger(__name__)

TIMESCALE_CHOICES = [t.label for t in ROTATION]

RECOVERABLE_ERRORS = (FetchFailed, MalformedPayload, MalformedTimestamp, InvalidScale, OSError)


def _parse_now(value: Optional[str]) -> int:
    if value is None:
        return int(time.time())
    try:
        return parse_time(value)
    except MalformedTimestamp as e:
        raise click.BadParameter(str(e), param_hint="--now") from e


def _make_state(config: Config, timescale: str) -> AppState:
    return AppState(
        cycler=TimescaleCycler.starting_at(Timescale.from_label(timescale)),
        ceiling_floor=config.graph.ceiling_floor,
        value_ceiling=config.graph.ceiling_floor,
        on_malformed=config.load.on_malformed,
    )


def _draw(config: Config, state: AppState, summary, projection, now: int) -> None:
    gr = config.graph
    console.print(render_dashboard(
        summary, projection, state.timescale, now,
        width=gr.width, height=gr.height, low=gr.target_low, high=gr.target_high,
    ))


@click.group()
@click.version_option(version=__version__, prog_name="sugarbit")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v, -vv, -vvv)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output except errors")
@click.option("--json-errors", is_flag=True, help="Output errors as JSON")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Config file (default: .sugarbit.yaml in cwd, parents or home)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool, json_errors: bool, config_path: Optional[str]) -> None:
    """sugarbit - glucose readings on a rotating-timescale terminal graph

    \b
    Commands:
      show   Fetch once and print the dashboard (or JSON)
      watch  Keep fetching and redrawing on a timer

    \b
    Verbosity:
      -v       INFO level (fetches, loads, timescale changes)
      -vv      DEBUG level (sample counts, refresh cadence)
      -vvv     TRACE level (per-entry parsing)
      -q       Quiet mode (errors only)
    """
    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    setup_logging(verbose, quiet)
    ctx.obj["config"] = load_config(Path(config_path) if config_path else None, use_cache=False)


@cli.command()
@click.option("--url", "-u", default=None, help="Report URL (default from config)")
@click.option(
    "--file", "-f", "file_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Read the payload from a JSON file instead of fetching",
)
@click.option("--now", "now_text", default=None, help='Current time as "YYYY.MM.DD - HH:MM:SS"')
@click.option(
    "--timescale", "-t", type=click.Choice(TIMESCALE_CHOICES), default=TIMESCALE_CHOICES[0],
    help="Look-back window",
)
@click.option("--json", "json_output", is_flag=True, help="Output summary and projection as JSON")
@click.pass_context
def show(
    ctx: click.Context,
    url: Optional[str],
    file_path: Optional[str],
    now_text: Optional[str],
    timescale: str,
    json_output: bool,
) -> None:
    """Fetch readings once and print the dashboard.

    \b
    Examples:
      sugarbit show
      sugarbit show -t 24h
      sugarbit show --file BG.json --now "2024.01.01 - 10:06:00" --json
    """
    config: Config = ctx.obj["config"]
    now = _parse_now(now_text)
    state = _make_state(config, timescale)
    source = file_path or url or config.source.url

    try:
        if file_path:
            result = load_payload_file(file_path)
        else:
            result = fetch_payload(source, config.source.headers, config.source.timeout)
        state.refresh(result.payload, now)

        th = config.thresholds
        gr = config.graph
        summary = state.summarize(now, th.max_age, th.max_delta_age)
        projection = state.project(
            now, Viewport(gr.width, gr.height),
            capacity=gr.capacity, target=(gr.target_low, gr.target_high),
        )
    except RECOVERABLE_ERRORS as e:
        sys.exit(handle_error(e, ctx.obj["json_errors"], {"source": source}))

    if json_output:
        print_json({
            "now": now,
            "timescale": state.timescale.label,
            "value_ceiling": state.value_ceiling,
            "samples": len(state.series),
            "summary": summary.to_dict(),
            "projection": projection.to_dict(),
        })
        return

    _draw(config, state, summary, projection, now)


@cli.command()
@click.option("--url", "-u", default=None, help="Report URL (default from config)")
@click.option("--interval", "-i", type=int, default=None, help="Seconds between fetches")
@click.option(
    "--timescale", "-t", type=click.Choice(TIMESCALE_CHOICES), default=TIMESCALE_CHOICES[0],
    help="Initial look-back window",
)
@click.option("--rotate-every", type=int, default=None, help="Rotate the timescale every N fetches")
@click.option("--max-ticks", type=int, default=None, help="Stop after N fetches")
@click.pass_context
def watch(
    ctx: click.Context,
    url: Optional[str],
    interval: Optional[int],
    timescale: str,
    rotate_every: Optional[int],
    max_ticks: Optional[int],
) -> None:
    """Keep fetching readings and redraw the dashboard.

    A failed fetch keeps the previous readings on screen; they are struck
    through once they are older than the staleness threshold.

    \b
    Examples:
      sugarbit watch
      sugarbit watch --interval 30 --rotate-every 10
    """
    config: Config = ctx.obj["config"]
    if interval is not None:
        config.refresh.interval = interval
    source = url or config.source.url
    state = _make_state(config, timescale)
    session = requests.Session()

    def fetch():
        return fetch_payload(source, config.source.headers, config.source.timeout, session=session)

    def draw(summary, projection, now):
        if console.is_terminal:
            console.clear()
        _draw(config, state, summary, projection, now)

    scheduler = UpdateScheduler(state, fetch, draw, config)
    try:
        scheduler.run(max_ticks=max_ticks, rotate_every=rotate_every)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        session.close()


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
