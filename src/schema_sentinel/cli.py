"""
Schema Sentinel CLI
====================
    schema-sentinel list                      endpoints with a hardened schema
    schema-sentinel inspect "GET /orders/{id}"
    schema-sentinel history "GET /orders/{id}"
    schema-sentinel diff old.json new.json    exit 1 on BREAKING drift
    schema-sentinel profile response.json     print the inferred schema
    schema-sentinel profile --url https://api.example.com/orders --samples 20

The store is selected through the usual environment variables (see
``SentinelConfig.from_env``).
"""

import dataclasses
import json
import logging

import click
import httpx

from schema_sentinel.core.config import ConfigurationError, SentinelConfig
from schema_sentinel.services.sentinel import Sentinel
from schema_sentinel.services.watcher import SchemaWatcher
from schema_sentinel.utils.changes import Severity

EXIT_BREAKING = 1
EXIT_BAD_INPUT = 2
EXIT_NOT_FOUND = 1

_SEVERITY_SYMBOLS = {
    Severity.BREAKING: click.style("✗", fg="red"),
    Severity.ADDITIVE: click.style("✓", fg="green"),
    Severity.ADVISORY: click.style("⚠", fg="yellow"),
}


def _load_config() -> SentinelConfig:
    try:
        return SentinelConfig.from_env()
    except ConfigurationError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from None


def _read_json_file(ctx: click.Context, path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"❌ Could not read {path}: {e}", fg="red"), err=True)
        ctx.exit(EXIT_BAD_INPUT)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Show sentinel log output")
def cli(verbose):
    """Schema Sentinel - learn API response schemas and detect contract drift."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
    )


@cli.command("list")
def list_schemas():
    """List endpoints with a hardened schema."""
    sentinel = Sentinel.from_config(_load_config())
    keys = sentinel.store.all()

    if not keys:
        click.echo("No hardened schemas yet.")
        return

    for key in sorted(keys):
        schema = sentinel.store.get(key)
        if schema is None:
            continue
        click.echo(
            f"{key}\t{schema.version[:19]}\t{schema.sample_count} samples\t"
            f"{schema.hardened_at.isoformat()}"
        )


@cli.command()
@click.argument("endpoint")
@click.pass_context
def inspect(ctx, endpoint):
    """Print the hardened schema document for ENDPOINT."""
    sentinel = Sentinel.from_config(_load_config())
    schema = sentinel.store.get(endpoint)

    if schema is None:
        pending = len(sentinel.store.get_samples(endpoint))
        click.echo(f"No hardened schema for {endpoint} ({pending} sample(s) pending).", err=True)
        ctx.exit(EXIT_NOT_FOUND)

    _echo_json(schema.to_dict())


@cli.command()
@click.argument("endpoint")
def history(endpoint):
    """Print archived schemas for ENDPOINT, oldest first."""
    sentinel = Sentinel.from_config(_load_config())
    _echo_json([schema.to_dict() for schema in sentinel.store.archives(endpoint)])


@cli.command()
@click.argument("baseline", type=click.Path(exists=True, dir_okay=False))
@click.argument("current", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def diff(ctx, baseline, current):
    """Compare two schema files (persisted documents or bare schema nodes)."""
    base_data = _read_json_file(ctx, baseline)
    curr_data = _read_json_file(ctx, current)

    if not isinstance(base_data, dict) or not isinstance(curr_data, dict):
        click.echo(click.style("❌ Both files must contain a JSON object.", fg="red"), err=True)
        ctx.exit(EXIT_BAD_INPUT)

    sentinel = Sentinel.from_config(SentinelConfig(store_driver="memory"))
    try:
        drift = sentinel.diff(base_data, curr_data)
    except (KeyError, TypeError, ValueError) as e:
        click.echo(click.style(f"❌ Invalid schema document: {e}", fg="red"), err=True)
        ctx.exit(EXIT_BAD_INPUT)

    if drift is None:
        click.echo(click.style("✅ No drift detected. Schemas match.", fg="green"))
        return

    click.echo(f"Drift detected: severity {drift.severity.value}")
    for change in drift.changes:
        click.echo(
            f"  {_SEVERITY_SYMBOLS[change.severity]}  {change.severity.value:<8}  "
            f"{change.path}\t({change.description})"
        )

    if drift.is_breaking:
        click.echo(click.style(f"🚨 {len(drift.breaking_changes)} breaking change(s)", fg="red"), err=True)
        ctx.exit(EXIT_BREAKING)


@cli.command()
@click.argument("file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--url", help="Profile a live endpoint instead of a file")
@click.option("--method", default="GET", show_default=True, help="HTTP method for --url")
@click.option("-H", "--header", "headers", multiple=True, help='Extra header, e.g. "Authorization: Bearer ..."')
@click.option("--samples", type=click.IntRange(min=1), default=20, show_default=True,
              help="Requests to send with --url")
@click.pass_context
def profile(ctx, file, url, method, headers, samples):
    """Infer a schema from a JSON FILE, or harden one by sampling --url."""
    if bool(file) == bool(url):
        raise click.UsageError("Pass either FILE or --url.")

    if file:
        payload = _read_json_file(ctx, file)
        sentinel = Sentinel.from_config(SentinelConfig(store_driver="memory"))
        _echo_json(sentinel.profile(payload))
        return

    config = _load_config()
    config = dataclasses.replace(
        config,
        sample_threshold=samples,
        max_stored_samples=max(samples, config.max_stored_samples),
    )
    sentinel = Sentinel.from_config(config)

    request_headers = {}
    for header in headers:
        if ":" in header:
            name, value = header.split(":", 1)
            request_headers[name.strip()] = value.strip()

    click.echo(f"Profiling {method.upper()} {url} ({samples} samples)")
    with httpx.Client(timeout=30.0, event_hooks={"response": [SchemaWatcher(sentinel)]}) as client:
        for _ in range(samples):
            try:
                client.request(method.upper(), url, headers=request_headers)
            except httpx.HTTPError as e:
                click.echo(click.style(f"❌ Request failed: {e}", fg="red"), err=True)
                ctx.exit(EXIT_BAD_INPUT)

    key = sentinel.normalizer.normalize(method, url)
    schema = sentinel.store.get(key)
    if schema is None:
        click.echo(f"Collected samples for {key}, but no schema was hardened (non-JSON or failed responses?).")
        ctx.exit(EXIT_NOT_FOUND)

    click.echo(click.style(f"✅ Hardened {key} ({schema.version[:19]})", fg="green"))


def main():
    cli(prog_name="schema-sentinel")


if __name__ == "__main__":
    main()
