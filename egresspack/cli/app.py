import json
from importlib.metadata import PackageNotFoundError, version as package_version
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Any

import typer

from egresspack.config import EgressConfig, load_config
from egresspack.diff import render_report_summary, render_reports
from egresspack.exceptions import EgressError
from egresspack.store import migrate_artifact_file
from egresspack.workflow import accept_artifacts, list_sessions, retire_artifact, review_session

app = typer.Typer(help="Egress snapshot-regression CLI")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()

_ROOT_OPTION = typer.Option(
    Path("."),
    "--root",
    help="Directory holding the egress/ artifact tree.",
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="Explicit Egress.toml file (overrides --root).",
)
_JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Emit machine-readable output.",
)


def _resolve_cli_version() -> str:
    try:
        return package_version("egress")
    except PackageNotFoundError:
        from egress import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show Egress version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log store reads/writes to stderr.",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(command: str, error: Exception, *, json_output: bool, **context: Any) -> None:
    message = f"{command} failed: {error}"
    if json_output:
        _echo_json({"status": "error", "exit_code": 1, "message": message, **context})
    else:
        _echo(message, err=True)
    raise typer.Exit(code=1) from error


def _resolve_config(root: Path, config_path: Path | None) -> EgressConfig:
    if config_path is not None:
        return load_config(config_path).with_env()
    return EgressConfig.from_env(root)


@app.command()
def status(
    session_id: str = typer.Argument(..., help="Session id, e.g. tests/numbers."),
    root: Path = _ROOT_OPTION,
    config_path: Path | None = _CONFIG_OPTION,
    verbose_values: bool = typer.Option(
        False,
        "--all",
        help="Also print unchanged entries.",
    ),
    json_output: bool = _JSON_OPTION,
) -> None:
    """Compare a session's latest captured artifacts against accepted baselines."""
    try:
        config = _resolve_config(root, config_path)
        result = review_session(config, session_id)
    except (EgressError, FileNotFoundError) as error:
        _fail("status", error, json_output=json_output, session_id=session_id)
        return

    if json_output:
        _echo_json(result.to_dict())
    else:
        for report in result.reports:
            _echo(render_report_summary(report))
        failing = result.failing_reports()
        if failing:
            _echo(render_reports(failing, include_unchanged=verbose_values), force=True)
            _echo(f"status failed: session={session_id} failing={len(failing)}", err=True)
        else:
            _echo(f"status passed: session={session_id} artifacts={len(result.reports)}")

    if not result.passed:
        raise typer.Exit(code=1)


@app.command()
def accept(
    session_id: str = typer.Argument(..., help="Session id, e.g. tests/numbers."),
    names: list[str] | None = typer.Argument(
        None,
        help="Artifact names to accept (default: every current artifact).",
    ),
    root: Path = _ROOT_OPTION,
    config_path: Path | None = _CONFIG_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """Promote current artifacts to become the new baselines."""
    try:
        config = _resolve_config(root, config_path)
        result = accept_artifacts(config, session_id, names or None)
    except (EgressError, FileNotFoundError) as error:
        _fail("accept", error, json_output=json_output, session_id=session_id)
        return

    if json_output:
        _echo_json(result.to_dict())
        return
    if not result.accepted:
        _echo(f"nothing to accept: session={session_id}")
        return
    for name, path in zip(result.accepted, result.baseline_paths):
        _echo(f"accepted: session={session_id} artifact={name} baseline={path}")


@app.command()
def retire(
    session_id: str = typer.Argument(..., help="Session id, e.g. tests/numbers."),
    name: str = typer.Argument(..., help="Artifact name whose baseline should be deleted."),
    root: Path = _ROOT_OPTION,
    config_path: Path | None = _CONFIG_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """Delete the stored baseline of an artifact that is no longer produced."""
    try:
        config = _resolve_config(root, config_path)
        removed = retire_artifact(config, session_id, name)
    except (EgressError, FileNotFoundError) as error:
        _fail("retire", error, json_output=json_output, session_id=session_id, artifact=name)
        return

    payload = {
        "status": "retired" if removed else "not_found",
        "session_id": session_id,
        "artifact": name,
    }
    if json_output:
        _echo_json(payload)
    elif removed:
        _echo(f"retired: session={session_id} artifact={name}")
    else:
        _echo(f"nothing to retire: session={session_id} artifact={name}")


@app.command()
def sessions(
    root: Path = _ROOT_OPTION,
    config_path: Path | None = _CONFIG_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """List sessions that have stored artifacts."""
    try:
        config = _resolve_config(root, config_path)
        session_ids = list_sessions(config)
    except (EgressError, FileNotFoundError) as error:
        _fail("sessions", error, json_output=json_output)
        return

    if json_output:
        _echo_json({"status": "ok", "sessions": session_ids})
        return
    for session_id in session_ids:
        _echo(session_id)


@app.command()
def migrate(
    source: Path = typer.Argument(..., help="Artifact file in a legacy or current format."),
    out: Path = typer.Argument(..., help="Output path for the migrated artifact."),
    session_id: str = typer.Option(
        "",
        "--session-id",
        help="Session id recorded in the migrated file's metadata.",
    ),
    artifact_name: str | None = typer.Option(
        None,
        "--name",
        help="Artifact name (default: source file stem).",
    ),
    json_output: bool = _JSON_OPTION,
) -> None:
    """Rewrite an artifact file in the current format."""
    try:
        summary = migrate_artifact_file(
            source,
            out,
            session_id=session_id,
            artifact_name=artifact_name,
        )
    except (EgressError, FileNotFoundError) as error:
        _fail("migrate", error, json_output=json_output, source=str(source), out=str(out))
        return

    if json_output:
        _echo_json({"status": "ok", "out": str(out), **summary.to_dict()})
        return
    _echo(
        f"migrated: {source} -> {out} "
        f"({summary.source_version} -> {summary.target_version}, "
        f"{summary.total_entries} entries, {summary.status})"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
