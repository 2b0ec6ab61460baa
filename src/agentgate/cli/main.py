"""Click CLI group: hook entry point plus one command per gate."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from agentgate.config import get_settings, validate_settings_for_env
from agentgate.errors import AgentGateError
from agentgate.logging import bind_context, configure_logging
from agentgate.policy.gate import EXIT_ADVISORY, EXIT_BLOCK
from agentgate.policy.types import Decision, ProposedAction


def _decision_payload(decision: Decision) -> dict[str, object]:
    payload: dict[str, object] = {
        "allowed": decision.allowed,
        "gate": decision.gate,
        "reason": decision.reason,
        "matched": decision.matched,
    }
    if decision.report:
        payload["report"] = decision.report
    if decision.conflict is not None:
        payload["conflict"] = {
            "file_path": decision.conflict.file_path,
            "role": decision.conflict.role,
            "owner_agent_id": decision.conflict.owner_agent_id,
            "acting_agent_id": decision.conflict.acting_agent_id,
            "pattern": decision.conflict.pattern,
        }
    return payload


def _emit_decision(decision: Decision, json_output: bool, deny_exit: int) -> None:
    if json_output:
        click.echo(json.dumps(_decision_payload(decision), indent=2, sort_keys=True))
    elif decision.allowed:
        click.echo(decision.reason)
    else:
        click.echo(decision.report or decision.reason, err=True)
    if not decision.allowed:
        sys.exit(deny_exit)


def _registry_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--registry",
        "registry_file",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help="Formation registry path (default: REGISTRY_FILE in the working directory).",
    )(func)


@click.group()
def cli() -> None:
    """agentgate: risk, autonomy, tool-policy and ownership gates for agent actions."""
    settings = get_settings()
    configure_logging(settings.log_level, json_output=True if settings.log_json else None)
    try:
        validate_settings_for_env(settings)
    except AgentGateError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option("--tool", "tool_name", required=True, help="Tool name, e.g. Bash or Write.")
@click.option("--command", "command_text", default="", help="Shell command text.")
def classify(tool_name: str, command_text: str) -> None:
    """Print the risk level of a proposed action."""
    from agentgate.policy.classifier import classify as classify_action

    level = classify_action(ProposedAction(tool_name=tool_name, command_text=command_text))
    click.echo(level.value)


@cli.command()
@click.argument("path")
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def project(path: str, json_output: bool) -> None:
    """Resolve the project a path belongs to."""
    from agentgate.policy.projects import resolve_project

    identity = resolve_project(path, get_settings())
    if json_output:
        payload = {"name": identity.name, "method": identity.method} if identity else None
        click.echo(json.dumps(payload))
    elif identity is not None:
        click.echo(f"{identity.name} ({identity.method})")
    if identity is None:
        if not json_output:
            click.echo("no project", err=True)
        sys.exit(1)


@cli.command()
@click.option("--tool", "tool_name", required=True)
@click.option("--command", "command_text", default="")
@click.option("--file", "file_path", default="")
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def authorize(tool_name: str, command_text: str, file_path: str, json_output: bool) -> None:
    """Check whether a medium/high risk action is pre-approved by project autonomy."""
    from agentgate.policy.autonomy import authorize_action

    action = ProposedAction(tool_name=tool_name, command_text=command_text, file_path=file_path)
    _emit_decision(authorize_action(action, get_settings()), json_output, EXIT_ADVISORY)


@cli.command()
@click.argument("tool_name")
@click.option("--agent-id", default=None, help="Acting agent id (default: AGENT_ID).")
@_registry_option
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def policy(
    tool_name: str, agent_id: str | None, registry_file: Path | None, json_output: bool
) -> None:
    """Resolve the tool-policy cascade for the acting agent."""
    from agentgate.policy.tool_policy import check_tool_policy

    settings = get_settings()
    decision = check_tool_policy(
        tool_name,
        agent_id if agent_id is not None else settings.agent_id,
        path=registry_file,
        settings=settings,
    )
    _emit_decision(decision, json_output, EXIT_BLOCK)


@cli.command()
@click.argument("file_path")
@click.option("--agent-id", default=None, help="Acting agent id (default: AGENT_ID).")
@_registry_option
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def ownership(
    file_path: str, agent_id: str | None, registry_file: Path | None, json_output: bool
) -> None:
    """Check a write target against declared teammate ownership."""
    from agentgate.policy.ownership import check_file_ownership

    settings = get_settings()
    decision = check_file_ownership(
        file_path,
        agent_id if agent_id is not None else settings.agent_id,
        path=registry_file,
        settings=settings,
    )
    _emit_decision(decision, json_output, EXIT_BLOCK)


@cli.command()
@click.option("--agent-id", default=None, help="Acting agent id (default: AGENT_ID).")
@_registry_option
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def hook(agent_id: str | None, registry_file: Path | None, json_output: bool) -> None:
    """Evaluate every gate for the hook record on stdin and exit 0, 1 (advisory) or 2 (block)."""
    from agentgate.events.hook_input import parse_hook_input
    from agentgate.policy.gate import evaluate

    settings = get_settings()
    try:
        record = parse_hook_input(click.get_text_stream("stdin").read())
    except AgentGateError as exc:
        click.echo(f"agentgate: {exc}", err=True)
        sys.exit(EXIT_ADVISORY)

    action = record.to_action(agent_id if agent_id is not None else settings.agent_id)
    bind_context(session_id=action.session_id, agent_id=action.acting_agent_id)
    report = evaluate(action, settings, registry_file=registry_file)

    if json_output:
        payload = {
            "allowed": report.allowed,
            "risk": report.risk.value,
            "project": report.project.name if report.project else None,
            "decisions": [_decision_payload(decision) for decision in report.decisions],
        }
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
    elif report.allowed:
        for decision in report.decisions:
            if decision.gate == "autonomy":
                click.echo(decision.reason)
    else:
        click.echo(report.render(), err=True)
    sys.exit(report.exit_code)


@cli.command()
@click.argument(
    "kind", type=click.Choice(["autonomy-state", "formation-registry", "task-metadata"])
)
@click.argument("document", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Exit 1 when issues are found.")
def validate(kind: str, document: Path, strict: bool) -> None:
    """Run advisory structural checks on a JSON document."""
    from agentgate.validation.contracts import validate_json_text

    issues = validate_json_text(kind, document.read_text(encoding="utf-8"))
    if not issues:
        click.echo(f"{document}: ok")
        return
    click.echo(f"SCHEMA VALIDATION FAILED ({kind}):", err=True)
    for issue in issues:
        click.echo(f"  {issue}", err=True)
    if strict:
        sys.exit(1)


@cli.group()
def artifact() -> None:
    """Artifact handoff store."""


@artifact.command("store")
@click.argument("project_name")
@click.argument("task_id")
@click.argument("name")
@click.option("--summary", default="", help="One-line summary (default: the name).")
@click.option(
    "--from-file",
    "source",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    default=None,
    help="Read content from a file instead of stdin.",
)
def artifact_store(
    project_name: str, task_id: str, name: str, summary: str, source: Path | None
) -> None:
    """Store content under the project's artifact tree and print its reference."""
    from agentgate.artifacts.store import store_artifact

    content = (
        source.read_text(encoding="utf-8")
        if source is not None
        else click.get_text_stream("stdin").read()
    )
    try:
        ref = store_artifact(project_name, task_id, name, content, summary, get_settings())
    except AgentGateError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(ref.to_dict(), sort_keys=True))


@artifact.command("read")
@click.argument("ref_json")
def artifact_read(ref_json: str) -> None:
    """Print the content an artifact reference points to."""
    from agentgate.artifacts.store import ArtifactRef, read_artifact

    try:
        decoded = json.loads(ref_json)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"invalid artifact reference: {exc.msg}") from exc
    if not isinstance(decoded, dict):
        raise click.ClickException("artifact reference must be a JSON object")
    content = read_artifact(ArtifactRef.from_dict(decoded), get_settings())
    if content is None:
        click.echo("artifact not found", err=True)
        sys.exit(1)
    click.echo(content, nl=False)


@artifact.command("upstream")
@click.argument("project_name")
@click.argument("blocked_by", nargs=-1)
def artifact_upstream(project_name: str, blocked_by: tuple[str, ...]) -> None:
    """Print artifacts of completed blocking tasks as a JSON array."""
    from agentgate.artifacts.store import upstream_artifacts

    try:
        payload = upstream_artifacts(project_name, list(blocked_by), get_settings())
    except AgentGateError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(payload, sort_keys=True))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
