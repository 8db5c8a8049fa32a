"""Typer CLI driving the Helm service broker."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from helm_broker.broker import (
    BindRequest,
    DeprovisionRequest,
    LastOperationRequest,
    ProvisionRequest,
    UnbindRequest,
    UpdateInstanceRequest,
)
from helm_broker.domain import InstanceId, PlanId, ServiceId
from helm_broker.exceptions import BrokerError

from .deps import get_container

app = typer.Typer(help="Helm service broker command-line interface")
console = Console()

T = TypeVar("T")


def _run(factory: Callable[[], Awaitable[T]]) -> T:
    try:
        return asyncio.run(factory())
    except BrokerError as exc:
        typer.echo(json.dumps(exc.to_response(), sort_keys=True), err=True)
        raise typer.Exit(code=1) from exc


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _parse_parameters(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"parameters must be valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise typer.BadParameter("parameters must be a JSON object")
    return parsed


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure logging from the resolved settings."""

    level = "DEBUG" if verbose else get_container().settings.log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("show-settings")
def show_settings() -> None:
    """Print the resolved application settings."""

    settings = get_container().settings
    typer.echo("Environment:\t" + settings.environment)
    typer.echo("Helm Home:\t" + str(settings.helm_home))
    typer.echo("Helm Binary:\t" + " ".join(settings.helm_command))
    typer.echo("Database URL:\t" + settings.database_url)
    typer.echo("Identifiers:\t" + settings.identifier_strategy.value)
    typer.echo("Async Mode:\t" + str(settings.async_mode))
    typer.echo("API Version:\t" + settings.api_version)


@app.command("catalog")
def catalog() -> None:
    """Print the service catalog built from the cached repository indexes."""

    broker = get_container().broker
    response = _run(broker.get_catalog)
    _emit(response.to_osb())


@app.command("search")
def search(
    term: str,
    regexp: bool = typer.Option(False, "--regexp", "-r", help="Treat TERM as a regex"),
) -> None:
    """Search the cached repository indexes for charts."""

    catalog_builder = get_container().catalog
    results = _run(lambda: catalog_builder.search(term, regexp=regexp))
    if not results:
        typer.echo("No results found")
        return
    for result in results:
        typer.echo(f"{result.name}\t{result.chart.version}\t{result.chart.description}")


@app.command("resolve")
def resolve(
    reference: str,
    repo_url: str | None = typer.Option(None, help="Ad-hoc chart repository URL"),
    username: str | None = typer.Option(None, help="Repository username"),
    password: str | None = typer.Option(None, help="Repository password"),
    version: str | None = typer.Option(None, help="Pin a chart version"),
    verify: bool = typer.Option(False, help="Verify the chart provenance"),
    keyring: Path | None = typer.Option(None, help="Keyring used for verification"),
) -> None:
    """Resolve a chart reference to a local chart path."""

    resolver = get_container().resolver
    path = _run(
        lambda: resolver.resolve(
            reference,
            repo_url=repo_url,
            username=username,
            password=password,
            version=version,
            verify=verify,
            keyring=keyring,
        )
    )
    typer.echo(str(path))


@app.command("provision")
def provision(
    instance_id: str,
    service_id: str,
    namespace: str = typer.Option(..., help="Namespace the release is installed into"),
    plan_id: str | None = typer.Option(None, help="Plan id (defaults to the service id)"),
    parameters: str | None = typer.Option(None, help="Instance parameters as a JSON object"),
    accepts_incomplete: bool = typer.Option(False, help="Allow an asynchronous response"),
) -> None:
    """Provision a service instance as a Helm release."""

    broker = get_container().broker
    request = ProvisionRequest(
        instance_id=InstanceId(instance_id),
        service_id=ServiceId(service_id),
        plan_id=PlanId(plan_id or service_id),
        parameters=_parse_parameters(parameters) or {},
        context={"namespace": namespace},
        accepts_incomplete=accepts_incomplete,
    )
    response = _run(lambda: broker.provision(request))
    _emit(response.to_osb())


@app.command("deprovision")
def deprovision(
    instance_id: str,
    accepts_incomplete: bool = typer.Option(False, help="Allow an asynchronous response"),
) -> None:
    """Delete the release backing an instance."""

    broker = get_container().broker
    request = DeprovisionRequest(
        instance_id=InstanceId(instance_id), accepts_incomplete=accepts_incomplete
    )
    response = _run(lambda: broker.deprovision(request))
    _emit(response.to_osb())


@app.command("update")
def update(
    instance_id: str,
    service_id: str | None = typer.Option(None, help="New service id"),
    plan_id: str | None = typer.Option(None, help="New plan id"),
    parameters: str | None = typer.Option(None, help="New parameters as a JSON object"),
    accepts_incomplete: bool = typer.Option(False, help="Allow an asynchronous response"),
) -> None:
    """Upgrade the release backing an instance."""

    broker = get_container().broker
    request = UpdateInstanceRequest(
        instance_id=InstanceId(instance_id),
        service_id=ServiceId(service_id) if service_id else None,
        plan_id=PlanId(plan_id) if plan_id else None,
        parameters=_parse_parameters(parameters),
        accepts_incomplete=accepts_incomplete,
    )
    response = _run(lambda: broker.update(request))
    _emit(response.to_osb())


@app.command("last-operation")
def last_operation(instance_id: str) -> None:
    """Report the state of the release backing an instance."""

    broker = get_container().broker
    request = LastOperationRequest(instance_id=InstanceId(instance_id))
    response = _run(lambda: broker.last_operation(request))
    _emit(response.to_osb())


@app.command("bind")
def bind(instance_id: str, binding_id: str) -> None:
    """Print the credentials of an instance."""

    broker = get_container().broker
    request = BindRequest(instance_id=InstanceId(instance_id), binding_id=binding_id)
    response = _run(lambda: broker.bind(request))
    _emit(response.to_osb())


@app.command("unbind")
def unbind(instance_id: str, binding_id: str) -> None:
    """Release a binding."""

    broker = get_container().broker
    request = UnbindRequest(instance_id=InstanceId(instance_id), binding_id=binding_id)
    response = _run(lambda: broker.unbind(request))
    _emit(response.to_osb())


@app.command("instances")
def instances() -> None:
    """List registered service instances."""

    broker = get_container().broker
    registered = _run(broker.instances)
    if not registered:
        typer.echo("No instances found")
        return
    table = Table(title="Service Instances")
    table.add_column("Instance")
    table.add_column("Service")
    table.add_column("Plan")
    table.add_column("Release")
    table.add_column("Created")
    for instance in registered:
        table.add_row(
            instance.instance_id,
            instance.service_id,
            instance.plan_id,
            f"{instance.namespace}/{instance.release_name}",
            instance.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)


__all__ = ["app"]
