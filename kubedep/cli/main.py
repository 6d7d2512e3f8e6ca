"""kubedep command-line interface."""

from __future__ import annotations

import asyncio
import dataclasses

import click

from kubedep import __version__
from kubedep.config import load_config
from kubedep.graph.builder import ResolutionError
from kubedep.observability.logging import setup_logging
from kubedep.params import DEFAULT_DEPTH, DependencyRequest, Direction, OutputFormat, normalize_depth
from kubedep.service import DependencyService
from kubedep.store.kubernetes import KubernetesResourceStore


@click.group()
@click.version_option(__version__, prog_name="kubedep")
def cli() -> None:
    """Explore what Kubernetes resources depend on, and what depends on them."""


@cli.command()
@click.argument("kind")
@click.argument("name")
@click.option("-c", "--cluster", default="", help="Cluster ID or kubeconfig context (default: current context).")
@click.option("-n", "--namespace", default="", help="Namespace of the resource.")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    default=Direction.DEPENDENTS.value,
    show_default=True,
)
@click.option("--depth", type=int, default=DEFAULT_DEPTH, show_default=True, help="Maximum traversal depth (1-20).")
@click.option(
    "-o",
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TREE.value,
    show_default=True,
)
@click.option("--kubeconfig", default="", help="Path to a kubeconfig file.")
@click.option("-v", "--verbose", is_flag=True, help="Log resolution details to stderr.")
def deps(
    kind: str,
    name: str,
    cluster: str,
    namespace: str,
    direction: str,
    depth: int,
    output_format: str,
    kubeconfig: str,
    verbose: bool,
) -> None:
    """Print the dependency graph of KIND NAME."""
    config = load_config()
    setup_logging("debug" if verbose else "warning", json_output=False)
    k8s = config.kubernetes
    if kubeconfig:
        k8s = dataclasses.replace(k8s, kubeconfig=kubeconfig)

    # An empty cluster selects the current kubeconfig context.
    request = DependencyRequest(
        cluster=cluster,
        kind=kind,
        name=name,
        namespace=namespace,
        direction=Direction(direction),
        depth=normalize_depth(depth),
        format=OutputFormat(output_format),
    )

    async def _run() -> str:
        store = KubernetesResourceStore(k8s)
        try:
            service = DependencyService(store, fetch_timeout=float(config.resolver.fetch_timeout_seconds))
            return await service.describe(request)
        finally:
            await store.close()

    try:
        output = asyncio.run(_run())
    except ResolutionError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(output, nl=not output.endswith("\n"))


@cli.command()
def serve() -> None:
    """Run the MCP server and, when enabled, the REST API."""
    from kubedep.app import main

    asyncio.run(main())
