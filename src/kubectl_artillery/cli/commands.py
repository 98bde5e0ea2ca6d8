"""
kubectl-artillery commands

``scaffold`` writes Artillery test scripts from the HTTP liveness probes
behind Kubernetes Services. ``generate`` packages an existing test script as a
Kubernetes Job with Kustomize.
"""

from __future__ import annotations

from pathlib import Path

import click
import structlog
from pydantic import ValidationError
from rich.console import Console

from .. import __version__
from ..artillery import (
    KUSTOMIZATION_FILENAME,
    TEST_FILENAME,
    Generatable,
    config_map_name,
    copy_file_to,
    generate,
    mkdir_target_or_default,
    new_kustomization,
    new_test_job,
    project_test_script,
)
from ..config import ArtillerySettings, get_settings
from ..errors import ArtilleryError, InvalidArgumentError
from ..kube import (
    KubernetesClusterAccessor,
    LivenessHit,
    LivenessMiss,
    QueryMiss,
    QueryResult,
    run_query,
)
from ..observability import configure_logging
from .validation import validate_name, validate_script_exists

CLI_NAME = "kubectl artillery"
EXIT_INTERRUPTED = 130

console = Console()
logger = structlog.get_logger(__name__)


def _echo(message: str, style: str | None = None) -> None:
    console.print(message, style=style, soft_wrap=True, highlight=False, markup=False)


@click.group(
    help="Bootstrap artillery.io testing on Kubernetes",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, prog_name=CLI_NAME)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level for diagnostics written to stderr",
)
@click.option("--log-json", is_flag=True, help="Write diagnostics as JSON lines")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_json: bool):
    """kubectl-artillery CLI root command."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.ClickException(f"invalid configuration: {e}") from e

    configure_logging(log_level or settings.log_level, json_logs=log_json)
    ctx.obj = settings


@cli.command()
@click.argument("names", nargs=-1)
@click.option(
    "-n",
    "--namespace",
    default=None,
    help="Optional. Specify a namespace for your services",
)
@click.option(
    "-o",
    "--out",
    "out_path",
    default=None,
    help="Optional. Specify output path to write the test script files",
)
@click.option("--kubeconfig", default=None, help="Path to the kubeconfig file to use")
@click.option("--context", "kube_context", default=None, help="Kubeconfig context to use")
@click.pass_obj
def scaffold(
    settings: ArtillerySettings,
    names: tuple[str, ...],
    namespace: str | None,
    out_path: str | None,
    kubeconfig: str | None,
    kube_context: str | None,
):
    """Scaffolds test scripts from K8s services using liveness probe HTTP endpoints.

    \b
    Examples:
      kubectl artillery scaffold <k8s-service-name>
      kubectl artillery scaffold <k8s-service1> <k8s-service2>
      kubectl artillery scaffold <k8s-service-name> [--namespace ] [--out ]
    """
    if not names:
        raise click.UsageError("missing service name or names")

    try:
        for name in names:
            validate_name(name, "service")

        accessor = KubernetesClusterAccessor.from_kubeconfig(
            kubeconfig=kubeconfig or settings.kubeconfig,
            context=kube_context or settings.context,
        )
        ns = namespace or settings.namespace or accessor.default_namespace

        results = run_query(
            list(names),
            ns,
            accessor,
            max_workers=settings.max_workers,
            timeout=settings.query_timeout,
        )

        hits = []
        for result in results:
            hit = _report(result)
            if hit is not None:
                hits.append(hit)

        if not hits:
            return

        target_dir = mkdir_target_or_default(Path.cwd(), out_path, settings.scripts_dir)
        scripts = [
            Generatable(
                path=target_dir / f"test-script_{hit.selection_service_name}.yaml",
                document=project_test_script(
                    hit.selection_service_name,
                    hit.endpoints,
                    namespace=hit.selection.namespace,
                    ports=hit.selection.ports,
                ),
            )
            for hit in hits
        ]
        _echo(generate(scripts, indent=2))

    except InvalidArgumentError as e:
        raise click.UsageError(e.message) from e
    except ArtilleryError as e:
        logger.error("scaffold_failed", error=e.message)
        raise click.ClickException(e.message) from e
    except KeyboardInterrupt:
        _echo("interrupted", style="yellow")
        click.get_current_context().exit(EXIT_INTERRUPTED)


def _report(result: QueryResult) -> LivenessHit | None:
    """Print the outcome of one queried name; return it when scripts should be written."""
    if isinstance(result, QueryMiss):
        _echo(f'services "{result.queried_service_name}" not found')
        return None
    if isinstance(result, LivenessMiss):
        _echo(
            f'services "{result.selection_service_name}" has no liveness probe endpoints, '
            "or ports mapping to endpoints"
        )
        return None
    if isinstance(result, LivenessHit):
        return result
    raise TypeError(f"unhandled query result {result!r}")


@cli.command(name="generate")
@click.argument("name", required=False)
@click.option(
    "-s",
    "--script",
    required=True,
    help="Specify path to artillery test-script file",
)
@click.option(
    "-n",
    "--namespace",
    default=None,
    help="Optional. Specify a namespace to apply your Job and related manifests",
)
@click.option(
    "-o",
    "--out",
    "out_path",
    default=None,
    help="Optional. Specify output path to write Job and related manifests",
)
@click.option(
    "-c",
    "--count",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Optional. Specify how many test workers the created Job should run",
)
@click.pass_obj
def generate_test(
    settings: ArtillerySettings,
    name: str | None,
    script: str,
    namespace: str | None,
    out_path: str | None,
    count: int,
):
    """Generates a k8s Job packaged with Kustomize to execute a test.

    \b
    Examples:
      kubectl artillery generate <job-name> --script path/to/test-script
      kubectl artillery generate <job-name> -s path/to/test-script [--namespace] [--out ] [--count ]
    """
    if not name:
        raise click.UsageError("missing test name")

    try:
        validate_name(name, "test")
        script_path = validate_script_exists(script)

        ns = namespace or settings.namespace or "default"
        config_map = config_map_name(name)

        target_dir = mkdir_target_or_default(Path.cwd(), out_path, settings.manifests_dir)
        copy_file_to(target_dir, script_path)

        job = new_test_job(
            name,
            ns,
            config_map,
            script_path.name,
            count=count,
            worker_image=settings.worker_image,
        )
        kustomization = new_kustomization(TEST_FILENAME, ns, config_map, script_path)

        _echo(
            generate(
                [
                    Generatable(path=target_dir / TEST_FILENAME, document=job),
                    Generatable(path=target_dir / KUSTOMIZATION_FILENAME, document=kustomization),
                ],
                indent=2,
            )
        )

    except InvalidArgumentError as e:
        raise click.UsageError(e.message) from e
    except ArtilleryError as e:
        logger.error("generate_failed", error=e.message)
        raise click.ClickException(e.message) from e


cli.add_command(generate_test, name="gen")


def main() -> None:
    """Console script entry point."""
    cli(prog_name=CLI_NAME)
