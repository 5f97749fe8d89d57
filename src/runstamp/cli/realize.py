"""
CLI commands for realizing and stamping pipelines from manifest files.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

import yaml

from runstamp.cli.ux import console, error, header, print_key_value, print_table, success
from runstamp.config import get_settings
from runstamp.core.errors import ExitCode, ManifestError, RepositoryError, main_with_error_handling
from runstamp.logging import bind_context
from runstamp.models import Pipeline
from runstamp.realizer import PipelineRealizer
from runstamp.repository import InMemoryRepository, ManifestSet, load_manifests
from runstamp.templates import Stamper


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="+",
        help="RunTemplate/Pipeline manifest files or directories",
    )
    parser.add_argument("--pipeline", help="Only this pipeline (default: all)")
    parser.add_argument("--namespace", "-n", help="Only pipelines in this namespace")


def register_realize_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``realize`` subcommand."""
    realize_parser = subparsers.add_parser(
        "realize",
        help="Realize pipelines against an in-memory store",
        description="Exit codes: 0=all pipelines ready, 1=at least one not ready.",
    )
    _add_selection_args(realize_parser)
    realize_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )


def register_stamp_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``stamp`` subcommand."""
    stamp_parser = subparsers.add_parser(
        "stamp",
        help="Print stamped objects without creating them",
    )
    _add_selection_args(stamp_parser)


def _load(paths: list[str], pipeline: str | None, namespace: str | None) -> tuple[ManifestSet, list[Pipeline]]:
    manifests = load_manifests(*paths, default_namespace=get_settings().default_namespace)
    selected = manifests.select_pipelines(name=pipeline, namespace=namespace)
    if not selected:
        raise ManifestError("No matching Pipeline manifests found", details={"paths": " ".join(paths)})
    return manifests, selected


async def _realize_all(
    pipelines: list[Pipeline],
    repository: InMemoryRepository,
    realizer: PipelineRealizer,
    timeout: float,
) -> list[dict[str, Any]]:
    results = []
    for pipeline in pipelines:
        logger = bind_context(pipeline=pipeline.name, namespace=pipeline.namespace)
        try:
            condition, outputs, obj = await asyncio.wait_for(
                realizer.realize(pipeline, logger, repository),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise RepositoryError(
                f"realizing pipeline '{pipeline.name}' timed out after {timeout}s"
            ) from e
        results.append(
            {
                "pipeline": pipeline.name,
                "namespace": pipeline.namespace,
                "condition": condition.to_dict(),
                "outputs": outputs,
                "object": obj,
            }
        )
    return results


def print_realize_results(results: list[dict[str, Any]]) -> None:
    header("Realized pipelines")
    rows = [
        [
            f"{r['namespace']}/{r['pipeline']}" if r["namespace"] else r["pipeline"],
            r["condition"]["status"],
            r["condition"]["reason"],
            r["condition"]["message"],
        ]
        for r in results
    ]
    print_table("RunTemplateReady", ["Pipeline", "Status", "Reason", "Message"], rows)

    for r in results:
        if r["outputs"]:
            print_key_value(
                {name: json.dumps(value) for name, value in r["outputs"].items()},
                title=f"Outputs: {r['pipeline']}",
            )
    console.print()


@main_with_error_handling()
def realize_command(
    paths: list[str],
    pipeline: str | None = None,
    namespace: str | None = None,
    output_format: str = "text",
) -> int:
    """Realize every selected pipeline and report its condition.

    Returns:
        Exit code (0 when every pipeline is Ready)
    """
    settings = get_settings()
    manifests, pipelines = _load(paths, pipeline, namespace)
    realizer = PipelineRealizer(label_prefix=settings.label_prefix)

    results = asyncio.run(
        _realize_all(pipelines, manifests.repository(), realizer, settings.realize_timeout)
    )

    if output_format == "json":
        print(json.dumps(results, indent=2))
    else:
        print_realize_results(results)

    ready = all(r["condition"]["status"] == "True" for r in results)
    if output_format != "json":
        if ready:
            success(f"{len(results)} pipeline(s) ready")
        else:
            error("Some pipelines are not ready")
    return ExitCode.SUCCESS if ready else ExitCode.NOT_READY


async def _stamp_all(
    pipelines: list[Pipeline],
    repository: InMemoryRepository,
    realizer: PipelineRealizer,
) -> list[dict[str, Any]]:
    stamped = []
    for pipeline in pipelines:
        template = await repository.get_run_template(pipeline.spec.run_template_ref)
        stamper = Stamper.for_pipeline(pipeline, labels=realizer.labels_for(pipeline, template.name))
        stamped.append(stamper.stamp(template.resource_template))
    return stamped


@main_with_error_handling()
def stamp_command(
    paths: list[str],
    pipeline: str | None = None,
    namespace: str | None = None,
) -> int:
    """Print the objects the selected pipelines would create.

    Returns:
        Exit code (0 for success)
    """
    settings = get_settings()
    manifests, pipelines = _load(paths, pipeline, namespace)
    realizer = PipelineRealizer(label_prefix=settings.label_prefix)

    documents = asyncio.run(_stamp_all(pipelines, manifests.repository(), realizer))
    print(yaml.safe_dump_all(documents, sort_keys=False), end="")
    return ExitCode.SUCCESS


def handle_realize_command(args: argparse.Namespace) -> int:
    return realize_command(
        paths=args.paths,
        pipeline=getattr(args, "pipeline", None),
        namespace=getattr(args, "namespace", None),
        output_format=getattr(args, "output", "text"),
    )


def handle_stamp_command(args: argparse.Namespace) -> int:
    return stamp_command(
        paths=args.paths,
        pipeline=getattr(args, "pipeline", None),
        namespace=getattr(args, "namespace", None),
    )
