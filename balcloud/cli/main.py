"""Main CLI entrypoint for balcloud."""

import json
import logging
import sys
from typing import Any, Dict

import click

from ..constants import CLOUD_DOCKER, CLOUD_K8S
from ..context import BuildContext
from ..errors import BuildError
from ..extractor import extract_intent
from ..manager import ArtifactManager
from ..project import load_project
from ..writer import format_instructions


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Show progress logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """balcloud - Kubernetes and Docker artifacts from Ballerina sources."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    print(json.dumps(data, indent=None))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


@main.command()
@click.argument('project', type=click.Path(exists=True))
@click.option('--cloud', default=CLOUD_K8S, show_default=True,
              help=f'Artifacts to generate: {CLOUD_K8S} or {CLOUD_DOCKER}')
@click.option('--output', 'output_dir', type=click.Path(file_okay=False), help='Output directory (default: PROJECT/target)')
@click.option('--jar', 'jar_path', type=click.Path(dir_okay=False), help='Executable jar (default: target/bin/<package>.jar)')
@click.option('--cloud-toml', 'cloud_toml', type=click.Path(dir_okay=False), help='Override document (default: PROJECT/Cloud.toml)')
@click.option('--build-image/--no-build-image', default=None, help='Run docker build on the generated context')
@click.pass_context
def build(ctx, project, cloud, output_dir, jar_path, cloud_toml, build_image):
    """Generate artifacts for a Ballerina package."""
    output_json = ctx.obj.get('json', False)
    try:
        loaded = load_project(project, cloud_toml)
        build_ctx = BuildContext.from_project(loaded, output_dir=output_dir, jar_path=jar_path, build_image=build_image)
        _human_output("\nGenerating artifacts...\n")
        result = ArtifactManager(build_ctx).create_artifacts(cloud)
    except BuildError as e:
        click.echo(f"error [balcloud]: {e}", err=True)
        sys.exit(1)

    if output_json:
        _json_output({
            'package': loaded.package.name,
            'cloud': cloud,
            'image': result.image,
            'files': [str(p) for p in result.files],
            'instructions': [{'title': t.strip(), 'command': c.strip()} for t, c in result.instructions],
        })
        return

    for path in result.files:
        _human_output(f"\t{path}")
    _human_output("")
    click.echo(format_instructions(result.instructions), nl=False)


@main.command()
@click.argument('project', type=click.Path(exists=True))
@click.pass_context
def inspect(ctx, project):
    """Show the listeners, services and task found in a package."""
    try:
        loaded = load_project(project)
    except BuildError as e:
        click.echo(f"error [balcloud]: {e}", err=True)
        sys.exit(1)
    intent = extract_intent(loaded.modules)

    if ctx.obj.get('json', False):
        _json_output({'package': loaded.package.name, 'intent': intent.to_dict()})
        return

    _human_output(f"Package: {loaded.package.name}")
    _human_output(f"Listeners ({len(intent.listeners)}):")
    for listener in intent.listeners:
        port = listener.port or (f"<{listener.port_ref}>" if listener.port_ref else "?")
        tls = " (TLS)" if listener.config else ""
        _human_output(f"  - {listener.name}: {port}{tls}")
    _human_output(f"Services ({len(intent.services)}):")
    for service in intent.services:
        _human_output(f"  - {service.service_path or '/'} on {service.listener.name}")
        for resource in service.resources:
            _human_output(f"      {resource.method} {resource.path}")
    if intent.task is not None:
        _human_output(f"Task schedule: {intent.task.to_cron()}")


if __name__ == '__main__':
    main()
