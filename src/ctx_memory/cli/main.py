"""CLI commands: stats, list, show, reindex, serve."""

from __future__ import annotations

import json
import logging

import click

from ctx_memory.config import get_settings
from ctx_memory.errors import ContextError
from ctx_memory.service import ContextService

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--root", type=click.Path(file_okay=False), default=None, help="Override the storage root")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, root: str | None) -> None:
    """ctx-memory — project and conversation context storage."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    overrides = {"storage_root": root} if root else {}
    ctx.obj = ContextService(get_settings(**overrides))


# ---------------------------------------------------------------------------
# read commands
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_obj
def stats(service: ContextService) -> None:
    """Show storage statistics."""
    info = service.stats()

    click.echo("Context Statistics")
    click.echo("=" * 40)
    click.echo(f"  root: {info['root']}")
    click.echo(f"  projects: {info['projects']}")
    click.echo(f"  project contexts: {info['project_contexts']}")
    click.echo(f"  conversation contexts: {info['conversation_contexts']}")
    click.echo(f"  index entries: {info['index_entries']}")


@cli.command("list")
@click.option("--project-id", default=None, help="Only contexts of this project")
@click.option("--tag", default=None, help="Only contexts carrying this tag")
@click.option("--type", "kind", type=click.Choice(["project", "conversation"]), default=None)
@click.pass_obj
def list_cmd(service: ContextService, project_id: str | None, tag: str | None, kind: str | None) -> None:
    """List contexts, most recent first, as JSON."""
    try:
        contexts = service.list(project_id=project_id, tag=tag, kind=kind)
    except ContextError as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps([c.to_record() for c in contexts], indent=2, ensure_ascii=False))


@cli.command()
@click.argument("context_id")
@click.option("--project-id", default=None, help="Project the context belongs to")
@click.pass_obj
def show(service: ContextService, context_id: str, project_id: str | None) -> None:
    """Print the content of a single context."""
    try:
        context = service.get(context_id, project_id)
    except ContextError as e:
        raise click.ClickException(str(e)) from e
    if context is None:
        raise click.ClickException(f"Context not found with ID: {context_id}")
    click.echo(context.content)


# ---------------------------------------------------------------------------
# maintenance
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_obj
def reindex(service: ContextService) -> None:
    """Rebuild the index from the files on disk."""
    try:
        count = service.reindex()
    except ContextError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Indexed {count} contexts into {service.paths.index_file}")


@cli.command()
@click.pass_obj
def serve(service: ContextService) -> None:
    """Run the MCP server on stdio."""
    import asyncio

    from ctx_memory import server

    ContextService.set_instance(service)
    logger.info(f"Serving contexts from {service.paths.root}")
    asyncio.run(server.run())


if __name__ == "__main__":
    cli()
