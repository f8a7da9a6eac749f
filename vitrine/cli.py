"""CLI commands for Vitrine."""

import asyncio
import base64
import logging
import os
import re
import secrets
import sys
from pathlib import Path

import click
import yaml


@click.group()
@click.version_option(package_name="vitrine")
def cli():
    """Vitrine - catalog API for a furniture storefront."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the Vitrine server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = Config()
    config.application_path = "vitrine.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from vitrine.asgi import create_app

    app = create_app()
    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.option(
    "--write",
    type=click.Path(),
    default=None,
    help="Write SECRET_KEY to a .env file",
)
@click.option(
    "--format",
    "fmt",
    default="urlsafe",
    type=click.Choice(["urlsafe", "hex", "base64"]),
    help="Output format for the secret key",
)
@click.option("--length", default=32, type=int, help="Number of random bytes")
def secret(write, fmt, length):
    """Generate a secure secret key."""
    if fmt == "urlsafe":
        key = secrets.token_urlsafe(length)
    elif fmt == "hex":
        key = secrets.token_hex(length)
    else:  # base64
        key = base64.b64encode(secrets.token_bytes(length)).decode("ascii")

    if write:
        env_path = Path(write)
        env_content = env_path.read_text() if env_path.exists() else ""

        secret_key_pattern = re.compile(r"^SECRET_KEY=.*$", re.MULTILINE)
        new_line = f"SECRET_KEY={key}"

        if secret_key_pattern.search(env_content):
            env_content = secret_key_pattern.sub(new_line, env_content)
        else:
            if env_content and not env_content.endswith("\n"):
                env_content += "\n"
            env_content += new_line + "\n"

        env_path.write_text(env_content)
        click.echo(f"SECRET_KEY written to {env_path}")
    else:
        click.echo(key)


@cli.command()
@click.option("--subject", default="admin", help="Who the token is issued to")
@click.option(
    "--expires-in",
    default=None,
    type=int,
    help="Lifetime in seconds (defaults to auth.token_ttl)",
)
def token(subject, expires_in):
    """Issue a bearer token for the catalog admin API."""
    from vitrine.auth.tokens import create_admin_token
    from vitrine.config import get_settings

    settings = get_settings()
    ttl = expires_in if expires_in is not None else settings.auth.token_ttl
    click.echo(create_admin_token(settings.secret_key, subject, ttl))


def _run_alembic(project_root: Path, args: list[str]) -> None:
    """Build an Alembic Config programmatically and run the given command."""
    from alembic.config import CommandLine, Config

    package_dir = Path(__file__).parent

    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        alembic_ini = package_dir / "alembic.ini"
        if not alembic_ini.exists():
            click.echo("Error: Could not find alembic.ini", err=True)
            sys.exit(1)

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(package_dir / "alembic"))

    cmd = CommandLine()
    options = cmd.parser.parse_args(args)
    if not hasattr(options, "cmd"):
        cmd.parser.error("too few arguments")
    else:
        cfg.cmd_opts = options
        fn, positional, kwarg = options.cmd
        fn(
            cfg,
            *[getattr(options, k, None) for k in positional],
            **{k: getattr(options, k, None) for k in kwarg},
        )


@cli.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.pass_context
def db(ctx):
    """Run database migrations via Alembic.

    \b
    Examples:
        vitrine db upgrade head    # Apply all migrations
        vitrine db downgrade -1    # Rollback one migration
        vitrine db current         # Show current revision
        vitrine db history         # Show migration history
    """
    project_root = Path.cwd()
    os.chdir(project_root)

    if not ctx.args:
        click.echo(ctx.get_help())
        return

    _run_alembic(project_root, ctx.args)


@cli.command("reconcile-uploads")
def reconcile_uploads():
    """Delete uploaded files no product media references."""
    from vitrine.app_config import build_db_config, build_upload_store
    from vitrine.config import get_settings
    from vitrine.db.services.upload_service import reconcile_uploads as sweep

    settings = get_settings()
    db_config = build_db_config(settings)
    store = build_upload_store(settings)

    async def run():
        try:
            async with db_config.get_session() as session:
                return await sweep(session, store)
        finally:
            await db_config.get_engine().dispose()

    result = asyncio.run(run())
    for name in result.removed:
        click.echo(f"removed {name}")
    click.echo(f"{result.total_removed} file(s) removed")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def seed(path):
    """Load categories and products from a YAML file.

    \b
    Categories are matched by slug and skipped when they already exist.
    Products name their category by slug under ``category``.
    """
    from vitrine.app_config import build_db_config, build_upload_store
    from vitrine.config import get_settings
    from vitrine.db.services.seed_service import seed_catalog

    with open(path, "r") as f:
        document = yaml.safe_load(f) or {}

    settings = get_settings()
    db_config = build_db_config(settings)
    store = build_upload_store(settings)

    async def run():
        try:
            async with db_config.get_session() as session:
                return await seed_catalog(
                    session,
                    store,
                    document,
                    assets_enabled=settings.catalog.assets_enabled,
                )
        finally:
            await db_config.get_engine().dispose()

    summary = asyncio.run(run())
    click.echo(
        f"{summary.categories_created} category(ies) and "
        f"{summary.products_created} product(s) created"
    )


if __name__ == "__main__":
    cli()
