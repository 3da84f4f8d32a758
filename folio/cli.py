"""Command line interface: run the server, render page documents, manage the database."""

import asyncio
import base64
import json
import os
import re
import secrets
from pathlib import Path

import click

PACKAGE_DIR = Path(__file__).parent

_KEY_FORMATS = {
    "urlsafe": secrets.token_urlsafe,
    "hex": secrets.token_hex,
    "base64": lambda length: base64.b64encode(secrets.token_bytes(length)).decode("ascii"),
}


@click.group()
@click.version_option(package_name="folio")
def cli():
    """Folio - personal pages built from a JSON page document."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8080, show_default=True, type=int, help="Port to bind")
@click.option("--reload", is_flag=True, help="Restart when source files change")
@click.option("--workers", default=1, show_default=True, type=int, help="Worker processes (ignored with --reload)")
@click.option(
    "--log-level",
    default="info",
    show_default=True,
    type=click.Choice(["debug", "info", "warning", "error"]),
)
def serve(host, port, reload, workers, log_level):
    """Serve the page API and public pages with Hypercorn."""
    from hypercorn.config import Config

    config = Config()
    config.application_path = "folio.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.loglevel = log_level.upper()
    config.include_server_header = False
    config.use_reloader = reload
    config.workers = 1 if reload else workers

    if reload or workers > 1:
        from hypercorn.run import run

        run(config)
        return

    from hypercorn.asyncio import serve as hypercorn_serve

    from folio.asgi import app

    asyncio.run(hypercorn_serve(app, config))


@cli.command()
@click.argument("config_file", type=click.File("r"))
@click.option("--preview", is_flag=True, help="Mark the output as a draft preview")
def render(config_file, preview):
    """Render a page document (JSON) to HTML on stdout.

    Accepts either a bare document or an API payload wrapping it in
    ``draftConfig``.
    """
    from folio.config import get_settings
    from folio.document.models import PageConfig
    from folio.rendering.composer import render_page

    try:
        document = json.load(config_file)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="CONFIG_FILE") from exc
    if isinstance(document, dict) and isinstance(document.get("draftConfig"), dict):
        document = document["draftConfig"]
    if not isinstance(document, dict):
        raise click.BadParameter("expected a JSON object", param_hint="CONFIG_FILE")

    config = PageConfig.from_document(document)
    click.echo(render_page(config, get_settings().pages.default_hero_slides, preview=preview))


@cli.command()
@click.argument("name", type=click.Choice(["empty", "demo"]), default="empty")
def template(name):
    """Print a seed page document as JSON."""
    from folio.document.templates import get_template

    click.echo(json.dumps(get_template(name).to_document(), indent=2, ensure_ascii=False))


def set_env_value(env_path: Path, name: str, value: str) -> None:
    """Set ``NAME=value`` in a dotenv file, replacing an existing assignment."""
    content = env_path.read_text() if env_path.exists() else ""
    line = f"{name}={value}"
    pattern = re.compile(rf"^{re.escape(name)}=.*$", re.MULTILINE)
    if pattern.search(content):
        content = pattern.sub(lambda _: line, content)
    else:
        if content and not content.endswith("\n"):
            content += "\n"
        content += line + "\n"
    env_path.write_text(content)


@cli.command()
@click.option("--write", type=click.Path(dir_okay=False, path_type=Path), help="Store as SECRET_KEY in this .env file")
@click.option("--format", "fmt", default="urlsafe", show_default=True, type=click.Choice(list(_KEY_FORMATS)))
@click.option("--length", default=32, show_default=True, type=int, help="Random bytes in the key")
def secret(write, fmt, length):
    """Generate a session signing key."""
    key = _KEY_FORMATS[fmt](length)
    if write is None:
        click.echo(key)
        return
    set_env_value(write, "SECRET_KEY", key)
    click.echo(f"SECRET_KEY written to {write}")


def _alembic_config():
    from alembic.config import Config

    ini_path = Path.cwd() / "alembic.ini"
    if not ini_path.exists():
        ini_path = PACKAGE_DIR / "alembic.ini"
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))
    database_url = os.environ.get("FOLIO_DATABASE_URL")
    if database_url:
        # ConfigParser interpolation treats % specially
        config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


@cli.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
@click.pass_context
def db(ctx):
    """Run Alembic against the pages database.

    \b
    Examples:
        folio db upgrade head
        folio db downgrade -1
        folio db current
    """
    from alembic.config import CommandLine

    if not ctx.args:
        click.echo(ctx.get_help())
        return

    command_line = CommandLine(prog="folio db")
    options = command_line.parser.parse_args(ctx.args)
    if not hasattr(options, "cmd"):
        command_line.parser.error("too few arguments")

    config = _alembic_config()
    config.cmd_opts = options
    command_line.run_cmd(config, options)


if __name__ == "__main__":
    cli()
