"""
Entry point of `notion-mirror` CLI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import dotenv
from click.exceptions import BadParameter, MissingParameter
from pydantic import ValidationError
from typer import Argument, Context, Exit, Option

from ...core import Session
from ...core.utils import title_text
from ..config import DEFAULT_SYNC_DIR, Config, InstanceConfig
from . import db, page, sync
from ._utils import (
    MainTyper,
    get_root_context,
    logger,
    lookup_param,
    print_json,
)

app = MainTyper(
    "notion-mirror",
    help="Mirror Notion databases to local Markdown files and back",
)


@app.callback()
def main(
    ctx: Context,
    token: str
    | None = Option(
        None,
        help="Notion integration token",
        envvar="NOTION_TOKEN",
    ),
    notion_version: str
    | None = Option(
        None,
        help="Notion API version",
        envvar="NOTION_VERSION",
    ),
    base_url: str
    | None = Option(
        None,
        help="Notion API base URL",
        envvar="NOTION_API_BASE",
    ),
    sync_dir: Path
    | None = Option(
        None,
        "--sync-dir",
        help=f"Root folder of local mirror [default: {DEFAULT_SYNC_DIR}]",
        envvar="NOTION_AUTO_SYNC_DIR",
        file_okay=False,
    ),
    refresh_ttl_ms: int
    | None = Option(
        None,
        "--refresh-ttl-ms",
        help="Milliseconds for which a refreshed database is considered fresh",
        envvar="NOTION_REFRESH_TTL_MS",
        min=0,
    ),
    instance_name: str
    | None = Option(
        None,
        "--instance",
        help="Instance name as configured in .yaml",
        envvar="NOTION_MIRROR_INSTANCE",
    ),
    config_file: Path = Option(
        "notion-mirror.yaml",
        help=".yaml file containing instance info, used with --instance",
        envvar="NOTION_MIRROR_CONFIG_FILE",
        dir_okay=False,
    ),
    log_level: str = Option(
        "INFO",
        help="Logging level",
        envvar="LOG_LEVEL",
    ),
):
    logger.setLevel(log_level.upper())

    if instance_name:
        root_context = RootContext.from_config(
            ctx=ctx, instance_name=instance_name, config_file=config_file
        )
    else:
        if not token:
            raise MissingParameter(
                message="one of --token/NOTION_TOKEN or --instance required",
                ctx=ctx,
                param_hint=["token", "instance"],
                param_type="option",
            )

        instance = InstanceConfig(token=token)
        root_context = RootContext(ctx=ctx, instance=instance, from_file=False)

    # explicit options and environment override config file
    overrides = {
        "notion_version": notion_version,
        "base_url": base_url,
        "sync_dir": sync_dir,
        "refresh_ttl": (
            refresh_ttl_ms / 1000 if refresh_ttl_ms is not None else None
        ),
    }
    updates = {k: v for k, v in overrides.items() if v is not None}

    if updates:
        root_context.instance = InstanceConfig.model_validate(
            root_context.instance.model_dump() | updates
        )

    ctx.obj = root_context


app.add_typer(sync.app)
app.add_typer(db.app)
app.add_typer(page.app)


@app.command()
def check(ctx: Context):
    """
    Check Notion connection
    """
    root_context = get_root_context(ctx)

    try:
        me = root_context.session.me()
    except Exception as e:
        logger.error(f"Failed to connect to Notion: {e}")
        raise Exit(code=1)

    logger.info(f"Connected to Notion as '{me.get('name') or me.get('id')}'")


@app.command()
def search(
    ctx: Context,
    query: str = Argument(help="Text to search for in titles"),
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    Search pages and databases shared with the integration
    """
    session = get_root_context(ctx).session

    items = []
    for result in session.iter_search(query=query):
        if result.get("object") == "database":
            title = title_text(result.get("title"))
        else:
            title = next(
                (
                    title_text(prop.get("title"))
                    for prop in (result.get("properties") or {}).values()
                    if prop.get("type") == "title"
                ),
                "",
            )

        items.append(
            {"id": result["id"], "object": result.get("object"), "title": title}
        )

    if json_:
        print_json(items)
    else:
        for item in items:
            logger.info(f"{item['object']} {item['id']}: {item['title']}")


def run():
    dotenv.load_dotenv()
    app()


@dataclass(kw_only=True)
class RootContext:
    ctx: Context
    instance: InstanceConfig
    from_file: bool
    _session: Session | None = field(default=None, repr=False)

    @classmethod
    def from_config(
        cls,
        *,
        ctx: Context,
        instance_name: str,
        config_file: Path,
    ) -> RootContext:
        # ensure config file exists
        if not config_file.is_file():
            raise BadParameter(
                message=f"file does not exist: {config_file}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get config from file
        try:
            config = Config.load_yaml(config_file)
        except (ValueError, ValidationError) as e:
            raise BadParameter(
                f"failed to load config file '{config_file}': {e}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get instance from config
        instance = config.instances.get(instance_name)
        if not instance:
            raise BadParameter(
                f"instance '{instance_name}' not found in '{config_file}'",
                ctx=ctx,
                param=lookup_param(ctx, "instance_name"),
            )

        return RootContext(ctx=ctx, instance=instance, from_file=True)

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = self.create_session()
        return self._session

    def create_session(self) -> Session:
        try:
            return self.instance.create_session(logger=logger)
        except Exception as e:
            logger.error(f"Failed to create session: {e}")
            raise Exit(code=1)


if __name__ == "__main__":
    run()
