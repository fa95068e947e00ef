"""Main CLI entry point for confluence-mirror command.

This module provides the Typer application that serves as the entry point
for the confluence-mirror command-line tool. Global options configure
logging and output; each subcommand answers one question about what a user
can see.
"""

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.markup import escape

from src.access_control.service import ConfluenceMirrorService
from src.cli.errors import ProfileLoadError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.profile_loader import ProfileLoader
from src.config.config_loader import ConfigLoader
from src.config.errors import ConfigError
from src.confluence_client.auth import Authenticator
from src.confluence_client.errors import InvalidCredentialsError
from src.models.access_profile import UserAccessProfile

app = typer.Typer(
    name="confluence-mirror",
    help="""Access-controlled, read-only view of a Confluence site.

QUICK START:
  confluence-mirror pages profile.yaml              # Pages the profile can see
  confluence-mirror pages profile.yaml --tree       # ... as a page tree
  confluence-mirror can-view profile.yaml 123456    # Exit 0 if visible, 1 if not
  confluence-mirror page 123456                     # Page details
  confluence-mirror spaces                          # All spaces
  confluence-mirror search "type=page AND space=ENG"

Credentials come from CONFLUENCE_URL, CONFLUENCE_EMAIL and CONFLUENCE_API_TOKEN
(a .env file is read automatically).""",
    add_completion=False,
    rich_markup_mode=None,  # Disable Rich markup to avoid compatibility issues
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Options shared by every subcommand."""
    config_path: Optional[str]
    output: OutputHandler


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    # Configure app-specific logger (not root) to avoid affecting libraries
    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    # Remove handlers from a previous invocation in the same process
    app_logger.handlers.clear()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Timestamped filename in local time
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"confluence-mirror_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@contextmanager
def _command_errors(output: OutputHandler) -> Iterator[None]:
    """Turn unexpected exceptions into a GENERAL_ERROR exit."""
    try:
        yield
    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Unexpected error")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _build_service(state: CLIState) -> ConfluenceMirrorService:
    """Load configuration, check credentials and build the service."""
    try:
        config = ConfigLoader.load(state.config_path)
    except ConfigError as e:
        logger.error(f"Configuration failed: {e}")
        state.output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    # The CLI has no MCP host, so it always reads through the REST API
    authenticator = Authenticator()
    try:
        authenticator.get_credentials()
    except InvalidCredentialsError as e:
        state.output.error(str(e))
        raise typer.Exit(ExitCode.AUTH_ERROR)

    return ConfluenceMirrorService.from_config(config, authenticator=authenticator)


def _load_profile(state: CLIState, profile_path: str) -> UserAccessProfile:
    try:
        profile = ProfileLoader.load(profile_path)
    except ProfileLoadError as e:
        logger.error(str(e))
        state.output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    state.output.debug(
        f"Profile {profile.user_id}: {len(profile.space_keys)} space(s), "
        f"{len(profile.page_grants)} page grant(s), {len(profile.exclusions)} exclusion(s)"
    )
    return profile


def _version_callback(value: bool) -> None:
    if value:
        typer.echo("confluence-mirror version 0.1.0")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Configuration file (default: {ConfigLoader.DEFAULT_CONFIG_PATH} if present)",
        metavar="PATH",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Access-controlled, read-only view of a Confluence site."""
    _configure_logging(verbosity, logdir)
    ctx.obj = CLIState(
        config_path=config_path,
        output=OutputHandler(verbosity=verbosity, no_color=no_color),
    )


@app.command("pages")
def pages_command(
    ctx: typer.Context,
    profile_path: str = typer.Argument(..., metavar="PROFILE", help="Access profile file (YAML or JSON)"),
    tree: bool = typer.Option(False, "--tree", help="Show pages as a parent/child tree"),
) -> None:
    """List every page the profile can see."""
    state: CLIState = ctx.obj
    output = state.output

    with _command_errors(output):
        profile = _load_profile(state, profile_path)
        if not profile.has_access():
            output.warning(f"User {profile.user_id} has no Confluence access")
            raise typer.Exit(ExitCode.SUCCESS)

        service = _build_service(state)
        pages = service.get_pages_for_user(profile)
        title = f"Pages visible to {profile.user_id}"

        if tree:
            output.print_page_tree(service.build_page_tree(pages), title)
        else:
            output.print_pages_table(pages, title)


@app.command("page")
def page_command(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Confluence page ID"),
    content: bool = typer.Option(False, "--content", help="Also print the page body"),
) -> None:
    """Show one page, bypassing access profiles."""
    state: CLIState = ctx.obj
    output = state.output

    with _command_errors(output):
        service = _build_service(state)
        page = service.get_page(page_id)
        if page is None:
            output.error(f"Page {page_id} not found or unavailable")
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        output.print_page_details(page, show_content=content)


@app.command("can-view")
def can_view_command(
    ctx: typer.Context,
    profile_path: str = typer.Argument(..., metavar="PROFILE", help="Access profile file (YAML or JSON)"),
    page_id: str = typer.Argument(..., help="Confluence page ID"),
    super_admin: bool = typer.Option(False, "--super-admin", help="Evaluate as a super admin"),
) -> None:
    """Check whether the profile can see a page (exit 0 if visible, 1 if not)."""
    state: CLIState = ctx.obj
    output = state.output

    with _command_errors(output):
        profile = _load_profile(state, profile_path)
        service = _build_service(state)

        page = service.get_page(page_id)
        if page is None:
            output.error(f"Page {page_id} not found or unavailable")
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        if service.can_view_page(profile, page, is_super_admin=super_admin):
            output.success(f"User {profile.user_id} can view page {page.id} ({escape(page.title)})")
            raise typer.Exit(ExitCode.SUCCESS)

        output.warning(f"User {profile.user_id} cannot view page {page.id} ({escape(page.title)})")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command("spaces")
def spaces_command(ctx: typer.Context) -> None:
    """List every space visible to the service account."""
    state: CLIState = ctx.obj

    with _command_errors(state.output):
        service = _build_service(state)
        state.output.print_spaces_table(service.get_spaces())


@app.command("search")
def search_command(
    ctx: typer.Context,
    cql: str = typer.Argument(..., help="CQL query, passed through unchanged"),
) -> None:
    """Run a CQL search, bypassing access profiles."""
    state: CLIState = ctx.obj

    with _command_errors(state.output):
        service = _build_service(state)
        state.output.print_pages_table(service.search_pages(cql), f"Results for {cql}")


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
