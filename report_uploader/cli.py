"""Command line interface for report_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.logging import RichHandler

from . import __version__
from .config import SyncConfig, load_sync_config
from .console import console, mask_secret, render_configuration_summary
from .errors import ConfigError
from .models import CatalogSession, ServerCredentials, SyncAction
from .orchestrator import CatalogSynchronizer

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_USAGE = 2
EXIT_FAILURE = 4
EXIT_INTERRUPTED = 130

ENV_REPORT_TARGET = "REPORT_TARGET"
ENV_UPLOAD_PREFIX = "UPLOAD_PREFIX"
ENV_CONFIG = "REPORT_CONFIG"
ENV_DOMAIN = "REPORT_DOMAIN"
ENV_USERNAME = "REPORT_USERNAME"
ENV_PASSWORD = "REPORT_PASSWORD"


class CLIError(RuntimeError):
    """Raised when CLI validation fails."""


def _setup_logging(verbose: bool, quiet: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    INFO by default, DEBUG with --verbose, WARNING with --quiet.
    Returns the effective level name.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    elif verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # Keep transport chatter out of --verbose output.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _resolve_setting(value: Optional[str], env_name: str) -> Optional[str]:
    """Command-line value wins, then the environment."""
    if value is not None:
        return value
    return os.getenv(env_name)


def _build_session(args: argparse.Namespace) -> CatalogSession:
    report_target = _resolve_setting(args.report_target, ENV_REPORT_TARGET)
    if not report_target:
        raise CLIError("Report target must be specified")

    try:
        credentials = ServerCredentials.from_parts(
            _resolve_setting(args.domain, ENV_DOMAIN),
            _resolve_setting(args.username, ENV_USERNAME),
            _resolve_setting(args.password, ENV_PASSWORD),
        )
    except ValueError as exc:
        raise CLIError(str(exc)) from exc

    return CatalogSession(
        report_target=report_target,
        upload_prefix=_resolve_setting(args.upload_prefix, ENV_UPLOAD_PREFIX) or "",
        credentials=credentials,
        timeout=args.timeout,
    )


def _resolve_config_path(args: argparse.Namespace) -> Path:
    config_filename = _resolve_setting(args.config_filename, ENV_CONFIG)
    if not config_filename:
        raise CLIError("Configuration file must be specified")
    return Path(config_filename)


async def _run_action(session: CatalogSession, action: SyncAction, config: SyncConfig) -> None:
    async with CatalogSynchronizer(session) as synchronizer:
        await synchronizer.run(action, config.reports, config.data_sources)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssrs-up",
        description="Upload or delete reports and data sources on a SQL Server Reporting Services catalog.",
    )
    parser.add_argument(
        "action",
        nargs="?",
        choices=[action.value for action in SyncAction],
        help="Action to perform",
    )
    parser.add_argument(
        "--report-target",
        default=None,
        help=f"The report server endpoint (default from {ENV_REPORT_TARGET})",
    )
    parser.add_argument(
        "--upload-prefix",
        default=None,
        help=f"The prefix to use when uploading reports (default from {ENV_UPLOAD_PREFIX} or none)",
    )
    parser.add_argument(
        "-c",
        "--config-filename",
        default=None,
        help=f"The name of the json configuration file (default from {ENV_CONFIG})",
    )
    parser.add_argument("--domain", default=None, help="The domain used to access server")
    parser.add_argument("--username", default=None, help="The username used to access report server")
    parser.add_argument("--password", default=None, help="The password used to access report server")
    parser.add_argument(
        "--timeout",
        type=int,
        default=60,
        help="Seconds to wait for each report server call",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Do not output unless an error occurs"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Explicit log level",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ssrs-up {__version__}",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_USAGE

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_USAGE

    effective_log_mode = _setup_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_level=args.log_level,
    )

    if args.action is None:
        print("ERROR: Action must be specified", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE
    action = SyncAction(args.action)

    try:
        session = _build_session(args)
        config_path = _resolve_config_path(args)
        config = load_sync_config(config_path)
    except (CLIError, ConfigError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not args.quiet:
        credentials = session.credentials
        render_configuration_summary(
            {
                "Action": action.value,
                "Report Target": session.report_target,
                "Upload Prefix": session.upload_prefix or "(none)",
                "Config File": str(config_path),
                "Reports": len(config.reports),
                "Data Sources": len(config.data_sources),
                "Domain": credentials.domain if credentials else "-",
                "Username": credentials.username if credentials else "-",
                "Password": mask_secret(credentials.password if credentials else None),
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        asyncio.run(_run_action(session, action, config))
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as exc:
        logger.debug("Action failed", exc_info=True)
        print(f"ERROR: Error processing action: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_SUCCESS


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
