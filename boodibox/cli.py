"""Command line interface for the boodibox package."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .cli_progress import (
    PostProgressDisplay,
    mask_secret,
    render_configuration_summary,
    render_error,
    render_post,
)
from .client import BoodiBoxClient
from .config import config_from_env, load_env_file
from .errors import BoodiBoxError
from .models import PathFile, PollOptions
from .validation import OMITTED


def _resolve_log_level(debug: bool, silent: bool, log_level: Optional[str]) -> Optional[int]:
    """None means no log output at all."""
    if silent:
        return None
    if debug:
        return logging.DEBUG
    if log_level:
        return getattr(logging, log_level.upper(), logging.INFO)
    return None


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Route library logs to a RichHandler on stderr.

    The CLI stays quiet unless --debug or --log-level asks for logs; returns
    the effective level name, or "silent".
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    logging.disable(logging.NOTSET)

    level = _resolve_log_level(debug, silent, log_level)
    if level is None:
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _default_env_file() -> Optional[Path]:
    """``.env`` in the working directory, when there is one."""
    candidate = Path.cwd() / ".env"
    return candidate if candidate.is_file() else None


async def _run_post(
    client: BoodiBoxClient,
    body: str,
    files: Sequence[Path],
    reply_permission: Any,
    quote_post_id: Optional[str],
    user_ip: Optional[str],
    poll_options: PollOptions,
    timeout: Optional[float],
) -> Any:
    PostProgressDisplay().attach(client)
    async with client:
        return await client.submit_post_with_files(
            body=body,
            files=[PathFile(path) for path in files],
            reply_permission=reply_permission,
            quote_post_id=quote_post_id,
            poll_options=poll_options,
            timeout=timeout,
            user_ip=user_ip,
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boodibox-post",
        description="Upload media and publish a post on BoodiBox.",
    )
    parser.add_argument("body", nargs="?", help="Post body text")
    parser.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        type=Path,
        default=[],
        help="Media file to attach (repeat for several files)",
    )
    parser.add_argument(
        "-r",
        "--reply-permission",
        default=None,
        help="PUBLIC or PRIVATE (default PUBLIC)",
    )
    parser.add_argument("-q", "--quote", default=None, help="Id of the post to quote")
    parser.add_argument("--user-ip", default=None, help="Submitter IP forwarded to the service")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall budget in seconds for upload + processing (default 120)",
    )
    parser.add_argument("--poll-interval", type=float, default=None, help="Seconds between status checks")
    parser.add_argument("--poll-timeout", type=float, default=None, help="Max seconds to wait per upload")
    parser.add_argument("--base-url", default=None, help="API base URL (default from BOODIBOX_BASE_URL)")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version="boodibox-post")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.body is None and not args.files:
        parser.print_help()
        return 0

    used_env_file = args.env_file or _default_env_file()
    try:
        if used_env_file is not None:
            load_env_file(Path(used_env_file))
        config = config_from_env(base_url=args.base_url)
    except BoodiBoxError as exc:
        render_error(exc)
        return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    missing = [str(path) for path in args.files if not path.is_file()]
    if missing:
        render_error(FileNotFoundError(f"file does not exist: {', '.join(missing)}"))
        return 1

    render_configuration_summary(
        {
            "Base URL": config.base_url,
            "API Key": mask_secret(config.api_key),
            "Files": ", ".join(str(path) for path in args.files) or "-",
            "Reply Permission": "PUBLIC (default)" if args.reply_permission is None else args.reply_permission,
            "Quote": args.quote or "-",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        post = asyncio.run(
            _run_post(
                BoodiBoxClient(config),
                body=args.body or "",
                files=args.files,
                reply_permission=OMITTED if args.reply_permission is None else args.reply_permission,
                quote_post_id=args.quote,
                user_ip=args.user_ip,
                poll_options=PollOptions(interval=args.poll_interval, timeout=args.poll_timeout),
                timeout=args.timeout,
            )
        )
    except BoodiBoxError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        render_error(RuntimeError("Cancelled."))
        return 130

    render_post(post)
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
