"""issueimport CLI.

Subcommands:
  upload    -> parse, validate and create GitHub issues from a CSV file
  validate  -> parse + validate only, no network access

Exit codes: 0 success, 1 fatal error or at least one failed issue,
2 usage / credential problems.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Callable
from typing import Any

import requests

from .config import CONFIG_DEFAULT, ConfigError, ImportConfig, load_config_or_default
from .diagnostics import LoggerSink
from .env_auth import EnvAuthConfig, EnvironmentAuthManager
from .errors import IssueImportError, classify_submission_error, fatal_error_for
from .github_rest import GitHubAPIError, GitHubRestClient
from .logging import configure_logging
from .models import IssueRecord, RepoRef
from .orchestrator import load_records, run_upload
from .security import sanitize_github_token
from .submitter import Throttle
from .ux import print_error, print_header, print_preview, print_results, print_success

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


class UsageError(Exception):
    pass


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issueimport", description="Bulk-create GitHub issues from a CSV file"
    )
    p.add_argument("--config", default=CONFIG_DEFAULT, help="YAML config (optional)")
    p.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    up = sub.add_parser("upload", help="Create GitHub issues from a CSV file")
    up.add_argument("csv_file", help="Path to the CSV file containing issue data")
    up.add_argument("-t", "--token", help="GitHub personal access token (default: env)")
    up.add_argument("-r", "--repo", help="GitHub repository in format owner/repo")
    up.add_argument("-o", "--owner", help="GitHub repository owner")
    up.add_argument("-n", "--name", help="GitHub repository name")
    up.add_argument("--dry-run", action="store_true", help="Preview issues without creating them")
    up.add_argument("--verbose", action="store_true", help="Enable verbose diagnostics")
    up.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    up.add_argument("--summary-json", help="Write a JSON summary of the outcomes")
    up.add_argument("--delay", type=float, help="Seconds to pause between requests")

    val = sub.add_parser("validate", help="Parse and validate a CSV file without uploading")
    val.add_argument("csv_file", help="Path to the CSV file containing issue data")
    val.add_argument("--verbose", action="store_true")
    return p


def _resolve_repo(cfg: ImportConfig, args: argparse.Namespace) -> RepoRef | None:
    try:
        if args.repo:
            return RepoRef.parse(args.repo)
        if args.owner and args.name:
            return RepoRef.of(args.owner, args.name)
        if args.owner or args.name:
            raise UsageError("--owner and --name must be given together")
        if cfg.github_repo:
            return RepoRef.parse(cfg.github_repo)
    except ValueError as exc:
        raise UsageError(str(exc)) from exc
    return None


def _resolve_token(cfg: ImportConfig, args: argparse.Namespace) -> str:
    raw = args.token
    if not raw:
        manager = EnvironmentAuthManager(EnvAuthConfig(github_token_var=cfg.token_env))
        raw = manager.get_github_token()
    if not raw:
        raise UsageError(
            f"GitHub token required: pass --token or set {cfg.token_env} "
            "(a token with 'repo' permissions, see https://github.com/settings/tokens)"
        )
    check = sanitize_github_token(raw)
    if not check.valid or check.sanitized is None:
        raise UsageError(f"Invalid GitHub token: {check.reason}")
    return check.sanitized


def _check_access(client: GitHubRestClient) -> None:
    try:
        client.check_access()
    except GitHubAPIError as exc:
        info = classify_submission_error(exc)
        if info.fatal:
            raise fatal_error_for(info) from exc
        raise


def _confirm_prompt(repo: RepoRef) -> Callable[[list[IssueRecord]], bool]:
    def _ask(records: list[IssueRecord]) -> bool:
        answer = input(f"Create {len(records)} issues in {repo.full_name}? [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    return _ask


def _cmd_upload(cfg: ImportConfig, args: argparse.Namespace) -> int:
    dry_run = bool(args.dry_run or cfg.dry_run_default)
    verbose = bool(args.verbose or cfg.verbose)
    repo = _resolve_repo(cfg, args)
    if args.delay is not None:
        cfg.delay_seconds = max(0.0, args.delay)
    sink = LoggerSink()

    if dry_run:
        result = run_upload(
            cfg,
            args.csv_file,
            None,
            repo=repo.full_name if repo else None,
            dry_run=True,
            verbose=verbose,
            sink=sink,
            summary_path=args.summary_json,
        )
        print_preview(result.records, repo.full_name if repo else None)
        return EXIT_OK

    if repo is None:
        raise UsageError("Repository required: pass --repo owner/name or --owner/--name")
    records = load_records(
        args.csv_file, sink=sink, max_bytes=cfg.max_file_mb * 1024 * 1024
    )
    token = _resolve_token(cfg, args)
    client = GitHubRestClient(token=token, repo=repo.full_name, base_url=cfg.github_api_url)
    _check_access(client)

    print_header(f"Creating GitHub issues in {repo.full_name}")
    result = run_upload(
        cfg,
        args.csv_file,
        client,
        repo=repo.full_name,
        verbose=verbose,
        sink=sink,
        throttle=Throttle(cfg.delay_seconds),
        summary_path=args.summary_json,
        confirm=None if args.yes else _confirm_prompt(repo),
        records=records,
    )
    if result.summary.get("cancelled"):
        print("Upload cancelled.")
        return EXIT_OK
    print_results(result.outcomes, repo.full_name)
    return EXIT_FAILURE if result.failed else EXIT_OK


def _cmd_validate(cfg: ImportConfig, args: argparse.Namespace) -> int:
    sink = LoggerSink()
    records = load_records(
        args.csv_file, sink=sink, max_bytes=cfg.max_file_mb * 1024 * 1024
    )
    print_success(f"Validated {len(records)} issues")
    if args.verbose:
        print_preview(records, cfg.github_repo)
    return EXIT_OK


def _build_handlers(
    args: argparse.Namespace, cfg: ImportConfig
) -> dict[str, Callable[[], int]]:
    return {
        "upload": lambda: _cmd_upload(cfg, args),
        "validate": lambda: _cmd_validate(cfg, args),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_config_or_default(args.config)
    except ConfigError as exc:
        print_error(str(exc))
        return EXIT_USAGE
    verbose = bool(getattr(args, "verbose", False) or cfg.verbose)
    configure_logging(
        json_logging=args.json_logs
        or cfg.logging_json_enabled
        or os.environ.get("ISSUEIMPORT_JSON_LOGS") == "1",
        level="DEBUG" if verbose else cfg.logging_level,
    )
    handler = _build_handlers(args, cfg).get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return EXIT_USAGE
    try:
        return handler()
    except UsageError as exc:
        print_error(str(exc))
        return EXIT_USAGE
    except (IssueImportError, GitHubAPIError, requests.RequestException) as exc:
        print_error(f"Error: {exc}")
        return EXIT_FAILURE
    except (EOFError, KeyboardInterrupt):
        print_error("Upload cancelled.")
        return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
