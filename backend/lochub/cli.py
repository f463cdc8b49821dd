import argparse
import json
import os
import sys

from lochub.config import Settings, load_settings
from lochub.context import build_context
from lochub.db import make_engine, migrate
from lochub.errors import ConfigurationError, LocHubError
from lochub.logging import configure_logging
from lochub.models import RepositoryIdentity
from lochub.pipeline import count_lines


def analyze_repo(full_name: str, token: str | None = None) -> list:
    try:
        owner, name = full_name.split('/', 1)
        identity = RepositoryIdentity(owner=owner, name=name)
    except ValueError:
        raise SystemExit("Repo must be in the form 'owner/name'")

    # The OAuth side is unused offline, so no DB_URL or client credentials are needed
    settings = Settings(
        db_url="sqlite://",
        client_id="",
        client_secret="",
        workspace_root=os.getenv("WORKSPACE_ROOT", "./repos"),
    )
    ctx = build_context(settings)
    return [stat.model_dump() for stat in count_lines(ctx, identity, token)]


def _serve(args) -> int:
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "lochub.main:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _loc(args) -> int:
    try:
        data = analyze_repo(args.repo, args.token or os.getenv("GITHUB_TOKEN"))
    except LocHubError as e:
        print(f"error ({e.status_code}): {e.detail}", file=sys.stderr)
        return 1
    if args.pretty:
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(data, separators=(",", ":"), ensure_ascii=False))
    return 0


def _migrate(args) -> int:
    settings = load_settings()
    migrate(make_engine(settings.db_url), refresh=args.refresh)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="lochub", description="Lines of code for GitHub repositories")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the HTTP service")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.set_defaults(func=_serve)

    p_loc = sub.add_parser("loc", help="Count lines for one repository and print JSON")
    p_loc.add_argument("repo", help="GitHub repository full name, e.g. owner/name")
    p_loc.add_argument("--token", help="Access token (default: $GITHUB_TOKEN)")
    p_loc.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    p_loc.set_defaults(func=_loc)

    p_migrate = sub.add_parser("migrate", help="Create the login_state table")
    p_migrate.add_argument("--refresh", action="store_true", help="Drop and recreate tables first")
    p_migrate.set_defaults(func=_migrate)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"configuration error: {e.detail}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
