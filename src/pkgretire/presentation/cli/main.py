"""
CLI entry point

    pkgretire serve [--host H] [--port P]   run the HTTP API
    pkgretire dispatch                      drain the job outbox into ARQ once
    pkgretire check <name> [--as LOGIN]     dry-run the deletion rules

The ARQ worker itself runs with:
    arq pkgretire.infrastructure.queue.arq_worker.WorkerSettings
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional

from pkgretire import __version__


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgretire",
        description="pkgretire - crate retirement service",
    )

    subparsers = parser.add_subparsers(dest="command", help="available commands")

    serve_parser = subparsers.add_parser("serve", help="run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    dispatch_parser = subparsers.add_parser("dispatch", help="move pending outbox jobs onto the queue")
    dispatch_parser.add_argument("--max-rounds", type=int, default=100)

    check_parser = subparsers.add_parser("check", help="report whether a crate may be deleted")
    check_parser.add_argument("name", help="crate name")
    check_parser.add_argument("--as", dest="login", help="also check this user's rights")

    parser.add_argument("--version", "-v", action="store_true", help="show version")

    return parser


def run_cli(args: Optional[list] = None) -> int:
    """
    Run the CLI.

    Args:
        args: argument list (defaults to sys.argv)

    Returns:
        exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.version:
        print(f"pkgretire v{__version__}")
        return 0

    if not parsed.command:
        parser.print_help()
        return 0

    from pkgretire.config.settings import configure_logging, get_settings

    settings = get_settings()
    configure_logging(settings.logging)

    if parsed.command == "serve":
        import uvicorn

        uvicorn.run("pkgretire.api.main:app", host=parsed.host, port=parsed.port)
        return 0

    if parsed.command == "dispatch":
        report = asyncio.run(_dispatch(settings, parsed.max_rounds))
        print(json.dumps(report, ensure_ascii=False))
        return 1 if report["failed"] else 0

    if parsed.command == "check":
        return _check(settings, parsed.name, parsed.login)

    return 0


async def _dispatch(settings, max_rounds: int) -> dict:
    from arq import create_pool

    from pkgretire.core.di.bootstrap import bootstrap_dependencies
    from pkgretire.infrastructure.queue.arq_worker import build_redis_settings
    from pkgretire.infrastructure.queue.dispatcher import OutboxDispatcher
    from pkgretire.infrastructure.queue.outbox import SqlAlchemyJobOutbox
    from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore

    container = bootstrap_dependencies(settings)
    pool = await create_pool(build_redis_settings(settings))
    try:
        dispatcher = OutboxDispatcher(
            container.resolve(SqlAlchemyCrateStore).provider,
            container.resolve(SqlAlchemyJobOutbox),
            pool,
            batch_size=settings.dispatcher.batch_size,
        )
        report = await dispatcher.drain(max_rounds=max_rounds)
    finally:
        await pool.close()
    return report.to_dict()


def _check(settings, name: str, login: Optional[str]) -> int:
    from pkgretire.application.workflows.retire_package import RetirementExecutor
    from pkgretire.core.di.bootstrap import bootstrap_dependencies
    from pkgretire.domain.package import AuthMethod, Requester
    from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore
    from pkgretire.infrastructure.stores.ownership import SqlAlchemyOwnershipResolver

    container = bootstrap_dependencies(settings)
    executor = container.resolve(RetirementExecutor)

    requester = None
    if login:
        store = container.resolve(SqlAlchemyCrateStore)
        with store.provider.session() as session:
            user_id = container.resolve(SqlAlchemyOwnershipResolver).user_id_for(session, login)
        if user_id is None:
            print(f"Error: unknown user `{login}`", file=sys.stderr)
            return 2
        requester = Requester(user_id=user_id, login=login, auth_method=AuthMethod.COOKIE)

    result = executor.check(name, requester)
    if not result.is_ok():
        print(f"Error: {result.error.message}", file=sys.stderr)
        return 2

    decision = result.unwrap()
    print(
        json.dumps(
            {"name": name, "allowed": decision.allowed, "rule": decision.rule.value, "reason": decision.reason},
            ensure_ascii=False,
        )
    )
    return 0 if decision.allowed else 1


if __name__ == "__main__":
    sys.exit(run_cli())
