from __future__ import annotations

import argparse
from typing import Any, Sequence

import uvicorn

from marketplace.core.config import ListingServiceSettings, PublicApiSettings, UserServiceSettings, env_key
from marketplace.core.logging import setup_logging
from marketplace.main import create_listing_app, create_public_app, create_user_app


SERVICES = {
    "listing-service": (ListingServiceSettings, create_listing_app),
    "user-service": (UserServiceSettings, create_user_app),
    "public-api": (PublicApiSettings, create_public_app),
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="marketplace", description="Run one of the marketplace services.")
    p.add_argument("service", choices=sorted(SERVICES))
    p.add_argument("--host", help="bind address (env HOST)")
    p.add_argument("--port", type=int, help="server port (env LISTING_PORT, USER_PORT or PUBLIC_API_PORT)")
    p.add_argument("--debug", action=argparse.BooleanOptionalAction, default=None, help="debug mode (env DEBUG_MODE)")
    p.add_argument("--db-path", help="sqlite file, storage services only (env LISTING_DB_PATH or USER_DB_PATH)")
    p.add_argument("--listing-service", help="listing service URL, public-api only (env LISTING_SERVICE_URL)")
    p.add_argument("--user-service", help="user service URL, public-api only (env USER_SERVICE_URL)")
    return p


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "host": args.host,
        "port": args.port,
        "debug": args.debug,
    }
    if args.service == "public-api":
        overrides["listing_service_url"] = args.listing_service
        overrides["user_service_url"] = args.user_service
    else:
        overrides["db_path"] = args.db_path
    settings_cls, _ = SERVICES[args.service]
    # keyed like the env source so flags win over env; unset flags leave env/defaults alone
    return {env_key(settings_cls, k): v for k, v in overrides.items() if v is not None}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings_cls, factory = SERVICES[args.service]
    settings = settings_cls(**settings_overrides(args))
    setup_logging(settings.log_level, debug=settings.debug)

    app = factory(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
