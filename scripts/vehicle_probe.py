#!/usr/bin/env python3
"""Live vehicle API probe.

Runs the application controller against a real server and prints the
resulting state snapshot as JSON.

Configuration comes from the environment (see ``VehicleConfig.from_env``):
- VEHICLE_USERNAME / VEHICLE_PASSWORD
- VEHICLE_BASE_URL
- VEHICLE_TOKEN_PATH (optional, persists tokens between runs)

Default behavior:
1) restore or create a session,
2) load the recent-vehicles list,
3) optionally look up a VIN (``--vin``) or open a vehicle (``--open``),
4) print the final state.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyvehicle import (  # noqa: E402
    ApplicationController,
    ConfigCredentialSource,
    HttpVehicleClient,
    JsonFileTokenBackend,
    OpenDetail,
    SearchQueryChanged,
    SessionRepository,
    SubmitSearch,
    TokenStore,
    VehicleConfig,
    VehicleError,
)
from pyvehicle._redact import redact_for_log  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--vin", help="VIN (or free text normalized to one) to look up")
    parser.add_argument("--open", dest="open_id", help="Vehicle id to open in detail view")
    parser.add_argument("--logout", action="store_true", help="Clear stored tokens before running")
    parser.add_argument("--base-url", help="Override VEHICLE_BASE_URL")
    parser.add_argument("--token-path", help="Override VEHICLE_TOKEN_PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, str] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.token_path:
        overrides["token_path"] = args.token_path
    config = VehicleConfig.from_env(**overrides)

    backend = JsonFileTokenBackend(config.token_path, config.token_namespace) if config.token_path else None
    tokens = TokenStore(backend)
    await tokens.load()
    if args.logout:
        await tokens.clear()

    async with HttpVehicleClient(config) as remote:
        repository = SessionRepository(remote, tokens)
        async with ApplicationController(
            repository,
            ConfigCredentialSource(config),
            recent_limit=config.recent_limit,
        ) as controller:
            await controller.wait_idle()
            if args.vin:
                controller.submit(SearchQueryChanged(value=args.vin))
                controller.submit(SubmitSearch())
                await controller.wait_idle()
            if args.open_id:
                controller.submit(OpenDetail(vehicle_id=args.open_id))
                await controller.wait_idle()
            state = controller.state

    dump = state.model_dump(mode="json")
    print(json.dumps(redact_for_log(dump), indent=2, ensure_ascii=False))
    return 1 if state.auth_error else 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except VehicleError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
