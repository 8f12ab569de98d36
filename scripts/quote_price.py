"""Price a Super Offer Package for one quote from the command line."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from package_pricing.config.quote_request import QuoteRequest
from package_pricing.config.settings import Settings
from package_pricing.core.logging import configure_logging
from package_pricing.packages.catalog import HttpPackageCatalog, PackageCatalog, open_catalog
from package_pricing.pricing.calculator import PriceCalculator, calculate_price
from package_pricing.pricing.errors import PricingError, user_message
from package_pricing.pricing.validation import ValidationEngine
from package_pricing.sync.controller import PriceSyncController
from package_pricing.sync.state import SyncSnapshot

logger = logging.getLogger("quote_price")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Calculate a package price for a quote")
    parser.add_argument("--request", type=Path, help="TOML file with a [quote] table")
    parser.add_argument("--package", dest="package_id", help="Package identifier")
    parser.add_argument("--version", type=int, help="Pin a package version (default: latest)")
    parser.add_argument("--people", type=int, help="Number of people")
    parser.add_argument("--nights", type=int, help="Number of nights")
    parser.add_argument("--arrival", help="Arrival date (YYYY-MM-DD or offset such as +14d)")
    parser.add_argument("--catalog", type=Path, help="Override the JSON catalog path")
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Drive a price sync session and print every status change",
    )
    return parser.parse_args()


def _build_request(args: argparse.Namespace) -> QuoteRequest:
    if args.request:
        request = QuoteRequest.load(args.request)
        overrides = {
            "package_id": args.package_id,
            "package_version": args.version,
            "people": args.people,
            "nights": args.nights,
            "arrival": args.arrival,
        }
        updates = {key: value for key, value in overrides.items() if value is not None}
        return request.model_copy(update=updates) if updates else request
    missing = [name for name in ("package_id", "people", "nights", "arrival") if getattr(args, name) is None]
    if missing:
        raise SystemExit(f"Missing required arguments without --request: {', '.join(missing)}")
    return QuoteRequest(
        package_id=args.package_id,
        package_version=args.version,
        people=args.people,
        nights=args.nights,
        arrival=args.arrival,
    )


def _print(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))


async def _quote_once(catalog: PackageCatalog, request: QuoteRequest, settings: Settings) -> int:
    calculator = PriceCalculator(catalog, lookup_timeout_s=settings.lookup_timeout_s)
    params = request.parameters()
    try:
        package = await calculator.load(request.package_id, request.package_version)
    except PricingError as exc:
        _print({"error": {"code": exc.code, "message": user_message(exc)}})
        return 2

    warnings = ValidationEngine().validate(
        params.number_of_people, params.number_of_nights, params.arrival_date, package
    )
    output: dict[str, object] = {
        "package": {"package_id": package.package_id, "version": package.version, "name": package.name},
        "parameters": params.to_dict(),
        "validation_warnings": [warning.to_dict() for warning in warnings],
    }
    try:
        result = calculate_price(package, params.number_of_people, params.number_of_nights, params.arrival_date)
    except PricingError as exc:
        output["error"] = {"code": exc.code, "message": user_message(exc), "detail": str(exc)}
        _print(output)
        return 1
    output["result"] = result.to_dict()
    _print(output)
    return 0


async def _watch(catalog: PackageCatalog, request: QuoteRequest, settings: Settings) -> int:
    controller = PriceSyncController.from_settings(settings, catalog, events_total=request.events_total)

    def _on_change(snapshot: SyncSnapshot) -> None:
        _print(snapshot.to_dict())

    controller.subscribe(_on_change)
    snapshot = await controller.select_package(
        request.package_id, request.parameters(), version=request.package_version
    )
    if request.manual_price is not None:
        snapshot = controller.set_manual_price(request.manual_price)
    await controller.wait_idle()
    controller.close()
    return 1 if snapshot.error else 0


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    request = _build_request(args)
    catalog = open_catalog(settings)
    try:
        if args.watch:
            return await _watch(catalog, request, settings)
        return await _quote_once(catalog, request, settings)
    finally:
        if isinstance(catalog, HttpPackageCatalog):
            await catalog.aclose()


def main() -> None:
    args = _parse_args()
    overrides: dict[str, object] = {}
    if args.catalog:
        overrides["catalog_path"] = args.catalog
    settings = Settings(**overrides)
    settings.ensure_directories()
    configure_logging(settings.log_level, settings.log_dir)
    logger.debug("Using catalog %s", settings.catalog_url or settings.catalog_path)
    raise SystemExit(asyncio.run(_run(args, settings)))


if __name__ == "__main__":
    main()
