"""CLI entry point for the pantry scanner."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from .camera import CaptureController, FridgeCamera, ImageFileDevice, Permission
from .commit import CommitPipeline
from .config import load_config
from .credentials import CredentialResolver, FernetCipher
from .db import HouseholdDB, InventoryDB, SecretDB
from .detection import DetectionService
from .errors import PantryPalError
from .forecast import dashboard_metrics
from .gateway import VisionGateway
from .models import Identity
from .result import Err, Ok
from .session import ScanCoordinator, SessionState


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pantrypal-scan",
        description="Photograph food, recognise it with AI, and add it to your pantry",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="Path to a TOML config file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("cameras", help="List available cameras")

    scan_parser = sub.add_parser("scan", help="Capture, detect and add items")
    scan_parser.add_argument("--user", required=True, help="User ID")
    scan_parser.add_argument("--name", default="", help="Display name, used for a new household")
    scan_parser.add_argument("--image", type=str, help="Use an existing image file")
    scan_parser.add_argument(
        "--exclude", nargs="+", default=[], metavar="NAME",
        help="Deselect detected items by name",
    )
    scan_parser.add_argument(
        "--quantity", nargs="+", default=[], metavar="NAME=N",
        help="Override the quantity of an item",
    )
    scan_parser.add_argument("--json", action="store_true", help="Output JSON")
    scan_parser.add_argument(
        "--dry-run", action="store_true", help="Detect only, do not add anything"
    )

    inv_parser = sub.add_parser("inventory", help="Show the household inventory")
    inv_parser.add_argument("--user", required=True, help="User ID")
    inv_parser.add_argument("--json", action="store_true", help="Output JSON")

    key_parser = sub.add_parser("set-key", help="Store a personal vision API key")
    key_parser.add_argument("--user", required=True, help="User ID")
    key_parser.add_argument("--key", required=True, help="API key")

    sub.add_parser("refresh-status", help="Mark expiring and expired items now")
    sub.add_parser("scheduler", help="Run the expiry status sweep on its schedule")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    config = load_config(args.config)

    match args.command:
        case "cameras":
            _cmd_cameras()
        case "scan":
            sys.exit(asyncio.run(_cmd_scan(config, args)))
        case "inventory":
            sys.exit(_cmd_inventory(config, args))
        case "set-key":
            sys.exit(_cmd_set_key(config, args))
        case "refresh-status":
            sys.exit(_cmd_refresh_status(config))
        case "scheduler":
            asyncio.run(_cmd_scheduler(config))


def _cmd_cameras() -> None:
    cameras = FridgeCamera.list_cameras()
    if not cameras:
        print("No cameras found.")
        return
    print(f"Available cameras: {len(cameras)}")
    for idx in cameras:
        print(f"  camera {idx}")


def _load_cipher(config) -> FernetCipher | None:
    """Build the secrets cipher, or None when no key is configured.

    Raises:
        ValueError: If the configured key is not a valid Fernet key.
    """
    return FernetCipher(config.secrets.key) if config.secrets.key else None


def _build_resolver(config, secrets: SecretDB, cipher: FernetCipher | None) -> CredentialResolver:
    return CredentialResolver(
        system_key=config.vision.system_api_key,
        secrets=secrets,
        cipher=cipher,
        service=config.vision.backend,
    )


def _parse_quantities(pairs: list[str]) -> dict[str, float]:
    quantities: dict[str, float] = {}
    for pair in pairs:
        name, sep, value = pair.rpartition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=N, got {pair!r}")
        quantities[name] = float(value)
    return quantities


async def _cmd_scan(config, args) -> int:
    try:
        quantities = _parse_quantities(args.quantity)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    if args.image:
        device = ImageFileDevice(args.image)
    else:
        device = FridgeCamera(
            camera_index=config.camera.indices[0],
            save_dir=config.camera.save_dir,
        )

    try:
        cipher = _load_cipher(config)
    except ValueError as e:
        print(f"Invalid secrets key: {e}", file=sys.stderr)
        return 1

    controller = CaptureController(
        device, on_captured=lambda image: print("📷 Image captured")
    )
    if controller.request_permission() is Permission.DENIED:
        print(
            "Camera permission denied. Grant access in your system settings "
            "and try again.",
            file=sys.stderr,
        )
        return 1

    households = HouseholdDB(config.database.path)
    inventory = InventoryDB(config.database.path)
    secrets = SecretDB(config.database.path)
    try:
        if isinstance(device, FridgeCamera):
            device.open()

        gateway = VisionGateway(_build_resolver(config, secrets, cipher), config.vision)
        detector = DetectionService(gateway, min_confidence=config.vision.min_confidence)
        coordinator = ScanCoordinator()

        print("🔍 Detecting items...")
        session = await coordinator.scan(controller, detector, args.user)

        if session.state is SessionState.EMPTY:
            print("Nothing was recognised in the image.")
            return 0
        if session.source == "fallback":
            print("⚠  AI detection unavailable; showing sample items instead.")

        for name in args.exclude:
            try:
                session.selection.toggle(name)
            except KeyError:
                print(f"Not in the detected items: {name}", file=sys.stderr)

        _print_candidates(session, as_json=args.json)

        if args.dry_run:
            coordinator.cancel()
            return 0

        pipeline = CommitPipeline(
            households, inventory, default_currency=config.household.currency
        )
        result = coordinator.commit(
            session.id, pipeline, Identity(args.user, args.name), quantities
        )
        if result.provisioned:
            print(f"🏠 Created household {result.household_id}")
        print(f"✅ Added {len(result.item_ids)} item(s) to your pantry")
        return 0
    except PantryPalError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        if isinstance(device, FridgeCamera):
            device.close()
        households.close()
        inventory.close()
        secrets.close()


def _print_candidates(session, as_json: bool) -> None:
    if as_json:
        data = [
            {**c.to_dict(), "selected": session.selection.is_selected(c.name)}
            for c in session.candidates
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print(f"\n🥬 Detected items ({len(session.candidates)}):")
    for c in session.candidates:
        mark = "x" if session.selection.is_selected(c.name) else " "
        bar = "█" * int(c.confidence * 10)
        print(
            f"  [{mark}] {c.name:<20} {c.confidence:.0%} {bar}  "
            f"[{c.category}] {c.suggested_location}, ~{c.estimated_expiry_days}d"
        )


def _cmd_inventory(config, args) -> int:
    households = HouseholdDB(config.database.path)
    inventory = InventoryDB(config.database.path)
    try:
        match households.get_membership(args.user):
            case Ok(value=None):
                print("You are not in a household yet. Run a scan to create one.")
                return 0
            case Ok(value=membership):
                pass
            case Err(error=err):
                print(f"Database error: {err.message}", file=sys.stderr)
                return 1

        match inventory.get_household_items(membership.household_id):
            case Ok(value=items):
                pass
            case Err(error=err):
                print(f"Database error: {err.message}", file=sys.stderr)
                return 1
    finally:
        households.close()
        inventory.close()

    metrics = dashboard_metrics(items)
    if args.json:
        data = {
            "items": [
                {
                    "id": i.id,
                    "name": i.name,
                    "category": i.category,
                    "quantity": i.quantity,
                    "unit": i.unit,
                    "expiry_date": i.expiry_date,
                    "status": i.status,
                }
                for i in items
            ],
            "metrics": metrics,
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return 0

    if not items:
        print("Your pantry is empty.")
        return 0
    print(f"📦 {len(items)} item(s):")
    for i in items:
        print(f"  {i.name:<20} {i.quantity:g} {i.unit:<6} {i.expiry_date or '-':<10}  {i.status}")
    if metrics["at_risk"]:
        print(f"\n⏰ Expiring within a week: {len(metrics['at_risk'])}")
        for entry in metrics["at_risk"]:
            print(f"  {entry['name']} ({entry['expiry_date']})")
    return 0


def _cmd_set_key(config, args) -> int:
    if not config.secrets.key:
        print(
            "No secrets key configured. Set PANTRYPAL_SECRET_KEY or [secrets] key.",
            file=sys.stderr,
        )
        return 1

    try:
        cipher = _load_cipher(config)
    except ValueError as e:
        print(f"Invalid secrets key: {e}", file=sys.stderr)
        return 1

    secrets = SecretDB(config.database.path)
    try:
        result = secrets.put_encrypted_key(
            args.user, config.vision.backend, cipher.encrypt(args.key)
        )
    finally:
        secrets.close()

    match result:
        case Ok():
            print(f"Stored {config.vision.backend} key for {args.user}")
            return 0
        case Err(error=err):
            print(f"Database error: {err.message}", file=sys.stderr)
            return 1


def _cmd_refresh_status(config) -> int:
    inventory = InventoryDB(config.database.path)
    try:
        result = inventory.refresh_statuses(
            expiring_soon_days=config.scheduler.expiring_soon_days
        )
    finally:
        inventory.close()

    match result:
        case Ok(value=count):
            print(f"Updated {count} item(s)")
            return 0
        case Err(error=err):
            print(f"Database error: {err.message}", file=sys.stderr)
            return 1


async def _cmd_scheduler(config) -> None:
    from .scheduler import ExpiryScheduler

    scheduler = ExpiryScheduler(config)
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
