#!/usr/bin/env python3
"""
Command line access to the current user's prescriptions.

Examples:
    philldesk list --status pending
    philldesk upload ./rx.pdf --doctor "Dr. Perera" --notes "Refill"
    philldesk watch --interval 30
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from datetime import date

from philldesk.clients import PrescriptionApiClient
from philldesk.config.settings import get_settings
from philldesk.core.shared.logger import configure_logging
from philldesk.domains.prescriptions import (
    PrescriptionFile,
    PrescriptionNotificationObserver,
    PrescriptionState,
    PrescriptionStatus,
    PrescriptionStatusChanged,
    PrescriptionStore,
    UploadMetadata,
    format_file_size,
)

logger = logging.getLogger(__name__)


def print_prescriptions(state: PrescriptionState) -> None:
    """Print the loaded prescriptions as a table."""
    if not state.prescriptions:
        print("No prescriptions found")
        return

    print(f"{'ID':<12} {'STATUS':<14} {'SIZE':>10}  FILE")
    for prescription in state.prescriptions:
        print(
            f"{prescription.id:<12} {prescription.status.display_name:<14} "
            f"{format_file_size(prescription.file_size):>10}  {prescription.file_name}"
        )


def print_stats(state: PrescriptionState) -> None:
    stats = state.stats
    print(f"📊 Prescriptions: {stats.total}")
    for status in PrescriptionStatus:
        print(f"  • {status.display_name}: {stats.count_for(status)}")


def print_progress(progress: int) -> None:
    print(f"\r⬆️  Uploading... {progress:3d}%", end="", flush=True)


def print_status_change(event: PrescriptionStatusChanged) -> None:
    name = event.file_name or event.prescription_id
    print(f"🔔 {name}: {event.previous_status.display_name} → {event.new_status.display_name}")


async def run_list(store: PrescriptionStore, args: argparse.Namespace) -> int:
    await store.fetch_prescriptions(args.status)
    if store.state.error:
        print(f"❌ {store.state.error}")
        return 1
    print_prescriptions(store.state)
    return 0


async def run_stats(store: PrescriptionStore, args: argparse.Namespace) -> int:
    await store.fetch_prescription_stats()
    if store.state.error:
        print(f"❌ {store.state.error}")
        return 1
    print_stats(store.state)
    return 0


async def run_upload(store: PrescriptionStore, args: argparse.Namespace) -> int:
    file_type = args.type or mimetypes.guess_type(args.path)[0] or "application/octet-stream"
    try:
        prescription_file = PrescriptionFile.from_path(args.path, file_type)
    except OSError as e:
        print(f"❌ Cannot read {args.path}: {e}")
        return 1

    metadata = UploadMetadata(
        patient_notes=args.notes,
        doctor_name=args.doctor,
        prescription_date=args.date,
    )
    try:
        response = await store.upload_prescription(prescription_file, metadata, print_progress)
    except Exception as e:
        print()
        print(f"❌ Upload failed: {store.state.upload_state.upload_error or e}")
        return 1

    print()
    prescription_id = response.prescription_id if response else None
    print(f"✅ Uploaded {prescription_file.file_name} ({format_file_size(prescription_file.file_size)})")
    if prescription_id:
        print(f"  • Prescription ID: {prescription_id}")
    print_stats(store.state)
    return 0


async def run_delete(store: PrescriptionStore, args: argparse.Namespace) -> int:
    await store.fetch_prescriptions()
    if store.state.error:
        logger.warning(f"Could not load prescriptions before delete: {store.state.error}")
        store.clear_error()

    await store.delete_prescription(args.prescription_id)
    if store.state.error:
        print(f"❌ {store.state.error}")
        return 1
    print(f"🗑️  Deleted prescription {args.prescription_id}")
    return 0


async def run_watch(store: PrescriptionStore, args: argparse.Namespace) -> int:
    """Poll the prescription list and report status changes until interrupted."""
    observer = PrescriptionNotificationObserver([print_status_change]).attach(store)
    print(f"👀 Watching prescriptions every {args.interval}s (Ctrl+C to stop)")
    try:
        while True:
            await store.fetch_prescriptions(args.status)
            if store.state.error:
                logger.warning(f"Poll failed: {store.state.error}")
                store.clear_error()
            await asyncio.sleep(args.interval)
    finally:
        observer.detach()


COMMANDS = {
    "list": run_list,
    "stats": run_stats,
    "upload": run_upload,
    "delete": run_delete,
    "watch": run_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="philldesk", description="PhillDesk prescription client")
    parser.add_argument("--base-url", help="API base URL (default: PHILLDESK_API_BASE_URL)")
    parser.add_argument("--token", help="Bearer token (default: PHILLDESK_API_TOKEN)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List prescriptions")
    list_parser.add_argument("--status", choices=[s.value for s in PrescriptionStatus])

    subparsers.add_parser("stats", help="Show prescription counters")

    upload_parser = subparsers.add_parser("upload", help="Upload a prescription file")
    upload_parser.add_argument("path", help="Image or PDF of the prescription")
    upload_parser.add_argument("--type", help="MIME type (guessed from the file name by default)")
    upload_parser.add_argument("--notes", help="Notes for the pharmacist")
    upload_parser.add_argument("--doctor", help="Prescribing doctor")
    upload_parser.add_argument("--date", type=date.fromisoformat, help="Prescription date (YYYY-MM-DD)")

    delete_parser = subparsers.add_parser("delete", help="Delete a prescription")
    delete_parser.add_argument("prescription_id")

    watch_parser = subparsers.add_parser("watch", help="Poll and report status changes")
    watch_parser.add_argument("--interval", type=float, default=30.0, help="Seconds between polls")
    watch_parser.add_argument("--status", choices=[s.value for s in PrescriptionStatus])

    return parser


async def run(args: argparse.Namespace) -> int:
    async with PrescriptionApiClient(base_url=args.base_url, api_token=args.token) as client:
        store = PrescriptionStore(client)
        return await COMMANDS[args.command](store, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        level="DEBUG" if args.verbose else settings.LOG_LEVEL,
        format_type=settings.LOG_FORMAT,
    )

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n👋 Stopped")
        return 130


if __name__ == "__main__":
    sys.exit(main())
