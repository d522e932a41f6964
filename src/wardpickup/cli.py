"""
WardPickup CLI entrypoint.

Operator tool for inspecting and repairing households against the configured store
without going through the HTTP API (e.g., reconciling a collection whose schedule
update failed). Commands act as the identity given by `--caller-id/--role/--ward`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from wardpickup.config.settings import get_settings
from wardpickup.core.errors import PickupError
from wardpickup.core.geo import GeoPoint
from wardpickup.core.logging import configure_logging
from wardpickup.core.time import parse_datetime
from wardpickup.domain.models import VALID_FREQUENCIES, Caller
from wardpickup.engine.authz import require_staff
from wardpickup.engine.services import Services, build_services


def _caller(args: argparse.Namespace) -> Caller:
    return Caller(id=args.caller_id, role=args.role, ward_number=args.ward)


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_schedule(services: Services, args: argparse.Namespace) -> int:
    at = parse_datetime(args.at) if args.at else None
    _print(services.schedule.get_schedule(args.household_id, now=at).model_dump(mode="json"))
    return 0


def _cmd_set_frequency(services: Services, args: argparse.Namespace) -> int:
    _print(services.schedule.set_frequency(args.household_id, args.days).model_dump(mode="json"))
    return 0


def _cmd_record_pickup(services: Services, args: argparse.Namespace) -> int:
    require_staff(args.role)
    at = parse_datetime(args.at) if args.at else None
    _print(services.schedule.record_pickup(args.household_id, now=at).model_dump(mode="json"))
    return 0


def _cmd_verify(services: Services, args: argparse.Namespace) -> int:
    require_staff(args.role)
    outcome = services.verification.attempt_verify(
        args.household_id,
        args.caller_id,
        args.lat,
        args.lng,
        args.action,
        reason=args.reason,
    )
    _print(outcome.model_dump(mode="json"))
    return 0


def _cmd_collect(services: Services, args: argparse.Namespace) -> int:
    outcome = services.collection.record_collection(
        _caller(args),
        args.household_id,
        waste_types=args.waste_type,
        weight_kg=args.weight_kg,
        notes=args.notes,
        worker_lat=args.lat,
        worker_lng=args.lng,
    )
    _print({**outcome.model_dump(mode="json"), "partial": outcome.partial})
    # Non-zero so scripts notice a collection that needs reconciliation.
    return 3 if outcome.partial else 0


def _cmd_households(services: Services, args: argparse.Namespace) -> int:
    position = GeoPoint(lat=args.lat, lng=args.lng) if args.lat is not None and args.lng is not None else None
    rows = services.roster.list_households(_caller(args), args.filter, position)
    if args.json:
        _print([r.model_dump(mode="json") for r in rows])
        return 0
    for r in rows:
        flags = r.verification_status.upper() + (" READY" if r.waste_ready else "")
        where = f"  {r.distance_label}" if r.distance_label else ""
        nxt = r.next_pickup_at.date().isoformat() if r.next_pickup_at else "-"
        print(f"{r.id}  ward={r.ward_number or '-'}  next={nxt}  {flags}{where}")
    return 0


def _add_identity(p: argparse.ArgumentParser, *, role_default: str = "worker") -> None:
    p.add_argument("--caller-id", default="cli-operator")
    p.add_argument("--role", default=role_default, choices=["citizen", "worker", "admin"])
    p.add_argument("--ward", type=int, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the WardPickup CLI."""
    parser = argparse.ArgumentParser(prog="wardpickup")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("schedule", help="Show a household's pickup schedule.")
    s.add_argument("household_id")
    s.add_argument("--at", default=None, help="ISO datetime to evaluate at (default: now)")
    s.set_defaults(func=_cmd_schedule)

    f = sub.add_parser("set-frequency", help="Change a household's pickup frequency.")
    f.add_argument("household_id")
    f.add_argument("days", type=int, choices=list(VALID_FREQUENCIES))
    f.set_defaults(func=_cmd_set_frequency)

    rp = sub.add_parser("record-pickup", help="Advance a household's schedule without logging a collection.")
    rp.add_argument("household_id")
    rp.add_argument("--at", default=None, help="ISO datetime of the pickup (default: now)")
    _add_identity(rp)
    rp.set_defaults(func=_cmd_record_pickup)

    v = sub.add_parser("verify", help="Run the proximity handshake for a pending household.")
    v.add_argument("household_id")
    v.add_argument("--lat", required=True, type=float)
    v.add_argument("--lng", required=True, type=float)
    v.add_argument("--action", choices=["verify", "reject"], default="verify")
    v.add_argument("--reason", default=None)
    _add_identity(v)
    v.set_defaults(func=_cmd_verify)

    c = sub.add_parser("collect", help="Record a collection (log + schedule + credits).")
    c.add_argument("household_id")
    c.add_argument("--waste-type", action="append", default=[], help="Repeatable (wet, dry, hazardous, ...)")
    c.add_argument("--weight-kg", type=float, default=None)
    c.add_argument("--notes", default=None)
    c.add_argument("--lat", type=float, default=None)
    c.add_argument("--lng", type=float, default=None)
    _add_identity(c)
    c.set_defaults(func=_cmd_collect)

    h = sub.add_parser("households", help="List households visible to a worker.")
    h.add_argument("--filter", choices=["waste_ready", "overdue", "pending_verification"], default=None)
    h.add_argument("--lat", type=float, default=None)
    h.add_argument("--lng", type=float, default=None)
    h.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    _add_identity(h)
    h.set_defaults(func=_cmd_households)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m wardpickup.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    services = build_services(get_settings())
    func: Any = getattr(args, "func")
    try:
        return int(func(services, args))
    except PickupError as e:
        _print({"error": e.as_detail()})
        return 2
    finally:
        services.close()


if __name__ == "__main__":
    raise SystemExit(main())
