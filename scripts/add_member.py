#!/usr/bin/env python3
"""
Add a member directly to the configured storage.

Usage:
  python scripts/add_member.py --first Somchai --last Sukjai --history "MP since 2019" \
      --party "Demo Party" [--prefix Mr] [--position ...] [--ministry ...] [--photo path.png]

--photo is mandatory while REQUIRE_PHOTO_ON_CREATE is on (the default), as in the form.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from contextlib import ExitStack
from pathlib import Path

# Make the roster package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core.config import get_settings
from roster.core.errors import DraftValidationError, ImageReadError
from roster.domain.members import PREFIXES, validate_draft
from roster.services.member_service import MemberStore, default_storage
from roster.services.photo_service import PhotoEncoder


def main() -> None:
    ap = argparse.ArgumentParser(description="Add a member record")
    ap.add_argument("--prefix", default="Mr", choices=PREFIXES)
    ap.add_argument("--first", required=True, help="First name")
    ap.add_argument("--last", required=True, help="Last name")
    ap.add_argument("--history", required=True, help="Work history / past achievements")
    ap.add_argument("--party", required=True, help="Party name")
    ap.add_argument("--position", default="", help="Minister position")
    ap.add_argument("--ministry", default="", help="Ministry")
    ap.add_argument("--photo", help="Path to a JPEG/PNG photo")
    args = ap.parse_args()

    values = {
        "prefix": args.prefix,
        "firstName": args.first,
        "lastName": args.last,
        "workHistory": args.history,
        "ministerPosition": args.position,
        "ministry": args.ministry,
        "party": args.party,
    }
    settings = get_settings()
    photo = None
    with ExitStack() as stack:
        handle = None
        if args.photo:
            path = Path(args.photo)
            if not path.exists():
                raise SystemExit(f"File not found: {path}")
            handle = stack.enter_context(path.open("rb"))
        draft = validate_draft(values, handle, photo_required=settings.require_photo_on_create)
        if handle is not None:
            photo = asyncio.run(PhotoEncoder(settings.max_upload_bytes).encode(handle))

    store = MemberStore.open(default_storage())
    member = store.create(draft, photo)
    print("OK: member added")
    print(f"  ID: {member.id}")
    print(f"  Name: {member.display_name}")
    print(f"  Total: {len(store)}")


if __name__ == "__main__":
    try:
        main()
    except DraftValidationError as exc:
        for field, message in exc.errors.items():
            sys.stderr.write(f"{field}: {message}\n")
        raise SystemExit(1)
    except ImageReadError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        raise SystemExit(1)
