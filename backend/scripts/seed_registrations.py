# backend/scripts/seed_registrations.py
"""
Seed sample Sunday registrations straight into the configured store.

No emails are sent; dashboards are refreshed once at the end.

Usage (from backend/):
  python scripts/seed_registrations.py --from 2024-01-07 --to 2024-06-30 --community main
  python scripts/seed_registrations.py --from 2024-01-07 --to 2024-06-30 --dry-run
"""
from __future__ import annotations

import argparse
import random
import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import List

# so "import sundayreg" works regardless of CWD
HERE = Path(__file__).resolve()
BACKEND_ROOT = HERE.parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sundayreg.config import get_settings  # noqa: E402
from sundayreg.models.registration import RegistrantType  # noqa: E402
from sundayreg.schemas.registration import RegistrationRecord  # noqa: E402
from sundayreg.db import Base, engine  # noqa: E402
from sundayreg.dependencies import get_intake  # noqa: E402

FIRST = ["Anna", "Ben", "Carla", "David", "Esther", "Felix", "Grace", "Hannah", "Isaac", "Joy", "Levi", "Miriam"]
LAST = ["Adams", "Baker", "Cole", "Diaz", "Evans", "Fisher", "Garcia", "Hughes", "Ingram", "Jones"]


def _sundays(start: date, end: date) -> List[date]:
    d = start + timedelta(days=(6 - start.weekday()) % 7)
    out = []
    while d <= end:
        out.append(d)
        d += timedelta(days=7)
    return out


def _household(rng: random.Random, sunday: date, community: str, session: str, tz) -> List[RegistrationRecord]:
    last = rng.choice(LAST)
    email = f"{last.lower()}.{rng.randint(1, 400)}@example.org"
    # registrations arrive during the week before
    made = datetime.combine(sunday - timedelta(days=rng.randint(0, 6)), time(rng.randint(7, 13), rng.randint(0, 59)), tz)
    return [
        RegistrationRecord(
            timestamp=made,
            community=community,
            first_name=rng.choice(FIRST),
            last_name=last,
            email=email,
            registrant_type=RegistrantType.member if rng.random() < 0.75 else RegistrantType.guest,
            session_label=session,
            sunday_date=sunday,
        )
        for _ in range(rng.choice([1, 1, 2, 2, 3, 4]))
    ]


def main() -> int:
    ap = argparse.ArgumentParser(description="Seed sample Sunday registrations")
    ap.add_argument("--from", dest="date_from", type=date.fromisoformat, required=True)
    ap.add_argument("--to", dest="date_to", type=date.fromisoformat, required=True)
    ap.add_argument("--community", default=None)
    ap.add_argument("--households", type=int, default=25, help="households per Sunday (avg)")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--dry-run", action="store_true")
    args = ap.parse_args()

    settings = get_settings()
    intake = get_intake()
    community, store = intake.router.for_community(args.community)
    rng = random.Random(args.seed)

    if settings.store_backend == "sql" and not args.dry_run:
        Base.metadata.create_all(bind=engine)

    total = 0
    for sunday in _sundays(args.date_from, args.date_to):
        batch: List[RegistrationRecord] = []
        for _ in range(max(1, int(rng.gauss(args.households, args.households * 0.2)))):
            batch.extend(_household(rng, sunday, community, settings.default_session_label, settings.tz))
        total += len(batch)
        print(f"{sunday.isoformat()}: {len(batch)} registrants")
        if not args.dry_run:
            store.append(batch)

    if args.dry_run:
        print(f"(dry-run) would insert {total} registrations into {community}")
        return 0

    result = intake.refresh_dashboards(community)
    print(f"✓ Inserted {total} registrations into {community}; dashboards refreshed={result.ok}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
