"""Seed one month of raw attendance (and scheduled totals) into Firestore.

Usage: python scripts/seed_db.py [YEAR MONTH]

Only the raw collections are written; the pre-aggregated collections stay
empty, so the dashboard answers from the legacy path until they are built.
"""

from __future__ import annotations

import importlib
import sys

from smart_attend.attendance.naming import raw_collection_name
from smart_attend.common.datetime_utils import current_month, current_year
from smart_attend.common.validators import require_month, require_year
from smart_attend.config import get_settings_module
from smart_attend.container import build_container_from_settings
from smart_attend.core.constants import SUBJECTS_COLLECTION
from smart_attend.core.enums import AttendanceType

SUBJECTS = {
    "CS101": {"lectTotal": 12, "labTotal": 6, "tutTotal": 4},
    "MA201": {"lectTotal": 10, "labTotal": 0, "tutTotal": 6},
    "PH301": {"lectTotal": 8, "labTotal": 4, "tutTotal": 0},
}
GROUPS = {"G1": range(101, 111), "G2": range(201, 211)}
CLASS_DAYS = range(3, 24, 3)


def main() -> None:
    year = require_year(sys.argv[1]) if len(sys.argv) > 1 else current_year()
    month = require_month(sys.argv[2]) if len(sys.argv) > 2 else current_month()

    settings = importlib.import_module(get_settings_module())
    container = build_container_from_settings(settings)
    store = container.store

    for subject, totals in SUBJECTS.items():
        store.set(SUBJECTS_COLLECTION, subject, totals)

    collection = raw_collection_name(year, month)
    types = list(AttendanceType)
    count = 0
    for day in CLASS_DAYS:
        for i, (subject, totals) in enumerate(SUBJECTS.items()):
            type_ = types[(day + i) % len(types)]
            for group, rolls in GROUPS.items():
                for roll in rolls:
                    count += 1
                    store.set(
                        collection,
                        f"{year}{month:02d}{day:02d}_{subject}_{roll}",
                        {
                            "date": f"{year}-{month:02d}-{day:02d}",
                            "deviceRoom": f"R-{100 + i}",
                            "group": group,
                            "isExtra": False,
                            # Every seventh roll/day pair is absent.
                            "present": (roll + day) % 7 != 0,
                            "rollNumber": str(roll),
                            "subject": subject,
                            "timestamp": f"{year}-{month:02d}-{day:02d} 09:00:00",
                            "type": type_.value,
                        },
                    )

    container.fanout.shutdown()
    print(f"OK: Seeded {count} records -> {collection}")


if __name__ == "__main__":
    main()
