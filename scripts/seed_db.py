from __future__ import annotations

import argparse
import importlib

from dotenv import load_dotenv

from school_attendance.config import get_settings_module
from school_attendance.database.bootstrap import DEMO_PASSWORD, seed_demo_data


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo teachers, students and attendance.")
    parser.add_argument("--teachers", type=int, default=3)
    parser.add_argument("--students-per-teacher", type=int, default=6)
    parser.add_argument("--days", type=int, default=30)
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_demo_data(
        db_config,
        teachers=args.teachers,
        students_per_teacher=args.students_per_teacher,
        days=args.days,
    )

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(login: teacher1@school.test / {DEMO_PASSWORD})"
    )


if __name__ == "__main__":
    main()
