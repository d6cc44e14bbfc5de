"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib
from datetime import date

from school_attendance.config import get_settings_module
from school_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    teacher = container.users_repo.get_by_email("teacher1@school.test")
    if teacher is None:
        print("Run scripts/seed_db.py first.")
        return

    record = container.attendance_service.mark_attendance(teacher, work_date=date.today(), status="present")
    print(record)
    print(container.attendance_service.list_attendance(teacher, teacher.user_id, page=1))


if __name__ == "__main__":
    main()
