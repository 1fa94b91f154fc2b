#!/usr/bin/env python3
"""
Seed a sample organisation chart into the 360 Feedback database.

Roles are derived from designations, reporting lines from the "reports_to"
column. Employees are matched by email, so the script can be re-run safely.

Usage:
    python scripts/seed_employees.py
    python scripts/seed_employees.py --dry-run
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.orm import Session

# Load environment variables
load_dotenv()

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# (name, designation, department, email, reports_to)
SAMPLE_ORG = [
    ("Harriet Poole", "Director", "Leadership (UK)", "harriet.poole@example.com", ""),
    ("Victor Mendes", "Head of Delivery and Operations", "Software Development (India)", "victor.mendes@example.com", "Harriet Poole"),
    ("Ravi Bhatt", "Technical Project Manager", "Software Development (India)", "ravi.bhatt@example.com", "Victor Mendes"),
    ("Dana Kowalski", "Technical Lead", "Software Development (India)", "dana.kowalski@example.com", "Victor Mendes"),
    ("Anil Kapoor", "Senior Tech Lead", "Software Development (India)", "anil.kapoor@example.com", "Victor Mendes"),
    ("Priya Nair", "Senior Software Developer", "Software Development (India)", "priya.nair@example.com", "Victor Mendes"),
    ("Rohan Iyer", "Senior DevOps Engineer", "Software Development (India)", "rohan.iyer@example.com", "Victor Mendes"),
    ("Mark Ellis", "HSE Product Owner", "Software Development (UK)", "mark.ellis@example.com", "Harriet Poole"),
    ("Sofia Brandt", "HR Manager", "HR (India)", "sofia.brandt@example.com", "Harriet Poole"),
    ("Aditya Rao", "Software Developer", "Software Development (India)", "aditya.rao@example.com", "Dana Kowalski"),
    ("Meera Joshi", "Software Developer", "Software Development (India)", "meera.joshi@example.com", "Priya Nair"),
    ("Karan Mehta", "QA Engineer (Manual+Automation)", "Software Development (India)", "karan.mehta@example.com", "Ravi Bhatt"),
    ("Nisha Verma", "Data Analyst", "Software Development (India)", "nisha.verma@example.com", "Priya Nair"),
    ("Tom Archer", "Junior Software Developer", "Software Development (UK)", "tom.archer@example.com", "Mark Ellis"),
    ("Lena Fischer", "Intern", "Software Development (UK)", "lena.fischer@example.com", "Mark Ellis"),
    ("Sameer Khan", "Release Architect", "Software Development (India)", "sameer.khan@example.com", "Rohan Iyer"),
    ("Ira Sen", "Intern", "HR (India)", "ira.sen@example.com", "Sofia Brandt"),
    ("Gaurav Das", "Software Engineer Manager", "Software Development (India)", "gaurav.das@example.com", "Victor Mendes"),
    ("Chloe Martin", "UI/UX Designer", "Software Development (India)", "chloe.martin@example.com", "Anil Kapoor"),
    ("Yusuf Ali", "Business Analyst", "Software Development (India)", "yusuf.ali@example.com", "Anil Kapoor"),
]

LEAD_DESIGNATIONS = (
    "Director",
    "Head of Delivery and Operations",
    "Technical Project Manager",
    "Scrum Master",
    "Technical Lead",
    "Senior Tech Lead",
    "HSE Product Owner",
    "HR Manager",
    "Software Engineer Manager",
)

MANAGER_DESIGNATIONS = (
    "Senior Software Developer",
    "Senior DevOps Engineer",
    "Release Architect",
)


def determine_role(designation: str) -> str:
    d = designation.lower()
    if any(x.lower() in d for x in LEAD_DESIGNATIONS):
        return "lead"
    if any(x.lower() in d for x in MANAGER_DESIGNATIONS):
        return "manager"
    return "employee"


def upsert_employees(db: Session, rows) -> dict[str, int]:
    from feedback360.models.employee import Employee
    from feedback360.models.user import User

    stats = {"created": 0, "updated": 0}
    for name, designation, department, email, _ in rows:
        email = email.lower()
        emp = db.query(Employee).filter(Employee.email == email).one_or_none()
        if emp is None:
            user = db.query(User).filter(User.email == email).one_or_none()
            emp = Employee(email=email, user_id=user.id if user else None)
            db.add(emp)
            stats["created"] += 1
        else:
            stats["updated"] += 1
        emp.name = name
        emp.designation = designation
        emp.department = department
        emp.role = determine_role(designation)
    db.flush()
    return stats


def link_managers(db: Session, rows) -> int:
    from feedback360.models.employee import Employee

    by_name = {name: email.lower() for name, _, _, email, _ in rows}
    by_email = {e.email: e for e in db.query(Employee).all()}

    linked = 0
    for name, _, _, email, reports_to in rows:
        if not reports_to:
            continue
        manager_email = by_name.get(reports_to)
        if not manager_email:
            print(f"  Warning: Manager '{reports_to}' not found for {name}")
            continue
        emp = by_email[email.lower()]
        manager = by_email[manager_email]
        emp.manager_id = manager.id
        # Reports of a lead are also led by them
        if manager.role == "lead":
            emp.lead_id = manager.id
        linked += 1
    db.flush()
    return linked


def main():
    parser = argparse.ArgumentParser(description="Seed a sample org chart")
    parser.add_argument("--dry-run", action="store_true", help="Roll back instead of committing")
    args = parser.parse_args()

    from feedback360.db.session import SessionLocal

    db = SessionLocal()
    try:
        print(f"Seeding {len(SAMPLE_ORG)} employees...")
        stats = upsert_employees(db, SAMPLE_ORG)
        print(f"  Employees: {stats['created']} created, {stats['updated']} updated")

        linked = link_managers(db, SAMPLE_ORG)
        print(f"  Reporting lines: {linked} linked")

        roles = {"lead": 0, "manager": 0, "employee": 0}
        for row in SAMPLE_ORG:
            roles[determine_role(row[1])] += 1
        print(f"  Roles: {roles['lead']} leads, {roles['manager']} managers, {roles['employee']} employees")

        if args.dry_run:
            db.rollback()
            print("Dry run, nothing committed")
        else:
            db.commit()
            print("Done")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
