"""Script to seed demo data into the database."""

from datetime import date
import asyncio
from sqlalchemy.sql import text

from components.core.init_db import get_db, init_models
from components.student.models import DebtStatus, Student, TuitionDebt
from components.user.repository import UserRepository

STUDENTS = [
    ("523K0077", "Saw Baw Mu Thaw", "Software Engineering"),
    ("523K0034", "Saw Harry", "Software Engineering"),
]


async def seed_data():
    """Seed one payer and two students with unpaid tuition."""
    await init_models()
    async for db in get_db():
        # Clear existing data
        await db.execute(text("DELETE FROM transactions"))
        await db.execute(text("DELETE FROM otp_challenges"))
        await db.execute(text("DELETE FROM payment_attempts"))
        await db.execute(text("DELETE FROM tuition_debts"))
        await db.execute(text("DELETE FROM students"))
        await db.execute(text("DELETE FROM auth_sessions"))
        await db.execute(text("DELETE FROM users"))
        await db.commit()

        await UserRepository(db).create(
            username="alice",
            password="correct",
            full_name="Alice Nguyen",
            email="alice@student.example.edu",
            phone_number="0900000001",
            available_balance=2_000_000,
            program="Software Engineering",
            student_id="523K0001",
        )

        for student_id, full_name, program in STUDENTS:
            db.add(Student(student_id=student_id, full_name=full_name, program=program))
        await db.flush()

        for student_id, _, _ in STUDENTS:
            for semester in ("SEMESTER 1", "SEMESTER 2"):
                db.add(TuitionDebt(
                    student_id=student_id,
                    amount=2_500_000,
                    semester=semester,
                    academic_year="2025-2026",
                    due_date=date(2025, 12, 30),
                    status=DebtStatus.UNPAID,
                ))
        await db.commit()
        print("Seeded 1 user and 2 students")

if __name__ == "__main__":
    asyncio.run(seed_data())
