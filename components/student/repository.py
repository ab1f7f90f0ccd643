"""Repository for student tuition operations."""

from typing import BinaryIO, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.student.models import DebtStatus, Student, TuitionDebt

settings = get_settings()

CSV_COLUMNS = ["student_id", "full_name", "program", "amount", "semester", "academic_year", "due_date"]


def _cell(row: pd.Series, column: str) -> str:
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


class StudentRepository:
    """Repository for students and their tuition debts."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_outstanding_debt(self, student_id: str) -> Optional[Tuple[Student, TuitionDebt]]:
        """Get the student with its earliest-due UNPAID debt, if any."""
        result = await self.session.execute(
            select(Student, TuitionDebt)
            .join(TuitionDebt, TuitionDebt.student_id == Student.student_id)
            .where(
                Student.student_id == student_id,
                TuitionDebt.status == DebtStatus.UNPAID,
            )
            .order_by(TuitionDebt.due_date, TuitionDebt.debt_id)
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def get_student(self, student_id: str) -> Optional[Student]:
        return await self.session.get(Student, student_id)

    async def get_debt_for_update(self, debt_id: int) -> Optional[TuitionDebt]:
        """Get a debt, locking the row until the transaction ends."""
        result = await self.session.execute(
            select(TuitionDebt)
            .where(TuitionDebt.debt_id == debt_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def debt_exists(self, student_id: str, semester: str, academic_year: str) -> bool:
        result = await self.session.execute(
            select(TuitionDebt.debt_id).where(
                TuitionDebt.student_id == student_id,
                TuitionDebt.semester == semester,
                TuitionDebt.academic_year == academic_year,
            )
        )
        return result.first() is not None

    async def import_debts_from_csv(self, file_content: BinaryIO) -> Tuple[bool, str, int, List[Dict]]:
        """
        Import students and tuition debts from a tab separated CSV file.

        Args:
            file_content: The CSV file content

        Returns:
            Tuple containing:
            - Success status (bool)
            - Message (str)
            - Number of imported debts (int)
            - List of errors if any (List[Dict])

        Every row is validated before anything is written; one bad row
        rejects the whole file.
        """
        try:
            frame = pd.read_csv(file_content, sep="\t", dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            return False, f"Could not read CSV file: {e}", 0, []

        frame.columns = [str(column).strip() for column in frame.columns]
        missing = [column for column in CSV_COLUMNS if column not in frame.columns]
        if missing:
            return False, f"CSV file must contain columns: {', '.join(CSV_COLUMNS)}", 0, []
        if frame.empty:
            return False, "CSV file contains no rows", 0, []

        errors: List[Dict] = []
        parsed: List[Dict] = []
        seen = set()

        for index, row in frame.iterrows():
            row_num = int(index) + 2  # Header is row 1
            student_id = _cell(row, "student_id")
            full_name = _cell(row, "full_name")
            semester = _cell(row, "semester")
            academic_year = _cell(row, "academic_year")

            if len(student_id) < settings.STUDENT_ID_MIN_LENGTH:
                errors.append({"row": row_num, "message": f"Invalid student_id: '{student_id}'"})
                continue
            if not full_name or not semester or not academic_year:
                errors.append({"row": row_num, "message": "full_name, semester and academic_year are required"})
                continue

            raw_amount = _cell(row, "amount").replace(",", "")
            if not raw_amount.isdigit() or int(raw_amount) <= 0:
                errors.append({"row": row_num, "message": f"Invalid amount: '{_cell(row, 'amount')}'"})
                continue

            due_date = pd.to_datetime(_cell(row, "due_date"), format="%Y-%m-%d", errors="coerce")
            if pd.isna(due_date):
                errors.append({
                    "row": row_num,
                    "message": f"Invalid due_date: '{_cell(row, 'due_date')}'. Expected YYYY-MM-DD"
                })
                continue

            key = (student_id, semester, academic_year)
            if key in seen or await self.debt_exists(*key):
                errors.append({
                    "row": row_num,
                    "message": f"Tuition for {student_id} {semester} {academic_year} already exists"
                })
                continue
            seen.add(key)

            parsed.append({
                "student_id": student_id,
                "full_name": full_name,
                "program": _cell(row, "program") or None,
                "amount": int(raw_amount),
                "semester": semester,
                "academic_year": academic_year,
                "due_date": due_date.date(),
            })

        if errors:
            return False, f"{len(errors)} invalid row(s); nothing was imported", 0, errors

        for item in parsed:
            student = await self.get_student(item["student_id"])
            if student is None:
                student = Student(
                    student_id=item["student_id"],
                    full_name=item["full_name"],
                    program=item["program"],
                )
                self.session.add(student)
                await self.session.flush()
            self.session.add(TuitionDebt(
                student_id=item["student_id"],
                amount=item["amount"],
                semester=item["semester"],
                academic_year=item["academic_year"],
                due_date=item["due_date"],
                status=DebtStatus.UNPAID,
            ))
        await self.session.commit()

        return True, f"Imported {len(parsed)} tuition debt(s)", len(parsed), []
