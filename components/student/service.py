"""Student debt lookup."""

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.exceptions import StudentNotFoundError
from components.student import schemas
from components.student.repository import StudentRepository

settings = get_settings()


class StudentDebtLookup:
    """Read-only lookup of a student's outstanding tuition."""

    def __init__(self, session: AsyncSession):
        self.repository = StudentRepository(session)

    async def lookup(self, student_id: str) -> schemas.StudentDebtRecord:
        """
        Return the student's outstanding debt.

        Ids shorter than STUDENT_ID_MIN_LENGTH are rejected without touching
        storage. A short id, an unknown student and a student with nothing
        left to pay all raise the same StudentNotFoundError.
        """
        student_id = (student_id or "").strip()
        if len(student_id) < settings.STUDENT_ID_MIN_LENGTH:
            raise StudentNotFoundError()

        found = await self.repository.get_outstanding_debt(student_id)
        if found is None:
            raise StudentNotFoundError()

        student, debt = found
        return schemas.StudentDebtRecord(
            student_id=student.student_id,
            full_name=student.full_name,
            program=student.program,
            tuition=schemas.TuitionDebt.model_validate(debt),
        )
