"""Student tuition endpoints."""

import io

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import ErrorResponse
from components.student import schemas
from components.student.repository import StudentRepository
from components.student.service import StudentDebtLookup
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/students",
    tags=["students"],
    responses={404: {"description": "Not found", "model": ErrorResponse}},
)


@router.get("/{student_id}/tuition", response_model=schemas.StudentDebtRecord)
async def lookup_tuition(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a student's profile and outstanding tuition debt."""
    return await StudentDebtLookup(db).lookup(student_id)


@router.post("/tuition/import", response_model=schemas.DebtImportResponse)
async def import_tuition(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Upload tuition debts from a tab separated CSV file.

    The file must have the columns:
    - student_id: at least 7 characters
    - full_name, program: used when the student is new
    - amount: positive whole number of VND
    - semester, academic_year: e.g. SEMESTER 1, 2025-2026
    - due_date: YYYY-MM-DD

    A file with any invalid row is rejected as a whole.
    """
    if not file.filename or not file.filename.endswith(('.csv', '.tsv')):
        return schemas.DebtImportResponse(
            success=False,
            message="Invalid file format. Only CSV files (.csv, .tsv) are supported."
        )

    repo = StudentRepository(db)
    file_content = await file.read()
    success, message, imported, errors = await repo.import_debts_from_csv(io.BytesIO(file_content))

    if not success:
        return schemas.DebtImportResponse(
            success=False,
            message=message,
            errors=[schemas.DebtImportError(**error) for error in errors]
        )

    return schemas.DebtImportResponse(success=True, message=message, imported=imported)
