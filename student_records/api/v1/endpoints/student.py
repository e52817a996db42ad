from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from student_records.api.v1.schemas.common import ErrorResponse, MessageResponse, NotFoundResponse, PaginationMeta
from student_records.api.v1.schemas.mark import MarkResponse
from student_records.api.v1.schemas.student import (
    CreateNewStudent,
    UpdateStudent,
    StudentDetail,
    StudentDetailEnvelope,
    StudentEnvelope,
    StudentListEnvelope,
    StudentListItem,
    StudentResponse,
)
from student_records.core.database import get_db
from student_records.core.logger import logger
from student_records.services.student import StudentService
from student_records.utils.pagination import resolve_pagination, total_pages

router = APIRouter(
    prefix="/students",
    tags=["Students"],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    }
)

NOT_FOUND = {404: {"model": NotFoundResponse}}


@router.post("", response_model=StudentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_student(
        student_data: CreateNewStudent,
        db: AsyncSession = Depends(get_db)
):
    """
    Создание нового студента и, если переданы, его оценок.

    Raises:
        HTTPException: 400 - Неверный формат даты рождения
        HTTPException: 500 - Внутренняя ошибка сервера
    """
    try:
        student = await StudentService.create_student(student_data, db)
        return StudentEnvelope(student=StudentResponse.model_validate(student))

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"[СОЗДАНИЕ СТУДЕНТА] Ошибка валидации: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        ) from e
    except Exception as e:
        logger.error(f"[СОЗДАНИЕ СТУДЕНТА] Ошибка при создании студента: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e


@router.get("", response_model=StudentListEnvelope, status_code=status.HTTP_200_OK)
async def get_students(
        page: Optional[str] = Query(None),
        limit: Optional[str] = Query(None),
        db: AsyncSession = Depends(get_db)
):
    """
    Постраничный список студентов, новые первыми.

    Номер страницы за пределами totalPages даёт пустой список.
    """
    page, limit, offset = resolve_pagination(page, limit)

    try:
        students, total = await StudentService.list_students(page, limit, offset, db)

        return StudentListEnvelope(
            meta=PaginationMeta(
                total=total,
                page=page,
                limit=limit,
                totalPages=total_pages(total, limit)
            ),
            data=[StudentListItem.model_validate(student) for student in students]
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[ПОЛУЧЕНИЕ СТУДЕНТОВ] Ошибка при получении списка студентов: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e


@router.get("/{student_id}", response_model=StudentDetailEnvelope, status_code=status.HTTP_200_OK, responses=NOT_FOUND)
async def get_student(
        student_id: int,
        db: AsyncSession = Depends(get_db)
):
    """
    Получение студента по ID вместе с оценками.

    Raises:
        HTTPException: 404 - Студент не найден
        HTTPException: 500 - Внутренняя ошибка сервера
    """
    try:
        student, marks = await StudentService.get_student(student_id, db)

        detail = StudentDetail(
            **StudentResponse.model_validate(student).model_dump(),
            marks=[MarkResponse.model_validate(mark) for mark in marks]
        )
        return StudentDetailEnvelope(student=detail)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[ПОЛУЧЕНИЕ СТУДЕНТА] Ошибка при получении студента ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e


@router.put("/{student_id}", response_model=StudentEnvelope, status_code=status.HTTP_200_OK, responses=NOT_FOUND)
async def update_student(
        student_id: int,
        student_data: UpdateStudent,
        db: AsyncSession = Depends(get_db)
):
    """
    Обновление информации о студенте по ID (полная замена полей).

    Raises:
        HTTPException: 400 - Неверный формат даты рождения
        HTTPException: 404 - Студент не найден
        HTTPException: 500 - Внутренняя ошибка сервера
    """
    try:
        updated_student = await StudentService.update_student(student_id, student_data, db)
        return StudentEnvelope(student=StudentResponse.model_validate(updated_student))

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"[ОБНОВЛЕНИЕ СТУДЕНТА] Ошибка валидации для ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        ) from e
    except Exception as e:
        logger.error(f"[ОБНОВЛЕНИЕ СТУДЕНТА] Ошибка при обновлении студента ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e


@router.delete("/{student_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK, responses=NOT_FOUND)
async def delete_student(
        student_id: int,
        db: AsyncSession = Depends(get_db)
):
    """
    Удаление студента по ID. Оценки удаляются каскадно.

    Raises:
        HTTPException: 404 - Студент не найден
        HTTPException: 500 - Внутренняя ошибка сервера
    """
    try:
        await StudentService.delete_student(student_id, db)
        return MessageResponse(message="Deleted")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[УДАЛЕНИЕ СТУДЕНТА] Ошибка при удалении студента ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        ) from e
