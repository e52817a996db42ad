from fastapi import HTTPException
from typing import List, Tuple
from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_records.models import Student, Mark
from student_records.core.logger import logger
from student_records.services.mark import MarkService
from student_records.utils.dates import parse_dob
from student_records.api.v1.schemas.student import CreateNewStudent, UpdateStudent


def _store_error(e: SQLAlchemyError) -> str:
    return str(getattr(e, "orig", None) or e)


class StudentService:
    @staticmethod
    async def create_student(student_data: CreateNewStudent, db: AsyncSession) -> Student:
        """
        Создание студента вместе с его оценками.

        Студент и все оценки пишутся одной транзакцией: либо сохраняется
        всё, либо ничего.

        Args:
            student_data: Данные студента и список оценок
            db: Асинхронная сессия SQLAlchemy

        Returns:
            Student: Созданный студент (без оценок)

        Raises:
            ValueError: Неверный формат даты рождения
            HTTPException: 500 - Ошибка базы данных
        """
        dob = parse_dob(student_data.dob)

        try:
            student = Student(
                first_name=student_data.first_name,
                last_name=student_data.last_name,
                email=student_data.email,
                dob=dob
            )
            db.add(student)
            await db.flush()

            marks = await MarkService.add_marks(student.id, student_data.marks or [], db)

            await db.commit()
            await db.refresh(student)

            logger.info(f"[СОЗДАНИЕ СТУДЕНТА] Студент создан: ID {student.id}, оценок: {len(marks)}")
            return student

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[СОЗДАНИЕ СТУДЕНТА] Ошибка базы данных: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=_store_error(e)
            ) from e

    @staticmethod
    async def list_students(page: int, limit: int, offset: int, db: AsyncSession) -> Tuple[List[Student], int]:
        """
        Получение страницы студентов, новые первыми.

        Args:
            page: Номер страницы (от 1)
            limit: Размер страницы
            offset: Смещение, (page - 1) * limit
            db: Асинхронная сессия SQLAlchemy

        Returns:
            Tuple[List[Student], int]: Студенты страницы и общее количество

        Raises:
            HTTPException: 500 - Ошибка базы данных
        """
        try:
            total = await db.scalar(select(func.count()).select_from(Student))

            result = await db.execute(
                select(Student)
                .order_by(Student.id.desc())
                .limit(limit)
                .offset(offset)
            )
            students = list(result.scalars().all())

            logger.info(f"[ПОЛУЧЕНИЕ СТУДЕНТОВ] Страница {page}: {len(students)} из {total}")
            return students, total or 0

        except SQLAlchemyError as e:
            logger.error(f"[ПОЛУЧЕНИЕ СТУДЕНТОВ] Ошибка базы данных: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=_store_error(e)
            ) from e

    @staticmethod
    async def get_student(student_id: int, db: AsyncSession) -> Tuple[Student, List[Mark]]:
        """
        Получение студента по ID вместе с оценками.

        Args:
            student_id: Идентификатор студента
            db: Асинхронная сессия SQLAlchemy

        Returns:
            Tuple[Student, List[Mark]]: Студент и его оценки

        Raises:
            HTTPException: 404 - Студент не найден
            HTTPException: 500 - Ошибка базы данных
        """
        try:
            result = await db.execute(select(Student).where(Student.id == student_id))
            student = result.scalars().first()

            if not student:
                logger.warning(f"[ПОЛУЧЕНИЕ СТУДЕНТА] Студент не найден: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Not found"
                )

            marks = await MarkService.get_marks_for_student(student_id, db)

            logger.info(f"[ПОЛУЧЕНИЕ СТУДЕНТА] Найден студент: ID {student_id}, оценок: {len(marks)}")
            return student, marks

        except SQLAlchemyError as e:
            logger.error(f"[ПОЛУЧЕНИЕ СТУДЕНТА] Ошибка базы данных для ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=_store_error(e)
            ) from e

    @staticmethod
    async def update_student(student_id: int, student_data: UpdateStudent, db: AsyncSession) -> Student:
        """
        Полная замена полей студента. Оценки не затрагиваются.

        Args:
            student_id: Идентификатор студента
            student_data: Новые данные студента
            db: Асинхронная сессия SQLAlchemy

        Returns:
            Student: Обновленный студент

        Raises:
            ValueError: Неверный формат даты рождения
            HTTPException: 404 - Студент не найден
            HTTPException: 500 - Ошибка базы данных
        """
        try:
            student = await db.get(Student, student_id)

            if not student:
                logger.warning(f"[ОБНОВЛЕНИЕ СТУДЕНТА] Студент не найден: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Student not found"
                )

            dob = parse_dob(student_data.dob) if student_data.dob is not None else None

            student.first_name = student_data.first_name
            student.last_name = student_data.last_name
            student.email = student_data.email
            student.dob = dob
            student.updated_at = func.now()

            await db.commit()
            await db.refresh(student)

            logger.info(f"[ОБНОВЛЕНИЕ СТУДЕНТА] Студент обновлен: ID {student_id}")
            return student

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ОБНОВЛЕНИЕ СТУДЕНТА] Ошибка базы данных для ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=_store_error(e)
            ) from e

    @staticmethod
    async def delete_student(student_id: int, db: AsyncSession) -> bool:
        """
        Удаление студента по ID одним запросом DELETE.

        Оценки удаляются каскадом по внешнему ключу.

        Args:
            student_id: Идентификатор студента
            db: Асинхронная сессия SQLAlchemy

        Returns:
            bool: True при успешном удалении

        Raises:
            HTTPException: 404 - Студент не найден
            HTTPException: 500 - Ошибка базы данных
        """
        try:
            result = await db.execute(
                delete(Student)
                .where(Student.id == student_id)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                logger.warning(f"[УДАЛЕНИЕ СТУДЕНТА] Студент не найден: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Student not found"
                )

            await db.commit()

            logger.info(f"[УДАЛЕНИЕ СТУДЕНТА] Студент удален: ID {student_id}")
            return True

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[УДАЛЕНИЕ СТУДЕНТА] Ошибка базы данных для ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=_store_error(e)
            ) from e
