from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_records.api.v1.schemas.mark import MarkCreate
from student_records.models import Mark
from student_records.core.logger import logger


class MarkService:
    @staticmethod
    async def add_marks(student_id: int, marks_data: List[MarkCreate], db: AsyncSession) -> List[Mark]:
        """
        Добавление оценок студенту в рамках текущей транзакции.

        Коммит не выполняется: его делает вызывающий код вместе
        с остальными изменениями.

        Args:
            student_id: Идентификатор студента
            marks_data: Список оценок (subject, marks, term)
            db: Асинхронная сессия SQLAlchemy

        Returns:
            List[Mark]: Добавленные оценки
        """
        marks = [
            Mark(
                student_id=student_id,
                subject=item.subject,
                marks=item.marks,
                term=item.term or None
            ) for item in marks_data
        ]
        if not marks:
            return marks

        db.add_all(marks)
        await db.flush()

        logger.debug(f"[ДОБАВЛЕНИЕ ОЦЕНОК] Добавлено {len(marks)} оценок студенту ID {student_id}")
        return marks

    @staticmethod
    async def get_marks_for_student(student_id: int, db: AsyncSession) -> List[Mark]:
        """Все оценки студента в порядке добавления."""
        result = await db.execute(
            select(Mark)
            .where(Mark.student_id == student_id)
            .order_by(Mark.id)
        )
        return list(result.scalars().all())
