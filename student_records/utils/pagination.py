import math
from typing import Optional, Tuple

from student_records.core.config import settings


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def resolve_pagination(page=None, limit=None) -> Tuple[int, int, int]:
    """
    Разбор параметров page/limit из строки запроса.

    Нечисловые и неположительные значения заменяются значениями по умолчанию,
    page не меньше 1, limit не больше MAX_PAGE_LIMIT.

    Returns:
        Tuple[int, int, int]: (page, limit, offset)
    """
    page = _to_int(page) or 1
    page = max(page, 1)

    limit = _to_int(limit)
    if not limit or limit < 1:
        limit = settings.DEFAULT_PAGE_LIMIT
    limit = min(limit, settings.MAX_PAGE_LIMIT)

    return page, limit, (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)
