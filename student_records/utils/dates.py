from datetime import datetime, timezone

DOB_FORMAT_ERROR = "Invalid date format. Please use YYYY-MM-DD"


def parse_dob(value) -> datetime:
    """
    Приводит дату рождения к метке времени в UTC.

    Принимает "YYYY-MM-DD" или полную ISO-8601 дату со временем.
    Значение без часового пояса считается UTC.

    Raises:
        ValueError: дату не удалось разобрать
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(DOB_FORMAT_ERROR)

    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as e:
        raise ValueError(DOB_FORMAT_ERROR) from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
