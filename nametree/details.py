"""Person detail records for renderers' detail panels."""

from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from .schemas import Person

DEFAULT_PICTURE_URL = "https://cdn-icons-png.flaticon.com/512/149/149071.png"
NOT_AVAILABLE = "N/A"


def parse_day_month_year(value: str) -> Optional[date]:
    """Parse ``DD-MM-YYYY``; returns ``None`` for anything else."""

    parts = value.strip().split("-")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def calculate_age(birth_date: Optional[str], end_date: Optional[str] = None, today: Optional[date] = None) -> str:
    if not birth_date:
        return NOT_AVAILABLE
    born = parse_day_month_year(birth_date)
    if born is None:
        return NOT_AVAILABLE
    if end_date:
        until = parse_day_month_year(end_date)
        if until is None:
            return NOT_AVAILABLE
    else:
        until = today or date.today()

    age = until.year - born.year
    if (until.month, until.day) < (born.month, born.day):
        age -= 1
    if age < 0:
        return NOT_AVAILABLE
    return f"{age} (deceased)" if end_date else str(age)


def person_details(person: Person, today: Optional[date] = None) -> Dict[str, str]:
    return {
        "name": person.full_name or NOT_AVAILABLE,
        "rootName": person.root_full_name or NOT_AVAILABLE,
        "birthDate": person.birth_date or NOT_AVAILABLE,
        "endDate": person.end_date or NOT_AVAILABLE,
        "age": calculate_age(person.birth_date, person.end_date, today),
        "picture": person.picture_url or DEFAULT_PICTURE_URL,
    }


__all__ = ["DEFAULT_PICTURE_URL", "calculate_age", "person_details", "parse_day_month_year"]
