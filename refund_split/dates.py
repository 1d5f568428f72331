import re
from datetime import date
from typing import Optional

MONTHS = {
    "january": "01",
    "february": "02",
    "march": "03",
    "april": "04",
    "may": "05",
    "june": "06",
    "july": "07",
    "august": "08",
    "september": "09",
    "october": "10",
    "november": "11",
    "december": "12",
}

LONG_DATE_RE = re.compile(
    r"\b(" + "|".join(MONTHS) + r")\s+(\d{1,2}),\s+(\d{4})\b",
    re.IGNORECASE,
)


def derive_date_code(text: str, today: Optional[date] = None) -> str:
    """
    Code date MMDDYY tiré de la première date longue ("October 3, 2024" → "100324").
    À défaut, la date du jour.
    """
    m = LONG_DATE_RE.search(text or "")
    if m:
        month, day, year = m.groups()
        return f"{MONTHS[month.lower()]}{int(day):02d}{year[-2:]}"

    today = today or date.today()
    return today.strftime("%m%d%y")
