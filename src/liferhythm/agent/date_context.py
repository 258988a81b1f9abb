from datetime import datetime, timedelta
from typing import List

WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _sunday_index(value: datetime) -> int:
    # datetime.weekday() counts from Monday.
    return (value.weekday() + 1) % 7


def build_date_context(now: datetime) -> str:
    """Build the date anchor block prepended to every user message.

    Lists today's date plus the most recent date (on or before today) for each
    weekday, Sunday through Saturday, so the model can resolve phrases such as
    "Monday" to an absolute ISO date.

    Args:
        now: Reference instant. Its own calendar date is used as-is.

    Returns:
        str: Block wrapped in ``[DATE CONTEXT]`` / ``[/DATE CONTEXT]`` markers.
    """
    today = now.date()
    today_idx = _sunday_index(now)
    weekday = WEEKDAYS[today_idx]
    readable = f"{weekday}, {MONTHS[today.month - 1]} {today.day}, {today.year}"

    recent: List[str] = []
    for idx, name in enumerate(WEEKDAYS):
        diff = (today_idx - idx + 7) % 7
        recent.append(f"  {name}: {(today - timedelta(days=diff)).isoformat()}")

    return "\n".join(
        [
            "[DATE CONTEXT]",
            f"Today is {readable} ({today.isoformat()}).",
            "Recent dates for reference:",
            *recent,
            "[/DATE CONTEXT]",
        ]
    )
