"""Date helpers shared by the API serializers and the admin page"""

from datetime import datetime
from typing import Optional, Union

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DATE_FORMATS = {
    "DMY": "%d/%m/%Y",
    "MDY": "%m/%d/%Y",
    "YMD": "%Y/%m/%d",
}


def now() -> datetime:
    """Wall-clock time truncated to whole seconds"""
    return datetime.now().replace(microsecond=0)


def to_db_string(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ``YYYY-MM-DD HH:MM:SS``"""
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


def parse_db_string(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.strptime(value.strip(), DATETIME_FORMAT)


def format_date(value: Union[str, datetime, None], date_format: str = "DMY", add_hours: bool = False) -> str:
    """
    Format a date for display on the admin page.

    Args:
        value: Datetime or ``YYYY-MM-DD HH:MM:SS`` string
        date_format: One of DMY, MDY, YMD
        add_hours: Append ``HH:MM`` to the date

    Raises:
        ValueError: If the date format is not supported
    """
    if value is None or value == "":
        return ""
    if date_format not in DATE_FORMATS:
        raise ValueError(f"Invalid date format provided: {date_format}")

    moment = parse_db_string(value)
    pattern = DATE_FORMATS[date_format]
    if add_hours:
        pattern += " %H:%M"
    return moment.strftime(pattern)
