"""Time-key patterns and normalization shared by extraction, import and storage."""

import re

# 4-digit year, month, day ('-' or '/'), whitespace, H:MM:SS. Recognizers
# sometimes drop a leading zero anywhere, so every field but the year takes 1-2 digits.
TIMESTAMP_RE: re.Pattern[str] = re.compile(
    r"(?P<year>\d{4})[-/](?P<month>\d{1,2})[-/](?P<day>\d{1,2})"
    r"\s+(?P<hour>\d{1,2}):(?P<minute>\d{1,2}):(?P<second>\d{1,2})"
)

# Date prefix accepted on imported rows; the time part is optional there.
DATE_PREFIX_RE: re.Pattern[str] = re.compile(r"^\d{4}[-/]\d{1,2}[-/]\d{1,2}")

_CLOCK_RE: re.Pattern[str] = re.compile(r"^(\d{1,2}):(\d{1,2}):(\d{1,2})$")


def normalize_time(raw: str) -> str:
    """Normalize a time string to ``YYYY-MM-DD HH:MM:SS``.

    Slashes become dashes, month and day of a three-part date are zero-padded
    and every field of an ``H:M:S`` clock is zero-padded. Parts that do not
    have the expected shape are left as they are.
    """
    parts = raw.strip().replace("/", "-").split(" ")
    date_parts = parts[0].split("-")
    if len(date_parts) == 3:
        date_parts[1] = date_parts[1].zfill(2)
        date_parts[2] = date_parts[2].zfill(2)
        parts[0] = "-".join(date_parts)
    if len(parts) > 1:
        clock = _CLOCK_RE.match(parts[-1])
        if clock:
            parts[-1] = ":".join(field.zfill(2) for field in clock.groups())
    return " ".join(parts)


def time_key_from_match(match: re.Match[str]) -> str:
    date = f"{match['year']}-{match['month'].zfill(2)}-{match['day'].zfill(2)}"
    clock = ":".join(match[name].zfill(2) for name in ("hour", "minute", "second"))
    return f"{date} {clock}"
