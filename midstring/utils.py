import uuid
from datetime import datetime, timezone
from typing import Optional


def new_uuid() -> str:
    return str(uuid.uuid4())


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def etag_for(version: int) -> str:
    return f'"{version}"'


def version_from_etag(if_match: str) -> Optional[int]:
    value = if_match.strip().removeprefix("W/").strip('"')
    return int(value) if value.isdigit() else None
