from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_unix() -> int:
    return int(now_utc().timestamp())
