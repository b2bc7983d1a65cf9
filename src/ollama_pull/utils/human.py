"""Human readable sizes and durations for listings and log lines."""

UNITS = ("B", "KiB", "MiB", "GiB", "TiB")
TIME_UNITS = ("seconds", "minutes", "hours", "days", "weeks", "months", "years")


def size_units(size: int) -> str:
    # base-1024 digits, least significant first
    parts = []
    rem = size
    for _ in UNITS:
        parts.append(rem % 1024)
        rem //= 1024
    for i in range(len(UNITS) - 1, 0, -1):
        if parts[i] > 0:
            return f"{parts[i]}.{parts[i - 1]:03d} {UNITS[i]}"
    return f"{parts[0]} {UNITS[0]}"


def duration_units(seconds: float) -> str:
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    if days == 0:
        if hours > 0:
            return f"{hours} {TIME_UNITS[2]}"
        if minutes > 0:
            return f"{minutes} {TIME_UNITS[1]}"
        return f"{secs} {TIME_UNITS[0]}"
    if days > 365:
        return f"{days // 365} {TIME_UNITS[6]}"
    if days >= 60:
        return f"{days // 30} {TIME_UNITS[5]}"
    if days >= 14:
        return f"{days // 7} {TIME_UNITS[4]}"
    return f"{days} {TIME_UNITS[3]}"
