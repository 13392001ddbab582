from numbers import Real

UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")


def format_size(value, precision: int = 0):
    """Format a byte count with 1024-based units.

    Below 1 KB the precision is forced to 0. Non-numeric input is returned
    unchanged.
    """
    if isinstance(value, bool) or not isinstance(value, (Real, str)):
        return value
    try:
        size = float(value)
    except ValueError:
        return value

    if abs(size) < 1024:
        precision = 0

    sign = "-" if size < 0 else ""
    size = abs(size)
    exp = 0
    while size >= 1024 and exp < len(UNITS) - 1:
        size /= 1024
        exp += 1
    return f"{sign}{size:.{precision}f} {UNITS[exp]}"
