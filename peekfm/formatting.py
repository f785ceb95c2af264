from datetime import datetime


def format_size(size: int) -> str:
    if size <= 0:
        return "0 B"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024.0 or unit == "GB":
            if unit == "B":
                return f"{int(value)} B"
            return f"{round(value, 2):g} {unit}"
        value /= 1024.0
    return f"{size} B"


def format_megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):.2f} MB"


def format_modified(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def count_lines(text: str) -> int:
    return text.count("\n") + 1
