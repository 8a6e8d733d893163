"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when their
str() representation is empty. Skip reasons are logged with these messages,
so an empty string would hide why a file was skipped.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

# Friendly messages for exception types that often carry no text
FRIENDLY_MESSAGES: dict[type, str] = {
    FileNotFoundError: "File does not exist.",
    IsADirectoryError: "Path is a directory, not a file.",
    PermissionError: "Permission denied while reading the file.",
    TimeoutError: "Filesystem operation timed out.",
    MemoryError: "Not enough memory to load the file.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a useful display message.

    Args:
        e: The exception to format
        include_type: Whether to include the exception type name

    Returns:
        A non-empty error message

    Examples:
        >>> format_error_message(ValueError("bad url"))
        'ValueError: bad url'

        >>> format_error_message(ValueError("bad url"), include_type=False)
        'bad url'

        >>> format_error_message(PermissionError())
        'PermissionError: Permission denied while reading the file.'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}" if include_type else friendly_msg

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings.

    File paths and prompt text may contain brackets ("[media attached: ...]")
    that Rich would otherwise parse as markup tags.
    """
    return _escape_markup(str(value))
