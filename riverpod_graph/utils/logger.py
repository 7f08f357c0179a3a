"""Terminal-safe output with ASCII fallbacks for non-UTF-8 consoles.

Detects the terminal encoding and swaps the Unicode icons used in progress
and status messages for ASCII equivalents when the terminal cannot show them.
"""
import sys
import locale


# Unicode to ASCII icon mapping
ICON_MAP = {
    '✓': '[OK]',
    '↻': '[CYCLE]',
    '→': '->',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if getattr(sys.stderr, 'encoding', None):
        return sys.stderr.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 output."""
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal isn't UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text
