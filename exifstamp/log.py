"""Output styling for extraction outcomes.

Every line the CLI prints about a file is keyed by its ``TimestampResult``
status. The same status picks the ANSI color on the terminal and the level
tag in the ``--log`` file, so both always agree.
"""

import sys
from datetime import datetime

_RESET = '\033[0m'
_DIM = '\033[2m'
_GREEN = '\033[32m'
_YELLOW = '\033[33m'
_BOLD_RED = '\033[1;31m'
_BOLD_CYAN = '\033[1;36m'

# status -> (terminal color, log-file level)
STATUS_STYLES = {
    'ok': (_GREEN, 'INFO'),
    'missing': (_YELLOW, 'WARN'),
    'error': (_BOLD_RED, 'ERROR'),
}

_LEVEL_WIDTH = max(len(level) for _, level in STATUS_STYLES.values()) + 2


def _stdout_is_tty():
    try:
        return sys.stdout.isatty()
    except AttributeError:
        return False


_use_color = _stdout_is_tty()


def set_color_enabled(enabled: bool):
    """Force color on or off, overriding TTY detection."""
    global _use_color
    _use_color = enabled


def _paint(code: str, text: str) -> str:
    return f'{code}{text}{_RESET}' if _use_color else text


def _style(status: str):
    try:
        return STATUS_STYLES[status]
    except KeyError:
        raise ValueError(f'Unknown result status: {status!r}') from None


def cli_status(status: str, text: str) -> str:
    """Color ``text`` for a result status ("ok", "missing" or "error")."""
    return _paint(_style(status)[0], text)


def cli_warning(text: str) -> str:
    return cli_status('missing', text)


def cli_error(text: str) -> str:
    return cli_status('error', text)


def cli_header(text: str) -> str:
    return _paint(_BOLD_CYAN, text)


def cli_dim(text: str) -> str:
    return _paint(_DIM, text)


def cli_separator(width: int = 60) -> str:
    return _paint(_DIM, '-' * width)


def log_line(status: str, msg: str) -> str:
    """Plain ``[time] [LEVEL] msg`` line for the log file. Never colored."""
    level = f'[{_style(status)[1]}]'
    stamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    return f'[{stamp}] {level:<{_LEVEL_WIDTH}} {msg}'
