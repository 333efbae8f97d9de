"""Console diagnostics for the symbol supplier.

All messages are tagged with ``[SYMBOL]`` so they can be grepped out of
stack-walker output.
"""
import sys

TAG = "[SYMBOL]"

# Verbose messages are printed only when enabled (config or --verbose)
VERBOSE = False


def set_verbose(enabled: bool):
    global VERBOSE
    VERBOSE = bool(enabled)


def safe_print(msg: str, stream=None):
    """Print message safely, handling unicode encoding issues on Windows."""
    stream = stream or sys.stdout
    try:
        print(msg, file=stream)
    except UnicodeEncodeError:
        encoding = getattr(stream, 'encoding', None) or 'utf-8'
        print(msg.encode(encoding, errors='replace').decode(encoding, errors='replace'), file=stream)


def log(message: str):
    """Log a message if verbose mode is enabled."""
    if VERBOSE:
        safe_print(f"{TAG} {message}")


def warn(message: str):
    safe_print(f"{TAG} - {message}", stream=sys.stderr)


def error(message: str):
    safe_print(f"{TAG} ✗ {message}", stream=sys.stderr)
