import re
import secrets
import string

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_PATTERN = re.compile(r'^[A-Z0-9]{6}$')


def generate_room_code(rng=None) -> str:
    """Generate a short, shareable room code.

    Codes are drawn independently on every call, so uniqueness is up to the
    caller (see ``lifecycle.create_room``). ``rng`` may be any object with a
    ``choice`` method; the default is the ``secrets`` module.
    """
    chooser = rng or secrets
    return ''.join(chooser.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def is_valid_room_code(code) -> bool:
    return isinstance(code, str) and ROOM_CODE_PATTERN.fullmatch(code) is not None


def format_room_code(code: str, separator: str = '-') -> str:
    """Split a room code into two groups of three, e.g. ``ABC-123``."""
    if not is_valid_room_code(code):
        raise ValueError('Invalid room code format')
    return f"{code[:3]}{separator}{code[3:]}"
