"""Repair of UTF-8 text that was decoded as Latin-1 (mojibake)."""

import regex

from .emoji_tokens import extract_emojis, is_emoji_token

# C1 control characters, or Latin-1 readings of common UTF-8 lead bytes
SUSPICIOUS_RE = regex.compile(r'[\u0080-\u009F\u00C2\u00C3\u00E2\u00F0]')
C1_CONTROL_RE = regex.compile(r'[\u0080-\u009F]')
PRINTABLE_RE = regex.compile(r'[^\u0000-\u001F\u007F-\u009F]')

# Text-presentation symbols that only count as emoji when followed by U+FE0F.
# Latin-1 readings of UTF-8 continuation bytes produce them bare.
TEXT_STYLE_SYMBOLS = {'\u00A9', '\u00AE'}


def emoji_score(text: str) -> int:
    """Number of real emoji glyphs in text."""
    return sum(
        1 for cluster in extract_emojis(text)
        if cluster not in TEXT_STYLE_SYMBOLS and is_emoji_token(cluster)
    )


def repair(text: str) -> str:
    """
    Undo UTF-8 bytes having been read as Latin-1 characters.

    Every character's low byte is re-read as UTF-8. The decoded text replaces
    the original only when it carries at least as many emoji, or strictly
    fewer C1 control characters while still holding printable text. Anything
    else, decode failures included, returns the input untouched.
    """
    if not text or not isinstance(text, str):
        return text
    if not SUSPICIOUS_RE.search(text):
        return text

    try:
        decoded = bytes(ord(ch) & 0xFF for ch in text).decode('utf-8')
    except UnicodeDecodeError:
        return text

    more_emojis = emoji_score(decoded) >= emoji_score(text)
    fewer_controls = (
        bool(PRINTABLE_RE.search(decoded))
        and len(C1_CONTROL_RE.findall(decoded)) < len(C1_CONTROL_RE.findall(text))
    )
    return decoded if (more_emojis or fewer_controls) else text
