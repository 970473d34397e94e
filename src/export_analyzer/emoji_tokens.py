"""Emoji extraction, emoji classification and word tokenization."""

import logging
from typing import List

import regex

logger = logging.getLogger(__name__)


# Clusters that start on a pictographic codepoint (or a flag half) and run to
# the end of the grapheme cluster, so skin tones, VS16 and ZWJ sequences stay
# attached to their base.
_EMOJI_PROPERTY_PATTERN = (
    r'(?=[\p{Extended_Pictographic}\p{Emoji_Presentation}\U0001F1E6-\U0001F1FF])\X'
)
_EMOJI_RANGE_PATTERN = (
    '[\u203C-\u3299\U0001F000-\U0001FAFF\u2600-\u27BF\uFE0F\u200D]+'
)


def _compile(primary: str, fallback: str) -> "regex.Pattern":
    try:
        return regex.compile(primary)
    except regex.error as e:
        logger.warning(f"Unicode property pattern unavailable ({e}); using fallback")
        return regex.compile(fallback)


EMOJI_RE = _compile(_EMOJI_PROPERTY_PATTERN, _EMOJI_RANGE_PATTERN)
EMOJI_PROPERTY_RE = _compile(
    r'[\p{Extended_Pictographic}\p{Emoji_Presentation}\p{Emoji}]',
    '[\U0001F000-\U0001FAFF\u2600-\u27BF]',
)
PUNCTUATION_RE = _compile(r'[\p{P}\p{S}]', r'[^a-z0-9\s]')

ASCII_ALNUM_RE = regex.compile(r'[A-Za-z0-9]')
JOINER_RE = regex.compile('[\uFE0F\u200D]')
WHITESPACE_RE = regex.compile(r'\s+')
DIGITS_RE = regex.compile(r'^\d+$')

EMOJI_BLOCKS = (
    (0x1F000, 0x1FAFF),
    (0x1F300, 0x1F6FF),
    (0x1F900, 0x1F9FF),
    (0x2600, 0x27BF),
)

STOP_WORDS = frozenset((
    "a,an,the,and,or,of,to,in,is,it,that,this,for,on,with,as,at,by,be,are,was,were,"
    "from,not,have,has,had,he,she,they,you,i,we,me,my,our,his,her,them,their,ours,"
    "your,yours,its,if,then,so,do,does,did,can,could,should,would,will,just,about,"
    "im,ill,ive,dont,doesnt,wasnt,werent,arent,isnt,cant,couldnt,shouldnt,wont,yep,"
    "yeah,ok,okay,uh,um,like,got,get,gotta,nah,oh,ah,eh,ya,yo,mm,mmm,rt,btw,idk,lol,"
    "omg,brb,gtg,thx,thanks,pls,please"
).split(','))

# System-message and boilerplate vocabulary of the export
BOILERPLATE_WORDS = frozenset((
    'message', 'messages', 'liked', 'like', 'reaction', 'reacted', 'removed',
    'unsent', 'shared', 'sent', 'photo', 'video', 'audio', 'gif', 'sticker',
    'mentioned', 'created', 'named', 'joined', 'left', 'missed', 'call', 'called',
    'voice', 'seen', 'story', 'reply', 'replied', 'forwarded', 'chat', 'group',
    'attachment',
))


def extract_emojis(text: str) -> List[str]:
    """Return every emoji cluster of text, in order."""
    if not text:
        return []
    return [m for m in EMOJI_RE.findall(text) if m]


def is_emoji_token(token: str) -> bool:
    """Decide whether a token extracted from text really is an emoji."""
    if not token or not isinstance(token, str):
        return False
    if ASCII_ALNUM_RE.search(token):
        return False
    if JOINER_RE.search(token):
        return True
    cp = ord(token[0])
    if any(lo <= cp <= hi for lo, hi in EMOJI_BLOCKS):
        return True
    return bool(EMOJI_PROPERTY_RE.search(token))


def tokenize_words(text: str) -> List[str]:
    """Split free text into lowercase content words."""
    if not text:
        return []
    # Import here to avoid circular imports (repair scores with extract_emojis)
    from .text_repair import repair

    lower = repair(text).lower()
    cleaned = PUNCTUATION_RE.sub(' ', lower)
    return [
        w for w in cleaned.split()
        if len(w) > 1
        and w not in STOP_WORDS
        and w not in BOILERPLATE_WORDS
        and not DIGITS_RE.match(w)
    ]


def clean_title(text: str) -> str:
    """Remove emoji and tidy whitespace for display labels."""
    if not text:
        return ''
    no_emoji = JOINER_RE.sub('', EMOJI_RE.sub('', text))
    return WHITESPACE_RE.sub(' ', no_emoji).strip()
