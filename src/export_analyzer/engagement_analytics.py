"""Saved items, comments and topic interests."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .config import TOP_COMMENTS, TOP_SAVES, TOP_TOPICS
from .data_models import Comment, ExportBundle, SavedItem, TopicTag
from .emoji_tokens import extract_emojis
from .utils import day_key, format_date, labels_values, top_n

logger = logging.getLogger(__name__)

MEDIA_TYPES = ("post", "reel", "other")


def median_mid(values: List[int]) -> float:
    """Median that averages the two middle values for even sizes."""
    if not values:
        return 0
    ordered = sorted(values)
    lo = (len(ordered) - 1) // 2
    hi = len(ordered) // 2
    return (ordered[lo] + ordered[hi]) / 2


def _bump(table: Dict[str, int], key: str) -> None:
    table[key] = table.get(key, 0) + 1


def _bounds(timestamps: List[int]):
    stamped = [ts for ts in timestamps if ts]
    if not stamped:
        return None, None
    return format_date(min(stamped)), format_date(max(stamped))


def _timeline(timestamps: List[int]) -> Dict[str, list]:
    by_day: Dict[str, int] = {}
    for ts in timestamps:
        if ts:
            _bump(by_day, day_key(ts))
    return labels_values(sorted(by_day.items()))


def _hostname(href: str) -> Optional[str]:
    try:
        return urlparse(href).hostname
    except ValueError:
        return None


def summarize_saves(saves: List[SavedItem]) -> Dict[str, Any]:
    by_creator: Dict[str, int] = {}
    by_domain: Dict[str, int] = {}
    type_count = {name: 0 for name in MEDIA_TYPES}

    for item in saves:
        if item.creator:
            _bump(by_creator, item.creator)
        host = _hostname(item.href) if item.href else None
        if host:
            _bump(by_domain, host)
        if item.media_type in type_count:
            type_count[item.media_type] += 1

    first, last = _bounds([s.timestamp_ms for s in saves])
    return {
        "total": len(saves),
        "first": first,
        "last": last,
        "typeCount": type_count,
        "timeline": _timeline([s.timestamp_ms for s in saves]),
        "topCreators": labels_values(top_n(by_creator, TOP_SAVES)),
        "topDomains": labels_values(top_n(by_domain, TOP_SAVES)),
    }


def summarize_comments(comments: List[Comment]) -> Dict[str, Any]:
    by_owner: Dict[str, int] = {}
    emojis: Dict[str, int] = {}
    lengths = []

    for comment in comments:
        if comment.owner:
            _bump(by_owner, comment.owner)
        text = comment.text or ""
        lengths.append(len(text))
        for emoji in extract_emojis(text):
            _bump(emojis, emoji)

    first, last = _bounds([c.timestamp_ms for c in comments])
    return {
        "total": len(comments),
        "first": first,
        "last": last,
        "avgLen": sum(lengths) / len(lengths) if lengths else 0,
        "medianLen": median_mid(lengths),
        "timeline": _timeline([c.timestamp_ms for c in comments]),
        "topOwners": labels_values(top_n(by_owner, TOP_COMMENTS)),
        "topEmojis": labels_values(top_n(emojis, TOP_COMMENTS)),
    }


def summarize_topics(topics: List[TopicTag]) -> Dict[str, Any]:
    # Case-insensitive; the first casing seen is the one shown
    unique: Dict[str, str] = {}
    for topic in topics:
        name = (topic.name or "").strip()
        if name:
            unique.setdefault(name.lower(), name)

    names = list(unique.values())
    return {
        "total": len(topics),
        "count": len(names),
        "top": labels_values([(name, 1) for name in names[:TOP_TOPICS]]),
    }


def compute_extras_analytics(bundle: ExportBundle) -> Dict[str, Any]:
    """
    Engagement statistics for saved items, comments and topics.

    Args:
        bundle: Canonical records of one run

    Returns:
        {"saves": ..., "comments": ..., "topics": ...}
    """
    report = {
        "saves": summarize_saves(bundle.saves),
        "comments": summarize_comments(bundle.comments),
        "topics": summarize_topics(bundle.topics),
    }
    logger.info(f"Engagement: {len(bundle.saves)} saves, {len(bundle.comments)} comments, "
                f"{report['topics']['count']} topics")
    return report
