"""Conversation and message statistics, rankings and time series."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

import pytz

from .config import (
    DAY_MS,
    DEFAULT_TIMEZONE,
    TOP_CONVERSATIONS,
    TOP_EMOJIS,
    TOP_WORDS,
    TREND_FLAT_THRESHOLD_PCT,
    TREND_WINDOW_DAYS,
)
from .data_models import Thread
from .emoji_tokens import clean_title, extract_emojis, is_emoji_token, tokenize_words
from .phrase_counters import DEFAULT_PHRASE_COUNTERS, PhraseCounter
from .utils import day_key, day_start_ms, format_date, round_half_up, top_n

logger = logging.getLogger(__name__)


def compute_streaks(active_days: Set[int], min_ts: Optional[int], max_ts: Optional[int]) -> Dict[str, int]:
    """
    Longest and current runs of consecutive active UTC days.

    Args:
        active_days: Day-start timestamps (ms) that have at least one message
        min_ts: Earliest message timestamp, or None when there is none
        max_ts: Latest message timestamp, or None when there is none

    Returns:
        {"current": run ending on the last day, "longest": longest run}
    """
    if min_ts is None or max_ts is None:
        return {"current": 0, "longest": 0}

    start, end = day_start_ms(min_ts), day_start_ms(max_ts)
    longest = run = 0
    for day in range(start, end + 1, DAY_MS):
        if day in active_days:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    current = 0
    for day in range(end, start - 1, -DAY_MS):
        if day not in active_days:
            break
        current += 1

    return {"current": current, "longest": longest}


def _window_sum(daily: Dict[int, int], first_day: int, last_day: int) -> int:
    return sum(daily.get(day, 0) for day in range(first_day, last_day + 1, DAY_MS))


def compute_trend(daily: Dict[int, int], max_ts: Optional[int],
                  window_days: int = TREND_WINDOW_DAYS) -> Dict[str, Any]:
    """Compare the latest window of days with the window just before it."""
    if max_ts is None:
        return {"direction": "flat", "deltaPct": 0}

    end = day_start_ms(max_ts)
    current_start = end - (window_days - 1) * DAY_MS
    previous_end = current_start - DAY_MS
    previous_start = previous_end - (window_days - 1) * DAY_MS

    current = _window_sum(daily, current_start, end)
    previous = _window_sum(daily, previous_start, previous_end)

    if previous == 0 and current > 0:
        return {"direction": "up", "deltaPct": 100}
    if previous == 0 and current == 0:
        return {"direction": "flat", "deltaPct": 0}

    delta = (current - previous) / max(1, previous) * 100
    if delta > TREND_FLAT_THRESHOLD_PCT:
        direction = "up"
    elif delta < -TREND_FLAT_THRESHOLD_PCT:
        direction = "down"
    else:
        direction = "flat"
    return {"direction": direction, "deltaPct": round_half_up(delta)}


def median_low(values: Sequence[int]) -> int:
    """Middle element of the sorted values; the upper middle for even sizes."""
    if not values:
        return 0
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def merge_counts(*counts: Dict[str, int]) -> Dict[str, int]:
    merged: Dict[str, int] = {}
    for table in counts:
        for key, value in table.items():
            merged[key] = merged.get(key, 0) + value
    return merged


def one_to_one_partner(names: List[str]) -> Optional[str]:
    """The other person in a two-person thread."""
    for name in names:
        if name and name.lower() != "me":
            return name
    return names[1] if len(names) > 1 else None


def _resolve_tz(tz):
    if tz is None:
        return DEFAULT_TIMEZONE
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _local_hour(timestamp_ms: int, tz) -> int:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=pytz.utc).astimezone(tz).hour


def _best_label(counts: Dict[str, int], suffix: str) -> str:
    if not counts:
        return "-"
    name, count = top_n(counts, 1)[0]
    return f"{name} ({count:,}{suffix})"


def compute_analytics(threads: Iterable[Thread], tz=None,
                      phrase_counters: Sequence[PhraseCounter] = DEFAULT_PHRASE_COUNTERS) -> Dict[str, Any]:
    """
    Aggregate every messaging statistic for a set of merged threads.

    Args:
        threads: Merged conversations
        tz: Timezone (name or pytz zone) for hour-of-day buckets
        phrase_counters: Phrase counters to run over message text; empty disables them

    Returns:
        {"overview": ..., "stats": ..., "charts": ...}
    """
    threads = list(threads)
    tz = _resolve_tz(tz)

    overview = {"totalMessages": 0, "totalConversations": len(threads), "totalEmojis": 0,
                "startDate": "-", "endDate": "-", "rangeDays": 0}
    conv_counts: Dict[str, int] = {}
    one_to_one: Dict[str, int] = {}
    emoji_text: Dict[str, int] = {}
    emoji_reactions: Dict[str, int] = {}
    daily: Dict[int, int] = {}
    hours = [0] * 24
    words: Dict[str, int] = {}
    by_sender: Dict[str, int] = {}
    by_sender_text_len: Dict[str, int] = {}
    by_sender_text_msgs: Dict[str, int] = {}
    by_sender_words: Dict[str, int] = {}
    by_sender_media: Dict[str, int] = {}
    phrase_by_sender: Dict[str, Dict[str, int]] = {c.name: {} for c in phrase_counters}

    min_ts: Optional[int] = None
    max_ts: Optional[int] = None
    lengths: List[int] = []
    media = {"photos": 0, "videos": 0, "audios": 0, "messagesWithMedia": 0}
    reactions_total = 0

    for thread in threads:
        conv_counts[thread.title] = conv_counts.get(thread.title, 0) + len(thread.messages)
        names = [p.name for p in thread.participants]
        if len(names) == 2:
            partner = one_to_one_partner(names)
            if partner:
                one_to_one[partner] = one_to_one.get(partner, 0) + len(thread.messages)

        for message in thread.messages:
            overview["totalMessages"] += 1
            sender = message.sender_name
            if sender:
                by_sender[sender] = by_sender.get(sender, 0) + 1

            ts = message.timestamp_ms
            if ts:
                min_ts = ts if min_ts is None else min(min_ts, ts)
                max_ts = ts if max_ts is None else max(max_ts, ts)
                day = day_start_ms(ts)
                daily[day] = daily.get(day, 0) + 1
                hours[_local_hour(ts, tz)] += 1

            text = message.content
            if text:
                lengths.append(len(text))
                for emoji in filter(is_emoji_token, extract_emojis(text)):
                    emoji_text[emoji] = emoji_text.get(emoji, 0) + 1
                tokens = tokenize_words(text)
                for word in tokens:
                    words[word] = words.get(word, 0) + 1
                if sender:
                    by_sender_text_len[sender] = by_sender_text_len.get(sender, 0) + len(text)
                    by_sender_text_msgs[sender] = by_sender_text_msgs.get(sender, 0) + 1
                    by_sender_words[sender] = by_sender_words.get(sender, 0) + len(tokens)
                    for counter in phrase_counters:
                        hits = counter.count(text)
                        if hits:
                            table = phrase_by_sender[counter.name]
                            table[sender] = table.get(sender, 0) + hits

            if message.reactions:
                reactions_total += len(message.reactions)
                for reaction in message.reactions:
                    for emoji in filter(is_emoji_token, extract_emojis(reaction.emoji_text)):
                        emoji_reactions[emoji] = emoji_reactions.get(emoji, 0) + 1

            for key, count in (("photos", message.photos_count),
                               ("videos", message.videos_count),
                               ("audios", message.audio_count)):
                if count:
                    media[key] += count
                    media["messagesWithMedia"] += 1
                    if sender:
                        by_sender_media[sender] = by_sender_media.get(sender, 0) + count

    if min_ts is not None:
        overview["startDate"] = format_date(min_ts)
        overview["endDate"] = format_date(max_ts)
        overview["rangeDays"] = max(1, round_half_up((day_start_ms(max_ts) - day_start_ms(min_ts)) / DAY_MS) + 1)
    overview["totalEmojis"] = sum(emoji_text.values()) + sum(emoji_reactions.values())

    max_day_count, max_day_date = 0, "-"
    if daily:
        best_day, max_day_count = top_n(daily, 1)[0]
        max_day_date = day_key(best_day)

    streak = compute_streaks(set(daily), min_ts, max_ts)
    best_hour, best_hour_count = top_n(dict(enumerate(hours)), 1)[0]
    range_days = overview["rangeDays"]

    stats = {
        "avgPerDay": overview["totalMessages"] / (range_days or 1),
        "mostActiveDayLabel": f"{max_day_date} ({max_day_count:,})" if daily else "-",
        "mostActiveHourLabel": f"{best_hour}:00 ({best_hour_count:,})",
        "avgMsgLength": sum(lengths) / len(lengths) if lengths else 0,
        "medianMsgLength": median_low(lengths),
        "mostActiveConversation": "-",
        "topOneToOne": _best_label(one_to_one, " msgs"),
        "uniqueActiveDays": len(daily),
        "media": media,
        "reactionsTotal": reactions_total,
        "topSender": _best_label(by_sender, " msgs"),
        "topMediaSender": _best_label(by_sender_media, " media"),
        "maxPerDayCount": max_day_count,
        "maxPerDayDate": max_day_date,
        "streakCurrent": streak["current"],
        "streakLongest": streak["longest"],
        "activeDaysPct": round_half_up(len(daily) / range_days * 100) if range_days else 0,
        "trend": compute_trend(daily, max_ts),
        "wordsTotal": sum(words.values()),
    }
    if conv_counts:
        title, count = top_n(conv_counts, 1)[0]
        stats["mostActiveConversation"] = f"{clean_title(title)} ({count:,} msgs)"

    avg_len = {
        name: round(total / (by_sender_text_msgs.get(name) or 1), 1)
        for name, total in by_sender_text_len.items()
    }
    charts = {
        "conversationsTop10": top_n(conv_counts, TOP_CONVERSATIONS),
        "emojisTextTop15": top_n(emoji_text, TOP_EMOJIS),
        "emojisReactionsTop15": top_n(emoji_reactions, TOP_EMOJIS),
        "emojisCombinedTop15": top_n(merge_counts(emoji_text, emoji_reactions), TOP_EMOJIS),
        "dailySeries": [(day_key(day), daily[day]) for day in sorted(daily)],
        "hoursSeries": list(enumerate(hours)),
        "wordsTop20": top_n(words, TOP_WORDS),
        "bySenderSorted": top_n(by_sender, len(by_sender)),
        "bySenderAvgLen": top_n(avg_len, len(avg_len)),
        "bySenderWords": top_n(by_sender_words, len(by_sender_words)),
        "bySenderMedia": top_n(by_sender_media, len(by_sender_media)),
        "phraseCounts": {name: top_n(table, len(table)) for name, table in phrase_by_sender.items()},
    }

    logger.info(f"Analyzed {overview['totalMessages']} messages in {len(threads)} conversations")
    return {"overview": overview, "stats": stats, "charts": charts}
