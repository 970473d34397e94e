"""Conversation merging and selection service."""

import logging
from typing import Dict, List

from .data_models import Thread
from .emoji_tokens import clean_title

logger = logging.getLogger(__name__)

ALL_THREADS_KEY = "ALL"


class ConversationService:
    """Service for handling conversation data processing."""

    def merge_threads(self, fragments: List[Thread]) -> List[Thread]:
        """Merge thread fragments that share a thread key into whole conversations."""
        logger.info(f"Merging {len(fragments)} conversation fragments")
        merged: Dict[str, Thread] = {}

        for fragment in fragments:
            existing = merged.get(fragment.thread_key)
            if existing is None:
                merged[fragment.thread_key] = Thread(
                    title=fragment.title,
                    thread_key=fragment.thread_key,
                    participants=list(fragment.participants),
                    messages=list(fragment.messages),
                )
                continue

            existing.messages.extend(fragment.messages)
            seen = {p.name for p in existing.participants}
            for participant in fragment.participants:
                if participant.name and participant.name not in seen:
                    seen.add(participant.name)
                    existing.participants.append(participant)

        # Sort by timestamp (stable, so equal timestamps keep input order)
        for thread in merged.values():
            thread.messages.sort(key=lambda m: m.timestamp_ms)

        logger.info(f"Merged into {len(merged)} conversations")
        return list(merged.values())

    def thread_options(self, threads: List[Thread]) -> List[Dict[str, str]]:
        """Selector entries for every conversation, A-Z by cleaned title."""
        items = []
        for thread in threads:
            label = thread.title or thread.thread_key
            items.append({"key": thread.thread_key, "label": label,
                          "sortKey": clean_title(label).lower()})
        items.sort(key=lambda item: item["sortKey"])

        # Suffix repeated labels so every entry stays distinguishable
        seen: Dict[str, int] = {}
        for item in items:
            base = item["label"]
            count = seen.get(base, 0)
            if count:
                item["label"] = f"{base} ({count + 1})"
            seen[base] = count + 1

        return [{"key": ALL_THREADS_KEY, "label": "All conversations", "sortKey": ""}] + items

    def filter_threads(self, threads: List[Thread], key: str) -> List[Thread]:
        """Threads matching a selector key; ALL keeps every thread."""
        if key == ALL_THREADS_KEY:
            return list(threads)
        return [t for t in threads if t.thread_key == key]


def merge_threads(fragments: List[Thread]) -> List[Thread]:
    """Module-level shortcut for ConversationService.merge_threads."""
    return ConversationService().merge_threads(fragments)
