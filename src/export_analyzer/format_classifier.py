"""Identify which export schema a parsed JSON document follows."""

import logging
from enum import Enum
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


class SchemaTag(Enum):
    AGGREGATED_THREADS = "aggregated_threads"
    WRAPPED_THREADS = "wrapped_threads"
    THREAD = "thread"
    LOOSE_THREAD = "loose_thread"
    SAVED_MEDIA = "saved_media"
    REEL_COMMENTS = "reel_comments"
    POST_COMMENTS = "post_comments"
    TOPICS = "topics"
    LOGIN_HISTORY = "login_history"
    LOGOUT_HISTORY = "logout_history"
    DEVICES = "devices"
    PROFILE_CHANGES = "profile_changes"
    SIGNUP = "signup"
    LAST_KNOWN_LOCATION = "last_known_location"
    LOCATIONS_OF_INTEREST = "locations_of_interest"
    FRIEND_MAP = "friend_map"
    MEDIA_LOCATIONS = "media_locations"
    TWO_FACTOR_DEVICES = "two_factor_devices"
    CAMERA_DEVICES = "camera_devices"
    INFERRED_EMAILS = "inferred_emails"
    UNKNOWN = "unknown"


def _first(doc: Any) -> Any:
    """First element of a non-empty list, else None."""
    if isinstance(doc, list) and doc:
        return doc[0]
    return None


def _has_list(doc: Any, key: str) -> bool:
    return isinstance(doc, dict) and isinstance(doc.get(key), list)


def _keyed_list(key: str) -> Callable[[Any], bool]:
    return lambda doc: _has_list(doc, key)


def is_aggregated_threads(doc: Any) -> bool:
    first = _first(doc)
    return isinstance(first, dict) and bool(first.get("messages")) and bool(first.get("participants"))


def is_wrapped_threads(doc: Any) -> bool:
    if not _has_list(doc, "conversations"):
        return False
    first = _first(doc["conversations"])
    return isinstance(first, dict) and bool(first.get("messages"))


def is_thread(doc: Any) -> bool:
    return _has_list(doc, "messages") and _has_list(doc, "participants")


def is_loose_thread(doc: Any) -> bool:
    return isinstance(doc, dict) and bool(doc.get("messages")) and bool(doc.get("participants"))


def is_post_comments(doc: Any) -> bool:
    first = _first(doc)
    if not isinstance(first, dict):
        return False
    string_map = first.get("string_map_data")
    return isinstance(string_map, dict) and ("Time" in string_map or "Comment" in string_map)


def is_locations_of_interest(doc: Any) -> bool:
    if not _has_list(doc, "label_values"):
        return False
    first = _first(doc["label_values"])
    return isinstance(first, dict) and "location" in str(first.get("label", "")).lower()


def is_media_locations(doc: Any) -> bool:
    first = _first(doc)
    return isinstance(first, dict) and isinstance(first.get("media"), list)


# Evaluated top to bottom, first match wins. Several shapes are subsets of
# others (an array of threads also looks like an array of records), so the
# order is part of the contract.
SCHEMA_RULES: List[Tuple[Callable[[Any], bool], SchemaTag]] = [
    (is_aggregated_threads, SchemaTag.AGGREGATED_THREADS),
    (is_wrapped_threads, SchemaTag.WRAPPED_THREADS),
    (is_thread, SchemaTag.THREAD),
    (is_loose_thread, SchemaTag.LOOSE_THREAD),
    (_keyed_list("saved_saved_media"), SchemaTag.SAVED_MEDIA),
    (_keyed_list("comments_reels_comments"), SchemaTag.REEL_COMMENTS),
    (is_post_comments, SchemaTag.POST_COMMENTS),
    (_keyed_list("topics_your_topics"), SchemaTag.TOPICS),
    (_keyed_list("account_history_login_history"), SchemaTag.LOGIN_HISTORY),
    (_keyed_list("account_history_logout_history"), SchemaTag.LOGOUT_HISTORY),
    (_keyed_list("devices_devices"), SchemaTag.DEVICES),
    (_keyed_list("profile_profile_change"), SchemaTag.PROFILE_CHANGES),
    (_keyed_list("account_history_registration_info"), SchemaTag.SIGNUP),
    (_keyed_list("account_history_last_known_location"), SchemaTag.LAST_KNOWN_LOCATION),
    (is_locations_of_interest, SchemaTag.LOCATIONS_OF_INTEREST),
    (_keyed_list("friend_map"), SchemaTag.FRIEND_MAP),
    (is_media_locations, SchemaTag.MEDIA_LOCATIONS),
    (_keyed_list("security_two_factor_devices"), SchemaTag.TWO_FACTOR_DEVICES),
    (_keyed_list("devices_camera"), SchemaTag.CAMERA_DEVICES),
    (_keyed_list("inferred_data_inferred_emails"), SchemaTag.INFERRED_EMAILS),
]


def classify(doc: Any) -> SchemaTag:
    """Return the tag of the first schema rule the document satisfies."""
    for predicate, tag in SCHEMA_RULES:
        try:
            if predicate(doc):
                return tag
        except (AttributeError, TypeError, KeyError) as e:
            logger.debug(f"Schema rule {tag.value} rejected document: {e}")
    return SchemaTag.UNKNOWN
