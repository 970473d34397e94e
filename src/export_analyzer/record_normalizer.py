"""Per-schema transforms from raw export documents to canonical records."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .data_models import (
    CameraDevice,
    Comment,
    DeviceRecord,
    GeoPoint,
    InferredEmail,
    LoginEvent,
    LogoutEvent,
    Message,
    Participant,
    ProfileChangeEvent,
    Reaction,
    Record,
    SavedItem,
    SignupRecord,
    Thread,
    TopicTag,
    TwoFactorDevice,
)
from .config import MAX_TIMESTAMP_MS
from .format_classifier import SchemaTag, classify
from .text_repair import repair
from .utils import to_float, to_int

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field access helpers. Export records mostly share the shape
# {"title": ..., "string_map_data": {"<Label>": {"value", "href", "timestamp"}}}.
# ---------------------------------------------------------------------------

def _dicts(items: Any) -> List[Dict]:
    """Only the dict entries of a list; anything else yields nothing."""
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return repair(str(value))


def _field(item: Dict, label: str) -> Dict:
    string_map = item.get("string_map_data")
    if not isinstance(string_map, dict):
        return {}
    entry = string_map.get(label)
    return entry if isinstance(entry, dict) else {}


def _value(item: Dict, *labels: str) -> str:
    """Repaired value of the first label present in string_map_data."""
    for label in labels:
        value = _field(item, label).get("value")
        if value not in (None, ""):
            return _text(value)
    return ""


def _epoch_ms(ms: int) -> int:
    """ms when it is a representable instant, else 0 (missing)."""
    return ms if 0 <= ms <= MAX_TIMESTAMP_MS else 0


def _seconds_ms(value: Any) -> int:
    return _epoch_ms(to_int(value) * 1000)


def _timestamp_ms(item: Dict, *labels: str) -> int:
    for label in labels:
        ts = _field(item, label).get("timestamp")
        if ts:
            return _seconds_ms(ts)
    return _iso_ms(item.get("title"))


def _iso_ms(value: Any) -> int:
    """Milliseconds of an ISO-8601 string such as a login entry's title, else 0."""
    if not isinstance(value, str) or not value:
        return 0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return _epoch_ms(int(parsed.timestamp() * 1000))


def _count(value: Any) -> int:
    return len(value) if isinstance(value, list) else 0


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

def derive_title(names: List[str]) -> str:
    """Title for an untitled conversation, built from its participants."""
    names = [n for n in names if n]
    if len(names) <= 2:
        partners = [n for n in names if n.lower() != "me"]
        return partners[0] if partners else ", ".join(names)
    extra = f" +{len(names) - 3}" if len(names) > 3 else ""
    return ", ".join(names[:3]) + extra


def _participants(raw: Any) -> List[Participant]:
    seen = set()
    participants = []
    for p in raw if isinstance(raw, list) else []:
        name = _text(p.get("name") if isinstance(p, dict) else p)
        if name and name not in seen:
            seen.add(name)
            participants.append(Participant(name=name))
    return participants


def _message(raw: Dict) -> Message:
    if "timestamp_ms" in raw:
        timestamp_ms = _epoch_ms(to_int(raw.get("timestamp_ms")))
    else:
        timestamp_ms = _seconds_ms(raw.get("timestamp"))

    reactions = None
    if isinstance(raw.get("reactions"), list):
        reactions = [
            Reaction(emoji_text=_text(r.get("reaction")), actor_name=_text(r.get("actor")))
            for r in _dicts(raw["reactions"])
        ]

    content = raw.get("content")
    return Message(
        sender_name=_text(raw.get("sender_name")),
        timestamp_ms=timestamp_ms,
        content=_text(content) if content else None,
        reactions=reactions,
        photos_count=_count(raw.get("photos")),
        videos_count=_count(raw.get("videos")),
        audio_count=_count(raw.get("audio_files")),
    )


def normalize_thread(doc: Dict) -> List[Record]:
    participants = _participants(doc.get("participants"))
    title = _text(doc.get("title")) or derive_title([p.name for p in participants])
    path = doc.get("thread_path") or doc.get("threadPath")
    return [Thread(
        title=title,
        thread_key=str(path) if path else f"title:{title}",
        participants=participants,
        messages=[_message(m) for m in _dicts(doc.get("messages"))],
    )]


def normalize_aggregated(doc: List) -> List[Record]:
    records: List[Record] = []
    for thread in _dicts(doc):
        records.extend(normalize_thread(thread))
    return records


def normalize_wrapped(doc: Dict) -> List[Record]:
    return normalize_aggregated(doc.get("conversations"))


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------

def media_type_from_href(href: str) -> str:
    if "/reel/" in href:
        return "reel"
    if "/p/" in href:
        return "post"
    return "other"


def normalize_saved(doc: Dict) -> List[Record]:
    saves: List[Record] = []
    for item in _dicts(doc.get("saved_saved_media")):
        saved_on = _field(item, "Saved on")
        if not saved_on:
            continue
        href = str(saved_on.get("href") or "")
        saves.append(SavedItem(
            href=href,
            timestamp_ms=_seconds_ms(saved_on.get("timestamp")),
            creator=_text(item.get("title")),
            media_type=media_type_from_href(href),
        ))
    return saves


def normalize_post_comments(doc: List) -> List[Record]:
    return [
        Comment(
            text=_value(item, "Comment"),
            owner=_value(item, "Media Owner"),
            timestamp_ms=_seconds_ms(_field(item, "Time").get("timestamp")),
        )
        for item in _dicts(doc)
    ]


def normalize_reel_comments(doc: Dict) -> List[Record]:
    return normalize_post_comments(doc.get("comments_reels_comments"))


def normalize_topics(doc: Dict) -> List[Record]:
    topics: List[Record] = []
    for item in _dicts(doc.get("topics_your_topics")):
        name = _value(item, "Name")
        if name:
            topics.append(TopicTag(name=name))
    return topics


# ---------------------------------------------------------------------------
# Account security
# ---------------------------------------------------------------------------

def _session_fields(item: Dict) -> Dict[str, Any]:
    return dict(
        timestamp_ms=_timestamp_ms(item, "Time"),
        location=_value(item, "Location", "City"),
        ip=_value(item, "IP Address"),
        device=_value(item, "User Agent", "Device"),
        lat=to_float(_field(item, "Latitude").get("value")),
        lon=to_float(_field(item, "Longitude").get("value")),
        country=_value(item, "Country") or None,
        country_code=_value(item, "Country Code") or None,
        cookie=_value(item, "Cookie Name") or None,
        language=_value(item, "Language Code") or None,
    )


def normalize_logins(doc: Dict) -> List[Record]:
    return [LoginEvent(**_session_fields(item)) for item in _dicts(doc.get("account_history_login_history"))]


def normalize_logouts(doc: Dict) -> List[Record]:
    return [LogoutEvent(**_session_fields(item)) for item in _dicts(doc.get("account_history_logout_history"))]


def normalize_devices(doc: Dict) -> List[Record]:
    devices: List[Record] = []
    for item in _dicts(doc.get("devices_devices")):
        device = _value(item, "User Agent", "Device")
        if device:
            devices.append(DeviceRecord(device=device, last_login_ms=_timestamp_ms(item, "Last Login")))
    return devices


def normalize_profile_changes(doc: Dict) -> List[Record]:
    changes: List[Record] = []
    for item in _dicts(doc.get("profile_profile_change")):
        change_type = _value(item, "Changed")
        if change_type:
            changes.append(ProfileChangeEvent(
                type=change_type,
                value=_value(item, "New Value"),
                timestamp_ms=_timestamp_ms(item, "Change Date"),
            ))
    return changes


def normalize_signup(doc: Dict) -> List[Record]:
    """A signup entry yields the SignupRecord and its initial profile values."""
    records: List[Record] = []
    for item in _dicts(doc.get("account_history_registration_info")):
        signup = SignupRecord(
            timestamp_ms=_timestamp_ms(item, "Time"),
            email=_value(item, "Email"),
            phone=_value(item, "Phone Number"),
            username=_value(item, "Username"),
            ip=_value(item, "IP Address"),
            device=_value(item, "Device", "User Agent"),
        )
        records.append(signup)
        for change_type, value in (("Email", signup.email),
                                   ("Phone Number", signup.phone),
                                   ("Username", signup.username)):
            if value:
                records.append(ProfileChangeEvent(type=change_type, value=value,
                                                  timestamp_ms=signup.timestamp_ms))
    return records


def normalize_two_factor(doc: Dict) -> List[Record]:
    return [
        TwoFactorDevice(
            device=_value(item, "Device", "Device Name"),
            method=_value(item, "Method", "Type"),
            timestamp_ms=_timestamp_ms(item, "Time", "Added"),
        )
        for item in _dicts(doc.get("security_two_factor_devices"))
    ]


def normalize_camera_devices(doc: Dict) -> List[Record]:
    return [
        CameraDevice(device_id=_value(item, "Device ID"), sdk_versions=_value(item, "Supported SDK Versions"))
        for item in _dicts(doc.get("devices_camera"))
    ]


def normalize_inferred_emails(doc: Dict) -> List[Record]:
    emails: List[Record] = []
    for item in doc.get("inferred_data_inferred_emails") or []:
        if isinstance(item, dict):
            email = _value(item, "Email") or _text(item.get("value"))
        else:
            email = _text(item)
        if email:
            emails.append(InferredEmail(email=email))
    return emails


# ---------------------------------------------------------------------------
# Geolocation
# ---------------------------------------------------------------------------

def normalize_last_known_location(doc: Dict) -> List[Record]:
    return [
        GeoPoint(
            timestamp_ms=_timestamp_ms(item, "Time", "Last Updated"),
            lat=to_float(_field(item, "Latitude").get("value")),
            lon=to_float(_field(item, "Longitude").get("value")),
            label=_value(item, "Location") or "Last known location",
            source_type="last_known",
        )
        for item in _dicts(doc.get("account_history_last_known_location"))
    ]


def normalize_locations_of_interest(doc: Dict) -> List[Record]:
    points: List[Record] = []
    for entry in _dicts(doc.get("label_values")):
        values = _dicts(entry.get("vec")) or [entry]
        for value in values:
            label = _text(value.get("value"))
            if label:
                points.append(GeoPoint(timestamp_ms=0, lat=None, lon=None, label=label, source_type="interest"))
    return points


def normalize_friend_map(doc: Dict) -> List[Record]:
    return [
        GeoPoint(
            timestamp_ms=_seconds_ms(node.get("timestamp")),
            lat=to_float(node.get("latitude")),
            lon=to_float(node.get("longitude")),
            label=_text(node.get("name")),
            source_type="friend_map",
        )
        for node in _dicts(doc.get("friend_map"))
    ]


def _exif_coordinates(media: Dict) -> Tuple[Optional[float], Optional[float]]:
    metadata = media.get("media_metadata")
    if not isinstance(metadata, dict):
        return None, None
    for section in metadata.values():
        if not isinstance(section, dict):
            continue
        for exif in _dicts(section.get("exif_data")):
            lat, lon = to_float(exif.get("latitude")), to_float(exif.get("longitude"))
            if lat is not None and lon is not None:
                return lat, lon
    return None, None


def normalize_media_locations(doc: List) -> List[Record]:
    points: List[Record] = []
    for post in _dicts(doc):
        for media in _dicts(post.get("media")):
            lat, lon = _exif_coordinates(media)
            if lat is None:
                continue
            points.append(GeoPoint(
                timestamp_ms=_seconds_ms(media.get("creation_timestamp")),
                lat=lat,
                lon=lon,
                label=_text(media.get("title") or post.get("title")) or str(media.get("uri") or ""),
                source_type="media",
            ))
    return points


NORMALIZERS: Dict[SchemaTag, Callable[[Any], List[Record]]] = {
    SchemaTag.AGGREGATED_THREADS: normalize_aggregated,
    SchemaTag.WRAPPED_THREADS: normalize_wrapped,
    SchemaTag.THREAD: normalize_thread,
    SchemaTag.LOOSE_THREAD: normalize_thread,
    SchemaTag.SAVED_MEDIA: normalize_saved,
    SchemaTag.REEL_COMMENTS: normalize_reel_comments,
    SchemaTag.POST_COMMENTS: normalize_post_comments,
    SchemaTag.TOPICS: normalize_topics,
    SchemaTag.LOGIN_HISTORY: normalize_logins,
    SchemaTag.LOGOUT_HISTORY: normalize_logouts,
    SchemaTag.DEVICES: normalize_devices,
    SchemaTag.PROFILE_CHANGES: normalize_profile_changes,
    SchemaTag.SIGNUP: normalize_signup,
    SchemaTag.LAST_KNOWN_LOCATION: normalize_last_known_location,
    SchemaTag.LOCATIONS_OF_INTEREST: normalize_locations_of_interest,
    SchemaTag.FRIEND_MAP: normalize_friend_map,
    SchemaTag.MEDIA_LOCATIONS: normalize_media_locations,
    SchemaTag.TWO_FACTOR_DEVICES: normalize_two_factor,
    SchemaTag.CAMERA_DEVICES: normalize_camera_devices,
    SchemaTag.INFERRED_EMAILS: normalize_inferred_emails,
}

_unhandled = set(SchemaTag) - set(NORMALIZERS) - {SchemaTag.UNKNOWN}
if _unhandled:
    raise RuntimeError(f"No normalizer registered for {sorted(t.value for t in _unhandled)}")


def normalize(tag: SchemaTag, doc: Any) -> List[Record]:
    """Run the normalizer registered for tag; unknown documents yield nothing."""
    normalizer = NORMALIZERS.get(tag)
    if normalizer is None:
        return []
    return normalizer(doc)


def classify_and_normalize(doc: Any) -> Tuple[SchemaTag, List[Record]]:
    """Classify a parsed document and turn it into canonical records."""
    tag = classify(doc)
    return tag, normalize(tag, doc)
