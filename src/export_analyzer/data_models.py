"""Data models for Export Analyzer."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class EntityKind(Enum):
    """Every kind of canonical record a normalizer can emit."""
    THREAD = "thread"
    SAVED_ITEM = "saved_item"
    COMMENT = "comment"
    TOPIC = "topic"
    LOGIN = "login"
    LOGOUT = "logout"
    DEVICE = "device"
    PROFILE_CHANGE = "profile_change"
    SIGNUP = "signup"
    GEO_POINT = "geo_point"
    TWO_FACTOR_DEVICE = "two_factor_device"
    CAMERA_DEVICE = "camera_device"
    INFERRED_EMAIL = "inferred_email"


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _export(value: Any) -> Any:
    if isinstance(value, list):
        return [_export(v) for v in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value


class _Exportable:
    """Adds camelCase dictionary export to record dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return {_camel(f.name): _export(getattr(self, f.name)) for f in fields(self)}


@dataclass
class Participant(_Exportable):
    name: str


@dataclass
class Reaction(_Exportable):
    emoji_text: str
    actor_name: str = ""


@dataclass
class Message(_Exportable):
    """A single message inside a conversation."""
    sender_name: str
    timestamp_ms: int
    content: Optional[str] = None
    reactions: Optional[List[Reaction]] = None
    photos_count: int = 0
    videos_count: int = 0
    audio_count: int = 0


@dataclass
class Thread(_Exportable):
    """A conversation, possibly one fragment of a larger one."""
    kind = EntityKind.THREAD

    title: str
    thread_key: str
    participants: List[Participant] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)


@dataclass
class SavedItem(_Exportable):
    kind = EntityKind.SAVED_ITEM

    href: str
    timestamp_ms: int
    creator: str = ""
    media_type: str = "other"  # "post", "reel" or "other"


@dataclass
class Comment(_Exportable):
    kind = EntityKind.COMMENT

    text: str
    owner: str
    timestamp_ms: int


@dataclass
class TopicTag(_Exportable):
    kind = EntityKind.TOPIC

    name: str


@dataclass
class LoginEvent(_Exportable):
    """A login (or, via LogoutEvent, logout) history entry."""
    kind = EntityKind.LOGIN

    timestamp_ms: int
    location: str = ""
    ip: str = ""
    device: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    cookie: Optional[str] = None
    language: Optional[str] = None


@dataclass
class LogoutEvent(LoginEvent):
    kind = EntityKind.LOGOUT


@dataclass
class DeviceRecord(_Exportable):
    kind = EntityKind.DEVICE

    device: str
    last_login_ms: int = 0


@dataclass
class ProfileChangeEvent(_Exportable):
    kind = EntityKind.PROFILE_CHANGE

    type: str
    value: str
    timestamp_ms: int = 0


@dataclass
class SignupRecord(_Exportable):
    kind = EntityKind.SIGNUP

    timestamp_ms: int
    email: str = ""
    phone: str = ""
    username: str = ""
    ip: str = ""
    device: str = ""


@dataclass
class GeoPoint(_Exportable):
    """A located point; lat/lon stay None until resolved from the label."""
    kind = EntityKind.GEO_POINT

    timestamp_ms: int
    lat: Optional[float]
    lon: Optional[float]
    label: str = ""
    source_type: str = ""


@dataclass
class TwoFactorDevice(_Exportable):
    kind = EntityKind.TWO_FACTOR_DEVICE

    device: str
    method: str = ""
    timestamp_ms: int = 0


@dataclass
class CameraDevice(_Exportable):
    kind = EntityKind.CAMERA_DEVICE

    device_id: str
    sdk_versions: str = ""


@dataclass
class InferredEmail(_Exportable):
    kind = EntityKind.INFERRED_EMAIL

    email: str


Record = Union[
    Thread, SavedItem, Comment, TopicTag, LoginEvent, LogoutEvent, DeviceRecord,
    ProfileChangeEvent, SignupRecord, GeoPoint, TwoFactorDevice, CameraDevice,
    InferredEmail,
]


@dataclass
class ExportBundle:
    """All canonical records recovered from one batch of documents."""
    threads: List[Thread] = field(default_factory=list)
    saves: List[SavedItem] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    topics: List[TopicTag] = field(default_factory=list)
    logins: List[LoginEvent] = field(default_factory=list)
    logouts: List[LogoutEvent] = field(default_factory=list)
    devices: List[DeviceRecord] = field(default_factory=list)
    profile_changes: List[ProfileChangeEvent] = field(default_factory=list)
    signups: List[SignupRecord] = field(default_factory=list)
    geo_points: List[GeoPoint] = field(default_factory=list)
    two_factor_devices: List[TwoFactorDevice] = field(default_factory=list)
    camera_devices: List[CameraDevice] = field(default_factory=list)
    inferred_emails: List[InferredEmail] = field(default_factory=list)

    def add(self, record: Record) -> None:
        getattr(self, BUNDLE_FIELDS[record.kind]).append(record)

    def extend(self, records: List[Record]) -> None:
        for record in records:
            self.add(record)


BUNDLE_FIELDS = {
    EntityKind.THREAD: 'threads',
    EntityKind.SAVED_ITEM: 'saves',
    EntityKind.COMMENT: 'comments',
    EntityKind.TOPIC: 'topics',
    EntityKind.LOGIN: 'logins',
    EntityKind.LOGOUT: 'logouts',
    EntityKind.DEVICE: 'devices',
    EntityKind.PROFILE_CHANGE: 'profile_changes',
    EntityKind.SIGNUP: 'signups',
    EntityKind.GEO_POINT: 'geo_points',
    EntityKind.TWO_FACTOR_DEVICE: 'two_factor_devices',
    EntityKind.CAMERA_DEVICE: 'camera_devices',
    EntityKind.INFERRED_EMAIL: 'inferred_emails',
}

_missing = set(EntityKind) - set(BUNDLE_FIELDS)
if _missing:
    raise RuntimeError(f"ExportBundle has no bucket for {sorted(k.value for k in _missing)}")


@dataclass
class Stats:
    """Centralized statistics tracking."""
    documents_seen: int = 0
    skipped: int = 0
    parse_errors: int = 0
    unrecognized: int = 0
    schema_counts: Dict[str, int] = field(default_factory=dict)
    threads_before_merge: int = 0
    threads_after_merge: int = 0

    # Timing
    phase_times: Dict[str, float] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    """Everything produced by one analysis run."""
    bundle: ExportBundle
    messaging: Dict[str, Any]
    extras: Dict[str, Any]
    security: Dict[str, Any]
    stats: Stats
