"""Login, device, location and account-change statistics."""

import logging
from typing import Any, Dict, List, Optional

import regex

from .config import LOCATION_PRECISION, PROFILE_CHANGE_TYPES, TOP_IPS, TOP_LOCATIONS
from .data_models import ExportBundle, GeoPoint, LoginEvent
from .geo_resolver import find_country_centroid
from .utils import day_key, format_date, labels_values, top_n

logger = logging.getLogger(__name__)

ICON_PHONE = "\U0001F4F1"
ICON_COMPUTER = "\U0001F4BB"
ICON_UNKNOWN = "\u2754"

ANDROID_VENDORS = {
    "samsung": "Samsung",
    "google": "Google",
    "oneplus": "OnePlus",
    "xiaomi": "Xiaomi",
    "redmi": "Xiaomi",
    "huawei": "Huawei",
    "motorola": "Motorola",
    "oppo": "OPPO",
    "vivo": "vivo",
    "sony": "Sony",
    "nokia": "Nokia",
}

# (substring, browser name); checked in order, Chrome-based browsers first
BROWSERS = (
    ("edg/", "Edge"),
    ("opr/", "Opera"),
    ("chrome/", "Chrome"),
    ("firefox/", "Firefox"),
    ("safari/", "Safari"),
)


def _browser(lower: str) -> str:
    for marker, name in BROWSERS:
        if marker in lower:
            return name
    return "Browser"


def _android(device: str) -> Dict[str, str]:
    vendor, model, version = "Android", "Android device", ""
    # Instagram app agents: "Android (33/13; 420dpi; 1080x2400; samsung; SM-S911B; ...)"
    app = regex.search(r'Android \(([^)]*)\)', device)
    if app:
        parts = [p.strip() for p in app.group(1).split(';')]
        if parts and '/' in parts[0]:
            version = parts[0].split('/', 1)[1]
        if len(parts) > 4:
            vendor = ANDROID_VENDORS.get(parts[3].lower(), parts[3] or vendor)
            model = parts[4] or model
    else:
        release = regex.search(r'Android ([\d.]+)', device)
        if release:
            version = release.group(1)
        build = regex.search(r';\s*([^;()]+?)\s+Build/', device)
        if build:
            model = build.group(1)
        lower = device.lower()
        for marker, name in ANDROID_VENDORS.items():
            if marker in lower:
                vendor = name
                break
    return {"vendor": vendor, "model": model, "os": f"Android {version}".strip(),
            "platform": "mobile", "icon": ICON_PHONE}


def describe_device(device: str) -> Dict[str, str]:
    """
    Best-effort descriptor for a free-text device or user-agent string.

    Mobile operating systems are checked before desktop ones because mobile
    agents often mention desktop tokens too ("like Mac OS X", "Linux").
    """
    lower = (device or "").lower()
    if "iphone" in lower or "ipad" in lower:
        is_pad = "ipad" in lower
        model = regex.search(r'(iP(?:hone|ad)\d+,\d+)', device)
        version = regex.search(r'(?:iOS|OS) (\d+[_.]\d+(?:[_.]\d+)?)', device)
        os_name = "iPadOS" if is_pad else "iOS"
        return {
            "vendor": "Apple",
            "model": model.group(1) if model else ("iPad" if is_pad else "iPhone"),
            "os": f"{os_name} {version.group(1).replace('_', '.')}" if version else os_name,
            "platform": "tablet" if is_pad else "mobile",
            "icon": ICON_PHONE,
        }
    if "android" in lower:
        return _android(device)
    if "windows" in lower:
        return {"vendor": "Microsoft", "model": _browser(lower), "os": "Windows",
                "platform": "desktop", "icon": ICON_COMPUTER}
    if "macintosh" in lower or "mac os" in lower:
        return {"vendor": "Apple", "model": _browser(lower), "os": "macOS",
                "platform": "desktop", "icon": ICON_COMPUTER}
    if "cros " in lower:
        return {"vendor": "Google", "model": _browser(lower), "os": "ChromeOS",
                "platform": "desktop", "icon": ICON_COMPUTER}
    if "linux" in lower:
        return {"vendor": "Linux", "model": _browser(lower), "os": "Linux",
                "platform": "desktop", "icon": ICON_COMPUTER}
    return {"vendor": "Unknown", "model": device or "Unknown", "os": "Unknown",
            "platform": "unknown", "icon": ICON_UNKNOWN}


def summarize_devices(bundle: ExportBundle) -> List[Dict[str, Any]]:
    """Aggregate device sightings by raw identifier, most recent first."""
    seen: Dict[str, Dict[str, Any]] = {}

    def record(device: str, timestamp_ms: int) -> None:
        if not device:
            return
        entry = seen.get(device)
        if entry is None:
            entry = {"device": device, "count": 0, "lastSeenMs": 0, **describe_device(device)}
            seen[device] = entry
        entry["count"] += 1
        entry["lastSeenMs"] = max(entry["lastSeenMs"], timestamp_ms or 0)

    for device in bundle.devices:
        record(device.device, device.last_login_ms)
    for event in bundle.logins + bundle.logouts:
        record(event.device, event.timestamp_ms)

    return sorted(seen.values(), key=lambda d: (d["lastSeenMs"], d["count"]), reverse=True)


def location_key(event: LoginEvent) -> Optional[str]:
    """Identity of a login location: coordinates, else text, else country."""
    if event.lat is not None and event.lon is not None:
        return f"{round(event.lat, LOCATION_PRECISION)},{round(event.lon, LOCATION_PRECISION)}"
    if event.location and event.location.strip():
        return event.location.strip().lower()
    centroid = find_country_centroid(event.country, event.country_code)
    if centroid:
        return f"country:{centroid['code']}"
    return None


def _session_point(event: LoginEvent, source_type: str) -> Optional[Dict[str, Any]]:
    label = event.location or event.country or event.ip
    if event.lat is not None and event.lon is not None:
        return {"lat": event.lat, "lon": event.lon, "label": label, "sourceType": source_type,
                "timestampMs": event.timestamp_ms, "approximate": False}
    centroid = find_country_centroid(event.country, event.country_code)
    if centroid:
        return {"lat": centroid["lat"], "lon": centroid["lon"], "label": label or centroid["code"],
                "sourceType": "country_centroid", "timestampMs": event.timestamp_ms, "approximate": True}
    return None


def _geo_point(point: GeoPoint) -> Optional[Dict[str, Any]]:
    if point.lat is not None and point.lon is not None:
        return {"lat": point.lat, "lon": point.lon, "label": point.label, "sourceType": point.source_type,
                "timestampMs": point.timestamp_ms, "approximate": False}
    centroid = find_country_centroid(point.label)
    if centroid:
        return {"lat": centroid["lat"], "lon": centroid["lon"], "label": point.label,
                "sourceType": point.source_type, "timestampMs": point.timestamp_ms, "approximate": True}
    return None


def build_map_points(bundle: ExportBundle) -> List[Dict[str, Any]]:
    points = [_session_point(e, "login") for e in bundle.logins]
    points += [_session_point(e, "logout") for e in bundle.logouts]
    points += [_geo_point(p) for p in bundle.geo_points]
    return [p for p in points if p is not None]


def compute_security_analytics(bundle: ExportBundle) -> Dict[str, Any]:
    """Aggregate login, device, location and profile-change statistics."""
    by_day: Dict[str, int] = {}
    locations: Dict[str, int] = {}
    location_labels: Dict[str, str] = {}
    ips: Dict[str, int] = {}
    first_login: Optional[int] = None
    last_login: Optional[int] = None

    for event in bundle.logins:
        if event.timestamp_ms:
            key = day_key(event.timestamp_ms)
            by_day[key] = by_day.get(key, 0) + 1
            first_login = event.timestamp_ms if first_login is None else min(first_login, event.timestamp_ms)
            last_login = event.timestamp_ms if last_login is None else max(last_login, event.timestamp_ms)
        key = location_key(event)
        if key:
            locations[key] = locations.get(key, 0) + 1
            location_labels.setdefault(key, event.location or event.country or key)
        if event.ip:
            ips[event.ip] = ips.get(event.ip, 0) + 1

    top_locations = [(location_labels[k], n) for k, n in top_n(locations, TOP_LOCATIONS)]
    changes = sorted(
        (c for c in bundle.profile_changes if c.type in PROFILE_CHANGE_TYPES),
        key=lambda c: c.timestamp_ms,
        reverse=True,
    )
    signups = sorted(bundle.signups, key=lambda s: s.timestamp_ms)

    report = {
        "logins": {
            "total": len(bundle.logins),
            "logouts": len(bundle.logouts),
            "first": format_date(first_login) if first_login is not None else None,
            "last": format_date(last_login) if last_login is not None else None,
            "timeline": labels_values(sorted(by_day.items())),
            "uniqueLocations": len(locations),
            "topLocations": labels_values(top_locations),
            "topIps": labels_values(top_n(ips, TOP_IPS)),
        },
        "mapPoints": build_map_points(bundle),
        "devices": summarize_devices(bundle),
        "profileChanges": [c.to_dict() for c in changes],
        "signup": signups[0].to_dict() if signups else None,
        "twoFactorDevices": [d.to_dict() for d in bundle.two_factor_devices],
        "cameraDevices": [d.to_dict() for d in bundle.camera_devices],
        "inferredEmails": [e.email for e in bundle.inferred_emails],
    }
    logger.info(f"Security report: {len(bundle.logins)} logins, {len(locations)} unique locations, "
                f"{len(report['devices'])} devices, {len(report['mapPoints'])} map points")
    return report
