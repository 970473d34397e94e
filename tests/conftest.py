"""Shared fixtures for the Export Analyzer test suite."""
import json
import sys
from pathlib import Path

import pytest

# Add src/ to path so imports work without an installed package
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))


# -- Minimal documents matching each export shape ------------------------

DAY = 86400000
T0 = 1700000000000  # 2023-11-14T22:13:20Z

THREAD_PART_1 = {
    "title": "Alice",
    "thread_path": "inbox/alice_123",
    "participants": [{"name": "Alice"}, {"name": "Me"}],
    "messages": [
        {"sender_name": "Alice", "timestamp_ms": T0 + 2 * DAY, "content": "See you tomorrow \U0001F600"},
        {"sender_name": "Me", "timestamp_ms": T0, "content": "good boy", "photos": [{"uri": "a.jpg"}]},
    ],
}

THREAD_PART_2 = {
    "title": "Alice",
    "thread_path": "inbox/alice_123",
    "participants": [{"name": "Alice"}, {"name": "Bob"}],
    "messages": [
        {"sender_name": "Bob", "timestamp_ms": T0 + DAY, "content": "Pizza tonight?",
         "reactions": [{"reaction": "\U0001F525", "actor": "Alice"}]},
    ],
}

SAVED_MEDIA = {
    "saved_saved_media": [
        {"title": "natgeo", "string_map_data": {"Saved on": {
            "href": "https://www.instagram.com/p/abc/", "timestamp": 1700000000}}},
        {"title": "natgeo", "string_map_data": {"Saved on": {
            "href": "https://www.instagram.com/reel/xyz/", "timestamp": 1700086400}}},
        {"title": "nasa", "string_map_data": {"Saved on": {
            "href": "https://example.com/other", "timestamp": 1700172800}}},
    ]
}

POST_COMMENTS = [
    {"string_map_data": {"Comment": {"value": "Nice \U0001F525"}, "Media Owner": {"value": "natgeo"},
                         "Time": {"timestamp": 1700000000}}},
    {"string_map_data": {"Comment": {"value": "wow"}, "Media Owner": {"value": "nasa"},
                         "Time": {"timestamp": 1700086400}}},
]

TOPICS = {
    "topics_your_topics": [
        {"string_map_data": {"Name": {"value": "Travel"}}},
        {"string_map_data": {"Name": {"value": "travel"}}},
        {"string_map_data": {"Name": {"value": "Cooking"}}},
    ]
}

LOGIN_HISTORY = {
    "account_history_login_history": [
        {"title": "2023-11-14T22:13:20+00:00", "string_map_data": {
            "Time": {"timestamp": 1700000000},
            "IP Address": {"value": "10.0.0.1"},
            "User Agent": {"value": "Instagram 300.0 Android (33/13; 420dpi; 1080x2400; samsung; SM-S911B; dm1q; qcom; en_US)"},
            "Country": {"value": "Germany"},
        }},
        {"title": "2023-11-15T22:13:20+00:00", "string_map_data": {
            "Time": {"timestamp": 1700086400},
            "IP Address": {"value": "10.0.0.1"},
            "User Agent": {"value": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X)"},
            "Latitude": {"value": "52.5200"},
            "Longitude": {"value": "13.4050"},
            "Location": {"value": "Berlin"},
        }},
    ]
}

SIGNUP = {
    "account_history_registration_info": [
        {"string_map_data": {
            "Time": {"timestamp": 1500000000},
            "Email": {"value": "me@example.com"},
            "Phone Number": {"value": "+15550100"},
            "Username": {"value": "me_123"},
            "Device": {"value": "iPhone"},
        }},
    ]
}


@pytest.fixture
def thread_docs():
    return [json.loads(json.dumps(THREAD_PART_1)), json.loads(json.dumps(THREAD_PART_2))]


@pytest.fixture
def export_documents():
    """(name, raw text) pairs for a small but complete export."""
    docs = {
        "inbox/alice_123/message_1.json": THREAD_PART_1,
        "inbox/alice_123/message_2.json": THREAD_PART_2,
        "saved_posts.json": SAVED_MEDIA,
        "post_comments_1.json": POST_COMMENTS,
        "recommended_topics.json": TOPICS,
        "login_activity.json": LOGIN_HISTORY,
        "signup_information.json": SIGNUP,
    }
    return [(name, json.dumps(doc)) for name, doc in docs.items()]


@pytest.fixture
def export_dir(tmp_path, export_documents):
    """Write the sample export to a folder tree."""
    root = tmp_path / "export"
    for name, text in export_documents:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root
