"""Tests for saved-item, comment and topic statistics."""
from export_analyzer.data_models import Comment, ExportBundle, SavedItem, TopicTag
from export_analyzer.engagement_analytics import compute_extras_analytics, median_mid

T = 1700000000000


def _bundle():
    bundle = ExportBundle()
    bundle.extend([
        SavedItem(href="https://www.instagram.com/p/abc/", timestamp_ms=T, creator="natgeo", media_type="post"),
        SavedItem(href="https://www.instagram.com/reel/x/", timestamp_ms=T + 86400000, creator="natgeo", media_type="reel"),
        SavedItem(href="not a url", timestamp_ms=T, creator="", media_type="other"),
        Comment(text="Nice \U0001F525\U0001F525", owner="natgeo", timestamp_ms=T),
        Comment(text="wow", owner="nasa", timestamp_ms=T + 86400000),
        TopicTag(name="Travel"),
        TopicTag(name="travel"),
        TopicTag(name="Cooking"),
    ])
    return bundle


class TestSaves:

    def test_totals_and_types(self):
        saves = compute_extras_analytics(_bundle())["saves"]
        assert saves["total"] == 3
        assert saves["typeCount"] == {"post": 1, "reel": 1, "other": 1}
        assert saves["first"] == "2023-11-14"
        assert saves["last"] == "2023-11-15"

    def test_rankings(self):
        saves = compute_extras_analytics(_bundle())["saves"]
        assert saves["topCreators"] == {"labels": ["natgeo"], "values": [2]}
        assert saves["topDomains"] == {"labels": ["www.instagram.com"], "values": [2]}
        assert saves["timeline"] == {"labels": ["2023-11-14", "2023-11-15"], "values": [2, 1]}


class TestComments:

    def test_lengths_and_owners(self):
        comments = compute_extras_analytics(_bundle())["comments"]
        assert comments["total"] == 2
        assert comments["avgLen"] == 5.0
        assert comments["medianLen"] == 5.0
        assert comments["topOwners"]["labels"] == ["natgeo", "nasa"]
        assert comments["topEmojis"] == {"labels": ["\U0001F525"], "values": [2]}

    def test_median_averages_middle_pair(self):
        assert median_mid([1, 2, 3, 10]) == 2.5
        assert median_mid([5, 1, 3]) == 3
        assert median_mid([]) == 0


class TestTopics:

    def test_case_insensitive_dedup_keeps_first_casing(self):
        topics = compute_extras_analytics(_bundle())["topics"]
        assert topics["count"] == 2
        assert topics["total"] == 3
        assert topics["top"] == {"labels": ["Travel", "Cooking"], "values": [1, 1]}


class TestEmptyBundle:

    def test_no_records(self):
        result = compute_extras_analytics(ExportBundle())
        assert result["saves"]["total"] == 0
        assert result["saves"]["first"] is None
        assert result["comments"]["medianLen"] == 0
        assert result["topics"]["count"] == 0
        assert result["topics"]["total"] == 0
