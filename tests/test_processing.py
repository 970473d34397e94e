"""Tests for the end-to-end orchestrator and the command-line entry point."""
import json

import pytest

from export_analyzer.main import main
from export_analyzer.processing import ExportAnalyzerError, NoValidDataError, Processor, analyze_documents

from conftest import THREAD_PART_1


class TestProcessor:

    def test_full_run(self, export_documents):
        result = Processor().run(export_documents)
        assert len(result.bundle.threads) == 1
        assert result.messaging["overview"]["totalMessages"] == 3
        assert result.extras["saves"]["total"] == 3
        assert result.extras["topics"]["count"] == 2
        assert result.extras["topics"]["total"] == 3
        assert result.security["logins"]["total"] == 2
        assert result.security["signup"]["username"] == "me_123"
        assert result.stats.threads_before_merge == 2
        assert result.stats.threads_after_merge == 1
        assert result.stats.schema_counts["thread"] == 2

    def test_merged_thread_is_sorted(self, export_documents):
        (thread,) = Processor().run(export_documents).bundle.threads
        timestamps = [m.timestamp_ms for m in thread.messages]
        assert timestamps == sorted(timestamps)
        assert [p.name for p in thread.participants] == ["Alice", "Me", "Bob"]

    def test_skip_list(self, export_documents):
        docs = export_documents + [("secret_conversations.json", json.dumps(dict(THREAD_PART_1, thread_path="x")))]
        result = Processor().run(docs)
        assert result.stats.skipped == 1
        assert len(result.bundle.threads) == 1

    def test_parse_error_and_unknown_do_not_stop_run(self, export_documents):
        docs = export_documents + [("broken.json", "{not json"), ("misc.json", "{}")]
        result = Processor().run(docs)
        assert result.stats.parse_errors == 1
        assert result.stats.unrecognized == 1
        assert result.stats.documents_seen == len(docs)

    def test_deeply_nested_document_is_a_parse_error(self, export_documents):
        docs = export_documents + [("deep.json", "[" * 100000 + "]" * 100000)]
        result = Processor().run(docs)
        assert result.stats.parse_errors == 1
        assert len(result.bundle.threads) == 1

    def test_far_future_timestamp_does_not_stop_run(self, export_documents):
        far_future = {
            "title": "Bob",
            "thread_path": "inbox/bob_456",
            "participants": [{"name": "Bob"}, {"name": "Me"}],
            "messages": [{"sender_name": "Bob", "timestamp_ms": 10 ** 17, "content": "hi"}],
        }
        result = Processor().run(export_documents + [("bob.json", json.dumps(far_future))])
        assert result.messaging["overview"]["totalMessages"] == 4
        bob = next(t for t in result.bundle.threads if t.thread_key == "inbox/bob_456")
        assert bob.messages[0].timestamp_ms == 0

    def test_no_threads_raises(self):
        with pytest.raises(NoValidDataError, match="No valid DM JSON files found."):
            Processor().run([("topics.json", json.dumps({"topics_your_topics": []}))])

    def test_no_documents_raises(self):
        with pytest.raises(ExportAnalyzerError):
            analyze_documents([])

    def test_no_valid_data_is_value_error(self):
        with pytest.raises(ValueError):
            analyze_documents([("ai_conversations.json", json.dumps(THREAD_PART_1))])

    def test_phrase_counters_disabled(self, export_documents):
        result = Processor(phrase_counters=()).run(export_documents)
        assert result.messaging["charts"]["phraseCounts"] == {}


class TestMain:

    def test_writes_report(self, export_dir, tmp_path):
        output = tmp_path / "out" / "report.json"
        assert main(["--input", str(export_dir), "--output", str(output), "--timezone", "Europe/Oslo"]) == 0
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["messaging"]["overview"]["totalMessages"] == 3
        assert report["conversations"][0]["key"] == "ALL"
        assert "records" not in report

    def test_include_records(self, export_dir, tmp_path):
        output = tmp_path / "report.json"
        assert main(["--input", str(export_dir), "--output", str(output), "--include-records"]) == 0
        records = json.loads(output.read_text(encoding="utf-8"))["records"]
        assert records["threads"][0]["threadKey"] == "inbox/alice_123"
        assert records["saves"][0]["mediaType"] == "post"

    def test_missing_input(self, tmp_path):
        assert main(["--input", str(tmp_path / "missing")]) == 1

    def test_unknown_timezone(self, export_dir):
        assert main(["--input", str(export_dir), "--timezone", "Mars/Olympus"]) == 1

    def test_empty_folder_fails(self, tmp_path):
        assert main(["--input", str(tmp_path)]) == 1
