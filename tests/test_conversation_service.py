"""Tests for cross-file conversation merging and selection."""
from export_analyzer.conversation_service import ALL_THREADS_KEY, ConversationService, merge_threads
from export_analyzer.data_models import Message, Participant, Thread


def _thread(key, timestamps, names=("A", "B"), title=None):
    return Thread(
        title=title or key,
        thread_key=key,
        participants=[Participant(name=n) for n in names],
        messages=[Message(sender_name=names[0], timestamp_ms=ts, content=str(ts)) for ts in timestamps],
    )


class TestMergeThreads:

    def test_fragments_merge_sorted(self):
        merged = merge_threads([_thread("k", [200, 100]), _thread("k", [150])])
        assert len(merged) == 1
        assert [m.timestamp_ms for m in merged[0].messages] == [100, 150, 200]

    def test_equal_timestamps_keep_input_order(self):
        first = _thread("k", [100])
        second = _thread("k", [100])
        second.messages[0].content = "later"
        merged = merge_threads([first, second])
        assert [m.content for m in merged[0].messages] == ["100", "later"]

    def test_participants_union_first_seen(self):
        merged = merge_threads([_thread("k", [1], names=("A", "B")), _thread("k", [2], names=("B", "C"))])
        assert [p.name for p in merged[0].participants] == ["A", "B", "C"]

    def test_groups_keep_first_seen_order(self):
        merged = merge_threads([_thread("b", [1]), _thread("a", [2]), _thread("b", [3])])
        assert [t.thread_key for t in merged] == ["b", "a"]

    def test_inputs_not_mutated(self):
        fragment = _thread("k", [200, 100])
        merge_threads([fragment, _thread("k", [150], names=("C",))])
        assert [m.timestamp_ms for m in fragment.messages] == [200, 100]
        assert [p.name for p in fragment.participants] == ["A", "B"]

    def test_empty(self):
        assert merge_threads([]) == []


class TestThreadOptions:

    def test_sorted_with_all_first(self):
        threads = [_thread("k1", [1], title="Zed"), _thread("k2", [1], title="\U0001F525 Amy")]
        options = ConversationService().thread_options(threads)
        assert options[0]["key"] == ALL_THREADS_KEY
        assert [o["key"] for o in options[1:]] == ["k2", "k1"]

    def test_duplicate_labels_suffixed(self):
        threads = [_thread("k1", [1], title="Chat"), _thread("k2", [1], title="Chat")]
        labels = [o["label"] for o in ConversationService().thread_options(threads)[1:]]
        assert labels == ["Chat", "Chat (2)"]

    def test_filter_threads(self):
        threads = [_thread("k1", [1]), _thread("k2", [1])]
        service = ConversationService()
        assert len(service.filter_threads(threads, ALL_THREADS_KEY)) == 2
        assert [t.thread_key for t in service.filter_threads(threads, "k2")] == ["k2"]
