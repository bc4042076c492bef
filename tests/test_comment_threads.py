import random
from datetime import datetime, timedelta

from docshare.domains.comments.entities import BlockType, Comment
from docshare.domains.comments.threads import (
    block_stats, group_by_block, group_into_threads, sort_threads_by_date
)

T0 = datetime(2024, 5, 1, 12, 0, 0)


def comment(id, minutes, block_id="intro-hook", parent=None, resolved=False):
    created = T0 + timedelta(minutes=minutes)
    return Comment(
        id=id,
        block_id=block_id,
        block_type=BlockType.INTRO,
        author_id="u1",
        author_email="u1@example.com",
        author_display_name="U1",
        text=f"text {id}",
        created_at=created,
        updated_at=created,
        parent_comment_id=parent,
        resolved=resolved,
    )


def sample():
    return [
        comment("r1", 0),
        comment("a1", 5, parent="r1"),
        comment("a2", 2, parent="r1"),
        comment("r2", 10),
        comment("b1", 11, parent="r2"),
        comment("r3", 1, block_id="claim-1"),
    ]


def test_replies_attached_in_time_order():
    threads = group_into_threads(sample())
    by_root = {t.root_comment.id: [r.id for r in t.replies] for t in threads}
    assert by_root == {"r1": ["a2", "a1"], "r2": ["b1"], "r3": []}


def test_orphan_replies_dropped():
    comments = [comment("r1", 0), comment("x1", 1, parent="gone")]
    threads = group_into_threads(comments)
    assert len(threads) == 1
    assert threads[0].replies == []


def test_grouping_is_order_independent_and_repeatable():
    comments = sample()
    expected = group_into_threads(comments)
    for seed in range(5):
        shuffled = comments[:]
        random.Random(seed).shuffle(shuffled)
        assert group_into_threads(shuffled) == expected
    assert group_into_threads(comments) == expected
    assert group_by_block(list(reversed(comments))) == group_by_block(comments)


def test_same_timestamp_ordered_by_id():
    comments = [comment("r1", 0), comment("b", 1, parent="r1"), comment("a", 1, parent="r1")]
    thread = group_into_threads(comments)[0]
    assert [r.id for r in thread.replies] == ["a", "b"]


def test_blocks_newest_thread_first():
    by_block = group_by_block(sample())
    assert set(by_block) == {"intro-hook", "claim-1"}
    assert [t.root_comment.id for t in by_block["intro-hook"]] == ["r2", "r1"]


def test_sort_threads_ascending():
    threads = group_into_threads(sample())
    assert [t.root_comment.id for t in sort_threads_by_date(threads, ascending=True)] == ["r1", "r3", "r2"]


def test_single_reply_thread_on_block():
    by_block = group_by_block([comment("r1", 0), comment("a1", 3, parent="r1")])
    threads = by_block["intro-hook"]
    assert len(threads) == 1
    assert threads[0].root_comment.id == "r1"
    assert [r.id for r in threads[0].replies] == ["a1"]
    assert threads[0].comment_count == 2


def test_block_stats():
    threads = group_into_threads([
        comment("r1", 0, resolved=True),
        comment("a1", 1, parent="r1"),
        comment("r2", 2),
    ])
    assert block_stats(threads) == (3, True)

    resolved_only = group_into_threads([comment("r1", 0, resolved=True)])
    assert block_stats(resolved_only) == (1, False)
    assert block_stats([]) == (0, False)
