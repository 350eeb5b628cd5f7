from datetime import datetime

import pytest

from verisight.core.exceptions import NotFoundError
from verisight.crud.analysis import (
    create_analysis,
    explore_analyses,
    get_analyses_changed_since,
    get_analysis,
    get_recent_analyses,
    get_user_analyses,
)
from verisight.crud.votes import cast_vote
from verisight.db.models.user import User
from verisight.schemas.analysis import ANONYMOUS_NAME, AnalysisCard, AnalysisOut, content_preview


def test_create_analysis_stores_report(db, make_user, sample_report):
    make_user("alice")

    row = create_analysis(db, "alice", "text", "Unemployment doubled in 2024", sample_report)

    assert row.id
    assert row.verdict == "FAKE"
    assert row.credibility_score == 27.5
    assert row.summary == "The claim contradicts published figures."
    assert row.sources == ["https://news.example.com/labour", "https://stats.example.org/2024"]
    assert row.evidence[0]["source_title"] == "Labour market overview"
    assert (row.votes_up, row.votes_down) == (0, 0)

    user = db.get(User, "alice")
    db.refresh(user)
    assert user.total_analyses == 1


def test_create_analysis_for_unknown_user(db, sample_report):
    with pytest.raises(NotFoundError) as exc:
        create_analysis(db, "ghost", "text", "claim", sample_report)
    assert exc.value.kind == "User"


def test_truth_seeker_badge_after_hundred_analyses(db, make_user, sample_report):
    make_user("alice", total_analyses=99)

    create_analysis(db, "alice", "text", "claim", sample_report)

    user = db.get(User, "alice")
    db.refresh(user)
    assert "Truth Seeker" in user.badges


def test_get_analysis(db, make_user, add_analysis):
    make_user("alice")
    row = add_analysis("alice")

    assert get_analysis(db, row.id).content == row.content
    assert get_analysis(db, "missing") is None


def test_user_analyses_newest_first_with_limit(db, make_user, add_analysis):
    make_user("alice")
    make_user("bob")
    first = add_analysis("alice", content="first")
    add_analysis("bob", content="not mine")
    second = add_analysis("alice", content="second")
    third = add_analysis("alice", content="third")

    rows = get_user_analyses(db, "alice", limit=2)

    assert [r.id for r in rows] == [third.id, second.id]
    assert [r.id for r in get_user_analyses(db, "alice")][-1] == first.id
    assert get_user_analyses(db, "nobody") == []


def test_recent_analyses_include_author(db, make_user, add_analysis):
    make_user("alice", display_name="Alice Kim", photo_url="https://img.example.com/a.png")
    older = add_analysis("alice", content="older")
    newer = add_analysis("alice", content="newer")

    rows = get_recent_analyses(db, limit=10)

    assert [a.id for a, _ in rows] == [newer.id, older.id]
    card = AnalysisCard.from_row_with_author(*rows[0])
    assert card.user_display_name == "Alice Kim"
    assert card.user_photo_url == "https://img.example.com/a.png"


def test_recent_analysis_without_author_is_anonymous(db, add_analysis):
    # sqlite는 기본으로 FK를 강제하지 않아서 작성자 없는 분석을 만들 수 있음
    add_analysis("deleted-user", content="orphan")

    (row, author), = get_recent_analyses(db)

    assert author is None
    card = AnalysisCard.from_row_with_author(row, author)
    assert card.user_display_name == ANONYMOUS_NAME
    assert card.user_photo_url is None


def test_explore_search_matches_content_and_summary(db, make_user, add_analysis):
    make_user("alice")
    by_content = add_analysis("alice", content="Vaccine causes MAGNETISM")
    by_summary = add_analysis("alice", content="photo", summary="Claims about magnetism are false")
    add_analysis("alice", content="unrelated")

    rows = explore_analyses(db, query="  Magnetism ")

    assert {a.id for a, _ in rows} == {by_content.id, by_summary.id}


def test_explore_search_treats_wildcards_literally(db, make_user, add_analysis):
    make_user("alice")
    literal = add_analysis("alice", content="100% true")
    add_analysis("alice", content="1000 people")

    rows = explore_analyses(db, query="100%")

    assert [a.id for a, _ in rows] == [literal.id]


def test_explore_type_filter(db, make_user, add_analysis):
    make_user("alice")
    image = add_analysis("alice", type="image", content="cat.png")
    add_analysis("alice", type="text")

    assert [a.id for a, _ in explore_analyses(db, content_type="image")] == [image.id]
    assert len(explore_analyses(db, content_type="all")) == 2


def test_explore_sort_orders(db, make_user, add_analysis):
    make_user("alice")
    low = add_analysis("alice", credibility_score=10.0, votes_up=5, votes_down=4)
    high = add_analysis("alice", credibility_score=90.0, votes_up=1, votes_down=0)
    mid = add_analysis("alice", credibility_score=50.0)

    def ids(sort):
        return [a.id for a, _ in explore_analyses(db, sort=sort)]

    assert ids("recent") == [mid.id, high.id, low.id]
    assert ids("votes") == [low.id, high.id, mid.id]
    assert ids("credibility") == [high.id, mid.id, low.id]


def test_explore_limit(db, make_user, add_analysis):
    make_user("alice")
    for _ in range(5):
        add_analysis("alice")

    assert len(explore_analyses(db, limit=3)) == 3


def test_content_preview_truncates_long_content():
    assert content_preview("short") == "short"
    long_text = "x" * 250
    preview = content_preview(long_text)
    assert preview == "x" * 200 + "..."


def test_changed_since_returns_rows_touched_by_votes(db, make_user, add_analysis):
    make_user("alice")
    make_user("bob")
    untouched = add_analysis("alice", content="quiet")
    voted = add_analysis("alice", content="busy")
    cutoff = datetime(2025, 6, 1)

    assert {r.id for r in get_analyses_changed_since(db, None)} == {untouched.id, voted.id}
    assert get_analyses_changed_since(db, cutoff) == []

    cast_vote(db, "bob", voted.id, "up")

    rows = get_analyses_changed_since(db, cutoff)
    assert [r.id for r in rows] == [voted.id]
    out = AnalysisOut.from_row(rows[0])
    assert out.community_votes.up == 1


def test_changed_since_pages_through_rows_sharing_a_timestamp(db, make_user, add_analysis):
    make_user("alice")
    same_time = datetime(2025, 4, 1, 9, 30)
    ids = {add_analysis("alice", updated_at=same_time).id for _ in range(3)}

    first_page = get_analyses_changed_since(db, None, limit=2)
    last = first_page[-1]
    second_page = get_analyses_changed_since(db, last.updated_at, after_id=last.id, limit=2)

    assert len(first_page) == 2
    assert len(second_page) == 1
    assert {r.id for r in first_page} | {r.id for r in second_page} == ids
    assert get_analyses_changed_since(db, second_page[0].updated_at, after_id=second_page[0].id) == []
