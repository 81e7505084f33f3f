"""Tests for feed scopes and cursor pagination."""

import pytest
from fastapi import HTTPException

from sermon_buddy.core.context import RequestContext
from sermon_buddy.modules.notes.feed import (
    FeedComposer,
    FeedMode,
    FeedScope,
    decode_cursor,
    encode_cursor,
)


@pytest.fixture
def composer(fake_db) -> FeedComposer:
    return FeedComposer(fake_db)


@pytest.fixture
def church(fake_db):
    return fake_db.seed("churches", name="Grace Fellowship", description="Downtown")


@pytest.fixture
def notes(fake_db, alice, bob, church):
    """A mix of authors, privacies and church scopes"""
    def note(author, title, privacy="public", church_id=None):
        return fake_db.seed("sermon_notes", user_id=author["id"], title=title, content=title,
                            privacy=privacy, church_id=church_id)

    return {
        "alice_public": note(alice, "Alice public"),
        "alice_private": note(alice, "Alice private", privacy="private"),
        "alice_church": note(alice, "Alice church", privacy="church", church_id=church["id"]),
        "bob_public_church": note(bob, "Bob public in church", church_id=church["id"]),
        "bob_private_church": note(bob, "Bob private in church", privacy="private", church_id=church["id"]),
        "bob_public": note(bob, "Bob public"),
    }


def ids(page):
    return [item.id for item in page.items]


class TestFeedScope:
    def test_from_params_picks_one_scope(self) -> None:
        assert FeedScope.from_params(author_id="a") == FeedScope(FeedMode.BY_AUTHOR, "a")
        assert FeedScope.from_params(church_id="c") == FeedScope(FeedMode.BY_GROUP, "c")
        assert FeedScope.from_params() == FeedScope(FeedMode.PUBLIC_ALL)

    def test_both_ids_rejected(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            FeedScope.from_params(author_id="a", church_id="c")

        assert exc_info.value.status_code == 400


class TestFeedComposer:
    def test_public_all_only_public_newest_first(self, composer, notes) -> None:
        page = composer.compose(FeedScope.public_all(), RequestContext())

        assert ids(page) == [
            notes["bob_public"]["id"],
            notes["bob_public_church"]["id"],
            notes["alice_public"]["id"],
        ]
        assert all(item.privacy.value == "public" for item in page.items)
        assert page.next_cursor is None

    def test_by_author_hides_non_public_from_others(self, composer, notes, alice) -> None:
        page = composer.compose(FeedScope.by_author(alice["id"]), RequestContext(viewer_id="someone-else"))

        assert ids(page) == [notes["alice_public"]["id"]]

    def test_by_author_shows_everything_to_the_author(self, composer, notes, alice) -> None:
        page = composer.compose(FeedScope.by_author(alice["id"]), RequestContext(viewer_id=alice["id"]))

        assert ids(page) == [
            notes["alice_church"]["id"],
            notes["alice_private"]["id"],
            notes["alice_public"]["id"],
        ]
        assert {item.user_id for item in page.items} == {alice["id"]}

    def test_by_group_only_that_church(self, composer, notes, church) -> None:
        page = composer.compose(FeedScope.by_group(church["id"]), RequestContext())

        assert ids(page) == [notes["bob_public_church"]["id"], notes["alice_church"]["id"]]
        assert {item.church_id for item in page.items} == {church["id"]}

    def test_items_carry_author_and_parsed_content(self, composer, fake_db, alice) -> None:
        fake_db.seed("sermon_notes", user_id=alice["id"], title="Romans", privacy="public", church_id=None,
                     content='{"pastorName": "Pastor John", "content": "Body", "bibleVerses": ["Romans 8:28"]}')
        fake_db.seed("sermon_notes", user_id=alice["id"], title="Plain", privacy="public", church_id=None,
                     content="Just some notes")

        plain, structured = composer.compose(FeedScope.public_all(), RequestContext()).items

        assert structured.author.username == "alice"
        assert structured.author.full_name == "Alice Smith"
        assert structured.content.pastor_name == "Pastor John"
        assert structured.content.bible_verses == ["Romans 8:28"]
        assert plain.content.content == "Just some notes"
        assert plain.content.pastor_name == ""

    def test_cursor_walks_every_row_once(self, composer, fake_db, alice) -> None:
        created = [
            fake_db.seed("sermon_notes", user_id=alice["id"], title=f"Note {i}", content="",
                         privacy="public", church_id=None)
            for i in range(7)
        ]

        seen, cursor = [], None
        for _ in range(10):
            page = composer.compose(FeedScope.public_all(), RequestContext(), cursor=cursor, limit=3)
            seen.extend(ids(page))
            cursor = page.next_cursor
            if cursor is None:
                break

        assert seen == [row["id"] for row in reversed(created)]

    def test_cursor_breaks_timestamp_ties_by_id(self, composer, fake_db, alice) -> None:
        for note_id in ("n-a", "n-b", "n-c"):
            fake_db.seed("sermon_notes", id=note_id, user_id=alice["id"], title=note_id, content="",
                         privacy="public", church_id=None, created_at="2024-05-01T10:00:00+00:00")

        first = composer.compose(FeedScope.public_all(), RequestContext(), limit=2)
        second = composer.compose(FeedScope.public_all(), RequestContext(), cursor=first.next_cursor, limit=2)

        assert ids(first) == ["n-c", "n-b"]
        assert ids(second) == ["n-a"]
        assert second.next_cursor is None

    def test_new_rows_do_not_shift_later_pages(self, composer, fake_db, alice) -> None:
        for i in range(4):
            fake_db.seed("sermon_notes", user_id=alice["id"], title=f"Note {i}", content="",
                         privacy="public", church_id=None)

        first = composer.compose(FeedScope.public_all(), RequestContext(), limit=2)
        fake_db.seed("sermon_notes", user_id=alice["id"], title="Fresh", content="",
                     privacy="public", church_id=None)
        second = composer.compose(FeedScope.public_all(), RequestContext(), cursor=first.next_cursor, limit=2)

        assert [item.title for item in first.items] == ["Note 3", "Note 2"]
        assert [item.title for item in second.items] == ["Note 1", "Note 0"]

    def test_page_size_is_capped(self, composer, fake_db, alice, monkeypatch) -> None:
        from sermon_buddy.config.settings import settings

        monkeypatch.setattr(settings, "feed_max_page_size", 2)
        for i in range(3):
            fake_db.seed("sermon_notes", user_id=alice["id"], title=f"Note {i}", content="",
                         privacy="public", church_id=None)

        page = composer.compose(FeedScope.public_all(), RequestContext(), limit=50)

        assert len(page.items) == 2
        assert page.next_cursor is not None

    def test_remote_failure(self, composer, fake_db) -> None:
        fake_db.fail_tables.add("sermon_notes")

        with pytest.raises(HTTPException) as exc_info:
            composer.compose(FeedScope.public_all(), RequestContext())

        assert exc_info.value.status_code == 502


class TestCursor:
    def test_encode_decode(self) -> None:
        cursor = encode_cursor("2024-05-01T10:00:00+00:00", "note-1")

        assert "=" not in cursor
        assert decode_cursor(cursor) == ("2024-05-01T10:00:00+00:00", "note-1")

    @pytest.mark.parametrize("cursor", ["not-a-cursor", "e30", encode_cursor("x", "y")[:-3] + "!!!"])
    def test_malformed_cursor_rejected(self, cursor) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_cursor(cursor)

        assert exc_info.value.status_code == 400


class TestFeedRoute:
    def test_conflicting_scopes(self, client) -> None:
        response = client.get("/api/v1/notes/feed", params={"author_id": "a", "church_id": "c"})

        assert response.status_code == 400

    def test_public_feed_with_cursor(self, client, fake_db, notes) -> None:
        first = client.get("/api/v1/notes/feed", params={"limit": 2}).json()
        second = client.get("/api/v1/notes/feed", params={"limit": 2, "cursor": first["next_cursor"]}).json()

        assert [item["title"] for item in first["items"]] == ["Bob public", "Bob public in church"]
        assert [item["title"] for item in second["items"]] == ["Alice public"]
        assert second["next_cursor"] is None

    def test_author_sees_own_private_notes(self, client, fake_db, notes, alice) -> None:
        headers = fake_db.login(alice["id"])

        response = client.get("/api/v1/notes/feed", params={"author_id": alice["id"]}, headers=headers)

        assert response.status_code == 200
        assert len(response.json()["items"]) == 3

    def test_content_uses_camel_case_keys(self, client, fake_db, notes) -> None:
        item = client.get("/api/v1/notes/feed").json()["items"][0]

        assert set(item["content"]) == {"pastorName", "churchName", "content", "bibleVerses"}
