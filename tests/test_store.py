import asyncio

import pytest

from productivity.database.store import (
    INVALID_IDENTIFIER,
    NOT_FOUND,
    Query,
    RecordNotFoundError,
    Store,
    StoreError,
)


@pytest.fixture
def store(db_path):
    return Store(db_path)


def _insert_note(store, **values):
    row = {"title": "Note", "content": "", "created_by": "alice", **values}
    return asyncio.run(store.insert("notes", row))


def test_insert_assigns_id_and_timestamps(store):
    row = asyncio.run(store.insert("categories", {"name": "Work", "created_by": "alice"}))

    assert row["id"]
    assert row["name"] == "Work"
    assert row["created_at"] == row["updated_at"]
    assert row["created_at"].endswith("Z")


def test_json_and_boolean_columns_round_trip(store):
    row = _insert_note(store, tags=["a", "b"], formatting={"bold": True}, is_pinned=True)

    assert row["tags"] == ["a", "b"]
    assert row["formatting"] == {"bold": True}
    assert row["is_pinned"] is True
    assert row["is_archived"] is False


def test_ilike_is_case_insensitive_and_literal(store):
    _insert_note(store, title="Shopping LIST")
    _insert_note(store, title="100% done")
    _insert_note(store, title="1000 things")

    shopping = asyncio.run(store.select("notes", Query().ilike("title", "list")))
    percent = asyncio.run(store.select("notes", Query().ilike("title", "0%")))

    assert [r["title"] for r in shopping.rows] == ["Shopping LIST"]
    assert [r["title"] for r in percent.rows] == ["100% done"]


def test_ilike_folds_non_ascii_case(store):
    _insert_note(store, title="CAFÉ MENU")
    _insert_note(store, title="Straße")
    _insert_note(store, title="cafe")

    cafe = asyncio.run(store.select("notes", Query().ilike("title", "café")))
    strasse = asyncio.run(store.select("notes", Query().ilike("title", "STRASSE")))

    assert [r["title"] for r in cafe.rows] == ["CAFÉ MENU"]
    assert [r["title"] for r in strasse.rows] == ["Straße"]


def test_or_groups_combine_with_top_level_conditions(store):
    _insert_note(store, title="alpha", content="x")
    _insert_note(store, title="beta", content="alpha inside")
    _insert_note(store, title="alpha", content="x", created_by="bob")

    query = Query().eq("created_by", "alice").or_(
        Query().ilike("title", "alpha"), Query().ilike("content", "alpha")
    )
    result = asyncio.run(store.select("notes", query))

    assert sorted(r["title"] for r in result.rows) == ["alpha", "beta"]


def test_range_returns_slice_with_exact_total(store):
    for i in range(5):
        _insert_note(store, title=f"note {i}")

    result = asyncio.run(
        store.select("notes", Query().order("title").range(1, 2), count=True)
    )

    assert [r["title"] for r in result.rows] == ["note 1", "note 2"]
    assert result.total == 5


def test_json_array_operators(store):
    _insert_note(store, title="one", tags=["work", "urgent"], shared_with=["bob"])
    _insert_note(store, title="two", tags=["home"])

    def titles(query):
        return sorted(r["title"] for r in asyncio.run(store.select("notes", query)).rows)

    assert titles(Query().contains("tags", ["work", "urgent"])) == ["one"]
    assert titles(Query().contains("tags", ["work", "home"])) == []
    assert titles(Query().overlaps("tags", ["home", "urgent"])) == ["one", "two"]
    assert titles(Query().is_empty("shared_with")) == ["two"]
    assert titles(Query().is_empty("shared_with", False)) == ["one"]


def test_update_refreshes_updated_at_and_returns_rows(store):
    row = _insert_note(store, title="before")

    rows = asyncio.run(store.update("notes", {"title": "after"}, Query().eq("id", row["id"])))

    assert [r["title"] for r in rows] == ["after"]
    assert rows[0]["updated_at"] >= row["updated_at"]
    assert rows[0]["created_at"] == row["created_at"]


def test_unfiltered_writes_are_refused(store):
    with pytest.raises(StoreError):
        asyncio.run(store.update("notes", {"title": "x"}, Query()))
    with pytest.raises(StoreError):
        asyncio.run(store.delete("notes", Query()))


def test_select_one_miss_has_not_found_code(store):
    with pytest.raises(RecordNotFoundError) as exc_info:
        asyncio.run(store.select_one("notes", Query().eq("id", "missing")))

    assert exc_info.value.code == NOT_FOUND


def test_unknown_column_is_rejected(store):
    with pytest.raises(StoreError) as exc_info:
        asyncio.run(store.select("notes", Query().order("title; DROP TABLE notes")))

    assert exc_info.value.code == INVALID_IDENTIFIER


def test_delete_and_count(store):
    keep = _insert_note(store, title="keep")
    drop = _insert_note(store, title="drop")

    deleted = asyncio.run(store.delete("notes", Query().in_("id", [drop["id"], "missing"])))

    assert deleted == 1
    assert asyncio.run(store.count("notes")) == 1
    assert asyncio.run(store.select_one("notes", Query().eq("id", keep["id"])))["title"] == "keep"
