from __future__ import annotations

from agent_hub.services.database import Filter
from agent_hub.services.resolver import not_found, resolve, search_terms


def test_search_terms_try_compact_then_digits() -> None:
    assert search_terms("Smith") == ["Smith"]
    assert search_terms("512-555-0142") == ["512-555-0142", "5125550142"]
    assert search_terms("(512) 555-0142") == ["(512) 555-0142", "(512)5550142", "5125550142"]


def test_partial_name_match_is_case_insensitive(seed, with_store) -> None:
    seed("leads", name="John Smith", status="contacted")
    seed("leads", name="Priya Patel", status="new")

    lead = with_store(lambda store: resolve(store, "lead", text="smith"))

    assert lead["name"] == "John Smith"


def test_ties_go_to_most_recently_updated(seed, with_store) -> None:
    seed("leads", age=60, name="John Older")
    newer = seed("leads", age=5, name="John Newer")

    lead = with_store(lambda store: resolve(store, "lead", text="John"))

    assert lead["id"] == newer["id"]


def test_latest_and_oldest_tokens_use_creation_order(seed, with_store) -> None:
    seed("projects", age=300, name="Oldest Job")
    seed("projects", age=100, name="Middle Job")
    seed("projects", age=1, name="Newest Job")

    latest = with_store(lambda store: resolve(store, "project", text="Most Recent"))
    oldest = with_store(lambda store: resolve(store, "project", text="first"))

    assert latest["name"] == "Newest Job"
    assert oldest["name"] == "Oldest Job"


def test_phone_typed_with_separators_matches_compact_value(seed, with_store) -> None:
    seed("leads", name="Ana Ruiz", phone="5125550190")

    lead = with_store(lambda store: resolve(store, "lead", text="512-555-0190"))

    assert lead["name"] == "Ana Ruiz"


def test_number_fragment_falls_back_to_digits(seed, with_store) -> None:
    seed("projects", name="Main Street Reroof", address="1234 Main St")
    seed("projects", name="Lakeway Clubhouse", address="77 Lakeway Dr")

    project = with_store(lambda store: resolve(store, "project", text="project 1234"))

    assert project["name"] == "Main Street Reroof"


def test_key_lookup_and_extra_filters(seed, with_store) -> None:
    member = seed("team_directory", full_name="Ben Foster", status="inactive")

    by_key = with_store(lambda store: resolve(store, "employee", key=member["user_id"]))
    active_only = with_store(
        lambda store: resolve(store, "employee", text="Ben", filters=[Filter("status", "neq", "inactive")])
    )

    assert by_key["full_name"] == "Ben Foster"
    assert active_only is None


def test_miss_returns_none_and_not_found_names_entity(db_path, with_store) -> None:
    assert with_store(lambda store: resolve(store, "invoice", text="INV-404")) is None
    assert with_store(lambda store: resolve(store, "invoice", text="   ")) is None
    assert not_found("invoice", "INV-404") == {"success": False, "error": "Invoice not found: INV-404"}
