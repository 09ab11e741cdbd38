import asyncio

from schemas import SearchQuery
from search_history import MAX_RECENT_SEARCHES, get_search_history, save_search_history


def run(coro):
    return asyncio.run(coro)


def query(origin="JFK", destination="LAX", depart_date="2030-01-01", **overrides):
    return SearchQuery(origin=origin, destination=destination, depart_date=depart_date, **overrides)


def test_empty_history(repo):
    assert run(get_search_history(repo, "u1")) == []


def test_saved_search_roundtrip(repo):
    run(save_search_history(repo, "u1", query(return_date="2030-01-08", passengers="2", cabin_class="business")))
    [item] = run(get_search_history(repo, "u1"))
    assert item.id.startswith("search-")
    assert item.return_date == "2030-01-08"
    assert item.passengers == "2"
    assert item.cabin_class == "business"
    assert item.search_date


def test_repeated_search_moves_to_front(repo):
    run(save_search_history(repo, "u1", query()))
    run(save_search_history(repo, "u1", query(destination="SFO")))
    run(save_search_history(repo, "u1", query(passengers="3")))
    history = run(get_search_history(repo, "u1"))
    assert [h.destination for h in history] == ["LAX", "SFO"]
    assert history[0].passengers == "3"


def test_history_is_capped_most_recent_first(repo):
    for day in range(1, 7):
        run(save_search_history(repo, "u1", query(depart_date=f"2030-01-0{day}")))
    history = run(get_search_history(repo, "u1"))
    assert len(history) == MAX_RECENT_SEARCHES
    assert [h.depart_date for h in history] == [f"2030-01-0{day}" for day in range(6, 1, -1)]


def test_history_is_per_user(repo):
    run(save_search_history(repo, "u1", query()))
    run(save_search_history(repo, "u2", query(origin="BOS")))
    assert [h.origin for h in run(get_search_history(repo, "u1"))] == ["JFK"]
    assert [h.origin for h in run(get_search_history(repo, "u2"))] == ["BOS"]


def test_without_storage(offline_repo):
    run(save_search_history(offline_repo, "u1", query()))
    assert run(get_search_history(offline_repo, "u1")) == []
