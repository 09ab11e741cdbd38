import logging
from datetime import datetime, timezone
from typing import List

from codes import timestamp_id
from database import RECENT_SEARCHES, Repository
from schemas import SearchHistoryItem, SearchQuery

logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 5


def _same_trip(row: dict, item: SearchHistoryItem) -> bool:
    return (
        row.get("origin") == item.origin
        and row.get("destination") == item.destination
        and row.get("departDate") == item.depart_date
    )


def _push(repo: Repository, user_id: str, item: SearchHistoryItem) -> None:
    with repo.collection(RECENT_SEARCHES) as searches:
        history = [row for row in searches.get(user_id, []) if not _same_trip(row, item)]
        history.insert(0, item.to_store())
        searches[user_id] = history[:MAX_RECENT_SEARCHES]


async def save_search_history(repo: Repository, user_id: str, search: SearchQuery) -> None:
    """Put a search at the front of the user's history, dropping an older copy of it."""
    if not repo.available:
        return
    await repo.pause("save_search_history")

    item = SearchHistoryItem(
        **search.model_dump(),
        id=timestamp_id("search-"),
        search_date=datetime.now(timezone.utc).isoformat(),
    )
    await repo.run(_push, repo, user_id, item)
    logger.debug("Saved search %s -> %s for user %s", item.origin, item.destination, user_id)


async def get_search_history(repo: Repository, user_id: str) -> List[SearchHistoryItem]:
    if not repo.available:
        return []
    await repo.pause("get_search_history")
    searches = await repo.run(repo.read, RECENT_SEARCHES)
    return [SearchHistoryItem(**row) for row in searches.get(user_id, [])]
