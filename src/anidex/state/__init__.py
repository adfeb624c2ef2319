"""Observable state machines for list browsing, search and the detail view.

Each machine holds an immutable snapshot, exposes it as ``.state`` and
publishes every new snapshot to its subscribers.
"""

from anidex.state.detail import AnimeDetailLoader, DetailState
from anidex.state.paginated import ListState, PaginatedList, Phase
from anidex.state.search import DebounceTimer, SearchSession, SearchState

__all__ = [
    "AnimeDetailLoader",
    "DebounceTimer",
    "DetailState",
    "ListState",
    "PaginatedList",
    "Phase",
    "SearchSession",
    "SearchState",
]
