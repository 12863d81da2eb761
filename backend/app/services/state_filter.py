from collections.abc import Iterable

from app.models.advert import Advert

STATES_PER_ROW = 6


def advert_states(adverts: Iterable[Advert]) -> list[str]:
    return [location.state for advert in adverts for location in advert.locations if location.state]


def group_states(states: Iterable[str], per_row: int = STATES_PER_ROW) -> list[list[str]]:
    """Deduplicate, sort and chunk states into display rows."""
    unique = sorted(set(states))
    return [unique[i:i + per_row] for i in range(0, len(unique), per_row)]


def state_selector(states: Iterable[str], selected: str | None = None,
                   per_row: int = STATES_PER_ROW) -> list[list[dict]]:
    return [
        [{"state": state, "selected": state == selected} for state in row]
        for row in group_states(states, per_row)
    ]
