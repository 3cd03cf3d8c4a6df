"""Search and categorical filters for admin listings.

Filters are pure predicates over records (dataclasses or dicts) and are
always applied to the full source list, so narrowing then widening a
search gives the original list back in its original order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

ALL = 'all'

SEARCH_FIELDS: Dict[str, Sequence[str]] = {
    'users': ('name', 'email'),
    'consultants': ('name', 'email'),
    'channels': ('name', 'description', 'contact_person'),
    'clients': ('name', 'email', 'company', 'contact_person'),
    'projects': ('channel_name', 'client_name', 'product', 'consultant_names'),
    'demands': ('title', 'client', 'description'),
    'approvals': ('consultant_name', 'demand_title', 'description'),
}


def _value(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple, set)):
        return ' '.join(_text(v) for v in value)
    return str(getattr(value, 'value', value))


def matches_search(record: Any, term: Optional[str], fields: Iterable[str]) -> bool:
    """Case-insensitive substring match against any of ``fields``.

    Empty terms match everything; missing fields never match.
    """
    needle = (term or '').lower()
    if not needle:
        return True
    return any(needle in _text(_value(record, f)).lower() for f in fields)


def matches_category(value: Any, selected: Any) -> bool:
    """Exact match on a vocabulary value; ``None`` or ``"all"`` pass."""
    if selected is None or selected == ALL:
        return True
    return _text(value) == _text(selected)


def matches_active(is_active: Any, selected: Optional[str]) -> bool:
    if selected is None or selected == ALL:
        return True
    if selected == 'active':
        return bool(is_active)
    if selected == 'inactive':
        return not is_active
    raise ValueError(f'Unknown active filter: {selected}')


@dataclass(frozen=True)
class ListFilter:
    """Conjunction of a search term, categorical filters and an active flag.

    Example: ``ListFilter.for_entity('users', search='ana', role='admin').apply(users)``
    """
    search: str = ''
    fields: Sequence[str] = ()
    categories: Dict[str, Any] = field(default_factory=dict)
    active: Optional[str] = ALL

    @classmethod
    def for_entity(cls, entity: str, search: str = '', active: Optional[str] = ALL, **categories) -> 'ListFilter':
        return cls(search=search or '', fields=SEARCH_FIELDS[entity], categories=categories, active=active)

    def matches(self, record: Any) -> bool:
        if not matches_search(record, self.search, self.fields):
            return False
        for name, selected in self.categories.items():
            if not matches_category(_value(record, name), selected):
                return False
        if self.active not in (None, ALL):
            return matches_active(_value(record, 'is_active'), self.active)
        return True

    def apply(self, records: Iterable[Any]) -> List[Any]:
        return [r for r in records if self.matches(r)]
