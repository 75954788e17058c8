# conciliador/view_engine.py
# Search / column filters / single-key sort over the consolidated entities.
# The table and the CSV export both read the sequence produced here.

import dataclasses
from dataclasses import dataclass
from enum import Enum

from .data_utils import natural_key

ALL = 'all'
YES = 'sim'
NO  = 'nao'

ASC  = 'asc'
DESC = 'desc'

# Filters compared against the enum value / raw text of the entity attribute
_ENUM_FILTERS = ('senior_origin', 'diagnosis', 'area_gestta', 'area_questor', 'area_check')
_BOOL_FILTERS = ('questor', 'senior')


@dataclass(frozen=True)
class ColumnFilters:
    id: str = ''
    name: str = ''
    questor: str = ALL
    senior: str = ALL
    senior_origin: str = ALL
    gestta: str = ALL
    diagnosis: str = ALL
    area_gestta: str = ALL
    area_questor: str = ALL
    area_check: str = ALL

    def is_active(self):
        return self != ColumnFilters()

    def replace(self, **changes):
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class SortConfig:
    key: str = 'name'
    direction: str = ASC


def toggle_sort(config, key):
    """Same column flips the direction; a new column starts ascending."""
    if config.key == key and config.direction == ASC:
        return SortConfig(key, DESC)
    return SortConfig(key, ASC)


def _text(val):
    return val.value if isinstance(val, Enum) else str(val)


def matches_search(entity, term):
    if not term:
        return True
    term = term.lower()
    return term in entity.name.lower() or term in entity.id


def matches_filters(entity, filters):
    if filters.id and filters.id not in entity.id:
        return False
    if filters.name and filters.name.lower() not in entity.name.lower():
        return False
    for col in _BOOL_FILTERS:
        wanted = getattr(filters, col)
        if wanted != ALL and getattr(entity, col) != (wanted == YES):
            return False
    if filters.gestta != ALL and entity.gestta.lower() != filters.gestta:
        return False
    for col in _ENUM_FILTERS:
        wanted = getattr(filters, col)
        if wanted != ALL and _text(getattr(entity, col)) != wanted:
            return False
    return True


def sort_key(entity, key):
    val = getattr(entity, key)
    if isinstance(val, bool):
        val = int(val)
    elif val is None:
        val = ''
    return natural_key(_text(val))


def sort_entities(entities, config):
    if not config or not config.key:
        return list(entities)
    return sorted(entities, key=lambda e: sort_key(e, config.key),
                  reverse=config.direction == DESC)


def build_view(entities, search='', filters=None, sort=None):
    """Filtered + sorted sequence, exactly what is displayed and exported."""
    filters = filters or ColumnFilters()
    items = [e for e in entities if matches_search(e, search) and matches_filters(e, filters)]
    return sort_entities(items, sort)


def filter_options(entities, column):
    """Distinct values for a select box; 'all' first."""
    if column in _BOOL_FILTERS:
        return [ALL, YES, NO]
    if column == 'gestta':
        values = {e.gestta.lower() for e in entities}
    else:
        values = {_text(getattr(e, column)) for e in entities}
    return [ALL] + sorted((v for v in values if v), key=natural_key)
