# conciliador/indexer.py
from dataclasses import dataclass
from typing import Dict, FrozenSet

from .data_utils import head_office_prefix


@dataclass(frozen=True)
class SourceIndexes:
    questor: Dict[str, object]
    senior: Dict[str, object]
    gestta: Dict[str, object]
    head_office_prefixes: FrozenSet[str]

    def all_ids(self):
        """Union of every indexed id: Questor order first, then Sênior, then Gestta."""
        return list(dict.fromkeys([*self.questor, *self.senior, *self.gestta]))


def index_records(records):
    """Maps normalized id -> record. Later rows win; rows without an id are dropped."""
    index = {}
    for rec in records:
        doc_id = rec.doc_id
        if doc_id:
            index[doc_id] = rec
    return index


def build_indexes(questor, senior, gestta):
    senior_index = index_records(senior)
    prefixes = frozenset(p for p in map(head_office_prefix, senior_index) if p)
    return SourceIndexes(
        questor=index_records(questor),
        senior=senior_index,
        gestta=index_records(gestta),
        head_office_prefixes=prefixes,
    )
