# conciliador/models.py
# Typed shapes shared by the engine, the store and the UI.

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from .constants import QUESTOR_FIELDS, SENIOR_FIELDS, GESTTA_FIELDS
from .data_utils import safe_string, normalize_id


class Source(str, Enum):
    QUESTOR = 'questor'
    SENIOR  = 'senior'
    GESTTA  = 'gestta'


class BillingOrigin(str, Enum):
    DIRECT   = 'Direct'
    MANUAL   = 'Manual'
    MATRIZ   = 'Matriz'
    IGNORADO = 'Ignorado'
    AUSENTE  = 'Ausente'


class Diagnosis(str, Enum):
    CONSISTENTE    = 'Consistente'
    FALTA_QUESTOR  = 'Falta Cadastro Questor'
    INATIVO        = 'Cliente Inativo (Baixa)'
    DIVERGENTE     = 'Divergente'


class Area(str, Enum):
    IN_COMPANY = 'In Company'
    INTEGRADA  = 'Integrada'
    UNKNOWN    = ''


class AreaVerdict(str, Enum):
    OK            = 'OK'
    DIVERGENTE    = 'Divergente'
    FALTA_QUESTOR = 'Falta Questor'
    FALTA_GESTTA  = 'Falta Gestta'
    FALTA_AMBOS   = 'Falta Gestta/Questor'


def _pick(row, names):
    """First non-empty value among the candidate column names."""
    for name in names:
        val = safe_string(row.get(name))
        if val:
            return val
    return ''


def _clean_row(row):
    return {safe_string(k): safe_string(v) for k, v in row.items()}


# ── Source records ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class QuestorRecord:
    tax_id: str = ''
    name: str = ''
    code: str = ''
    especie: str = ''
    raw: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row):
        return cls(**{k: _pick(row, names) for k, names in QUESTOR_FIELDS.items()},
                   raw=_clean_row(row))

    @property
    def doc_id(self):
        return normalize_id(self.tax_id)


@dataclass(frozen=True)
class SeniorRecord:
    tax_id: str = ''
    name: str = ''
    code: str = ''
    raw: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row):
        return cls(**{k: _pick(row, names) for k, names in SENIOR_FIELDS.items()},
                   raw=_clean_row(row))

    @property
    def doc_id(self):
        return normalize_id(self.tax_id)


@dataclass(frozen=True)
class GesttaRecord:
    tax_id: str = ''
    name: str = ''
    status: str = ''
    code: str = ''
    raw: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row):
        return cls(**{k: _pick(row, names) for k, names in GESTTA_FIELDS.items()},
                   raw=_clean_row(row))

    @property
    def doc_id(self):
        return normalize_id(self.tax_id)


RECORD_TYPES = {
    Source.QUESTOR: QuestorRecord,
    Source.SENIOR:  SeniorRecord,
    Source.GESTTA:  GesttaRecord,
}


RECORD_FIELDS = {
    Source.QUESTOR: QUESTOR_FIELDS,
    Source.SENIOR:  SENIOR_FIELDS,
    Source.GESTTA:  GESTTA_FIELDS,
}


def record_from_row(source, row):
    return RECORD_TYPES[Source(source)].from_row(row)


def record_to_row(source, rec):
    """Original row when there is one, else the typed fields under their main column name."""
    if rec.raw:
        return dict(rec.raw)
    fields = RECORD_FIELDS[Source(source)]
    return {names[0]: getattr(rec, key) for key, names in fields.items()}


# ── Engine results ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Attribution:
    has_direct: bool
    has_group: bool
    has_manual: bool
    is_excluded: bool
    origin: BillingOrigin

    @property
    def covered(self) -> bool:
        return self.has_direct or self.has_group or self.has_manual


@dataclass(frozen=True)
class ConsolidatedEntity:
    id: str
    name: str
    questor: bool
    senior: bool
    senior_origin: BillingOrigin
    gestta: str
    diagnosis: Diagnosis
    area_gestta: Area
    area_questor: Area
    area_check: AreaVerdict
    payer_id: Optional[str] = None
    is_direct_senior: bool = False
    is_excluded: bool = False
    questor_code: str = ''
    senior_code: str = ''
    gestta_code: str = ''


# ── Application state ────────────────────────────────────────────────────────
@dataclass(frozen=True)
class AppState:
    """
    Immutable snapshot of everything the engine reads.
    Every operator action returns a new snapshot with version + 1.
    """
    questor: Tuple[QuestorRecord, ...] = ()
    senior: Tuple[SeniorRecord, ...] = ()
    gestta: Tuple[GesttaRecord, ...] = ()
    payer_overrides: Dict[str, str] = field(default_factory=dict)
    matrix_exclusions: FrozenSet[str] = frozenset()
    version: int = 0

    def records(self, source):
        return getattr(self, Source(source).value)

    def evolve(self, **changes):
        changes.setdefault('version', self.version + 1)
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class AuditEntry:
    id: str
    user: str
    action: str
    details: str
    timestamp: str
