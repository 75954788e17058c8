# conciliador/core_engine.py
# Consolidation: one row per CNPJ seen in Questor, Sênior or Gestta.
# Always a full rebuild from the current AppState, nothing is cached.

import logging
from enum import Enum
import pandas as pd

from .attribution import resolve_attribution
from .classifier import (gestta_status, is_active, diagnose,
                         gestta_area, questor_area, compare_areas)
from .constants import UNKNOWN_NAME
from .indexer import build_indexes
from .models import ConsolidatedEntity, Diagnosis, AreaVerdict, BillingOrigin

logger = logging.getLogger(__name__)


def _display_name(q, s, g):
    for rec in (q, s, g):
        if rec is not None and rec.name:
            return rec.name
    return UNKNOWN_NAME


def consolidate_one(doc_id, indexes, overrides, exclusions):
    q = indexes.questor.get(doc_id)
    s = indexes.senior.get(doc_id)
    g = indexes.gestta.get(doc_id)

    attr = resolve_attribution(doc_id, indexes.senior, indexes.head_office_prefixes,
                               overrides, exclusions)

    status = gestta_status(g.status if g else '')
    q_at   = q is not None
    g_at   = is_active(status)

    area_g = gestta_area(g.name if g else '')
    area_q = questor_area(q.especie if q else '')
    payer  = overrides.get(doc_id)

    return ConsolidatedEntity(
        id=doc_id,
        name=_display_name(q, s, g),
        questor=q_at,
        senior=attr.covered,
        senior_origin=attr.origin,
        gestta=status,
        diagnosis=diagnose(q_at, attr.covered, g_at),
        area_gestta=area_g,
        area_questor=area_q,
        area_check=compare_areas(area_g, area_q),
        payer_id=payer or None,
        is_direct_senior=attr.has_direct,
        is_excluded=attr.is_excluded,
        questor_code=q.code if q else '',
        senior_code=s.code if s else '',
        gestta_code=g.code if g else '',
    )


def build_consolidated(state):
    """Rebuilds the full consolidated view from an AppState snapshot."""
    indexes = build_indexes(state.questor, state.senior, state.gestta)
    overrides  = state.payer_overrides
    exclusions = state.matrix_exclusions

    entities = [consolidate_one(doc_id, indexes, overrides, exclusions)
                for doc_id in indexes.all_ids()]

    logger.debug(
        "Consolidated %d entities (questor=%d, senior=%d, gestta=%d, roots=%d, state v%d)",
        len(entities), len(indexes.questor), len(indexes.senior), len(indexes.gestta),
        len(indexes.head_office_prefixes), state.version)
    return entities


def to_frame(entities):
    """DataFrame view of the entities, enum members flattened to their text."""
    rows = []
    for ent in entities:
        row = {}
        for key, val in vars(ent).items():
            row[key] = val.value if isinstance(val, Enum) else val
        rows.append(row)
    columns = list(ConsolidatedEntity.__dataclass_fields__)
    return pd.DataFrame(rows, columns=columns)


def summarize(entities):
    """
    Counts for the dashboard. Every enum value is present (zero when unused)
    so charts keep a stable legend.
    """
    df = to_frame(entities)

    def _counts(col, enum_cls):
        labels = [m.value for m in enum_cls]
        counts = df[col].value_counts().reindex(labels, fill_value=0)
        out = counts.reset_index()
        out.columns = ['Status', 'Count']
        return out

    return {
        'total':         len(df),
        'diagnosis':     _counts('diagnosis', Diagnosis),
        'area_check':    _counts('area_check', AreaVerdict),
        'senior_origin': _counts('senior_origin', BillingOrigin),
    }
