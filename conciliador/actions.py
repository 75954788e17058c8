# conciliador/actions.py
"""
Operator actions. Each one takes the current AppState and returns
(new_state, AuditEntry); nothing here touches storage or the screen.
Callers must rebuild the consolidated view afterwards (see ReconSession).
"""

import logging
import time
import uuid
import datetime

from .constants import (SYSTEM_USER, ACTION_LOGIN, ACTION_IMPORT, ACTION_CLEAR,
                        ACTION_LINK, ACTION_UNLINK, ACTION_MATRIX)
from .data_utils import safe_string
from .file_loader import merge_new_records
from .models import AuditEntry, Source

logger = logging.getLogger(__name__)


class LoginError(ValueError):
    pass


def make_entry(action, details, user=None):
    return AuditEntry(
        id=f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}",
        user=safe_string(user) or SYSTEM_USER,
        action=safe_string(action),
        details=safe_string(details),
        timestamp=datetime.datetime.now().isoformat(),
    )


def login(name):
    """Validates the operator name and returns (clean name, AuditEntry)."""
    name = safe_string(name).strip()
    if not name:
        raise LoginError('Informe seu nome para entrar.')
    logger.info("Operator %s logged in", name)
    return name, make_entry(ACTION_LOGIN, f'Utilizador "{name}" acedeu ao sistema.', name)


def import_records(state, source, rows, user=None):
    source = Source(source)
    merged, added = merge_new_records(state.records(source), rows, source)
    logger.info("Imported %d of %d rows into %s", added, len(rows), source.value)
    entry = make_entry(ACTION_IMPORT,
                       f'Adicionados {added} registos no sistema {source.value.upper()}.', user)
    return state.evolve(**{source.value: merged}), entry


def clear_source(state, source, user=None):
    source = Source(source)
    logger.info("Clearing %s base (%d records)", source.value, len(state.records(source)))
    entry = make_entry(ACTION_CLEAR, f'A base do sistema {source.value.upper()} foi limpa.', user)
    return state.evolve(**{source.value: ()}), entry


def assign_payer(state, doc_ids, payer_id, user=None):
    """Links every selected CNPJ to the same payer (replaces previous links)."""
    payer_id = safe_string(payer_id)
    doc_ids = list(doc_ids)
    overrides = dict(state.payer_overrides)
    for doc_id in doc_ids:
        overrides[doc_id] = payer_id
    logger.info("Linked %d clients to payer %s", len(doc_ids), payer_id)
    entry = make_entry(ACTION_LINK,
                       f'{len(doc_ids)} clientes vinculados ao pagador {payer_id}.', user)
    return state.evolve(payer_overrides=overrides), entry


def remove_payer(state, doc_id, user=None):
    overrides = dict(state.payer_overrides)
    overrides.pop(doc_id, None)
    logger.info("Removed payer link of %s", doc_id)
    entry = make_entry(ACTION_UNLINK, f'Vínculo manual removido do cliente {doc_id}.', user)
    return state.evolve(payer_overrides=overrides), entry


def toggle_matrix_exclusion(state, doc_id, user=None):
    exclusions = set(state.matrix_exclusions)
    if doc_id in exclusions:
        exclusions.discard(doc_id)
        details = f'Regra de 8 dígitos reativada para o cliente {doc_id}.'
    else:
        exclusions.add(doc_id)
        details = f'Regra de 8 dígitos desativada para o cliente {doc_id}.'
    logger.info("Matrix rule toggled for %s (excluded=%s)", doc_id, doc_id in exclusions)
    entry = make_entry(ACTION_MATRIX, details, user)
    return state.evolve(matrix_exclusions=frozenset(exclusions)), entry
