# conciliador/attribution.py
"""
Billing attribution (Sênior coverage) for a single CNPJ.

Coverage can come from three independent facts:
  * direct  - the CNPJ itself has a Sênior billing record
  * group   - another establishment with the same 8-digit root is billed
              (head-office rule), unless the operator excluded this CNPJ
  * manual  - an operator linked this CNPJ to a payer that is billed,
              directly or through its root. Exclusion does not apply here.

The origin tag keeps the priority Direct > Manual > Matriz > Ignorado > Ausente.
"""

from .data_utils import head_office_prefix, HEAD_OFFICE_LEN
from .models import Attribution, BillingOrigin


def _payer_is_billed(payer_id, senior_index, prefixes):
    return payer_id in senior_index or payer_id[:HEAD_OFFICE_LEN] in prefixes


def resolve_attribution(doc_id, senior_index, prefixes, overrides, exclusions):
    has_direct  = doc_id in senior_index
    is_excluded = doc_id in exclusions
    root        = head_office_prefix(doc_id)
    has_group   = bool(root) and not is_excluded and root in prefixes

    payer_id   = overrides.get(doc_id)
    has_manual = bool(payer_id) and _payer_is_billed(payer_id, senior_index, prefixes)

    if has_direct:
        origin = BillingOrigin.DIRECT
    elif has_manual:
        origin = BillingOrigin.MANUAL
    elif has_group:
        origin = BillingOrigin.MATRIZ
    elif is_excluded:
        origin = BillingOrigin.IGNORADO
    else:
        origin = BillingOrigin.AUSENTE

    return Attribution(
        has_direct=has_direct,
        has_group=has_group,
        has_manual=has_manual,
        is_excluded=is_excluded,
        origin=origin,
    )
