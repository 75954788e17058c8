# conciliador/classifier.py
# Diagnosis across the three systems + Questor/Gestta area confrontation.

import re

from .constants import GESTTA_MISSING, GESTTA_ACTIVE
from .data_utils import safe_string, normalize_specie, gestta_area_code
from .models import Area, AreaVerdict, Diagnosis

_IN_COMPANY = re.compile(r'IN COMPANY|INCOMPANY')
_INTEGRADA  = re.compile(r'INTEGRADA|INTEGRADO|INTERNO')


def gestta_status(raw):
    return safe_string(raw) or GESTTA_MISSING


def is_active(status):
    return safe_string(status).lower() == GESTTA_ACTIVE


def diagnose(q_at, covered, g_at):
    """
    Consistent when the client is everywhere or nowhere.
    Billed + active in Gestta but missing in Questor -> needs Questor registration.
    Only in Questor -> client should be written off.
    """
    if (q_at and covered and g_at) or (not q_at and not covered and not g_at):
        return Diagnosis.CONSISTENTE
    if covered and g_at and not q_at:
        return Diagnosis.FALTA_QUESTOR
    if q_at and not covered and not g_at:
        return Diagnosis.INATIVO
    return Diagnosis.DIVERGENTE


def gestta_area(name):
    code = gestta_area_code(name)
    if code == '0':
        return Area.IN_COMPANY
    if code == '1':
        return Area.INTEGRADA
    return Area.UNKNOWN


def questor_area(especie):
    norm = normalize_specie(especie)
    if not norm:
        return Area.UNKNOWN
    if _IN_COMPANY.search(norm):
        return Area.IN_COMPANY
    if _INTEGRADA.search(norm):
        return Area.INTEGRADA
    return Area.UNKNOWN


def compare_areas(area_gestta, area_questor):
    if not area_gestta and not area_questor:
        return AreaVerdict.FALTA_AMBOS
    if not area_questor:
        return AreaVerdict.FALTA_QUESTOR
    if not area_gestta:
        return AreaVerdict.FALTA_GESTTA
    if area_gestta != area_questor:
        return AreaVerdict.DIVERGENTE
    return AreaVerdict.OK
