# conciliador/data_utils.py
import re
import unicodedata
import pandas as pd

_NON_DIGIT = re.compile(r'\D')
_GESTTA_AREA_MARK = re.compile(r'#\s*(0|1)\s*$')
_DIGIT_RUN = re.compile(r'(\d+)')

HEAD_OFFICE_LEN = 8


def safe_string(val):
    """Best-effort string: None, NaN and container values become ''."""
    if val is None:
        return ''
    if isinstance(val, (dict, list, tuple, set)):
        return ''
    try:
        if pd.isna(val): return ''
    except (TypeError, ValueError):
        pass
    return str(val)


def normalize_id(val):
    """Keeps ONLY ASCII digits. '12.345.678/0001-99' -> '12345678000199'."""
    text = safe_string(val)
    if not text:
        return ''
    return _NON_DIGIT.sub('', text.encode('ascii', 'ignore').decode())


def head_office_prefix(doc_id):
    """First 8 digits of a CNPJ (the 'raiz'), or '' when the id is too short."""
    if len(doc_id) < HEAD_OFFICE_LEN:
        return ''
    return doc_id[:HEAD_OFFICE_LEN]


def strip_accents(text):
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_specie(val):
    """Uppercase, accent-free, single-spaced version of Questor's ESPECIEESTAB."""
    norm = strip_accents(safe_string(val).upper())
    return re.sub(r'\s+', ' ', norm).strip()


def gestta_area_code(name):
    """Returns '0' / '1' from the trailing '#0' / '#1' marker of a Gestta name."""
    match = _GESTTA_AREA_MARK.search(safe_string(name))
    return match.group(1) if match else ''


def natural_key(val):
    """
    Sort key close to localeCompare(numeric=True, sensitivity='base'):
    accents and case are ignored, digit runs compare as numbers.
    """
    text = strip_accents(safe_string(val)).casefold()
    parts = _DIGIT_RUN.split(text)
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts))
