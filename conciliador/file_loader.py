# conciliador/file_loader.py
# Turns uploaded Questor / Sênior / Gestta exports into plain {column: text} rows.
# Everything that reaches the engine is already decoded, split and trimmed.

import csv
import zipfile
import io
import logging
import pandas as pd

from .constants import TEXT_SEPARATORS, EXCEL_EXTENSIONS
from .data_utils import safe_string
from .models import Source, record_from_row

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = '\ufffd'


class IngestionError(ValueError):
    def __init__(self, filename, cause):
        self.filename = filename
        self.cause = cause
        super().__init__(f"Não foi possível ler '{filename}': {cause}")


def decode_text(raw):
    """UTF-8 first; any replacement char means it was really a Windows-1252 export."""
    text = raw.decode('utf-8-sig', errors='replace')
    if REPLACEMENT_CHAR in text:
        logger.info("Invalid UTF-8 sequence found, decoding as cp1252")
        text = raw.decode('cp1252', errors='replace')
    return text


def _strip_quotes(val):
    """Trim, then drop one leading and one trailing double quote."""
    val = safe_string(val).strip()
    if val.startswith('"'):
        val = val[1:]
    if val.endswith('"'):
        val = val[:-1]
    return val


def _clean_frame(df):
    df = df.fillna('')
    df.columns = [safe_string(c).strip().replace('"', '') for c in df.columns]
    return df.apply(lambda col: col.map(_strip_quotes))


def parse_text(text, source):
    """
    Questor: pipe separated, no quoting.
    Sênior / Gestta: comma separated with "quoted, fields".
    Extra fields on a row are dropped, missing ones become ''.
    """
    source = Source(source)
    sep = TEXT_SEPARATORS[source.value]
    if not text.strip():
        return pd.DataFrame()

    n_cols = len(text.lstrip().splitlines()[0].split(sep))
    df = pd.read_csv(
        io.StringIO(text),
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
        quoting=csv.QUOTE_NONE if source == Source.QUESTOR else csv.QUOTE_MINIMAL,
        engine='python',
        on_bad_lines=lambda fields: fields[:n_cols],
    )
    return _clean_frame(df)


def parse_excel(raw):
    df = pd.read_excel(io.BytesIO(raw), sheet_name=0, dtype=str)
    return _clean_frame(df)


def load_file(filename, raw, source):
    """Reads one uploaded file into a list of row dicts."""
    if filename.lower().endswith('.xls'):
        raise IngestionError(filename, ValueError("formato .xls não suportado, salve como .xlsx"))
    try:
        if filename.lower().endswith(EXCEL_EXTENSIONS):
            df = parse_excel(raw)
        else:
            df = parse_text(decode_text(raw), source)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError, OSError,
            zipfile.BadZipFile) as e:
        logger.warning("Failed to read %s for %s: %s", filename, Source(source).value, e)
        raise IngestionError(filename, e) from e

    rows = df.to_dict(orient='records')
    logger.info("Read %d rows from %s (%s)", len(rows), filename, Source(source).value)
    return rows


def merge_new_records(existing, rows, source):
    """
    Appends rows whose CNPJ is not already loaded (earlier rows in the same
    batch count as loaded). Rows without any digits in the CNPJ are skipped.
    Returns (merged tuple, number added).
    """
    seen = {rec.doc_id for rec in existing}
    added = []
    for row in rows:
        rec = record_from_row(source, row)
        doc_id = rec.doc_id
        if not doc_id or doc_id in seen:
            continue
        seen.add(doc_id)
        added.append(rec)
    return tuple(existing) + tuple(added), len(added)
