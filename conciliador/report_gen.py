# conciliador/report_gen.py
import io
import pandas as pd

from .constants import EXPORT_COLUMNS, BOOL_LABELS, DEFAULT_EXPORT_NAME
from .core_engine import to_frame, summarize

BOM = '\ufeff'


def export_frame(entities):
    """Entities laid out with the fixed export headers, booleans as Sim/Não."""
    df = to_frame(entities)
    out = pd.DataFrame({header: df[attr] for header, attr in EXPORT_COLUMNS},
                       columns=[h for h, _ in EXPORT_COLUMNS])
    for header in ('Questor', 'Sênior'):
        out[header] = out[header].map(BOOL_LABELS)
    return out.fillna('').astype(str)


def export_csv(entities):
    """
    UTF-8 CSV with BOM (Excel-friendly). Values with comma, quote or newline
    are quoted and inner quotes doubled. Rows keep the order received.
    """
    buf = io.StringIO()
    export_frame(entities).to_csv(buf, index=False, lineterminator='\n')
    text = buf.getvalue()
    # rows are joined by \n, no terminator after the last one
    if text.endswith('\n'):
        text = text[:-1]
    return (BOM + text).encode('utf-8')


def export_filename(base=DEFAULT_EXPORT_NAME, ext='csv'):
    return f"{base or DEFAULT_EXPORT_NAME}.{ext}"


def generate_excel(entities):
    output = io.BytesIO()
    df = export_frame(entities)
    summary = summarize(entities)

    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        wb = writer.book
        fmt_hdr  = wb.add_format({'bold': True, 'bg_color': '#4472C4', 'font_color': 'white',
                                  'border': 1, 'align': 'center', 'valign': 'vcenter'})
        fmt_ok   = wb.add_format({'font_color': '#2e7d32', 'bold': True})
        fmt_warn = wb.add_format({'font_color': '#C00000', 'bold': True})

        # ── Sheet 1: Confronto ────────────────────────────────────────────────
        df.to_excel(writer, index=False, sheet_name='Confronto', startrow=1, header=False)
        ws = writer.sheets['Confronto']
        for col_num, header in enumerate(df.columns):
            ws.write(0, col_num, header, fmt_hdr)
        ws.freeze_panes(1, 0)
        ws.autofilter(0, 0, max(len(df), 1), len(df.columns) - 1)
        ws.set_column(0, 0, 20)
        ws.set_column(1, 1, 45)
        ws.set_column(2, len(df.columns) - 1, 16)

        if len(df):
            diag_col = df.columns.get_loc('Diagnóstico')
            last_row = len(df)
            ws.conditional_format(1, diag_col, last_row, diag_col,
                                  {'type': 'cell', 'criteria': '==',
                                   'value': '"Consistente"', 'format': fmt_ok})
            ws.conditional_format(1, diag_col, last_row, diag_col,
                                  {'type': 'cell', 'criteria': '!=',
                                   'value': '"Consistente"', 'format': fmt_warn})

        # ── Sheet 2: Resumo ───────────────────────────────────────────────────
        row = 0
        ws_sum = wb.add_worksheet('Resumo')
        ws_sum.write(row, 0, 'Total de clientes', fmt_hdr)
        ws_sum.write(row, 1, summary['total'])
        row += 2
        for title, key in (('Diagnóstico', 'diagnosis'), ('Confronto de Área', 'area_check'),
                           ('Origem Fat.', 'senior_origin')):
            ws_sum.write(row, 0, title, fmt_hdr)
            ws_sum.write(row, 1, 'Qtd.', fmt_hdr)
            for _, rec in summary[key].iterrows():
                row += 1
                ws_sum.write(row, 0, rec['Status'] or '(vazio)')
                ws_sum.write(row, 1, int(rec['Count']))
            row += 2
        ws_sum.set_column(0, 0, 30)

    return output.getvalue()
