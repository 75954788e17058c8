"""
Tests for the CSV / Excel export of the current view.
"""

import csv
import io

import pandas as pd

from conciliador.core_engine import build_consolidated
from conciliador.report_gen import export_csv, export_filename, generate_excel
from conciliador.view_engine import ColumnFilters, SortConfig, build_view

HEADER = ["Documento", "Empresa", "Questor", "Sênior", "Origem Fat.", "Gestta",
          "Diagnóstico", "Área Gestta", "Área Questor", "Confronto"]


def read_back(payload):
    text = payload.decode("utf-8-sig")
    return list(csv.reader(io.StringIO(text)))


def test_bom_header_and_booleans(make_state):
    state = make_state(
        questor=[{"INSCRFEDERAL": "12.345.678/0001-99", "NOMEEMPRESA": "ACME", "ESPECIEESTAB": "INTEGRADA"}],
        senior=[{"CNPJ": "12345678000199"}],
    )
    payload = export_csv(build_consolidated(state))
    assert payload.startswith("\ufeff".encode("utf-8"))
    assert b"\r\n" not in payload

    rows = read_back(payload)
    assert rows[0] == HEADER
    assert rows[1] == ["12345678000199", "ACME", "Sim", "Sim", "Direct", "AUSENTE",
                       "Divergente", "", "Integrada", "Falta Gestta"]


def test_quoting_of_special_values(make_state):
    state = make_state(questor=[
        {"INSCRFEDERAL": "1", "NOMEEMPRESA": 'ACME, "Filial"'},
        {"INSCRFEDERAL": "2", "NOMEEMPRESA": "Linha\nDupla"},
    ])
    payload = export_csv(build_consolidated(state))
    text = payload.decode("utf-8-sig")
    assert '"ACME, ""Filial"""' in text
    assert '"Linha\nDupla"' in text
    rows = read_back(payload)
    assert rows[1][1] == 'ACME, "Filial"'
    assert rows[2][1] == "Linha\nDupla"
    assert rows[1][3] == "Não"


def test_filtered_view_round_trip(make_state):
    state = make_state(
        questor=[{"INSCRFEDERAL": str(n), "NOMEEMPRESA": f"Cliente {n}, Ltda"} for n in range(1, 8)],
        senior=[{"CNPJ": str(n)} for n in range(1, 8, 2)],
    )
    entities = build_consolidated(state)
    view = build_view(entities, "", ColumnFilters(senior="sim"), SortConfig("id", "desc"))
    rows = read_back(export_csv(view))

    assert len(rows) - 1 == len(view) == 4
    assert [r[0] for r in rows[1:]] == ["7", "5", "3", "1"]
    assert [r[1] for r in rows[1:]] == [e.name for e in view]


def test_empty_view_has_only_header():
    rows = read_back(export_csv([]))
    assert rows == [HEADER]


def test_export_filename():
    assert export_filename() == "confronto_clientes.csv"
    assert export_filename("base", "xlsx") == "base.xlsx"


def test_excel_workbook(make_state):
    state = make_state(
        questor=[{"INSCRFEDERAL": "12345678000199", "NOMEEMPRESA": "ACME"}],
        gestta=[{"CNPJ": "98765432000100", "Ativo/inativo": "Ativo", "Nome": "Beta #0"}],
    )
    entities = build_consolidated(state)
    payload = generate_excel(entities)
    assert payload[:2] == b"PK"

    sheets = pd.read_excel(io.BytesIO(payload), sheet_name=None, dtype=str)
    assert set(sheets) == {"Confronto", "Resumo"}
    confronto = sheets["Confronto"].fillna("")
    assert list(confronto.columns) == HEADER
    assert confronto["Documento"].tolist() == ["12345678000199", "98765432000100"]


def test_no_terminator_after_last_row(make_state):
    state = make_state(questor=[{"INSCRFEDERAL": "1", "NOMEEMPRESA": "A"},
                                {"INSCRFEDERAL": "2", "NOMEEMPRESA": "B"}])
    text = export_csv(build_consolidated(state)).decode("utf-8-sig")
    assert not text.endswith("\n")
    assert text.count("\n") == 2
    assert export_csv([]).decode("utf-8-sig") == ",".join(HEADER)
