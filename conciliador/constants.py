# conciliador/constants.py

# ── Field names in each system's export ──────────────────────────────────────
# Each value lists the accepted column names in priority order.
QUESTOR_FIELDS = {
    'tax_id':  ['INSCRFEDERAL'],
    'name':    ['NOMEEMPRESA'],
    'code':    ['CODIGOEMPRESA'],
    'especie': ['ESPECIEESTAB'],
}

SENIOR_FIELDS = {
    'tax_id': ['CNPJ'],
    'name':   ['Nome', 'NOME'],
    'code':   ['Sênior'],
}

GESTTA_FIELDS = {
    'tax_id': ['CNPJ', 'cnpj'],
    'name':   ['Nome', 'NOME', 'nome'],
    'status': ['Ativo/inativo'],
    'code':   ['Código'],
}

# Questor exports are pipe separated, the others are plain CSV
TEXT_SEPARATORS = {
    'questor': '|',
    'senior':  ',',
    'gestta':  ',',
}

SOURCE_LABELS = {
    'questor': ('Questor', 'Base Primária (Pipe/Excel)'),
    'senior':  ('Sênior',  'Faturamento (CSV/Excel)'),
    'gestta':  ('Gestta',  'Tarefas (Ativos/Inativos)'),
}

TEXT_EXTENSIONS  = ('.csv', '.txt')
EXCEL_EXTENSIONS = ('.xlsx',)

# ── Sentinels ────────────────────────────────────────────────────────────────
GESTTA_MISSING = 'AUSENTE'
GESTTA_ACTIVE  = 'ativo'
UNKNOWN_NAME   = 'N/A'
SYSTEM_USER    = 'SISTEMA'

# ── Export layout ────────────────────────────────────────────────────────────
# (header, ConsolidatedEntity attribute)
EXPORT_COLUMNS = [
    ('Documento',    'id'),
    ('Empresa',      'name'),
    ('Questor',      'questor'),
    ('Sênior',       'senior'),
    ('Origem Fat.',  'senior_origin'),
    ('Gestta',       'gestta'),
    ('Diagnóstico',  'diagnosis'),
    ('Área Gestta',  'area_gestta'),
    ('Área Questor', 'area_questor'),
    ('Confronto',    'area_check'),
]

BOOL_LABELS = {True: 'Sim', False: 'Não'}
DEFAULT_EXPORT_NAME = 'confronto_clientes'

# ── Audit actions ────────────────────────────────────────────────────────────
ACTION_LOGIN   = 'Login'
ACTION_IMPORT  = 'Importação'
ACTION_CLEAR   = 'Limpeza'
ACTION_LINK    = 'Vínculo Manual'
ACTION_UNLINK  = 'Desvínculo'
ACTION_MATRIX  = 'Regra Matriz'
