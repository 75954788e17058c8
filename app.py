# app.py — Conciliador Base de Clientes
# Questor (ERP) x Sênior (Faturamento) x Gestta (Tarefas)
import streamlit as st
import pandas as pd
import altair as alt

from conciliador.config         import load_config
from conciliador.logging_config import setup_logging
from conciliador.constants      import SOURCE_LABELS, TEXT_EXTENSIONS, EXCEL_EXTENSIONS
from conciliador.core_engine    import to_frame, summarize
from conciliador.view_engine    import (ColumnFilters, SortConfig, toggle_sort, build_view,
                                        filter_options, ALL, ASC)
from conciliador.report_gen     import export_csv, export_filename, generate_excel
from conciliador.file_loader    import IngestionError
from conciliador.actions        import LoginError
from conciliador.db_handler     import StaleStateError
from conciliador.models         import Source, BillingOrigin
from conciliador.session        import ReconSession

CONFIG = load_config()
setup_logging(CONFIG.log_level, CONFIG.log_json)

# ==========================================
# PAGE CONFIG & CSS
# ==========================================
st.set_page_config(
    page_title="Conciliador Base de Clientes",
    page_icon="🛡️",
    layout="wide",
)

st.markdown("""
    <style>
    .stApp { background-color: #f4f6f9; }
    div[data-testid="stMetric"] {
        background-color: #ffffff;
        border: 1px solid #e0e0e0;
        padding: 16px;
        border-radius: 12px;
        box-shadow: 0 4px 6px rgba(0,0,0,0.04);
    }
    div[data-testid="stMetricLabel"] { font-size: 13px; color: #6c757d; font-weight: 600; text-transform: uppercase; }
    div[data-testid="stMetricValue"] { font-size: 24px; color: #312e81; font-weight: 800; }
    .stTabs [data-baseweb="tab"][aria-selected="true"] { background-color: #4f46e5; color: #ffffff; border-radius: 8px; }
    div.stButton > button:first-child { border-radius: 8px; font-weight: 600; }
    .main-header { color: #312e81; font-weight: 800; text-transform: uppercase; margin-bottom: 0px; }
    </style>
""", unsafe_allow_html=True)

# ==========================================
# SESSION STATE INIT
# ==========================================
defaults = {
    'recon':          None,
    'search':         '',
    'filters':        ColumnFilters(),
    'sort':           SortConfig(),
    'upload_nonce':   0,
    'filter_nonce':   0,
}
for k, v in defaults.items():
    if k not in st.session_state:
        st.session_state[k] = v


# ==========================================
# LOGIN GATE
# ==========================================
def _login_gate():
    if st.session_state.recon is not None:
        return

    st.markdown("<h2 class='main-header' style='text-align:center'>🔒 Conciliador Base de Clientes</h2>",
                unsafe_allow_html=True)
    st.caption("Identificação colaborativa — informe o seu nome para registar as ações.")
    with st.form("login_form"):
        name = st.text_input("Nome do Responsável", max_chars=80)
        if st.form_submit_button("Entrar no Sistema", type="primary", use_container_width=True):
            try:
                st.session_state.recon = ReconSession.login(CONFIG.db_path, name)
                st.rerun()
            except LoginError as e:
                st.error(f"⚠️ {e}")
    st.stop()


_login_gate()
recon = st.session_state.recon


def _run_action(fn, *args):
    """Runs a session action; on a version conflict reloads the store and tells the user."""
    try:
        fn(*args)
    except StaleStateError:
        recon.reload()
        st.warning("A base foi alterada por outro utilizador. Dados recarregados — repita a ação.")
        return False
    return True


# ==========================================
# HEADER
# ==========================================
col_title, col_user = st.columns([4, 1])
with col_title:
    st.markdown("<h3 class='main-header'>Conciliador Base de Clientes</h3>", unsafe_allow_html=True)
with col_user:
    st.caption(f"👤 {recon.operator}")
    if st.button("Sair", use_container_width=True):
        st.session_state.recon = None
        st.rerun()

tab_upload, tab_work, tab_audit = st.tabs(["📥 Importar", "👥 Trabalho", "🕑 Auditoria"])

# ─────────────────────────────────────────────────────
# TAB 1 — IMPORT
# ─────────────────────────────────────────────────────
with tab_upload:
    cols = st.columns(3)
    for col, source in zip(cols, Source):
        title, desc = SOURCE_LABELS[source.value]
        count = len(recon.state.records(source))
        with col:
            with st.container(border=True):
                st.markdown(f"**{title.upper()}**")
                st.caption(desc)
                files = st.file_uploader(
                    f"Arquivos {title}",
                    type=[e.lstrip('.') for e in TEXT_EXTENSIONS + EXCEL_EXTENSIONS],
                    accept_multiple_files=True,
                    key=f"up_{source.value}_{st.session_state.upload_nonce}",
                    label_visibility="collapsed",
                )
                if files and st.button("➕ Importar", key=f"imp_{source.value}", use_container_width=True):
                    imported = 0
                    for f in files:
                        try:
                            if not _run_action(recon.import_file, source, f.name, f.getvalue()):
                                break
                            imported += 1
                        except IngestionError as e:
                            st.error(f"❌ {e}")
                    if imported:
                        st.session_state.upload_nonce += 1
                        st.rerun()
                st.metric("Registos", count)
                if count and st.button("🗑️ Limpar base", key=f"clr_{source.value}", use_container_width=True):
                    if _run_action(recon.clear_source, source):
                        st.rerun()

# ─────────────────────────────────────────────────────
# TAB 2 — WORK TABLE
# ─────────────────────────────────────────────────────
with tab_work:
    entities = recon.entities
    summary  = summarize(entities)

    m1, m2, m3, m4 = st.columns(4)
    diag_counts = dict(zip(summary['diagnosis']['Status'], summary['diagnosis']['Count']))
    m1.metric("Clientes", summary['total'])
    m2.metric("Consistentes", diag_counts.get('Consistente', 0))
    m3.metric("Falta Questor", diag_counts.get('Falta Cadastro Questor', 0))
    m4.metric("Pendente Baixa", diag_counts.get('Cliente Inativo (Baixa)', 0))

    if entities:
        with st.expander("📊 Distribuição", expanded=False):
            ch1, ch2 = st.columns(2)
            for holder, key, title in ((ch1, 'diagnosis', 'Diagnóstico'), (ch2, 'area_check', 'Confronto de Área')):
                data = summary[key][summary[key]['Count'] > 0]
                chart = alt.Chart(data).mark_arc(innerRadius=50).encode(
                    theta=alt.Theta("Count", stack=True),
                    color=alt.Color("Status", scale=alt.Scale(scheme='category10')),
                    tooltip=["Status", "Count"]
                ).properties(title=title)
                holder.altair_chart(chart, use_container_width=True)

    # --- Search / filters ---
    filters = st.session_state.filters
    c_search, c_sort, c_dir, c_clear = st.columns([3, 2, 1, 1])
    search = c_search.text_input("Busca CNPJ ou Nome...", value=st.session_state.search)
    st.session_state.search = search

    sort_labels = {
        'id': 'Documento', 'name': 'Empresa', 'questor': 'Questor', 'senior': 'Sênior',
        'senior_origin': 'Origem Fat.', 'gestta': 'Gestta', 'diagnosis': 'Diagnóstico',
        'area_gestta': 'Área Gestta', 'area_questor': 'Área Questor', 'area_check': 'Confronto',
    }
    sort = st.session_state.sort
    sort_keys = list(sort_labels)
    new_key = c_sort.selectbox("Ordenar por", sort_keys, index=sort_keys.index(sort.key),
                               format_func=sort_labels.get)
    if new_key != sort.key:
        st.session_state.sort = toggle_sort(sort, new_key)
        st.rerun()
    arrow = "▲" if sort.direction == ASC else "▼"
    c_dir.write("")
    if c_dir.button(f"{arrow} Inverter", use_container_width=True):
        st.session_state.sort = toggle_sort(sort, sort.key)
        st.rerun()
    c_clear.write("")
    if filters.is_active() and c_clear.button("🧹 Limpar Filtros", key="clear_filters", use_container_width=True):
        st.session_state.filters = ColumnFilters()
        # filter widgets are keyed by the nonce: a new nonce starts them blank
        st.session_state.filter_nonce += 1
        st.rerun()
    nonce = st.session_state.filter_nonce

    with st.expander("🔎 Filtros por coluna", expanded=filters.is_active()):
        f1, f2 = st.columns(2)
        new_filters = {
            'id':   f1.text_input("Documento", value=filters.id, key=f"flt_id_{nonce}"),
            'name': f2.text_input("Empresa", value=filters.name, key=f"flt_name_{nonce}"),
        }
        enum_cols = ['questor', 'senior', 'senior_origin', 'gestta', 'diagnosis',
                     'area_gestta', 'area_questor', 'area_check']
        sel_cols = st.columns(4)
        for i, col_name in enumerate(enum_cols):
            options = filter_options(entities, col_name)
            current = getattr(filters, col_name)
            if current not in options:
                options.append(current)
            new_filters[col_name] = sel_cols[i % 4].selectbox(
                sort_labels[col_name], options, index=options.index(current),
                format_func=lambda v: "Todos" if v == ALL else v, key=f"flt_{col_name}_{nonce}")
        updated = filters.replace(**new_filters)
        if updated != filters:
            st.session_state.filters = updated
            st.rerun()

    view = build_view(entities, search, st.session_state.filters, st.session_state.sort)

    # --- Export (exactly what is on screen) ---
    e1, e2, _ = st.columns([1, 1, 3])
    e1.download_button("⬇️ Exportar CSV", data=export_csv(view),
                       file_name=export_filename(CONFIG.export_basename),
                       mime="text/csv", use_container_width=True)
    e2.download_button("⬇️ Exportar Excel", data=generate_excel(view),
                       file_name=export_filename(CONFIG.export_basename, 'xlsx'),
                       mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                       use_container_width=True)

    st.caption(f"{len(view)} de {len(entities)} clientes")

    # --- Table with selection ---
    df_view = to_frame(view)
    df_view.insert(0, 'Sel.', False)
    edited = st.data_editor(
        df_view[['Sel.', 'id', 'name', 'questor', 'senior', 'senior_origin', 'gestta',
                 'diagnosis', 'area_gestta', 'area_questor', 'area_check', 'payer_id']],
        hide_index=True, use_container_width=True, height=520,
        disabled=[c for c in df_view.columns if c != 'Sel.'],
        column_config={
            'Sel.':          st.column_config.CheckboxColumn("Sel.", width="small"),
            'id':            st.column_config.TextColumn("Documento"),
            'name':          st.column_config.TextColumn("Empresa", width="large"),
            'questor':       st.column_config.CheckboxColumn("Questor"),
            'senior':        st.column_config.CheckboxColumn("Sênior"),
            'senior_origin': st.column_config.TextColumn("Origem Fat."),
            'gestta':        st.column_config.TextColumn("Gestta"),
            'diagnosis':     st.column_config.TextColumn("Diagnóstico"),
            'area_gestta':   st.column_config.TextColumn("Área Gestta"),
            'area_questor':  st.column_config.TextColumn("Área Questor"),
            'area_check':    st.column_config.TextColumn("Confronto"),
            'payer_id':      st.column_config.TextColumn("Pagante"),
        },
        key=f"grid_{recon.state.version}",
    )
    checked = edited.loc[edited['Sel.'], 'id'].tolist()

    # --- Manual payer link ---
    if view:
        with st.expander(f"🔗 Vincular Pagador ({len(checked)})", expanded=bool(checked)):
            names = {e.id: f"{e.name} — {e.id}" for e in view}
            selected_ids = st.multiselect("Clientes a vincular", list(names), default=checked,
                                          format_func=names.get)
            payer_search = st.text_input("Procurar pagador (nome ou CNPJ)", key="payer_search")
            candidates = build_view(entities, payer_search)[:50]
            if candidates:
                payer = st.selectbox("Pagador", [e.id for e in candidates],
                                     format_func={e.id: f"{e.name} — {e.id}" for e in candidates}.get)
                if st.button("Vincular", type="primary", key="link_payer", disabled=not selected_ids):
                    if _run_action(recon.assign_payer, selected_ids, payer):
                        st.rerun()
            else:
                st.info("Nenhum pagador encontrado.")

    # --- Row actions ---
    linked   = [e for e in view if e.payer_id]
    matrix   = [e for e in view if e.senior_origin == BillingOrigin.MATRIZ or e.is_excluded]
    if linked or matrix:
        with st.expander("⚙️ Ajustes por cliente", expanded=False):
            a1, a2 = st.columns(2)
            with a1:
                if linked:
                    target = st.selectbox("Remover vínculo manual", [e.id for e in linked],
                                          format_func={e.id: f"{e.name} → {e.payer_id}" for e in linked}.get)
                    if st.button("❌ Remover vínculo"):
                        if _run_action(recon.remove_payer, target):
                            st.rerun()
            with a2:
                if matrix:
                    target = st.selectbox(
                        "Regra de 8 dígitos (Matriz)", [e.id for e in matrix],
                        format_func={e.id: f"{e.name} — {'Ignorado' if e.is_excluded else 'Matriz'}"
                                     for e in matrix}.get)
                    if st.button("🔁 Ignorar / Reativar Matriz"):
                        if _run_action(recon.toggle_matrix_exclusion, target):
                            st.rerun()

# ─────────────────────────────────────────────────────
# TAB 3 — AUDIT
# ─────────────────────────────────────────────────────
with tab_audit:
    st.subheader("🕑 Histórico de Atividades")
    log_df = recon.audit_log()
    if log_df.empty:
        st.info("Nenhum evento registrado ainda.")
    else:
        log_df['timestamp'] = pd.to_datetime(log_df['timestamp'], errors='coerce').dt.strftime('%d/%m/%Y %H:%M:%S')
        st.dataframe(
            log_df, hide_index=True, use_container_width=True,
            column_config={
                "timestamp": st.column_config.TextColumn("Data"),
                "user":      st.column_config.TextColumn("Utilizador"),
                "action":    st.column_config.TextColumn("Ação"),
                "details":   st.column_config.TextColumn("Detalhes", width="large"),
            }
        )
