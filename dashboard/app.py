import streamlit as st
import polars as pl
import plotly.express as px

from fila_processos import (
    get_overall_average_days_by_unidade,
    get_tabelas_summary_by_unidade,
    list_unidades,
    load_processos,
    SnapshotError,
)

st.set_page_config(
    page_title="COMRAR — Fila de Processos",
    page_icon="📋",
    layout="wide",
)

st.title("📋 COMRAR — Painel da Fila de Processos")
st.caption(
    "Coordenadoria de Regularização Ambiental Rural. "
    "Quantidade de processos e média de dias em análise por tabela, para cada unidade."
)

# ── Load data ──────────────────────────────────────────────────────────────
# Failures raise, so st.cache_data never keeps them
@st.cache_data(ttl=300)
def load_records():
    return load_processos()

try:
    records = load_records()
except SnapshotError as exc:
    st.error(f"Não foi possível carregar os processos: {exc}")
    st.stop()

unidades = list_unidades(records=records).value
if not unidades:
    st.info("Nenhum processo disponível no momento.")
    st.stop()

default_unidade = st.session_state.get("selected_unidade")
selected_unidade = st.sidebar.selectbox(
    "Selecione uma unidade",
    unidades,
    index=unidades.index(default_unidade) if default_unidade in unidades else 0,
)
st.session_state["selected_unidade"] = selected_unidade

summary = get_tabelas_summary_by_unidade(selected_unidade, records=records)
media_geral = get_overall_average_days_by_unidade(selected_unidade, records=records).value
if not summary.ok:
    st.error(summary.message)
    st.stop()

summary_df = summary.value

# ── Unit KPIs ──────────────────────────────────────────────────────────────
total_validos = int(summary_df["quantidade_processos"].sum()) if not summary_df.is_empty() else 0
n_tabelas = len(summary_df)

k1, k2, k3 = st.columns(3)
k1.metric("Processos com dias válidos", f"{total_validos:,}".replace(",", "."))
k2.metric("Tabelas", n_tabelas)
k3.metric("Média geral (dias)", f"{media_geral:.2f}".replace(".", ","))

st.divider()

if summary_df.is_empty():
    st.info(f"Nenhum processo com contagem de dias válida para {selected_unidade}.")
    st.stop()

# ── Charts ─────────────────────────────────────────────────────────────────
chart_col1, chart_col2 = st.columns(2)

with chart_col1:
    st.subheader("Processos por tabela")
    fig_qtd = px.bar(
        summary_df.sort("quantidade_processos", descending=True).to_pandas(),
        x="quantidade_processos",
        y="tipo_tabela",
        orientation="h",
        labels={"quantidade_processos": "Processos", "tipo_tabela": ""},
        color_discrete_sequence=["#2e7d32"],
        text="quantidade_processos",
    )
    fig_qtd.update_layout(
        margin=dict(t=10, b=10, l=10, r=40),
        height=360,
        yaxis=dict(autorange="reversed"),
    )
    st.plotly_chart(fig_qtd, use_container_width=True)

with chart_col2:
    st.subheader("Média de dias por tabela")
    fig_media = px.bar(
        summary_df.sort("media_dias", descending=True).to_pandas(),
        x="media_dias",
        y="tipo_tabela",
        orientation="h",
        labels={"media_dias": "Dias (média, arredondada para cima)", "tipo_tabela": ""},
        color="media_dias",
        color_continuous_scale="Oranges",
        text="media_dias",
    )
    fig_media.update_layout(
        coloraxis_showscale=False,
        margin=dict(t=10, b=10, l=10, r=40),
        height=360,
        yaxis=dict(autorange="reversed"),
    )
    st.plotly_chart(fig_media, use_container_width=True)

st.divider()

# ── Summary table ──────────────────────────────────────────────────────────
st.subheader("Resumo por tabela")
st.caption("Clique em uma linha para ver os detalhes por intervalo de dias.")

display = summary_df.select([
    pl.col("tipo_tabela").alias("Tabela"),
    pl.col("quantidade_processos").alias("Processos"),
    pl.col("media_dias").alias("Média de dias"),
])

selection = st.dataframe(
    display,
    use_container_width=True,
    hide_index=True,
    on_select="rerun",
    selection_mode="single-row",
)

# ── Navigate to details on row click ───────────────────────────────────────
selected_rows = selection.selection.rows
if selected_rows:
    st.session_state["selected_tabela"] = summary_df["tipo_tabela"][selected_rows[0]]
    st.switch_page("pages/2_Detalhes_Tabela.py")

st.caption("Fonte: snapshot da fila de processos, atualizado periodicamente.")
