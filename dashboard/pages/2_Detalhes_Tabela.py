import streamlit as st
import plotly.express as px
import polars as pl

from fila_processos import (
    get_invalid_processos_details,
    get_processos_by_unidade_and_tabela,
    get_tabela_details,
    list_tabelas,
    list_unidades,
    load_processos,
    SnapshotError,
)

st.set_page_config(
    page_title="Detalhes por Tabela",
    page_icon="📊",
    layout="wide",
)

st.title("📊 Detalhes por Tabela")
st.caption(
    "Quantos processos de uma tabela estão dentro de um limite de dias, "
    "e quantos não têm contagem de dias válida."
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

# ── Selection (from home page click or sidebar picker) ─────────────────────
unidades = list_unidades(records=records).value
if not unidades:
    st.info("Nenhum processo disponível no momento.")
    st.stop()

default_unidade = st.session_state.get("selected_unidade")
unidade = st.sidebar.selectbox(
    "Unidade",
    unidades,
    index=unidades.index(default_unidade) if default_unidade in unidades else 0,
)
st.session_state["selected_unidade"] = unidade

tabelas = list_tabelas(unidade, records=records).value
if not tabelas:
    st.info(f"Nenhuma tabela para {unidade}.")
    st.stop()

default_tabela = st.session_state.get("selected_tabela")
tipo_tabela = st.sidebar.selectbox(
    "Tabela",
    tabelas,
    index=tabelas.index(default_tabela) if default_tabela in tabelas else 0,
)
st.session_state["selected_tabela"] = tipo_tabela

dias = st.sidebar.number_input("Limite de dias", min_value=0, value=30, step=1)

details = get_tabela_details(tipo_tabela, unidade, dias, records=records)
invalidos = get_invalid_processos_details(tipo_tabela, unidade, records=records)

if details.not_found:
    st.warning(f"Nenhum processo da tabela {tipo_tabela} em {unidade}.")
    st.stop()
if not details.ok:
    st.error(details.message)
    st.stop()

d = details.value
inv = invalidos.value or {"quantidade_processos_invalidos": 0, "total_geral_processos": d["quantidade_processos"]}

# ── KPIs ───────────────────────────────────────────────────────────────────
st.subheader(f"{tipo_tabela} — {unidade}")

k1, k2, k3, k4 = st.columns(4)
k1.metric("Total de processos", d["quantidade_processos"])
k2.metric(f"Até {dias} dias", d["dias"])
k3.metric("Percentual no intervalo", f"{d['percentual_intervalo_dias']:.2f}%".replace(".", ","))
k4.metric(
    "Sem contagem válida",
    inv["quantidade_processos_invalidos"],
    help="Processos com dias ausente, não numérico, zero ou negativo",
)

st.divider()

# ── Threshold curve ────────────────────────────────────────────────────────
processos = get_processos_by_unidade_and_tabela(tipo_tabela, unidade, records=records).value
validos = processos.filter(pl.col("dias") > 0)

if not validos.is_empty():
    st.subheader("Distribuição de dias em análise")
    fig_hist = px.histogram(
        validos.to_pandas(),
        x="dias",
        nbins=30,
        labels={"dias": "Dias", "count": "Processos"},
        color_discrete_sequence=["#1565c0"],
    )
    fig_hist.add_vline(x=dias, line_dash="dash", line_color="#c62828")
    fig_hist.update_layout(margin=dict(t=10, b=10, l=10, r=10), height=340)
    st.plotly_chart(fig_hist, use_container_width=True)

# ── Process list ───────────────────────────────────────────────────────────
st.subheader("Processos")
st.dataframe(
    processos.sort("posicao", nulls_last=True).rename({
        "posicao":     "Posição na Fila",
        "processo":    "Processo",
        "dias":        "Dias",
        "tipo_tabela": "Marcador no SEI",
        "unidade":     "Unidade COMRAR",
    }),
    use_container_width=True,
    hide_index=True,
)
