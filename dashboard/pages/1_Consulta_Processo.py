import streamlit as st
import polars as pl

from fila_processos import find_processo, format_numero, is_valid_numero
from fila_processos.config import CONTATO_TELEFONE

st.set_page_config(
    page_title="Buscar Processo",
    page_icon="🔎",
    layout="centered",
)

st.title("🔎 Buscar Processo")
st.caption("Coordenadoria de Regularização Ambiental Rural — COMRAR")

# ── Search form ────────────────────────────────────────────────────────────
with st.form("busca_processo"):
    termo = st.text_input(
        "Digite o número do processo:",
        placeholder="0000.000000/0000-00",
        max_chars=19,
    )
    submitted = st.form_submit_button("✅ Confirmar")

if not submitted:
    st.stop()

numero = format_numero(termo.strip())
if not is_valid_numero(numero):
    st.error("Digite o processo no formato correto: xxxx.xxxxxx/xxxx-xx")
    st.stop()

with st.spinner("Buscando processo..."):
    result = find_processo(numero)

# ── Result ─────────────────────────────────────────────────────────────────
if result.ok:
    p = result.value
    st.dataframe(
        pl.DataFrame([{
            "Posição na Fila": str(p.get("posição") if p.get("posição") is not None else "—"),
            "Processo":        p.get("processo"),
            "Dias":            str(p.get("dias") if p.get("dias") is not None else "—"),
            "Marcador no SEI": p.get("tipo_tabela"),
            "Unidade COMRAR":  p.get("unidade"),
        }]),
        use_container_width=True,
        hide_index=True,
    )
else:
    if result.not_found:
        st.error("Processo não encontrado, ou não inserido na fila de análise")
    else:
        st.error(result.message or "Ocorreu um erro ao buscar o processo.")
    st.error(f"Entre em contato pelo número: **{CONTATO_TELEFONE}**")
