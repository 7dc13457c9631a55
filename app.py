# app.py: risk register dashboard with factor wheels, residual scoring and the 5x5 heatmap
import streamlit as st
import plotly.graph_objects as go

from grc_riskmath.ai_helper import suggest_mitigations
from grc_riskmath.config import (
    configure_logging,
    get_csv_file_path,
    get_probability_weights,
    get_risk_decimals,
    get_risk_level_ranges,
)
from grc_riskmath.heatmap import build_grid, grid_frame, grid_matrix
from grc_riskmath.helpers import build_record, df_to_cell_items, load_df, save_record
from grc_riskmath.impact import IMPACT_CATALOG, IMPACT_KEYS, calculate_impact, impact_level_text
from grc_riskmath.models import ImpactFactors, ProbabilityFactors
from grc_riskmath.probability import FACTOR_CATALOG, FACTOR_KEYS, calculate_probability, probability_level_text
from grc_riskmath.risk_math import classify, combine_controls, inherent, residual_from_controls
from grc_riskmath.services.risk_service import risks_by, top_risks
from grc_riskmath.wheel import wheel_segments

configure_logging()

CSV_FILE_PATH = get_csv_file_path()
RANGES = get_risk_level_ranges()
WEIGHTS = get_probability_weights()
PRECISION = get_risk_decimals()

st.set_page_config(page_title="GRC Risk Dashboard", layout="wide")
st.title("🛡️ GRC Risk Dashboard")

st.sidebar.info(
    f"Rangos de riesgo: Bajo ≤{RANGES.low_max:g}, Medio ≤{RANGES.medium_max:g}, "
    f"Alto ≤{RANGES.high_max:g}, Crítico >{RANGES.high_max:g}"
)


# -----------------------
# Helper functions
# -----------------------
def factor_sliders(catalog: dict, keys, prefix: str, default: int) -> dict:
    values = {}
    cols = st.columns(len(keys))
    for col, key in zip(cols, keys):
        entry = catalog[key]
        with col:
            values[key] = st.select_slider(
                entry.get("short_name", entry["name"]),
                options=[1, 2, 3, 4, 5],
                value=default,
                key=f"{prefix}_{key}",
                help="\n".join(f"{i}: {d}" for i, d in enumerate(entry["descriptions"], 1)),
            )
    return values


def wheel_figure(values: dict, keys, catalog: dict) -> go.Figure:
    """Factor wheel as a polar bar chart, one ring per level."""
    segments = wheel_segments(values, keys)
    width = 360 / len(keys)
    fig = go.Figure()
    for level in range(1, 6):
        ring = [s for s in segments if s.level == level]
        fig.add_trace(go.Barpolar(
            r=[1] * len(ring),
            theta=[s.factor_index * width for s in ring],
            width=[width] * len(ring),
            base=level - 1,
            marker_color=[classify(level * 5 - 1, RANGES).color if s.selected else "#E5E7EB" for s in ring],
            marker_line_color="#FFFFFF",
            hovertext=[f"{catalog[s.factor].get('short_name', catalog[s.factor]['name'])} · nivel {level}: "
                       f"{catalog[s.factor]['descriptions'][level - 1]}" for s in ring],
            hoverinfo="text",
            showlegend=False,
        ))
    fig.update_layout(
        polar=dict(
            hole=0.25,
            radialaxis=dict(visible=False, range=[0, 5]),
            angularaxis=dict(
                tickvals=[i * width for i in range(len(keys))],
                ticktext=[catalog[k].get("short_name", catalog[k]["name"]) for k in keys],
                direction="clockwise",
                rotation=90,
            ),
        ),
        margin=dict(l=40, r=40, t=20, b=20),
        height=380,
    )
    return fig


def heatmap_figure(cells) -> go.Figure:
    counts = grid_matrix(cells, "count")
    scores = grid_matrix(cells, "score")
    probability_labels = [1, 2, 3, 4, 5]
    impact_labels = [5, 4, 3, 2, 1]
    fig = go.Figure(
        data=go.Heatmap(
            z=scores,
            x=probability_labels,
            y=impact_labels,
            text=counts,
            texttemplate="%{text}",
            colorscale=[[0.0, "#22c55e"], [0.5, "#eab308"], [0.75, "#f97316"], [1.0, "#ef4444"]],
            hovertemplate="<b>Probabilidad:</b> %{x}<br><b>Impacto:</b> %{y}<br>"
                          "<b>Score:</b> %{z:.1f}<br><b>Riesgos:</b> %{text}<extra></extra>",
            zmin=0,
            zmax=25,
            colorbar_title="Score",
        )
    )
    fig.update_layout(
        xaxis_title="Probabilidad",
        yaxis_title="Impacto",
        margin=dict(l=60, r=60, t=40, b=60),
        width=600, height=550,
    )
    return fig


# -----------------------
# Risk assessment
# -----------------------
st.markdown("## 1) Evaluar un riesgo")
col_code, col_name = st.columns([1, 3])
with col_code:
    code = st.text_input("Código", value="R-001")
with col_name:
    name = st.text_input("Nombre del riesgo")
description = st.text_area("Descripción")
col_owner, col_process = st.columns(2)
with col_owner:
    owner = st.text_input("Dueño")
with col_process:
    process = st.text_input("Proceso")

st.markdown("### Factores de probabilidad")
probability_values = factor_sliders(FACTOR_CATALOG, FACTOR_KEYS, "prob", 3)
probability = calculate_probability(ProbabilityFactors(**probability_values), WEIGHTS)

st.markdown("### Factores de impacto")
impact_values = factor_sliders(IMPACT_CATALOG, IMPACT_KEYS, "imp", 1)
impact = calculate_impact(ImpactFactors(**impact_values))

wheel_cols = st.columns(2)
with wheel_cols[0]:
    st.plotly_chart(wheel_figure(probability_values, FACTOR_KEYS, FACTOR_CATALOG), use_container_width=True)
with wheel_cols[1]:
    st.plotly_chart(wheel_figure(impact_values, IMPACT_KEYS, IMPACT_CATALOG), use_container_width=True)

st.markdown("### Controles")
n_controls = st.number_input("Número de controles", min_value=0, max_value=10, value=0, step=1)
effectiveness = []
for idx in range(int(n_controls)):
    effectiveness.append(
        st.slider(f"Efectividad control {idx + 1} (%)", 0, 100, 50, key=f"control_{idx}") / 100
    )

inherent_score = inherent(probability, impact)
combined = combine_controls(effectiveness)
residual_score = residual_from_controls(inherent_score, combined, PRECISION)
inherent_band = classify(inherent_score, RANGES)
residual_band = classify(residual_score, RANGES)

cols = st.columns(5)
cols[0].metric("Probabilidad", probability, help=probability_level_text(probability))
cols[1].metric("Impacto", impact, help=impact_level_text(impact))
cols[2].metric("Riesgo inherente", inherent_score, inherent_band.label, delta_color="off")
cols[3].metric("Efectividad combinada", f"{combined:.0%}")
cols[4].metric("Riesgo residual", f"{residual_score:g}", residual_band.label, delta_color="off")

if st.button("💾 Guardar riesgo"):
    if not name:
        st.warning("Ingresa un nombre para el riesgo.")
    else:
        record = build_record(
            code=code, name=name, probability=probability, impact=impact,
            control_effectiveness=effectiveness, description=description,
            owner=owner, process=process, ranges=RANGES, precision=PRECISION,
        )
        save_record(record, CSV_FILE_PATH)

        # --- AI mitigation suggestions ---
        mitigation_info = suggest_mitigations(name, description, residual_band.label)
        st.sidebar.markdown(f"**Sugerencias para {code}:**")
        st.sidebar.info(mitigation_info)

        st.success(f"✅ Riesgo {code} guardado ({residual_band.label}).")

# -----------------------
# Display Saved Risks + Heatmap
# -----------------------
df = load_df(CSV_FILE_PATH)
st.markdown("---")
st.subheader("📋 Registro de riesgos")
if not df.empty:
    st.dataframe(df, use_container_width=True)
    csv = df.to_csv(index=False).encode("utf-8")
    st.download_button("📥 Descargar CSV", data=csv, file_name="risks.csv", mime="text/csv")
else:
    st.warning("Aún no hay riesgos registrados.")

if not df.empty:
    st.subheader("📊 Mapa de calor")
    mode = st.radio("Modo", ["inherent", "residual"], horizontal=True,
                    format_func=lambda m: "Inherente" if m == "inherent" else "Residual")
    cells = build_grid(df_to_cell_items(df), mode, RANGES)
    st.plotly_chart(heatmap_figure(cells), use_container_width=False)
    with st.expander("Detalle por celda"):
        frame = grid_frame(cells)
        st.dataframe(frame[frame["count"] > 0], use_container_width=True)

    st.subheader("🔝 Top 5 riesgos")
    st.dataframe(top_risks(df), use_container_width=True)

    by_cols = st.columns(2)
    with by_cols[0]:
        st.markdown("**Riesgos por dueño**")
        st.dataframe(risks_by(df, "owner"), use_container_width=True)
    with by_cols[1]:
        st.markdown("**Riesgos por proceso**")
        st.dataframe(risks_by(df, "process"), use_container_width=True)
