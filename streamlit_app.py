"""
Stablecoin Risk Dashboard - Streamlit Application.

Risk report viewer for stablecoins featuring:
- Ticker search with native-token resolution
- Weighted 0-5 risk score with gauge and factor cards
- Peg stability chart, liquidity distribution, audit timeline
- Transparency panel and scoring methodology

Run with: streamlit run streamlit_app.py
"""

from typing import Any, Dict, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from stablecoin_risk import __version__
from stablecoin_risk.core.cache import clear_all_caches
from stablecoin_risk.core.models import RiskReport
from stablecoin_risk.core.scoring import format_usd
from stablecoin_risk.core.service import analyze_stablecoin, error_response
from stablecoin_risk.thresholds import (
    FACTOR_WEIGHTS,
    LIQUIDITY_SCORING,
    PEG_EVENT_LADDER,
    PEG_SCORING,
    RISK_TIERS,
)

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Stablecoin Risk Dashboard",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# =============================================================================
# CONSTANTS
# =============================================================================

EXAMPLE_TICKERS = ["USDC", "USDT", "DAI", "FRAX", "PYUSD", "USDe"]

TIER_COLORS = {
    "low-risk": "#22c55e",
    "moderately low-risk": "#84cc16",
    "moderate-risk": "#eab308",
    "high-risk": "#ef4444",
}

EVENT_COLORS = {
    "Major depeg event": "#ef4444",
    "Significant price deviation": "#f97316",
    "Minor price deviation": "#eab308",
    "Normal market fluctuation": "#84cc16",
    "At peg": "#22c55e",
}


# =============================================================================
# SESSION STATE
# =============================================================================

def init_session_state():
    """Initialize session state variables."""
    defaults = {
        "report": None,
        "error": None,
        "ticker": "",
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def score_color(score: float) -> str:
    for minimum, tier in RISK_TIERS:
        if score >= minimum:
            return TIER_COLORS[tier]
    return TIER_COLORS["high-risk"]


def run_analysis(ticker: str, use_cache: bool):
    st.session_state.ticker = ticker
    st.session_state.report = None
    st.session_state.error = None
    try:
        with st.spinner(f"Analyzing {ticker.upper()}..."):
            st.session_state.report = analyze_stablecoin(ticker, use_cache=use_cache)
    except Exception as e:
        status, body = error_response(e)
        st.session_state.error = {"status": status, **body}


# =============================================================================
# TAB 1: RISK SCORE
# =============================================================================

def render_risk_meter(total_score: float):
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=round(total_score, 2),
        number={"suffix": " / 5"},
        gauge={
            "axis": {"range": [0, 5]},
            "bar": {"color": score_color(total_score)},
            "steps": [
                {"range": [0, 2], "color": "#fee2e2"},
                {"range": [2, 3], "color": "#fef9c3"},
                {"range": [3, 4], "color": "#ecfccb"},
                {"range": [4, 5], "color": "#dcfce7"},
            ],
        },
        title={"text": "Overall Risk Score (5 = lowest risk)"},
    ))
    fig.update_layout(height=300, margin=dict(t=60, b=10, l=30, r=30))
    st.plotly_chart(fig, use_container_width=True)


def render_tab_risk_score(report: RiskReport):
    coin = report.coin_info
    col1, col2 = st.columns([1, 5])
    with col1:
        if coin.logo:
            st.image(coin.logo, width=72)
    with col2:
        st.markdown(f"## {coin.name} ({coin.symbol})")
        st.caption(coin.description)

    cols = st.columns(4)
    cols[0].metric("Market Cap", format_usd(coin.market_cap))
    cols[1].metric("Collateral", coin.collateral_type)
    cols[2].metric("Blockchain", coin.blockchain)
    cols[3].metric("Launched", coin.launch_date)

    st.divider()
    render_risk_meter(report.total_score)
    st.info(report.summary)

    st.subheader("Risk Factors")
    cols = st.columns(len(report.factors))
    for i, (key, factor) in enumerate(report.factors.items()):
        with cols[i]:
            color = score_color(factor.score)
            st.markdown(f"""
            <div style="padding: 10px; border-left: 4px solid {color}; margin-bottom: 10px;">
                <strong>{factor.name}</strong><br>
                <span style="font-size: 24px; color: {color};">{factor.score:.2f}</span><br>
                <small>Weight: {FACTOR_WEIGHTS[key]['weight'] * 100:.0f}%</small>
            </div>
            """, unsafe_allow_html=True)

    for key, factor in report.factors.items():
        with st.expander(f"{factor.name} - {factor.score:.2f}"):
            st.markdown(f"**{factor.description}**")
            for detail in factor.details:
                st.markdown(f"- {detail}")


# =============================================================================
# TAB 2: PEG STABILITY
# =============================================================================

def render_tab_peg(report: RiskReport):
    if not report.peg_events:
        st.info("No price history available.")
        return

    df = pd.DataFrame([event.to_dict() for event in report.peg_events])
    df["date"] = pd.to_datetime(df["date"])

    fig = px.scatter(
        df, x="date", y="price", color="description",
        color_discrete_map=EVENT_COLORS,
        title="Notable Peg Events",
    )
    fig.add_trace(go.Scatter(x=df["date"], y=df["price"], mode="lines", line=dict(color="#94a3b8", width=1), showlegend=False))
    fig.add_hline(y=1.0, line_dash="dash", line_color="#64748b", annotation_text="$1.00 peg")
    fig.update_layout(height=400, yaxis_title="Price (USD)")
    st.plotly_chart(fig, use_container_width=True)

    st.dataframe(df.sort_values("date", ascending=False), use_container_width=True, hide_index=True)


# =============================================================================
# TAB 3: LIQUIDITY
# =============================================================================

def render_tab_liquidity(report: RiskReport):
    if not report.liquidity_data:
        st.info("No per-chain liquidity data available.")
        return

    df = pd.DataFrame([entry.to_dict() for entry in report.liquidity_data])
    df["% of Total"] = (df["amount"] / df["amount"].sum() * 100).round(2)

    col1, col2 = st.columns(2)
    with col1:
        fig = px.pie(df, values="amount", names="chain", title="Circulating Supply by Chain", hole=0.4)
        fig.update_traces(textposition="inside", textinfo="percent+label")
        fig.update_layout(showlegend=True, height=350)
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        st.metric("Total Circulating", format_usd(df["amount"].sum()))
        display = df.assign(amount=df["amount"].apply(format_usd))
        st.dataframe(display, use_container_width=True, hide_index=True)


# =============================================================================
# TAB 4: AUDITS
# =============================================================================

def render_tab_audits(report: RiskReport):
    if not report.audit_history:
        st.info("No audit reports found in the project repository.")
        return

    for audit in report.audit_history:
        issues = audit.issues
        with st.container(border=True):
            st.markdown(f"**{audit.firm}** · {audit.date.isoformat()}")
            st.caption(audit.summary)
            cols = st.columns(4)
            cols[0].metric("Critical", issues.critical)
            cols[1].metric("High", issues.high)
            cols[2].metric("Medium", issues.medium)
            cols[3].metric("Low", issues.low)
            if audit.link:
                st.markdown(f"[View report]({audit.link})")


# =============================================================================
# TAB 5: TRANSPARENCY
# =============================================================================

def render_tab_transparency(report: RiskReport):
    signal = report.transparency
    if signal is None:
        st.info("Transparency information unavailable.")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"- PoR provider: **{signal.por_provider or 'N/A'}**")
        st.markdown(f"- Update frequency: {signal.update_frequency or 'N/A'}")
        st.markdown(f"- Last update: {signal.last_update or 'N/A'}")
        if signal.por_url:
            st.markdown(f"- [Reserves dashboard]({signal.por_url})")
        if signal.transparency_url:
            st.markdown(f"- [Transparency page]({signal.transparency_url})")
    with col2:
        if signal.reserves:
            df = pd.DataFrame([holding.to_dict() for holding in signal.reserves])
            fig = px.bar(df, x="asset", y="percentage", title="Reserve Composition")
            fig.update_layout(height=300)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No reserve composition table found.")


# =============================================================================
# TAB 6: METHODOLOGY
# =============================================================================

def render_tab_methodology():
    st.subheader("Factor Weights")
    df = pd.DataFrame([
        {"Factor": key, "Weight": f"{entry['weight'] * 100:.0f}%", "Justification": entry["justification"]}
        for key, entry in FACTOR_WEIGHTS.items()
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.subheader("Peg Event Classification")
    for rung in PEG_EVENT_LADDER:
        st.markdown(f"- ≥ {rung['min_deviation_pct']}%: {rung['description']}")

    st.subheader("Peg Stability Scoring")
    for band in PEG_SCORING["max_deviation_below"] + PEG_SCORING["max_deviation_above"]:
        st.markdown(f"- {band['adjustment']:+.2f}: {band['justification']}")

    st.subheader("Liquidity Scoring")
    for tier in LIQUIDITY_SCORING["total_tiers"]:
        st.markdown(f"- {tier['adjustment']:+.2f}: {tier['justification']}")


# =============================================================================
# MAIN
# =============================================================================

def main():
    init_session_state()

    with st.sidebar:
        st.title("🛡️ Stablecoin Risk")
        ticker = st.text_input("Ticker", value=st.session_state.ticker, placeholder="e.g. USDC")
        st.caption("Examples: " + ", ".join(EXAMPLE_TICKERS))
        use_cache = not st.checkbox("Bypass cache", value=False)
        if st.button("Analyze", type="primary", disabled=not ticker.strip()):
            run_analysis(ticker.strip(), use_cache)
        if st.button("Clear caches"):
            clear_all_caches()
            st.success("All caches cleared")
        st.divider()
        st.caption(f"v{__version__}")

    error: Optional[Dict[str, Any]] = st.session_state.error
    if error:
        st.error(f"**{error['message']}** ({error['status']})")
        st.caption(error["details"])
        return

    report: Optional[RiskReport] = st.session_state.report
    if report is None:
        st.info("👈 Enter a stablecoin ticker to generate a risk report.")
        render_tab_methodology()
        return

    tabs = st.tabs([
        "📊 Risk Score",
        "📈 Peg Stability",
        "💧 Liquidity",
        "🔍 Audits",
        "🏛️ Transparency",
        "📚 Methodology",
    ])
    with tabs[0]:
        render_tab_risk_score(report)
    with tabs[1]:
        render_tab_peg(report)
    with tabs[2]:
        render_tab_liquidity(report)
    with tabs[3]:
        render_tab_audits(report)
    with tabs[4]:
        render_tab_transparency(report)
    with tabs[5]:
        render_tab_methodology()


if __name__ == "__main__":
    main()
