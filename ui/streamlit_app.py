"""ui.streamlit_app

Streamlit playground for the layout recommender:
- Prompt box with example prompts
- Request options in the sidebar (user id, max results, personalization, alternatives, learning, debug)
- Ranked layouts with SVG preview, reasoning and a feedback slider
- Corpus matches as a table, insights, and debug traces when debug is on
"""

from __future__ import annotations

import json
import time

import pandas as pd
import streamlit as st

from layout_ai.config import Settings
from layout_ai.contracts.models import LayoutRequest, LayoutResponse, RequestContext, RequestOptions
from layout_ai.env_loader import load_env
from layout_ai.errors import FeedbackError
from layout_ai.main import build_service
from layout_ai.orchestrator import LayoutService
from ui.ui_theme import css, layout_card


EXAMPLE_PROMPTS = [
    "I need a weekly planner for my work projects",
    "simple todo list",
    "habit tracker and mood journal for the month",
    "Cornell notes for my Biology exam",
    "creative brainstorm board to share with the team",
]


@st.cache_resource(show_spinner=False)
def _service() -> LayoutService:
    load_env()
    return build_service(Settings.load())


def _init_state(settings: Settings):
    if "user_id" not in st.session_state:
        st.session_state.user_id = "demo-user"
    if "max_results" not in st.session_state:
        st.session_state.max_results = settings.default_max_results
    if "personalization" not in st.session_state:
        st.session_state.personalization = settings.default_personalization
    if "alternatives" not in st.session_state:
        st.session_state.alternatives = True
    if "learning" not in st.session_state:
        st.session_state.learning = True
    if "debug" not in st.session_state:
        st.session_state.debug = settings.default_debug
    if "last" not in st.session_state:
        st.session_state.last = None  # (prompt, LayoutResponse)


def _request(prompt: str) -> LayoutRequest:
    return LayoutRequest(
        prompt=prompt,
        user_id=(st.session_state.user_id.strip() or None),
        context=RequestContext(),
        options=RequestOptions(
            max_results=int(st.session_state.max_results),
            include_alternatives=bool(st.session_state.alternatives),
            learning_mode=bool(st.session_state.learning),
            personalization_level=st.session_state.personalization,
            debug=bool(st.session_state.debug),
        ),
    )


def _matches_frame(resp: LayoutResponse) -> pd.DataFrame:
    rows = []
    for m in resp.search_results.matches:
        row = {
            "id": m.candidate_id,
            "name": m.candidate.name,
            "category": m.candidate.category,
            "similarity": round(m.similarity_score, 3),
            "confidence": round(m.confidence_score, 3),
            "popularity": m.candidate.popularity,
        }
        row.update({f"dim.{k}": v for k, v in m.dimension_scores.items()})
        rows.append(row)
    return pd.DataFrame(rows)


def _render_response(service: LayoutService, prompt: str, resp: LayoutResponse):
    if not resp.success:
        st.error(resp.error or "Request failed")
        return

    meta = resp.metadata
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Layouts", len(resp.layouts))
    c2.metric("Confidence", f"{meta.confidence:.2f}")
    c3.metric("Time", f"{meta.processing_time_ms:.0f} ms")
    c4.metric("Cache", "hit" if meta.cache_hit else "miss")

    intent = resp.insights.intent_analysis
    if intent is not None:
        st.caption(
            f"Intent: **{intent.primary_intent}** · complexity {intent.complexity} · tone {intent.emotional_tone}"
            f" · source {intent.source} · confidence {intent.confidence:.2f}"
        )

    st.markdown("### Recommended layouts")
    for i, layout in enumerate(resp.layouts):
        with st.container(border=True):
            left, right = st.columns([3, 2])
            with left:
                st.markdown(layout_card(layout), unsafe_allow_html=True)
                for r in layout.metadata.reasoning:
                    st.markdown(f"- {r}")
                if layout.context.explanation:
                    st.caption(layout.context.explanation)
            with right:
                if layout.svg_template:
                    st.markdown(layout.svg_template, unsafe_allow_html=True)
            if st.session_state.user_id.strip():
                score = st.slider("How well does this fit?", 0.0, 1.0, 0.5, 0.1, key=f"fb_{i}_{layout.id}")
                if st.button("Send feedback", key=f"fb_btn_{i}_{layout.id}"):
                    try:
                        service.record_feedback(st.session_state.user_id.strip(), layout.id, score)
                        st.success("Feedback recorded")
                    except FeedbackError as e:
                        st.error(str(e))

    if resp.suggestions:
        st.markdown("### Suggestions")
        for s in resp.suggestions:
            st.markdown(f"**{s.layout_type}** ({s.confidence:.2f}): {s.reasoning}. Also try: {', '.join(s.alternatives)}")

    with st.expander("Corpus matches", expanded=False):
        df = _matches_frame(resp)
        if df.empty:
            st.info("No corpus template scored above the threshold.")
        else:
            st.dataframe(df, width="stretch")
        for s in resp.search_results.suggestions:
            st.markdown(f"- {s}")
        if resp.search_results.alternative_queries:
            st.caption("Alternative queries: " + ", ".join(resp.search_results.alternative_queries))

    with st.expander("Insights", expanded=False):
        st.json(
            {
                "userPatterns": resp.insights.user_patterns,
                "recommendations": resp.insights.recommendations,
                "learningInsights": resp.insights.learning_insights,
            }
        )

    if st.session_state.debug and meta.traces:
        st.markdown("### Debug traces")
        for t in meta.traces:
            with st.expander(t["step"], expanded=False):
                st.code(json.dumps(t["payload"], indent=2, default=str), language="json")


def main():
    load_env()
    settings = Settings.load()
    _init_state(settings)

    st.set_page_config(page_title="Layout AI", page_icon="🗒️", layout="wide")
    st.markdown(css(), unsafe_allow_html=True)

    st.markdown(
        "<div class='layout-header'><span class='layout-badge'>🗒️ Layout AI</span>"
        "<b>Layout recommender</b>"
        "<span class='layout-muted'>Describe the page you want; get ranked, editable templates</span></div>",
        unsafe_allow_html=True,
    )

    service = _service()

    with st.sidebar:
        st.markdown("### Request")
        st.session_state.user_id = st.text_input("User id (empty = anonymous)", value=st.session_state.user_id)
        st.session_state.max_results = st.number_input("Max results", min_value=1, max_value=50, value=int(st.session_state.max_results))
        st.session_state.personalization = st.selectbox(
            "Personalization", options=["low", "medium", "high"],
            index=["low", "medium", "high"].index(st.session_state.personalization),
        )
        st.session_state.alternatives = st.toggle("Include stylistic variants", value=st.session_state.alternatives)
        st.session_state.learning = st.toggle("Learning mode", value=st.session_state.learning)
        st.session_state.debug = st.toggle("Debug mode", value=st.session_state.debug)
        st.divider()

        st.markdown("### Service")
        st.json(service.stats())
        if st.button("Clear cache", width="stretch"):
            service.clear_cache()
            st.rerun()
        st.caption("Without a model credential the rule-based extractor answers every request.")

    st.markdown("### Try an example")
    cols = st.columns(len(EXAMPLE_PROMPTS))
    picked = None
    for i, p in enumerate(EXAMPLE_PROMPTS):
        if cols[i].button(p, width="stretch"):
            picked = p

    prompt = st.chat_input("Describe the layout you need...") or picked
    if prompt:
        with st.status("Finding layouts...", expanded=False) as status:
            start = time.time()
            resp = service.recommend(_request(prompt))
            status.update(label=f"Done • {time.time() - start:.1f}s", state="complete")
        st.session_state.last = (prompt, resp)

    if st.session_state.last:
        last_prompt, last_resp = st.session_state.last
        st.markdown(f"**Prompt:** {last_prompt}")
        _render_response(service, last_prompt, last_resp)


if __name__ == "__main__":
    main()
