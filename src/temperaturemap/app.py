"""Temperature Map — Streamlit app animating gridded temperatures over a world map."""

import asyncio
import html
import logging
import time

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from temperaturemap.clock import VirtualClock  # noqa: E402
from temperaturemap.config import ConfigError, Settings, load_settings  # noqa: E402
from temperaturemap.i18n import status_text, t  # noqa: E402
from temperaturemap.loader import LoadError  # noqa: E402
from temperaturemap.models import (  # noqa: E402
    DisplayMode,
    Region,
    RemoveSelection,
    Scrub,
    SetMode,
    TogglePlay,
    ToggleSelection,
)
from temperaturemap.projection import EquirectangularProjection  # noqa: E402
from temperaturemap.regions import RegionLoadError, load_regions  # noqa: E402
from temperaturemap.renderers.plotly_map import (  # noqa: E402
    picked_regions,
    render_map_figure,
)
from temperaturemap.renderers.static import frame_png  # noqa: E402
from temperaturemap.session import STATUS_FAILED, MapSession  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun it triggers fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🌡",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    [data-testid="stMainBlockContainer"] { padding-top: 1rem !important; }
    .status-line { color: #475569; font-size: 1.05rem; font-weight: 600; }
    .status-line.failed { color: #ef4444; }
    .selection-item { color: #1e293b; font-size: 0.9rem; padding-top: 0.45rem; }
    </style>
    """,
    unsafe_allow_html=True,
)

try:
    settings: Settings = load_settings()
except ConfigError as e:
    st.error(str(e))
    st.stop()

# --- Session state initialization ---
if "map_session" not in st.session_state:
    st.session_state.map_session = None
if "load_failed" not in st.session_state:
    st.session_state.load_failed = False
if "clock" not in st.session_state:
    st.session_state.clock = VirtualClock(
        start=time.monotonic(), time_source=time.monotonic
    )


@st.cache_resource(show_spinner=False)
def _regions(
    url: str, width: int, height: int, scale: float | None
) -> tuple[Region, ...]:
    return load_regions(url, EquirectangularProjection.for_canvas(width, height, scale))


status_placeholder = st.empty()


def _status_html(text: str) -> str:
    failed = " failed" if text == STATUS_FAILED else ""
    return f"<div class='status-line{failed}'>{status_text(text, _lang)}</div>"


def _show_status(text: str) -> None:
    status_placeholder.markdown(_status_html(text), unsafe_allow_html=True)


# --- Data loading (once per browser session) ---
if st.session_state.map_session is None and not st.session_state.load_failed:
    try:
        st.session_state.map_session = asyncio.run(
            MapSession.open(settings, st.session_state.clock, on_status=_show_status)
        )
    except LoadError:
        logger.exception("Error loading temperature data")
        st.session_state.load_failed = True

session: MapSession | None = st.session_state.map_session

if session is None:
    _show_status(STATUS_FAILED)
    st.slider(t("label_time", _lang), 0, 1, 0, disabled=True)
    st.button(t("btn_play", _lang), disabled=True)
    st.checkbox(
        t("label_anomaly", _lang).format(year=settings.baseline_year), disabled=True
    )
    st.stop()

status_placeholder.empty()

try:
    regions = _regions(
        settings.regions_url,
        settings.map_width,
        settings.map_height,
        settings.projection_scale,
    )
except RegionLoadError:
    logger.exception("Failed to load region geometry")
    st.caption(t("regions_unavailable", _lang))
    regions = ()


# --- Command callbacks ---
def _on_scrub() -> None:
    session.dispatch(Scrub(st.session_state.time_slider))


def _on_toggle_play() -> None:
    session.dispatch(TogglePlay())


def _on_mode() -> None:
    anomaly = st.session_state.anomaly_toggle
    session.dispatch(SetMode(DisplayMode.ANOMALY if anomaly else DisplayMode.ABSOLUTE))


def _on_pick() -> None:
    for region_id, name in picked_regions(st.session_state.get("map_pick")):
        session.dispatch(ToggleSelection(region_id, name))


def _on_remove(region_id: str) -> None:
    session.dispatch(RemoveSelection(region_id))


_playing_at_start = session.controller.is_playing


@st.fragment(run_every=settings.frame_interval if _playing_at_start else None)
def _map_view() -> None:
    # Fire every tick that fell due since the last run
    st.session_state.clock.pump()
    if session.controller.is_playing != _playing_at_start:
        st.rerun()  # full rerun re-arms (or disarms) the fragment timer

    state = session.controller.state
    st.markdown(_status_html(session.status), unsafe_allow_html=True)

    st.session_state.time_slider = state.time_index
    st.slider(
        t("label_time", _lang),
        min_value=0,
        max_value=session.controller.timeline_length - 1,
        key="time_slider",
        on_change=_on_scrub,
        format="%d",
    )

    col_play, col_mode, col_save = st.columns([1, 2, 1])
    with col_play:
        st.button(
            t("btn_pause" if state.is_playing else "btn_play", _lang),
            key="play_btn",
            on_click=_on_toggle_play,
            use_container_width=True,
        )
    with col_mode:
        st.checkbox(
            t("label_anomaly", _lang).format(year=settings.baseline_year),
            value=state.mode is DisplayMode.ANOMALY,
            key="anomaly_toggle",
            on_change=_on_mode,
        )

    frame = session.frame
    with col_save:
        if not state.is_playing:
            st.download_button(
                t("btn_save", _lang),
                data=frame_png(
                    frame,
                    session.color_scale,
                    session.legend,
                    regions=regions,
                    selection=session.selection,
                    width=settings.map_width,
                    height=settings.map_height,
                ),
                file_name=f"temperature_{frame.time_key}.png",
                mime="image/png",
                use_container_width=True,
            )

    col_map, col_list = st.columns([4, 1])
    with col_map:
        fig = render_map_figure(
            frame,
            session.color_scale,
            session.legend,
            regions=regions,
            selection=session.selection,
            width=settings.map_width,
            height=settings.map_height,
            point_radius=settings.point_radius,
        )
        st.plotly_chart(
            fig,
            key="map_pick",
            on_select=_on_pick,
            selection_mode="points",
            use_container_width=True,
            config={"displayModeBar": False},
        )
    with col_list:
        st.markdown(f"**{t('selection_title', _lang)}**")
        entries = session.selection.entries()
        if not entries:
            st.caption(t("selection_empty", _lang))
        for region_id, label in entries:
            c_name, c_btn = st.columns([4, 1])
            c_name.markdown(
                f"<div class='selection-item'>{html.escape(label)}</div>",
                unsafe_allow_html=True,
            )
            c_btn.button(
                "✕", key=f"remove_{region_id}", on_click=_on_remove, args=(region_id,)
            )


_map_view()
