"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "기온 지도",
        "en": "Temperature Map",
    },
    "status_downloading": {
        "ko": "데이터 내려받는 중…",
        "en": "Downloading…",
    },
    "status_processing": {
        "ko": "처리 중…",
        "en": "Processing…",
    },
    "status_failed": {
        "ko": "데이터를 불러오지 못했어요",
        "en": "Data Load Failed",
    },
    "label_time": {
        "ko": "시점",
        "en": "Time",
    },
    "btn_play": {
        "ko": "▶ 재생",
        "en": "▶ Play",
    },
    "btn_pause": {
        "ko": "⏸ 일시정지",
        "en": "⏸ Pause",
    },
    "label_anomaly": {
        "ko": "기준 연도 대비 편차 ({year})",
        "en": "Anomaly vs. {year}",
    },
    "selection_title": {
        "ko": "선택한 나라",
        "en": "Selected countries",
    },
    "selection_empty": {
        "ko": "지도에서 나라를 눌러 가림막을 걷어보세요",
        "en": "Click a country on the map to toggle its mask",
    },
    "btn_save": {
        "ko": "↓ 저장",
        "en": "↓ Save",
    },
    "regions_unavailable": {
        "ko": "국가 경계를 불러오지 못했어요. 열 지도만 표시합니다.",
        "en": "Country outlines are unavailable; showing the heat map only.",
    },
}

# Loader status text → translation key
_STATUS_KEYS: dict[str, str] = {
    "Downloading…": "status_downloading",
    "Processing…": "status_processing",
    "Data Load Failed": "status_failed",
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key


def status_text(status: str, lang: str) -> str:
    """Translate a loader/session status. TimeKeys pass through unchanged."""
    key = _STATUS_KEYS.get(status)
    return t(key, lang) if key else status
