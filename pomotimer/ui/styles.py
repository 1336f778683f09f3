"""QSS stylesheet and mode colors for PomoTimer."""

from __future__ import annotations

from ..timer.engine import Mode

# ── mode colors (ring gradient pairs) ────────────────────────────────────
#    Each mode maps to (primary, secondary) for the conical gradient.

MODE_COLORS: dict[Mode, tuple[str, str]] = {
    Mode.WORK:        ("#FF6B6B", "#FFA07A"),   # warm coral
    Mode.SHORT_BREAK: ("#4ECDC4", "#44B09E"),   # cool teal
    Mode.LONG_BREAK:  ("#A18CD1", "#7B68EE"),   # calm purple
}

PALETTE: dict[str, str] = {
    "bg":           "#1A1A2E",
    "surface":      "#2A2A4A",
    "accent":       "#667EEA",
    "text":         "#E2E2F0",
    "text_muted":   "#7A7A9A",
    "success":      "#4CAF50",
    "border":       "#313154",
}


def build_stylesheet(palette: dict[str, str] | None = None) -> str:
    p = palette or PALETTE
    return f"""
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-size: 14px;
    }}
    QFrame#card {{
        background-color: {p['surface']};
        border: 1px solid {p['border']};
        border-radius: 16px;
    }}
    QPushButton {{
        background-color: {p['surface']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 8px 18px;
    }}
    QPushButton:disabled {{
        color: {p['text_muted']};
    }}
    QPushButton#modeButton:checked,
    QPushButton#primaryButton {{
        background-color: {p['accent']};
        color: #FFFFFF;
    }}
    QPushButton#savedButton {{
        background-color: {p['success']};
        color: #FFFFFF;
    }}
    QSpinBox {{
        background-color: {p['surface']};
        border: 1px solid {p['border']};
        border-radius: 6px;
        padding: 4px 8px;
    }}
    QLabel#mutedLabel {{
        color: {p['text_muted']};
    }}
    """
