"""ui.ui_theme

Theme constants, CSS and small HTML snippets for the playground.
"""

from html import escape

LAYOUT_ACCENT = "#667EEA"

SOURCE_COLORS = {
    "contextual": LAYOUT_ACCENT,
    "corpus": "#00A651",
}


def css() -> str:
    return f"""
    <style>
    .layout-header {{
        background: white;
        border-bottom: 1px solid #e6e6e6;
        padding: 8px 12px;
        display:flex;
        align-items:center;
        gap:12px;
    }}
    .layout-badge {{
        display:inline-block;
        padding: 2px 8px;
        border-radius: 999px;
        background: {LAYOUT_ACCENT};
        color: white;
        font-size: 12px;
    }}
    .layout-muted {{
        color: #4b4b4b;
        font-size: 13px;
    }}
    .layout-chip {{
        display:inline-block;
        padding: 1px 6px;
        margin-right: 4px;
        border-radius: 6px;
        background: #f1f3f5;
        font-size: 11px;
    }}
    </style>
    """


def layout_card(layout) -> str:
    """Header block for one ranked layout: name, source badge, confidence and tags."""
    color = SOURCE_COLORS.get(layout.source, "#888888")
    chips = "".join(f"<span class='layout-chip'>{escape(str(t))}</span>" for t in layout.metadata.tags[:6])
    return (
        f"<div><b>{escape(layout.name)}</b> "
        f"<span class='layout-badge' style='background:{color}'>{escape(layout.source)}</span> "
        f"<span class='layout-muted'>confidence {layout.metadata.confidence:.2f} · "
        f"{len(layout.editable_fields)} fields</span></div>"
        f"<div class='layout-muted'>{escape(layout.description)}</div>"
        f"<div>{chips}</div>"
    )
