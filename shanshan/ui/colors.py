"""Theme colors and color utilities for the UI."""


class GameColors:
    """Candy palette: pink background, purple avatar, yellow accents."""

    BG_TOP = "#fce7f3"
    BG_BOTTOM = "#e9d5ff"

    PRIMARY = "#9333ea"
    PRIMARY_LIGHT = "#c084fc"
    PRIMARY_DARK = "#6b21a8"

    PINK = "#ec4899"
    PINK_LIGHT = "#fbcfe8"
    YELLOW = "#facc15"
    GREEN = "#22c55e"
    ORANGE = "#fb923c"

    GRID_FRAME = "#f9a8d4"
    CELL_BG = "#ffffff"
    CELL_BORDER = "#fce7f3"
    OBSTACLE = "#9ca3af"
    AVATAR = "#a855f7"
    GOAL_BG = "#fce7f3"
    GOAL_RING = "#f9a8d4"
    CRASH = "#ef4444"

    TEXT_PRIMARY = "#4c1d95"
    TEXT_MUTED = "#6b7280"
    LOCKED_BG = "#e5e7eb"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except (TypeError, ValueError):
        return a
