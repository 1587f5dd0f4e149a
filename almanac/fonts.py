from pathlib import Path
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from loguru import logger

import almanac.settings as settings

# Role → (TTF face, file name, built-in fallback)
FONT_FACES = {
    "regular":  ("Montserrat-Regular",  "Montserrat-Regular.ttf",  "Helvetica"),
    "bold":     ("Montserrat-Bold",     "Montserrat-Bold.ttf",     "Helvetica-Bold"),
    "semibold": ("Montserrat-SemiBold", "Montserrat-SemiBold.ttf", "Helvetica-Bold"),
    "light":    ("Montserrat-Light",    "Montserrat-Light.ttf",    "Helvetica"),
}

# Font names the renderer draws with, filled in by init_fonts()
FONTS = {role: fallback for role, (_, _, fallback) in FONT_FACES.items()}


def init_fonts(fonts_dir: Path | None = None) -> dict:
    """
    Register the Montserrat faces with ReportLab by passing in real file paths.
    Tries the given directory, the configured FONTS_DIR and the package-local
    fonts folder; a face found nowhere falls back to a built-in PDF font.
    """
    candidates = []
    if fonts_dir:
        candidates.append(Path(fonts_dir))
    candidates.append(Path(settings.FONTS_DIR))
    candidates.append(Path(__file__).resolve().parent / "fonts")

    for role, (name, fname, fallback) in FONT_FACES.items():
        for base in candidates:
            font_path = (base / fname).resolve()
            if font_path.is_file():
                logger.debug("Loading font {} from {}", name, str(font_path))
                pdfmetrics.registerFont(TTFont(name, str(font_path)))
                FONTS[role] = name
                break
        else:
            logger.warning(
                "Font '{}' not found in: {}; using {}",
                fname, ", ".join(str(p) for p in candidates), fallback,
            )
            FONTS[role] = fallback
    return dict(FONTS)
