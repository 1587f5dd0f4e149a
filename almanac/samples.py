from urllib.parse import quote

from almanac.models import Event


def create_polaroid_image(label: str, hue: int) -> str:
    """A generated 300x400 gradient card, as an SVG data URI."""
    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" width="300" height="400" viewBox="0 0 300 400">
    <defs>
      <linearGradient id="g" x1="0" y1="0" x2="1" y2="1">
        <stop offset="0%" stop-color="hsl({hue}, 62%, 72%)"/>
        <stop offset="100%" stop-color="hsl({hue + 40}, 65%, 58%)"/>
      </linearGradient>
    </defs>
    <rect width="300" height="400" rx="28" fill="url(#g)"/>
    <circle cx="230" cy="90" r="38" fill="rgba(255,255,255,0.45)"/>
    <circle cx="80" cy="300" r="56" fill="rgba(255,255,255,0.2)"/>
    <text x="24" y="360" font-family="sans-serif" font-size="22" fill="rgba(255,255,255,0.9)">{label}</text>
  </svg>"""
    return "data:image/svg+xml;utf8," + quote(svg)


def sample_events(year: int = 2026) -> list[Event]:
    """Seed data for an empty planner."""
    def d(month_day: str) -> str:
        return f"{year}-{month_day}"

    return [
        Event.from_payload({
            "id": "copenhagen",
            "label": "Copenhagen sprint",
            "start": d("03-17"),
            "end": d("03-23"),
            "tone": "sea",
            "images": [
                create_polaroid_image("Copenhagen", 188),
                create_polaroid_image("Nordic light", 210),
            ],
        }),
        Event.from_payload({
            "id": "spring-break",
            "label": "Spring break",
            "start": d("04-04"),
            "end": d("04-10"),
            "tone": "sunset",
            "images": [
                create_polaroid_image("Sunset coast", 24),
                create_polaroid_image("Slow mornings", 36),
                create_polaroid_image("Beach day", 18),
            ],
        }),
        Event.from_payload({
            "id": "friends-wedding",
            "label": "Friends wedding",
            "start": d("06-12"),
            "end": d("06-15"),
            "tone": "orchid",
            "images": [
                create_polaroid_image("Wedding", 320),
                create_polaroid_image("Celebration", 300),
            ],
        }),
        Event.from_payload({
            "id": "new-zealand",
            "label": "New Zealand",
            "start": d("09-02"),
            "end": d("09-12"),
            "tone": "sea",
            "images": [
                create_polaroid_image("New Zealand", 200),
                create_polaroid_image("Glacier", 220),
            ],
        }),
        Event.from_payload({
            "id": "oasis-show",
            "label": "Oasis reunion",
            "start": d("10-20"),
            "end": d("10-22"),
            "tone": "ink",
            "images": [create_polaroid_image("Oasis", 240)],
        }),
    ]
