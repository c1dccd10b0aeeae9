import io
import os
import tempfile
from PIL import Image, ImageDraw, ImageFont


WIDTH, HEIGHT = 800, 600
BACKGROUND_TOP = (26, 26, 46)
BACKGROUND_BOTTOM = (22, 33, 62)
TEXT = (238, 238, 238)
ACCENT = (78, 204, 163)
NAME = (147, 191, 236)
MUTED = (136, 136, 136)


def _load_fonts():
    try:
        return (
            ImageFont.truetype('DejaVuSans-Bold.ttf', 36),
            ImageFont.truetype('DejaVuSans-Bold.ttf', 24),
            ImageFont.truetype('DejaVuSans.ttf', 20),
        )
    except OSError:
        default = ImageFont.load_default()
        return default, default, default


def _draw_gradient(d):
    for y in range(HEIGHT):
        t = y / (HEIGHT - 1)
        colour = tuple(
            int(top + (bottom - top) * t)
            for top, bottom in zip(BACKGROUND_TOP, BACKGROUND_BOTTOM)
        )
        d.line([(0, y), (WIDTH, y)], fill=colour)


def _centered(d, y, text, font, fill):
    x = (WIDTH - d.textlength(text, font=font)) // 2
    d.text((x, y), text, font=font, fill=fill)


def format_gdp(value):
    return f"${value:,.2f}"


def render_summary_image(total, top_countries, timestamp):
    """
    Draw the summary card and return it as PNG bytes.

    top_countries is a list of {'name', 'estimated_gdp'} dicts, already
    ordered; timestamp is a datetime or None when no refresh has happened.
    """
    img = Image.new('RGB', (WIDTH, HEIGHT), color=BACKGROUND_TOP)
    d = ImageDraw.Draw(img)
    font_title, font_heading, font_text = _load_fonts()

    _draw_gradient(d)
    _centered(d, 40, 'Country Data Summary', font_title, TEXT)
    _centered(d, 105, f'Total Countries: {total}', font_heading, ACCENT)

    d.text((50, 170), 'Top 5 by Estimated GDP', font=font_heading, fill=TEXT)
    y = 220
    for i, c in enumerate(top_countries):
        d.text((70, y), f"{i + 1}. {c['name']}", font=font_text, fill=NAME)
        d.text((400, y), format_gdp(c['estimated_gdp']), font=font_text, fill=ACCENT)
        y += 50

    stamp = timestamp.isoformat() if timestamp else 'Never'
    _centered(d, HEIGHT - 45, f'Last Refreshed: {stamp}', font_text, MUTED)

    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


def save_summary_image(total, top_countries, timestamp, out_path):
    data = render_summary_image(total, top_countries, timestamp)
    out_dir = os.path.dirname(out_path)
    os.makedirs(out_dir, exist_ok=True)
    # write then rename so readers never see a half-written file
    with tempfile.NamedTemporaryFile(dir=out_dir, prefix='.summary-', suffix='.png', delete=False) as f:
        f.write(data)
    try:
        os.replace(f.name, out_path)
    except OSError:
        os.remove(f.name)
        raise
    return out_path
