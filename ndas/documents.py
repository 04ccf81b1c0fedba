"""NDA document rendering.

The agreement is drawn on an A4 canvas with Pillow and saved as a one-page
PDF; Sadiq receives it base64 encoded.
"""

from __future__ import annotations

import base64
import re
import time
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

# A4 at 100 dpi
PAGE_SIZE = (827, 1169)
MARGIN = 70

NDA_TERMS = [
    '1. The company signing below agrees to maintain confidentiality of all project information.',
    '2. This agreement is effective from the date of digital signing through Nafath platform.',
    '3. This agreement remains valid for two years after project completion.',
    '4. Any breach of this agreement allows legal action by the affected party.',
    '5. This agreement is governed by Saudi Arabian law and digital signature regulations.',
    '6. Digital signatures through Nafath are legally binding and equivalent to handwritten signatures.',
]


def _pick_font(size: int) -> ImageFont.ImageFont:
    for name in ('arial.ttf', 'DejaVuSans.ttf'):
        try:
            return ImageFont.truetype(name, int(size))
        except OSError:
            continue
    return ImageFont.load_default()


def _wrap_text(text: str, *, max_chars: int) -> list[str]:
    words = [w for w in re.split(r'\s+', (text or '').strip()) if w]
    lines: list[str] = []
    cur: list[str] = []
    cur_len = 0
    for w in words:
        add_len = len(w) + (1 if cur else 0)
        if cur and (cur_len + add_len) > int(max_chars):
            lines.append(' '.join(cur))
            cur = [w]
            cur_len = len(w)
        else:
            cur.append(w)
            cur_len += add_len
    if cur:
        lines.append(' '.join(cur))
    return lines


def nda_reference(project_id) -> str:
    return f'NDA-{project_id}-{str(int(time.time() * 1000))[:8]}'


def render_nda_pdf(project, company_rep: dict | None = None, entrepreneur: dict | None = None) -> bytes:
    """Draw the agreement for ``project`` and return the PDF bytes."""
    w, h = PAGE_SIZE
    img = Image.new('RGB', (w, h), (255, 255, 255))
    draw = ImageDraw.Draw(img)

    title_font = _pick_font(30)
    sub_font = _pick_font(22)
    body_font = _pick_font(16)
    small_font = _pick_font(12)

    y = MARGIN

    def line(text, font=body_font, fill=(0, 0, 0), step=24):
        nonlocal y
        draw.text((MARGIN, y), text, fill=fill, font=font)
        y += step

    line('Non-Disclosure Agreement (NDA)', title_font, (26, 86, 219), 56)

    line('Project Information:', sub_font, (30, 64, 175), 34)
    line(f'Project Name: {project.title or "Not specified"}')
    for i, chunk in enumerate(_wrap_text(project.description or 'Not specified', max_chars=80)[:6]):
        line(('Description: ' if i == 0 else '    ') + chunk)
    y += 20

    line('Agreement Terms:', sub_font, (30, 64, 175), 34)
    for term in NDA_TERMS:
        for i, chunk in enumerate(_wrap_text(term, max_chars=85)):
            line(chunk if i == 0 else '    ' + chunk, step=22)
    y += 30

    line('Digital Signatures:', sub_font, (30, 64, 175), 34)
    owner_name = (entrepreneur or {}).get('name') or 'Project Owner'
    line(f'First Party (Project Owner): {owner_name}')
    line('Status: Agreed to terms (by posting project publicly)', fill=(45, 90, 45), step=34)
    if company_rep:
        line(f'Second Party (Company Representative): {company_rep.get("name", "")}')
    line('The company signed below acknowledges and agrees to the terms of this agreement.')

    footer_y = h - MARGIN - 30
    draw.text((MARGIN, footer_y), 'Created via LinkTech Platform - https://linktech.app', fill=(102, 102, 102), font=small_font)
    draw.text((MARGIN, footer_y + 18), f'Reference Number: {nda_reference(project.id)}', fill=(102, 102, 102), font=small_font)

    out = BytesIO()
    img.save(out, format='PDF', resolution=100.0)
    return out.getvalue()


def render_nda_base64(project, company_rep: dict | None = None, entrepreneur: dict | None = None) -> str:
    return base64.b64encode(render_nda_pdf(project, company_rep, entrepreneur)).decode('ascii')
