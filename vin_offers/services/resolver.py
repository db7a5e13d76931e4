"""Turn raw warehouse offer names into display-ready offers."""

import html
import re
from typing import Optional

from vin_offers.models.offers import ResolvedOffer
from vin_offers.services.catalog import describe_offer, offer_image
from vin_offers.services.text import fold_accents, normalize_text

# Matched against HTML-escaped text; the token alphabet is unaffected by escaping
CODE_PATTERN = re.compile(r"C[oó]digo:\s*([A-Z0-9]+)", re.IGNORECASE)

STATUS_LEGENDS = {
    "ASISTIO": "Ya asistió",
    "POTENCIAL": "Potencial",
}


def format_offer_name(raw: object) -> str:
    """'ACELERACIÓN_PRIMER_SERVICIO' -> 'Aceleracion primer servicio'."""
    name = normalize_text(raw)
    if not name:
        return ""
    return name[0].upper() + name[1:]


def format_code(text: Optional[str]) -> str:
    """Escape text for HTML and wrap promo codes in a ``<code>`` element."""
    if not text:
        return ""
    escaped = html.escape(text, quote=True)
    return CODE_PATTERN.sub(
        lambda m: f'Código: <code class="codigo-oferta">{m.group(1)}</code>',
        escaped,
    )


def customer_status_legend(raw: object) -> str:
    if raw is None:
        return ""
    status = fold_accents(str(raw)).upper().strip()
    return STATUS_LEGENDS.get(status, "")


def resolve_offer(raw: object) -> Optional[ResolvedOffer]:
    """Join an offer name with its catalog entry. ``None`` for blank names."""
    key = normalize_text(raw)
    if not key:
        return None
    description = describe_offer(key)
    return ResolvedOffer(
        key=key,
        display_name=format_offer_name(key),
        description=description,
        description_html=format_code(description),
        image=offer_image(key),
    )
