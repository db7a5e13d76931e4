"""Server-side rendering of a lookup result into the page's view model."""

import html

from vin_offers.models.offers import OfferRecord, OfferView, ResolvedOffer
from vin_offers.services.catalog import DEFAULT_IMAGE
from vin_offers.services.resolver import (
    customer_status_legend,
    format_code,
    resolve_offer,
)

NO_TITLE = "Sin información"
NO_DESCRIPTION = "No hay descripción disponible para esta oferta."
SECONDARY_FALLBACK = "Oferta adicional disponible."

_CARD_TEMPLATE = """\
<div class="p-4 @container">
  <div class="card-secondary flex flex-col rounded-xl shadow border">
    <img src="{image}" class="offer-secondary-img" alt="Imagen Oferta">
    <div class="p-6">
      <p class="text-lg font-bold">{name}</p>
      <p class="text-base mt-1">{description}</p>
    </div>
  </div>
</div>"""


def render_offer_card(offer: ResolvedOffer) -> str:
    return _CARD_TEMPLATE.format(
        image=html.escape(offer.image, quote=True),
        name=html.escape(offer.display_name, quote=True),
        description=offer.description_html or format_code(SECONDARY_FALLBACK),
    )


def build_offer_view(record: OfferRecord) -> OfferView:
    principal = resolve_offer(record.primary_offer)
    others = [o for o in (resolve_offer(name) for name in record.secondary_offers) if o]

    return OfferView(
        vin=record.vin,
        title=principal.display_name if principal else NO_TITLE,
        description_html=(principal.description_html if principal else "")
        or format_code(NO_DESCRIPTION),
        image=principal.image if principal else DEFAULT_IMAGE,
        status_legend=customer_status_legend(record.customer_status),
        principal=principal,
        others=others,
        cards_html=[render_offer_card(o) for o in others],
    )
