"""Static offer catalog: descriptions and images keyed by normalised name.

Tables are ordered ``(pattern, value)`` pairs. Lookups try an exact match,
then the first pattern (in declaration order) that contains or is contained
in the key. "aceleracion primer servicio" must stay ahead of
"primer servicio", otherwise the longer offer resolves to the shorter one.
"""

from typing import Optional

from vin_offers.services.text import normalize_text

OfferTable = tuple[tuple[str, str], ...]

OFFER_DESCRIPTIONS: OfferTable = (
    (
        "aceleracion primer servicio",
        "Contacta al cliente con urgencia por perder garantía. Ofrece Reactivación "
        "de garantía al realizar su servicio. Código: REACTIVACION.",
    ),
    (
        "inactivos",
        "Recupera clientes con una oferta de entrada: Servicio VA $1,699 o Cambio "
        "de Aceite VA $999. Código: OFERTALLER.",
    ),
    (
        "retenidos en riesgo",
        "Motiva una visita con la Revisión de 27 puntos + Cupón $500 para "
        "reparaciones. Código: OFERTALLER.",
    ),
    (
        "servicio a tu puerta",
        "Ofrece recolección y entrega del vehículo como valor agregado. Incentivo: "
        "$100 al distribuidor. Código: VALETPARKING.",
    ),
    (
        "leales fuera garantia",
        "Recompensa su lealtad con Servicio VA $1,699 y promueve upselling de "
        "mantenimientos. Código: OFERTALLER.",
    ),
    (
        "primer servicio",
        "Invita al cliente a realizar su primer servicio y conservar la garantía. "
        "Beneficio: Tarjeta Amazon $500. Código: OFERTALLER.",
    ),
)

OFFER_IMAGES: OfferTable = (
    ("aceleracion primer servicio", "./images/aceleracion_ps.png"),
    ("inactivos", "./images/Inactivos.png"),
    ("retenidos en riesgo", "./images/retencion.png"),
    ("leales fuera garantia", "./images/leales_fg.png"),
    ("primer servicio", "./images/primer_servicio.png"),
)

DEFAULT_DESCRIPTION = ""
DEFAULT_IMAGE = "./images/default.png"


def lookup(key: str, table: OfferTable, default: Optional[str] = None) -> Optional[str]:
    """Match an already-normalised key against an ordered table."""
    # An empty key would be a substring of every pattern
    if not key:
        return default
    for pattern, value in table:
        if pattern == key:
            return value
    for pattern, value in table:
        if pattern in key or key in pattern:
            return value
    return default


def describe_offer(name: object) -> str:
    """Catalog description for a raw offer name, or ``""``."""
    return lookup(normalize_text(name), OFFER_DESCRIPTIONS, DEFAULT_DESCRIPTION) or ""


def offer_image(name: object) -> str:
    """Catalog image path for a raw offer name, or the default image."""
    return lookup(normalize_text(name), OFFER_IMAGES, DEFAULT_IMAGE) or DEFAULT_IMAGE
