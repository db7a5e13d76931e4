from typing import Optional

from pydantic import BaseModel, Field


class OfferRecord(BaseModel):
    """One warehouse row, normalised."""

    vin: str
    primary_offer: Optional[str] = None
    secondary_offers: list[str] = Field(default_factory=list)
    customer_status: Optional[str] = None

    def to_response(self) -> "OfferResponse":
        return OfferResponse(
            vin=self.vin,
            oferta_principal=self.primary_offer,
            ofertas=self.secondary_offers,
            status_cliente_principal=self.customer_status,
        )


class OfferResponse(BaseModel):
    """Wire shape of ``GET /api/ofertas``."""

    vin: str
    found: bool = True
    oferta_principal: Optional[str] = None
    ofertas: list[str] = Field(default_factory=list)
    status_cliente_principal: Optional[str] = None


class ResolvedOffer(BaseModel):
    """An offer name joined with its catalog description and image."""

    key: str
    display_name: str
    description: str = ""
    description_html: str = ""
    image: str


class OfferView(BaseModel):
    """Everything the page needs to render one lookup result."""

    vin: str
    title: str
    description_html: str
    image: str
    status_legend: str = ""
    principal: Optional[ResolvedOffer] = None
    others: list[ResolvedOffer] = Field(default_factory=list)
    cards_html: list[str] = Field(default_factory=list)
