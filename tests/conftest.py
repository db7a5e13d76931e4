"""Shared fixtures: fake BigQuery client, fake token verifier, API client."""

import json
import os

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def service_account_info(project_id="test-project"):
    """A structurally valid service-account key with a throwaway RSA key."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    return {
        "type": "service_account",
        "project_id": project_id,
        "private_key_id": "test-key",
        "private_key": pem,
        "client_email": f"ofertas@{project_id}.iam.gserviceaccount.com",
        "client_id": "1234567890",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


SERVICE_ACCOUNT_JSON = json.dumps(service_account_info())

# Settings are read and validated once at import of vin_offers.main
os.environ["GOOGLE_PROJECT_ID"] = "test-project"
os.environ["GOOGLE_APPLICATION_CREDENTIALS_JSON"] = SERVICE_ACCOUNT_JSON
os.environ["GOOGLE_CLIENT_ID"] = "test-client.apps.googleusercontent.com"
os.environ["ALLOWED_EMAIL_DOMAIN"] = "grupogranauto.mx"
os.environ["RATE_LIMIT"] = "1000/minute"

import pytest  # noqa: E402

from vin_offers.config import OfferTableSchema  # noqa: E402
from vin_offers.core.errors import InvalidTokenError  # noqa: E402
from vin_offers.models.identity import TokenClaims  # noqa: E402

KNOWN_VIN = "1HGCM82633A004352"
VALID_TOKEN = "good-token"
OUTSIDER_TOKEN = "outsider-token"
HOSTED_TOKEN = "hosted-domain-token"
UNVERIFIED_TOKEN = "unverified-token"

OFFER_TABLE = OfferTableSchema(table_id="test-project.Ofertas_Comerciales.vin_ofertas_consolidado")
USAGE_TABLE = "test-project.Ofertas_Comerciales.uso_herramienta"


class FakeQueryJob:
    def __init__(self, rows):
        self._rows = rows

    def result(self):
        return self._rows


class FakeBigQuery:
    """Stands in for ``bigquery.Client``; rows keyed by lower-cased VIN."""

    def __init__(self, rows=None):
        self.rows = {k.strip().lower(): v for k, v in (rows or {}).items()}
        self.queries = []
        self.inserted = []
        self.query_error = None
        self.insert_error = None
        self.insert_result = []

    def query(self, sql, job_config=None):
        self.queries.append((sql, job_config))
        if self.query_error:
            raise self.query_error
        vin = job_config.query_parameters[0].value
        row = self.rows.get(vin.strip().lower())
        return FakeQueryJob([row] if row else [])

    def insert_rows_json(self, table_id, rows):
        if self.insert_error:
            raise self.insert_error
        self.inserted.append((table_id, rows))
        return self.insert_result


class FakeVerifier:
    """Token verifier with a fixed token -> claims table."""

    def __init__(self):
        self.calls = []
        self.claims = {
            VALID_TOKEN: TokenClaims(
                email="ana.lopez@grupogranauto.mx",
                email_verified=True,
                hosted_domain="grupogranauto.mx",
                name="Ana López",
                picture="https://example.com/ana.png",
            ),
            OUTSIDER_TOKEN: TokenClaims(
                email="someone@gmail.com",
                email_verified=True,
                name="Someone",
            ),
            HOSTED_TOKEN: TokenClaims(
                email="ana@alias.example.com",
                email_verified=True,
                hosted_domain="GrupoGranAuto.mx",
                name="Ana",
            ),
            UNVERIFIED_TOKEN: TokenClaims(
                email="new.hire@grupogranauto.mx",
                email_verified=False,
            ),
        }

    def verify(self, token, audience):
        self.calls.append((token, audience))
        if token not in self.claims:
            raise InvalidTokenError("Wrong number of segments in token")
        return self.claims[token]


@pytest.fixture
def fake_bq():
    return FakeBigQuery(
        {
            KNOWN_VIN: {
                "vin": KNOWN_VIN,
                "oferta_principal": "inactivos",
                "ofertas": ["Inactivos", "Retenidos"],
                "status_cliente_principal": "ASISTIÓ",
            },
            "3VWFE21C04M000001": {
                "vin": "3VWFE21C04M000001",
                "oferta_principal": "ACELERACION_PRIMER_SERVICIO",
                "ofertas": "primer servicio; Servicio a tu puerta|aceleracion_primer_servicio",
                "status_cliente_principal": None,
            },
        }
    )


@pytest.fixture
def fake_verifier():
    return FakeVerifier()


@pytest.fixture
def api_client(fake_bq, fake_verifier):
    from fastapi.testclient import TestClient

    from vin_offers.api.deps import (
        get_offer_warehouse,
        get_token_verifier,
        get_usage_recorder,
    )
    from vin_offers.main import app
    from vin_offers.services.usage import UsageRecorder
    from vin_offers.services.warehouse import OfferWarehouse

    app.dependency_overrides[get_offer_warehouse] = lambda: OfferWarehouse(fake_bq, OFFER_TABLE)
    app.dependency_overrides[get_usage_recorder] = lambda: UsageRecorder(lambda: fake_bq, USAGE_TABLE)
    app.dependency_overrides[get_token_verifier] = lambda: fake_verifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
