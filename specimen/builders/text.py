"""Readable strings for well-known member names, drawn from Faker.

A seeded string request whose seed names a familiar field ("email",
"first_name", "city", ...) gets a plausible value instead of the default
``"<seed><uuid>"`` string. Seeds are matched case-insensitively with
underscores and dashes ignored, so ``firstName`` and ``first_name`` both hit.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.builder import SpecimenBuilder
from ..core.context import SpecimenContext
from ..core.requests import Request, SeededRequest
from ..core.specimen import NoSpecimen
from .source import RandomSource

logger = logging.getLogger(__name__)

# Normalized seed -> Faker provider method
SEED_PROVIDERS: dict[str, str] = {
    "email": "email",
    "emailaddress": "email",
    "firstname": "first_name",
    "givenname": "first_name",
    "lastname": "last_name",
    "surname": "last_name",
    "familyname": "last_name",
    "name": "name",
    "fullname": "name",
    "username": "user_name",
    "login": "user_name",
    "city": "city",
    "country": "country",
    "countrycode": "country_code",
    "address": "address",
    "street": "street_address",
    "streetaddress": "street_address",
    "postcode": "postcode",
    "postalcode": "postcode",
    "zipcode": "postcode",
    "zip": "postcode",
    "phone": "phone_number",
    "phonenumber": "phone_number",
    "company": "company",
    "companyname": "company",
    "job": "job",
    "jobtitle": "job",
    "url": "url",
    "website": "url",
    "domain": "domain_name",
    "hostname": "hostname",
    "ip": "ipv4",
    "ipaddress": "ipv4",
    "iban": "iban",
    "currency": "currency_code",
    "color": "color_name",
    "colour": "color_name",
    "language": "language_name",
    "description": "sentence",
}


def normalize_seed(seed: str) -> str:
    return seed.lower().replace("_", "").replace("-", "").strip()


class FakerSeedBuilder(SpecimenBuilder):
    """Faker-backed values for seeded ``str`` requests with a known seed."""

    def __init__(self, source: RandomSource, providers: dict[str, str] | None = None):
        self.source = source
        self.providers = dict(SEED_PROVIDERS if providers is None else providers)

    def provider_for(self, seed: Any) -> str | None:
        if not isinstance(seed, str):
            return None
        return self.providers.get(normalize_seed(seed))

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, SeededRequest) or request.type is not str:
            return NoSpecimen
        provider = self.provider_for(request.seed)
        if provider is None:
            return NoSpecimen
        with self.source.lock:
            value = getattr(self.source.faker, provider)()
        logger.debug("Faker %s() for seed %r", provider, request.seed)
        return str(value)
