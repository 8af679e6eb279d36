# pricing_logic.py
"""
Price estimation for a described property.

The remote model is tried first. Anything that goes wrong on that path (the
service fails, or the reply is not a usable estimate) falls back to a
deterministic area x rate x city-multiplier heuristic, so a valid description
always produces an estimate.
"""
import json
import logging
import math
from types import MappingProxyType
from typing import Any, List, Mapping, Union

from pydantic import ValidationError

from exceptions import (
    InvalidPropertyDescription, MalformedModelResponse, MissingRequiredField,
    RemoteServiceError,
)
from llm_client import ModelCaller
from prompts import APPRAISER_SYSTEM_INSTRUCTION, build_price_estimate_prompt
from schemas import (
    ComparableProperty, ModelEstimateOutput, PriceEstimate, PropertyDescription,
)

logger = logging.getLogger(__name__)


# --- Tunable Constants for the Fallback Heuristic ---
class PricingConstants:
    BASE_RATE_PER_SQFT = MappingProxyType({
        'apartment': 200,
        'house': 250,
        'villa': 400,
        'penthouse': 500,
        'studio': 300,
    })
    DEFAULT_RATE_PER_SQFT = 250

    # Rough metro multipliers, keyed by lower-cased city name
    CITY_MULTIPLIERS = MappingProxyType({
        'new york': 3.5,
        'san francisco': 3.0,
        'los angeles': 2.5,
        'seattle': 2.2,
        'boston': 2.0,
        'miami': 1.8,
        'chicago': 1.5,
        'austin': 1.4,
        'denver': 1.3,
        'atlanta': 1.2,
    })
    DEFAULT_CITY_MULTIPLIER = 1.0

    RANGE_LOW = 0.85
    RANGE_HIGH = 1.15
    FALLBACK_CONFIDENCE = 75
    FALLBACK_FACTORS = MappingProxyType({
        'location': 80,
        'size': 85,
        'bedrooms': 75,
        'bathrooms': 75,
        'amenities': 70,
        'market': 80,
    })
    # (price multiplier, distance, similarity)
    FALLBACK_COMPARABLES = (
        (0.95, "0.5 miles", 92),
        (1.08, "0.8 miles", 88),
        (0.92, "1.2 miles", 85),
    )
    COMPARABLE_COUNT = 3


# Accepted input keys for each required field
REQUIRED_FIELDS = {
    'propertyType': ('propertyType', 'property_type'),
    'bedrooms': ('bedrooms',),
    'bathrooms': ('bathrooms',),
    'areaSqft': ('areaSqft', 'area_sqft', 'area'),
    'city': ('city',),
    'state': ('state',),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


# --- Input Validation ---

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def find_missing_fields(payload: Mapping[str, Any]) -> List[str]:
    missing = []
    for field, keys in REQUIRED_FIELDS.items():
        if all(_is_blank(payload.get(key)) for key in keys):
            missing.append(field)
    return missing


def parse_property_description(
    payload: Union[PropertyDescription, Mapping[str, Any]]
) -> PropertyDescription:
    """
    Turns a flat request payload into a PropertyDescription.

    Raises MissingRequiredField when any required field is absent or blank,
    and InvalidPropertyDescription when a present value cannot be used.
    """
    if isinstance(payload, PropertyDescription):
        return payload

    missing = find_missing_fields(payload)
    if missing:
        raise MissingRequiredField(missing)

    try:
        return PropertyDescription.model_validate(dict(payload))
    except ValidationError as e:
        fields = sorted({str(err['loc'][0]) for err in e.errors() if err['loc']})
        raise InvalidPropertyDescription(f"Invalid property description: {', '.join(fields)}", fields) from e


def description_from_listing(listing) -> PropertyDescription:
    """Builds the estimator input from a stored models.Property row."""
    return parse_property_description({
        'property_type': listing.property_type,
        'bedrooms': listing.bedrooms,
        'bathrooms': listing.bathrooms,
        'area_sqft': listing.area_sqft,
        'city': listing.city,
        'state': listing.state,
        'zipcode': listing.zipcode,
        'address': listing.address,
        'year_built': listing.year_built,
        'parking_spaces': listing.parking_spaces,
        'furnished': bool(listing.furnished),
        'pet_friendly': bool(listing.pet_friendly),
        'amenities': listing.amenities or [],
    })


# --- Fallback Heuristic ---

def base_rate_per_sqft(property_type: str) -> int:
    return PricingConstants.BASE_RATE_PER_SQFT.get(property_type, PricingConstants.DEFAULT_RATE_PER_SQFT)


def city_multiplier(city: str) -> float:
    return PricingConstants.CITY_MULTIPLIERS.get(city.strip().lower(), PricingConstants.DEFAULT_CITY_MULTIPLIER)


def calculate_base_price(description: PropertyDescription) -> int:
    """areaSqft x rate for the property type x multiplier for the city, rounded."""
    return round_half_up(
        description.area_sqft
        * base_rate_per_sqft(description.property_type)
        * city_multiplier(description.city)
    )


def synthesize_comparables(base_price: float) -> List[ComparableProperty]:
    return [
        ComparableProperty(price=round_half_up(base_price * multiplier), distance=distance, similarity=similarity)
        for multiplier, distance, similarity in PricingConstants.FALLBACK_COMPARABLES
    ]


def fallback_estimate(description: PropertyDescription) -> PriceEstimate:
    """Deterministic estimate used whenever the model path is unavailable."""
    consts = PricingConstants
    base_price = calculate_base_price(description)
    return PriceEstimate(
        estimated_price=base_price,
        price_range={
            'min': round_half_up(base_price * consts.RANGE_LOW),
            'max': round_half_up(base_price * consts.RANGE_HIGH),
        },
        confidence=consts.FALLBACK_CONFIDENCE,
        factors=dict(consts.FALLBACK_FACTORS),
        comparable_properties=synthesize_comparables(base_price),
    )


# --- Model Response Handling ---

def _valid_comparables(raw_entries: List[Any]) -> List[ComparableProperty]:
    comparables = []
    for entry in raw_entries:
        if not isinstance(entry, dict):
            continue
        entry = dict(entry)
        if 'similarity' in entry:
            try:
                entry['similarity'] = clamp_score(entry['similarity'])
            except (TypeError, ValueError):
                continue
        try:
            comparables.append(ComparableProperty.model_validate(entry))
        except ValidationError:
            continue
    return comparables


def shape_model_output(output: ModelEstimateOutput) -> PriceEstimate:
    """
    Forces a validated model reply into the PriceEstimate invariants: scores
    clamped to 0-100, the range widened to contain the estimate, and exactly
    three comparables (padded from the estimate when the model gave fewer).
    """
    consts = PricingConstants
    price = output.estimated_price
    low, high = output.price_range.min, output.price_range.max
    if not all(math.isfinite(v) for v in (price, low, high)):
        raise MalformedModelResponse("Reply contains non-finite prices")
    if low > high:
        raise MalformedModelResponse(f"priceRange min {low} is above max {high}")

    confidence = consts.FALLBACK_CONFIDENCE if output.confidence is None else output.confidence
    factors = {name: clamp_score(score) for name, score in output.factors.model_dump().items()}

    comparables = _valid_comparables(output.comparable_properties)[:consts.COMPARABLE_COUNT]
    if len(comparables) < consts.COMPARABLE_COUNT:
        comparables += synthesize_comparables(price)[len(comparables):]

    return PriceEstimate(
        estimated_price=price,
        price_range={'min': min(low, price), 'max': max(high, price)},
        confidence=clamp_score(confidence),
        factors=factors,
        comparable_properties=comparables,
    )


def parse_model_response(text: str) -> PriceEstimate:
    """Strictly parses the model's reply; raises MalformedModelResponse if unusable."""
    try:
        raw = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedModelResponse(f"Reply is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise MalformedModelResponse("Reply is not a JSON object")

    try:
        output = ModelEstimateOutput.model_validate(raw)
    except ValidationError as e:
        raise MalformedModelResponse(f"Reply is missing required estimate fields: {e}") from e

    return shape_model_output(output)


# --- Orchestrator ---

class PriceEstimator:
    """Produces a PriceEstimate for a property; never fails once the input is valid."""

    def __init__(self, model_caller: ModelCaller):
        self.model_caller = model_caller

    def estimate(self, payload: Union[PropertyDescription, Mapping[str, Any]]) -> PriceEstimate:
        # 1. Reject bad input before anything goes over the wire
        description = parse_property_description(payload)

        # 2. Ask the model
        prompt = build_price_estimate_prompt(description)
        try:
            text = self.model_caller.call_model(APPRAISER_SYSTEM_INSTRUCTION, prompt)
            estimate = parse_model_response(text)
            logger.info("Model estimate for %s, %s: %.0f", description.city, description.state, estimate.estimated_price)
            return estimate
        except RemoteServiceError as e:
            logger.warning("Model service failed, using heuristic estimate: %s", e)
        except MalformedModelResponse as e:
            logger.warning("Unusable model reply, using heuristic estimate: %s", e)

        # 3. Deterministic fallback
        return fallback_estimate(description)
