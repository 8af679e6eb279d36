# prompts.py
APPRAISER_SYSTEM_INSTRUCTION = (
    "You are a professional real estate appraiser and market analyst with extensive "
    "knowledge of property valuation. Always respond with valid JSON only."
)

NOT_PROVIDED = "Not provided"
NO_AMENITIES = "None specified"

PRICE_ESTIMATE_PROMPT_TEMPLATE = """
You are a real estate price prediction AI expert. Analyze the following property data and provide an accurate price estimate.

**Property Details:**
- Type: {property_type}
- Bedrooms: {bedrooms}
- Bathrooms: {bathrooms}
- Area: {area_sqft} sq ft
- Address: {address}
- Location: {city}, {state}
- ZIP Code: {zipcode}
- Year Built: {year_built}
- Parking Spaces: {parking_spaces}
- Furnished: {furnished}
- Pet Friendly: {pet_friendly}
- Amenities: {amenities}

Based on current market data and property analysis, provide:

1. Estimated market value (realistic price for current market)
2. Price range (min and max)
3. Confidence percentage (based on data completeness and market conditions)
4. Factor scores (0-100) for: location, size, bedrooms, bathrooms, amenities, market
5. 3 comparable properties with prices, distances, and similarity percentages

**JSON Schema:**
{{
  "estimatedPrice": number,
  "priceRange": {{
    "min": number,
    "max": number
  }},
  "confidence": number (70-95),
  "factors": {{
    "location": number (0-100),
    "size": number (0-100),
    "bedrooms": number (0-100),
    "bathrooms": number (0-100),
    "amenities": number (0-100),
    "market": number (0-100)
  }},
  "comparableProperties": [
    {{
      "price": number,
      "distance": "X.X miles",
      "similarity": number (75-95)
    }}
  ]
}}

Consider current market trends, location desirability, property features, and recent sales data for similar properties.
JSON Output:
"""


def _or_placeholder(value) -> str:
    return NOT_PROVIDED if value is None else str(value)


def _number(value: float) -> str:
    # 2.0 -> "2", 1.5 -> "1.5"
    return str(int(value)) if float(value).is_integer() else str(value)


def build_price_estimate_prompt(description) -> str:
    """Renders every field of a PropertyDescription into the user prompt."""
    return PRICE_ESTIMATE_PROMPT_TEMPLATE.format(
        property_type=description.property_type,
        bedrooms=description.bedrooms,
        bathrooms=_number(description.bathrooms),
        area_sqft=description.area_sqft,
        address=_or_placeholder(description.address),
        city=description.city,
        state=description.state,
        zipcode=_or_placeholder(description.zipcode),
        year_built=_or_placeholder(description.year_built),
        parking_spaces=_or_placeholder(description.parking_spaces),
        furnished="Yes" if description.furnished else "No",
        pet_friendly="Yes" if description.pet_friendly else "No",
        amenities=", ".join(description.amenities) or NO_AMENITIES,
    )
