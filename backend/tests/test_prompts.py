from prompts import NO_AMENITIES, NOT_PROVIDED, build_price_estimate_prompt
from schemas import PropertyDescription


def describe(**overrides):
    fields = dict(
        property_type='house', bedrooms=3, bathrooms=2.5, area_sqft=1800,
        city='Denver', state='CO',
    )
    fields.update(overrides)
    return PropertyDescription(**fields)


def test_renders_every_field():
    prompt = build_price_estimate_prompt(describe(
        zipcode='80202', address='12 Pine St', year_built=1998, parking_spaces=2,
        furnished=True, pet_friendly=False, amenities=['Pool', 'Gym'],
    ))

    assert '- Type: house' in prompt
    assert '- Bedrooms: 3' in prompt
    assert '- Bathrooms: 2.5' in prompt
    assert '- Area: 1800 sq ft' in prompt
    assert '- Address: 12 Pine St' in prompt
    assert '- Location: Denver, CO' in prompt
    assert '- ZIP Code: 80202' in prompt
    assert '- Year Built: 1998' in prompt
    assert '- Parking Spaces: 2' in prompt
    assert '- Furnished: Yes' in prompt
    assert '- Pet Friendly: No' in prompt
    assert '- Amenities: Gym, Pool' in prompt


def test_missing_optional_fields_use_placeholder():
    prompt = build_price_estimate_prompt(describe())

    for label in ('Address', 'ZIP Code', 'Year Built', 'Parking Spaces'):
        assert f'- {label}: {NOT_PROVIDED}' in prompt
    assert f'- Amenities: {NO_AMENITIES}' in prompt


def test_zero_parking_is_not_a_placeholder():
    prompt = build_price_estimate_prompt(describe(parking_spaces=0))

    assert '- Parking Spaces: 0' in prompt


def test_whole_bathrooms_render_without_decimal():
    assert '- Bathrooms: 2\n' in build_price_estimate_prompt(describe(bathrooms=2.0))


def test_prompt_is_stable_for_equal_descriptions():
    first = build_price_estimate_prompt(describe(amenities=['Pool', 'Gym']))
    second = build_price_estimate_prompt(describe(amenities=['Gym', 'Pool', 'Gym']))

    assert first == second


def test_asks_for_json_schema():
    prompt = build_price_estimate_prompt(describe())

    assert '"estimatedPrice": number' in prompt
    assert '"comparableProperties": [' in prompt
