import warnings

import pytest

import schemas
from conftest import make_listing


@pytest.mark.parametrize("model", [schemas.PropertyOut, schemas.FavoriteOut, schemas.PropertyViewOut])
def test_orm_output_models_read_attributes(model):
    assert model.model_config.get('from_attributes') is True


def test_property_out_from_orm_row(db_session):
    listing = make_listing(title='Garden Flat', amenities=['Garden'])
    db_session.add(listing)
    db_session.commit()

    with warnings.catch_warnings():
        warnings.simplefilter('error')
        out = schemas.PropertyOut.model_validate(listing)

    assert out.id == listing.id
    assert out.amenities == ['Garden']
    assert out.status == 'available'
    assert out.parking_spaces == 0


def test_estimate_serialises_with_camel_case_keys():
    estimate = schemas.PriceEstimate(
        estimated_price=100,
        price_range={'min': 90, 'max': 110},
        confidence=80,
        factors={'location': 1, 'size': 2, 'bedrooms': 3, 'bathrooms': 4, 'amenities': 5, 'market': 6},
        comparable_properties=[{'price': 100, 'distance': '1.0 miles', 'similarity': 90}] * 3,
    )

    dumped = estimate.model_dump(by_alias=True)

    assert set(dumped) == {'estimatedPrice', 'priceRange', 'confidence', 'factors', 'comparableProperties'}
