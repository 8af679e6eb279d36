# data_handler.py
"""
Handles loading of the demo listings into the database at application startup.
"""
import json
import logging
import math

import pandas as pd
from sqlalchemy.orm import Session

import models

logger = logging.getLogger(__name__)

JSON_LIST_COLUMNS = ['images', 'amenities']
BOOL_COLUMNS = ['furnished', 'pet_friendly']
INT_COLUMNS = ['area_sqft', 'bedrooms', 'year_built', 'parking_spaces']


def _clean_value(column: str, value):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return [] if column in JSON_LIST_COLUMNS else None
    if column in JSON_LIST_COLUMNS:
        return json.loads(value) if isinstance(value, str) else list(value)
    if column in BOOL_COLUMNS:
        return str(value).strip().lower() in ('true', '1', 'yes')
    if column in INT_COLUMNS:
        return int(value)
    return value


def read_sample_properties(csv_path: str) -> list:
    """Reads the listings CSV into a list of dicts ready for models.Property(**row)."""
    df = pd.read_csv(csv_path, dtype={'zipcode': str, 'agent_contact': str})
    return [
        {column: _clean_value(column, value) for column, value in record.items()}
        for record in df.to_dict(orient='records')
    ]


def load_sample_properties(db: Session, csv_path: str) -> int:
    """Seeds the properties table from CSV if it is empty. Returns the number of rows added."""
    if db.query(models.Property).first() is not None:
        logger.info("Properties table already populated, skipping sample data.")
        return 0

    try:
        rows = read_sample_properties(csv_path)
    except FileNotFoundError:
        logger.warning("Sample data file '%s' not found, starting with an empty catalogue.", csv_path)
        return 0

    db.add_all(models.Property(**row) for row in rows)
    db.commit()
    logger.info("Loaded %d sample properties from %s", len(rows), csv_path)
    return len(rows)
