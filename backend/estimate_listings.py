# estimate_listings.py
"""
Estimates every stored listing and appends the results to a CSV report.
Re-running the script skips listings that are already in the report.
"""
import argparse
import logging
import os

import pandas as pd
from sqlalchemy.orm import Session
from tqdm import tqdm

import models
from config import settings
from database import init_db, session_scope
from exceptions import EstimationRequestError
from llm_client import OllamaModelCaller
from pricing_logic import PriceEstimator, description_from_listing

logger = logging.getLogger(__name__)

BATCH_SIZE = 20 # Save every 20 listings so an interrupted run loses little work

REPORT_COLUMNS = [
    'property_id', 'title', 'city', 'list_price', 'estimated_price',
    'price_min', 'price_max', 'confidence', 'price_gap_pct',
]


def already_estimated_ids(output_filepath: str) -> set:
    if not os.path.exists(output_filepath):
        return set()
    try:
        df_existing = pd.read_csv(output_filepath, dtype={'property_id': str})
    except pd.errors.EmptyDataError:
        logger.info("Output file exists but is empty. Starting from scratch.")
        return set()
    return set(df_existing['property_id'].unique())


def estimate_row(listing: models.Property, estimator: PriceEstimator) -> dict:
    estimate = estimator.estimate(description_from_listing(listing))
    # Positive gap means the asking price is above the estimate
    gap = (listing.price - estimate.estimated_price) / estimate.estimated_price * 100
    return {
        'property_id': listing.id,
        'title': listing.title,
        'city': listing.city,
        'list_price': listing.price,
        'estimated_price': estimate.estimated_price,
        'price_min': estimate.price_range.min,
        'price_max': estimate.price_range.max,
        'confidence': estimate.confidence,
        'price_gap_pct': round(gap, 2),
    }


def process_in_batches(
    db: Session,
    estimator: PriceEstimator,
    output_filepath: str,
    status: str = "available",
    batch_size: int = BATCH_SIZE,
) -> int:
    """
    Estimates listings with the given status that are not yet in the report and
    appends them batch by batch. Returns the number of listings estimated.
    """
    processed_ids = already_estimated_ids(output_filepath)
    if processed_ids:
        logger.info("Found %d listings already estimated. They will be skipped.", len(processed_ids))

    query = db.query(models.Property).order_by(models.Property.created_at, models.Property.id)
    if status:
        query = query.filter(models.Property.status == status)
    to_process = [listing for listing in query.all() if listing.id not in processed_ids]

    if not to_process:
        logger.info("No new listings to estimate. The report is up to date.")
        return 0

    logger.info("Found %d new listings to estimate.", len(to_process))
    estimated = 0
    for i in tqdm(range(0, len(to_process), batch_size), desc="Estimating listings"):
        batch = to_process[i:i + batch_size]
        rows = []
        for listing in batch:
            try:
                rows.append(estimate_row(listing, estimator))
            except EstimationRequestError as e:
                # A listing the estimator rejects is skipped; the rest of the batch continues
                logger.warning("Could not estimate property %s: %s", listing.id, e)
        batch_df = pd.DataFrame(rows, columns=REPORT_COLUMNS)

        # Header only when the file is first created
        is_new_file = not os.path.exists(output_filepath)
        batch_df.to_csv(output_filepath, mode='a', header=is_new_file, index=False)
        estimated += len(rows)
        tqdm.write(f"Batch {i // batch_size + 1} completed and saved.")

    return estimated


def main():
    """Main function to parse arguments and orchestrate the process."""
    parser = argparse.ArgumentParser(description="Estimate prices for stored property listings.")
    parser.add_argument("--status", default="available", choices=["available", "sold", "pending"],
                        help="Only estimate listings with this status.")
    parser.add_argument("--output", default=settings.ESTIMATES_CSV, help="CSV report to append to.")
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    init_db()
    estimator = PriceEstimator(OllamaModelCaller.from_settings(settings))
    with session_scope() as db:
        count = process_in_batches(db, estimator, args.output, args.status, args.batch_size)
    logger.info("Estimated %d listings. Report: %s", count, args.output)


if __name__ == "__main__":
    main()
