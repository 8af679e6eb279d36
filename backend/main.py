# main.py
"""
The main FastAPI application file.
Serves the listings catalogue, per-user favorites, view tracking and the
AI price estimate.
"""
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Literal, Optional
import functools
import logging
import uuid

from config import settings
import models, schemas, pricing_logic, data_handler
from database import get_db, init_db, session_scope
from exceptions import EstimationRequestError
from llm_client import OllamaModelCaller

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6

app = FastAPI(
    title="Property Listings API",
    description="Browse listings, save favorites and get an AI price estimate for a property.",
    version="1.0.0"
)

# Configure CORS to allow the React frontend to communicate with the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create the tables and seed the demo listings when the application starts."""
    init_db()
    with session_scope() as db:
        data_handler.load_sample_properties(db, settings.SAMPLE_PROPERTIES_CSV)


@app.exception_handler(EstimationRequestError)
async def estimation_request_error_handler(request: Request, exc: EstimationRequestError):
    return JSONResponse(
        status_code=422,
        content=schemas.ErrorResponse(error=exc.kind, message=exc.message, fields=exc.fields).model_dump(),
    )


# --- DEPENDENCIES ---

@functools.lru_cache(maxsize=1)
def get_estimator() -> pricing_logic.PriceEstimator:
    return pricing_logic.PriceEstimator(OllamaModelCaller.from_settings(settings))


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """The auth provider is external; the signed-in user arrives as a header."""
    return x_user_id or None


def require_user_id(user_id: Optional[str] = Depends(get_current_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in required.")
    return user_id


def get_property_or_404(property_id: str, db: Session) -> models.Property:
    listing = db.get(models.Property, property_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Property not found.")
    return listing


# --- API ENDPOINTS ---

@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/properties", response_model=List[schemas.PropertyOut])
def get_properties(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[float] = Query(None, ge=0),
    min_area: Optional[int] = Query(None, ge=0),
    max_area: Optional[int] = Query(None, ge=0),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort_by: Literal["created_at", "price", "area_sqft", "bedrooms"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
):
    """
    Retrieves available listings, with optional search, filters and sorting.
    This is the primary endpoint for the browse page.
    """
    Property = models.Property
    query = db.query(Property).filter(Property.status == "available")
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Property.title.ilike(pattern),
            Property.city.ilike(pattern),
            Property.address.ilike(pattern),
        ))
    if property_type:
        query = query.filter(Property.property_type == property_type.lower())
    if city:
        query = query.filter(Property.city.ilike(f"%{city.strip()}%"))
    if bedrooms is not None:
        query = query.filter(Property.bedrooms == bedrooms)
    if bathrooms is not None:
        query = query.filter(Property.bathrooms == bathrooms)
    if min_area is not None:
        query = query.filter(Property.area_sqft >= min_area)
    if max_area is not None:
        query = query.filter(Property.area_sqft <= max_area)
    if min_price is not None:
        query = query.filter(Property.price >= min_price)
    if max_price is not None:
        query = query.filter(Property.price <= max_price)

    column = getattr(Property, sort_by)
    return query.order_by(column.asc() if sort_order == "asc" else column.desc()).all()


@app.get("/properties/featured", response_model=List[schemas.PropertyOut])
def get_featured_properties(db: Session = Depends(get_db)):
    return (
        db.query(models.Property)
        .filter(models.Property.status == "available")
        .order_by(models.Property.created_at.desc())
        .limit(FEATURED_LIMIT)
        .all()
    )


@app.get("/properties/{property_id}", response_model=schemas.PropertyOut)
def get_property(property_id: str, db: Session = Depends(get_db)):
    return get_property_or_404(property_id, db)


@app.post("/properties/{property_id}/views", response_model=schemas.PropertyViewOut, status_code=201)
def track_property_view(
    property_id: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(get_current_user_id),
    x_session_id: Optional[str] = Header(None),
):
    get_property_or_404(property_id, db)
    view = models.PropertyView(
        property_id=property_id,
        user_id=user_id,
        session_id=x_session_id or uuid.uuid4().hex,
    )
    db.add(view)
    db.commit()
    db.refresh(view)
    return view


@app.get("/properties/{property_id}/estimate", response_model=schemas.PredictionResponse)
def estimate_listing(
    property_id: str,
    db: Session = Depends(get_db),
    estimator: pricing_logic.PriceEstimator = Depends(get_estimator),
):
    """Runs the price estimate for a stored listing."""
    listing = get_property_or_404(property_id, db)
    description = pricing_logic.description_from_listing(listing)
    return {"prediction": estimator.estimate(description)}


@app.post("/predict-price", response_model=schemas.PredictionResponse)
def predict_price(
    payload: Dict[str, Any] = Body(...),
    estimator: pricing_logic.PriceEstimator = Depends(get_estimator),
):
    """
    Estimates the price of a described property.
    Missing required fields are rejected with 422; model failures are never
    surfaced, the heuristic estimate is returned instead.
    """
    logger.info("Received price prediction request for %s", payload.get("city"))
    return {"prediction": estimator.estimate(payload)}


@app.get("/favorites", response_model=List[schemas.FavoriteOut])
def get_favorites(db: Session = Depends(get_db), user_id: str = Depends(require_user_id)):
    return (
        db.query(models.UserFavorite)
        .filter(models.UserFavorite.user_id == user_id)
        .order_by(models.UserFavorite.created_at.desc())
        .all()
    )


@app.post("/favorites/{property_id}", response_model=schemas.FavoriteOut, status_code=201)
def add_favorite(property_id: str, db: Session = Depends(get_db), user_id: str = Depends(require_user_id)):
    get_property_or_404(property_id, db)
    existing = (
        db.query(models.UserFavorite)
        .filter_by(user_id=user_id, property_id=property_id)
        .first()
    )
    if existing is not None:
        raise HTTPException(status_code=409, detail="Property is already in your favorites.")

    favorite = models.UserFavorite(user_id=user_id, property_id=property_id)
    db.add(favorite)
    db.commit()
    db.refresh(favorite)
    return favorite


@app.delete("/favorites/{property_id}", status_code=204)
def remove_favorite(property_id: str, db: Session = Depends(get_db), user_id: str = Depends(require_user_id)):
    favorite = (
        db.query(models.UserFavorite)
        .filter_by(user_id=user_id, property_id=property_id)
        .first()
    )
    if favorite is None:
        raise HTTPException(status_code=404, detail="Property is not in your favorites.")
    db.delete(favorite)
    db.commit()
    return Response(status_code=204)
