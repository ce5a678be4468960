from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import settings
from app.core.rate_limiter import limiter
from app.db.session import get_db
from app.db.unit_of_work import UnitOfWork
from app.models.seller import Seller
from app.repositories.seller import SellerRepository
from app.schemas.seller import SellerCreate, SellerResponse
from app.utils.response import paginated_response, success

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit("100/minute")
def list_sellers(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=1000),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    sellers, total = SellerRepository(db).list(
        search=search.strip() if search else None,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return paginated_response(
        items=[SellerResponse.model_validate(seller).model_dump() for seller in sellers],
        total=total,
        page=page,
        limit=limit,
    )


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_seller(
    request: Request,
    payload: SellerCreate,
    db: Session = Depends(get_db),
):
    with UnitOfWork(db, name="create_seller"):
        seller = SellerRepository(db).add(Seller(**payload.model_dump(), is_active=True))
        seller_id = seller.id

    seller = SellerRepository(db).get(seller_id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success(data=SellerResponse.model_validate(seller).model_dump(), message="Seller created"),
    )
