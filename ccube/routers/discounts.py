# ccube/routers/discounts.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ccube.database import get_session
from ccube.repositories.discount_repo import DiscountRepository
from ccube.schemas.discount import PromotionRule
from ccube.services.discount_service import DiscountService

router = APIRouter(prefix="/discounts", tags=["Discounts"])

service = DiscountService(DiscountRepository())


@router.get("", response_model=list[PromotionRule])
def list_active_discounts(session: Session = Depends(get_session)):
    """
    List active promotion rules. Invalid rule records are left out.
    """
    return service.list_active_rules(session)
