"""
API endpoints for cash appointment closure
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import CLOSURE_ACTIVATE_OFFSET_MIN
from ...database import get_db
from ...models import User
from .repository import ClosureRepository
from .schemas import ClosureCycleResult, PendingClosureResponse
from .service import run_closure_cycle

router = APIRouter(prefix="/closure", tags=["Closure"])


@router.get("/pending", response_model=list[PendingClosureResponse])
async def get_pending_closures(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Appointments awaiting closure where the current user is provider or client"""
    appointments = ClosureRepository.get_pending_closures_for_user(db, current_user.id)
    return [PendingClosureResponse.model_validate(a) for a in appointments]


@router.post("/automation/run", response_model=ClosureCycleResult)
def run_closure_automation(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Manually trigger one closure cycle
    (In production this runs on the closure cron)
    """
    result = run_closure_cycle(db, CLOSURE_ACTIVATE_OFFSET_MIN)
    return ClosureCycleResult(**result)
