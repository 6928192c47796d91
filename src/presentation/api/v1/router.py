from fastapi import APIRouter

from .analysis import analysis_router
from .credit import credit_router
from .health import health_router
from .transactions import transactions_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(analysis_router, tags=["Analysis"])
router.include_router(transactions_router, tags=["Transactions"])
router.include_router(credit_router, tags=["Credit"])
