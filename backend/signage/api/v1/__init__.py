from fastapi import APIRouter

from signage.api.v1.schedules import router as schedules_router
from signage.api.v1.resolve import router as resolve_router
from signage.api.v1.assignments import router as assignments_router
from signage.api.v1.dayparts import router as dayparts_router

router = APIRouter()
router.include_router(schedules_router)
router.include_router(resolve_router)
router.include_router(assignments_router)
router.include_router(dayparts_router)
