from fastapi import APIRouter

from routes import admin, auth, contest, registrations


router = APIRouter()

router.include_router(registrations.router)
router.include_router(contest.router)
router.include_router(auth.router)
router.include_router(admin.router)


@router.get("/alive")
async def alive():
    return "Alive"
