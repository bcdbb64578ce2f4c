# api.py
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import auth_service
import config
import leaderboard
import logic_handler
import points_ledger
from errors import WellbeingError
from schemas import AwardRequest, MoodEntryRequest, UserRequest, WasteEventRequest


# --------- App Setup ---------
app = FastAPI(title="Campus Wellbeing Points API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------- Repository Dependency ---------
def get_repo():
    return config.get_repository()


def _ok(data, **extra):
    return {"success": True, "data": data, **extra}


# --------- Error Translation ---------
@app.exception_handler(WellbeingError)
async def wellbeing_error_handler(request: Request, exc: WellbeingError):
    print(f"[API] {request.method} {request.url.path} -> {exc.STATUS_CODE} {exc}")
    return JSONResponse(status_code=exc.STATUS_CODE, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}" for err in exc.errors()
    )
    print(f"[API] {request.method} {request.url.path} -> 400 {problems}")
    return JSONResponse(status_code=400, content={"error": "ValidationError", "message": problems})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    print(f"[API] {request.method} {request.url.path} -> 500 {exc!r}")
    return JSONResponse(status_code=500, content={"error": "InternalServerError", "message": "Internal server error"})


# --------- Health ---------
@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# --------- Users ---------
@app.post("/users")
def create_user(body: UserRequest, repo=Depends(get_repo)):
    user = auth_service.ensure_user(body.user_id, body.email, body.display_name, repo=repo)
    return _ok(user.to_dict())


@app.get("/users/{user_id}")
def get_user(user_id: str, repo=Depends(get_repo)):
    return _ok(auth_service.get_user_details(user_id, repo=repo).to_dict())


# --------- Points ---------
@app.post("/points")
def apply_award(body: AwardRequest, repo=Depends(get_repo)):
    new_total, new_level = points_ledger.apply_award(
        body.user_id, body.category, body.magnitude, reason=body.reason, repo=repo
    )
    return _ok({"user_id": body.user_id, "total_points": new_total, "level": new_level})


@app.get("/points/{user_id}")
def get_points_profile(user_id: str, repo=Depends(get_repo)):
    return _ok(points_ledger.get_profile(user_id, repo=repo))


@app.get("/points/{user_id}/history")
def get_points_history(user_id: str, limit: Optional[int] = Query(None, gt=0), repo=Depends(get_repo)):
    awards = points_ledger.get_award_history(user_id, limit=limit, repo=repo)
    return _ok([a.to_dict() for a in awards])


@app.get("/points/{user_id}/achievements")
def get_achievements(user_id: str, repo=Depends(get_repo)):
    return _ok(points_ledger.get_achievements(user_id, repo=repo))


# --------- Leaderboard ---------
@app.get("/leaderboard")
def get_leaderboard(limit: Optional[int] = None, repo=Depends(get_repo)):
    entries = leaderboard.get_leaderboard(limit=limit, repo=repo)
    return _ok([e.to_dict() for e in entries])


# --------- Mood Tracker ---------
@app.post("/moods")
def create_mood(body: MoodEntryRequest, repo=Depends(get_repo)):
    entry, result = logic_handler.log_mood(body.user_id, body.mood, body.score, body.notes, repo=repo)
    return _ok(entry.to_dict(), points=result)


@app.get("/moods/{user_id}")
def list_moods(user_id: str, limit: int = Query(logic_handler.DEFAULT_HISTORY_LIMIT, gt=0), repo=Depends(get_repo)):
    return _ok([m.to_dict() for m in logic_handler.list_moods(user_id, limit=limit, repo=repo)])


# --------- Sustainability Tracker ---------
@app.post("/waste/events")
def create_waste_event(body: WasteEventRequest, repo=Depends(get_repo)):
    event, result = logic_handler.log_waste_event(
        body.user_id, body.type, body.location, weight=body.weight, device_id=body.device_id, repo=repo
    )
    return _ok(event.to_dict(), points=result)


@app.get("/waste/events/{user_id}")
def list_waste_events(user_id: str, limit: int = Query(logic_handler.DEFAULT_HISTORY_LIMIT, gt=0), repo=Depends(get_repo)):
    return _ok([e.to_dict() for e in logic_handler.list_waste_events(user_id, limit=limit, repo=repo)])
