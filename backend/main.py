import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, Header, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

import config
import feed
import matching
import messaging
import scheduling
from database import create_db_and_tables, engine, get_session
from errors import (
    AuthorizationError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)
from import_courses import seed_courses
from models import (
    Course,
    Message,
    MessageCreate,
    PostCreate,
    SwipeCreate,
    TeeTime,
    TeeTimeCreate,
    User,
    UserCreate,
    UserUpdate,
)
from storage import Storage, SQLStorage

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    if config.SEED_COURSES:
        with Session(engine) as session:
            seed_courses(SQLStorage(session))
    logger.info("TeeMatch API starting up")
    yield
    logger.info("TeeMatch API shutting down")


app = FastAPI(title="TeeMatch", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# Error mapping
# ------------------------------------------------------------------------------

def _error(status_code: int, exc) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return _error(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return _error(status.HTTP_401_UNAUTHORIZED, exc)


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ------------------------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------------------------

def get_storage(session: Session = Depends(get_session)) -> Storage:
    return SQLStorage(session)


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
    storage: Storage = Depends(get_storage),
) -> int:
    """
    The authenticated user's id, as set by the upstream auth layer in the
    X-User-Id header.
    """
    if x_user_id is None:
        raise NotAuthenticatedError("Not authenticated")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise NotAuthenticatedError("Invalid user id")
    if not storage.get_user(user_id):
        raise NotAuthenticatedError("Unknown user")
    return user_id


# ------------------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------------------

@app.get("/")
def read_root():
    return {"message": "TeeMatch API is running"}


@app.post("/api/users", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, storage: Storage = Depends(get_storage)):
    if storage.get_user_by_username(payload.username):
        raise ValidationError("Username already exists")
    return storage.create_user(User.model_validate(payload))


@app.get("/api/user", response_model=User)
def get_current_user(
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return storage.get_user(user_id)


@app.put("/api/user", response_model=User)
def update_current_user(
    payload: UserUpdate,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    user = storage.update_user(user_id, payload.model_dump(exclude_unset=True))
    if not user:
        raise NotFoundError("User not found")
    return user


@app.get("/api/profiles", response_model=List[User])
def get_profiles_for_swiping(
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    """Everyone the current user has not swiped on yet."""
    return matching.candidates_for(storage, user_id)


@app.post("/api/swipe")
def create_swipe(
    payload: SwipeCreate,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    swipe, match = matching.swipe(storage, user_id, payload.swipee_id, payload.direction)
    return {"swipe": swipe, "match": match}


@app.get("/api/matches")
def get_matches(
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return matching.matches_for(storage, user_id)


@app.get("/api/matches/{match_id}/messages", response_model=List[Message])
def get_messages(
    match_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return messaging.list_messages(storage, match_id, user_id)


@app.post(
    "/api/matches/{match_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    match_id: int,
    payload: MessageCreate,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return messaging.send_message(storage, match_id, user_id, payload.content)


@app.post("/api/matches/{match_id}/messages/read")
def mark_messages_read(
    match_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return {"updated": messaging.mark_read(storage, match_id, user_id)}


@app.get("/api/courses", response_model=List[Course])
def get_courses(storage: Storage = Depends(get_storage)):
    return storage.list_courses()


@app.get("/api/courses/{course_id}", response_model=Course)
def get_course(course_id: int, storage: Storage = Depends(get_storage)):
    course = storage.get_course(course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


@app.get("/api/tee-times")
def get_tee_times(
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return scheduling.tee_times_for(storage, user_id)


@app.post("/api/tee-times", response_model=TeeTime, status_code=status.HTTP_201_CREATED)
def create_tee_time(
    payload: TeeTimeCreate,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return scheduling.propose_activity(
        storage, payload.course_id, payload.date, user_id, payload.participants
    )


@app.get("/api/posts")
def get_posts(storage: Storage = Depends(get_storage)):
    return feed.list_posts(storage)


@app.get("/api/users/{user_id}/posts")
def get_user_posts(user_id: int, storage: Storage = Depends(get_storage)):
    return feed.user_posts(storage, user_id)


@app.post("/api/posts", status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    user_id: int = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return feed.create_post(
        storage,
        user_id,
        payload.content,
        image_url=payload.image_url,
        course_id=payload.course_id,
        score=payload.score,
        played_date=payload.played_date,
    )
