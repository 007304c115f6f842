import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from comments import router as comments_router
from core import config, db, errors
from follows import router as follows_router
from likes import router as likes_router
from posts import router as posts_router
from preferences import router as preferences_router
from users import router as users_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        if config.env_bool("APPLY_SCHEMA"):
            await db.apply_schema()
            logger.info("schema_applied")
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(errors.ServiceError)
async def service_error_handler(_: Request, exc: errors.ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _parameter_error(error: dict) -> str:
    # loc starts with the source ("path", "query", "body"); the rest names the field.
    name = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
    if error.get("type") in ("int_parsing", "int_type", "int_from_float"):
        return f"Parameter Error: {name} must be a number"
    return f"Parameter Error: {name}: {error.get('msg', 'is invalid')}"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    failure = errors.BadRequestError([_parameter_error(error) for error in exc.errors()])
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(posts_router.router, tags=["posts"])
app.include_router(comments_router.router, tags=["comments"])
app.include_router(likes_router.router, tags=["likes"])
app.include_router(follows_router.router, tags=["follows"])
app.include_router(preferences_router.router, tags=["preferences"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "feed api"}
