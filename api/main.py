import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from achievements import router as achievements_router  # noqa: E402
from auth import router as auth_router  # noqa: E402
from categories import router as categories_router  # noqa: E402
from core import config, db, log  # noqa: E402
from interactions import router as interactions_router  # noqa: E402
from posts import router as posts_router  # noqa: E402
from stats import router as stats_router  # noqa: E402

log.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    logger.info("fashion_hub_started")
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="Fashion Hub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(db.StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: db.StoreUnavailableError) -> JSONResponse:
    logger.error(
        "store_unavailable method=%s path=%s error=%s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


app.include_router(auth_router.router, prefix="/api", tags=["auth"])
app.include_router(posts_router.router, prefix="/api", tags=["posts"])
app.include_router(interactions_router.router, prefix="/api", tags=["interactions"])
app.include_router(stats_router.router, prefix="/api", tags=["stats"])
app.include_router(achievements_router.router, prefix="/api", tags=["achievements"])
app.include_router(categories_router.router, prefix="/api", tags=["categories"])


@app.get("/api/health")
def health() -> dict:
    return {"status": "OK", "message": "Fashion Hub is running!"}
