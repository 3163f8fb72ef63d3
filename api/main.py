import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from auth import router as auth_router
from contacts import router as contacts_router
from core import config, db
from crud import CrudError, Forbidden, NoFieldsProvided, NotFound
from images import router as images_router
from images import service as images_service
from phone_numbers import router as phone_numbers_router
from users import router as users_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first.
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (NotFound, 404),
    (Forbidden, 403),
    (NoFieldsProvided, 400),
    (db.UniqueViolation, 409),
    (db.StoreError, 500),
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    images_service.upload_dir().mkdir(parents=True, exist_ok=True)
    try:
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


async def crud_error_handler(_: Request, exc: Exception) -> JSONResponse:
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
    if status_code >= 500:
        # Store details stay in the log.
        logger.error("request_failed error=%s", exc)
        return JSONResponse(status_code=status_code, content={"detail": "Internal server error."})
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.add_exception_handler(CrudError, crud_error_handler)
app.add_exception_handler(db.StoreError, crud_error_handler)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(contacts_router.router, tags=["contacts"])
app.include_router(phone_numbers_router.router, tags=["phone-numbers"])
app.include_router(images_router.router, tags=["images"])

app.mount(
    "/uploads",
    StaticFiles(directory=str(images_service.upload_dir()), check_dir=False),
    name="uploads",
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "Welcome to Contact Management API"}
