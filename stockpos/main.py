# stockpos/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockpos.config import settings
from stockpos.database import init_db
from stockpos.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    StockPosError,
    ValidationInputError,
)

from stockpos.routes.auth import router as auth_router
from stockpos.routes.users import router as users_router
from stockpos.routes.categories import router as categories_router
from stockpos.routes.products import router as products_router
from stockpos.routes.sales import router as sales_router
from stockpos.routes.stock import router as stock_router
from stockpos.routes.validations import router as validations_router
from stockpos.routes.stats import router as stats_router
from stockpos.routes.reports import router as reports_router
from stockpos.routes.settings import router as settings_router
from stockpos.routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATUS_CODES = {
    PermissionDeniedError: 403,
    InvalidStateError: 409,
    NotFoundError: 404,
    InsufficientStockError: 409,
    ConflictError: 409,
    ValidationInputError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="StockPOS API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StockPosError)
async def stockpos_error_handler(request: Request, exc: StockPosError):
    status_code = next((code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 400)
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, status_code, exc.code)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Router registration
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(sales_router)
app.include_router(stock_router)
app.include_router(validations_router)
app.include_router(stats_router)
app.include_router(reports_router)
app.include_router(settings_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "StockPOS API is running"}
