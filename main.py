import os
from contextlib import asynccontextmanager

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import check_connection, get_session_context, init_db
from logging_config import configure_logging
from routers import invoices_router, payments_router
from seed import seed_demo_data
from services.errors import (
     InvoiceError,
     NotFoundError,
     OverpaymentError,
     StateConflictError,
     ValidationError,
)

# Load .env
load_dotenv()
configure_logging()

logger = structlog.get_logger(__name__)


def _env_flag(name: str) -> bool:
     return os.getenv(name, "false").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI):
     if _env_flag("INIT_DB"):
          init_db()
          logger.info("database_initialized")
     if _env_flag("SEED_DEMO_DATA"):
          with get_session_context() as db:
               seed_demo_data(db)
     if not check_connection():
          logger.warning("database_unreachable_at_startup")
     yield


# App instance
app = FastAPI(title="FieldBill Invoicing API", lifespan=lifespan)

# CORS
origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
app.add_middleware(
     CORSMiddleware,
     allow_origins=origins,
     allow_credentials=True,
     allow_methods=["*"],
     allow_headers=["*"],
)


# Domain error mapping
_STATUS_CODES = {
     ValidationError: status.HTTP_400_BAD_REQUEST,
     NotFoundError: status.HTTP_404_NOT_FOUND,
     StateConflictError: status.HTTP_409_CONFLICT,
     OverpaymentError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(InvoiceError)
async def invoice_error_handler(request: Request, exc: InvoiceError):
     content = {"error": exc.error_code, "detail": exc.detail}
     if isinstance(exc, StateConflictError):
          content["current_status"] = exc.current_status
     if isinstance(exc, OverpaymentError):
          content["remaining_balance"] = str(exc.remaining_balance)

     status_code = _STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
     logger.info(
          "request_rejected",
          path=request.url.path,
          error=exc.error_code,
          detail=exc.detail,
          status_code=status_code,
     )
     return JSONResponse(status_code=status_code, content=content)


app.include_router(invoices_router)
app.include_router(payments_router)


@app.get("/api/health")
def health():
     return {"status": "ok", "database": check_connection()}


# 404 Fallback Middleware
@app.middleware("http")
async def not_found_middleware(request: Request, call_next):
     try:
          response = await call_next(request)
          # Only unmatched paths; domain 404s keep their own body
          if response.status_code == 404 and "endpoint" not in request.scope:
               return JSONResponse(status_code=404, content={"error": "Route not found"})
          return response
     except Exception as e:
          logger.exception("unhandled_request_error", path=request.url.path, error=str(e))
          return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
     port = int(os.getenv("PORT", 10000))
     uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
