from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.database import engine
from app.startup import configure_startup_logging, run_startup_checks

# ========== Payroll ==========
from modules.payroll import payroll_router
from modules.payroll.routes import register_payroll_exception_handlers

settings = get_settings()
configure_startup_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    run_startup_checks(settings, engine)
    yield
    engine.dispose()


app = FastAPI(
    title="Payroll Core API",
    description="""
    Madagascar payroll computation, approval and reconciliation.

    ## Workflow
    - **HR** creates payroll drafts; CNAPS, OSTIE and IRSA are derived from
      the gross salary and the configured rates and bracket tables
    - **Accountants** approve drafts, producing OHADA journal entries, a
      payslip serial and a signature
    - **Reconciliation** compares HR totals with approved totals per period

    ## Authentication
    Bearer JWT carrying `sub` (user id) and `roles` (`hr`, `accountant`, `admin`).
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Register exception handlers for consistent error responses
register_payroll_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(payroll_router)


@app.get("/")
def read_root():
    return {"message": "Payroll Core API", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
