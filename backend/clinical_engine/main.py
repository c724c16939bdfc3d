"""
Clinical Derivation Engine API
Deterministic weight-management planning, pressure-injury risk scoring and wound trend analysis.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import policy, risk, weight, wounds
from .core.config import settings
from .core.exceptions import ClinicalDerivationError
from .core.request_logging import RequestLogMiddleware

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clinical Derivation Engine API",
    description=(
        "Pure computation endpoints turning validated patient measurements into "
        "risk classifications, calorie targets, trend judgments and care recommendations. "
        "Nothing is persisted."
    ),
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLogMiddleware)


@app.exception_handler(ClinicalDerivationError)
async def clinical_error_handler(request: Request, exc: ClinicalDerivationError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": exc.to_dict()})


app.include_router(weight.router, prefix="/api/v1")
app.include_router(risk.router, prefix="/api/v1")
app.include_router(wounds.router, prefix="/api/v1")
app.include_router(policy.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}
