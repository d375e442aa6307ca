import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db.schema import init_db
from .engines.interviews.errors import ErrorKind, InterviewPipelineError
from .routers import (
    health,
    interviews,
    profile,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.INTERVIEW_NOT_FOUND: 404,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.EMPTY_RESPONSE: 502,
    ErrorKind.MALFORMED_OUTPUT: 502,
    ErrorKind.PERSISTENCE_ERROR: 500,
}

app = FastAPI(title="AI Career Coach API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InterviewPipelineError)
async def pipeline_error_handler(request: Request, exc: InterviewPipelineError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.kind, 500)
    logger.warning("%s %s -> %d (%s)", request.method, request.url.path, status_code, exc.kind.value)
    # Raw model output stays in the server log, never in the response.
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )


@app.on_event("startup")
async def startup() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()


app.include_router(health.router)
app.include_router(profile.router)
app.include_router(interviews.router)


@app.get("/")
def root():
    return {"message": "AI Career Coach API", "docs": "/docs"}


def serve() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
