import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from db import init_db
from predictor.routes import router as predictor_router

logging.basicConfig(level=logging.INFO)
logging.info("App starting with DATABASE_URL")

app = FastAPI(title="College Predictor API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", []) if part != "body")
    message = first.get("msg", "Invalid request")
    logging.warning(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"{field}: {message}" if field else message},
    )


@app.on_event("startup")
def on_startup():
    init_db()
    logging.info("Catalog tables ready")


app.include_router(predictor_router)


@app.get("/", tags=["health"])
def root():
    return {"message": "College Predictor API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=False)
