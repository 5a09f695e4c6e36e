# main.py
import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from starlette.middleware.cors import CORSMiddleware
import routes
from config.cache import close_redis, get_redis
from config.settings import settings
from util.constants import API_KEY_HEADER, REQUEST_ID_HEADER
from util.enums import Color, Environment, ErrorMessage
from util.errors import AppError
from util.logger import init_logger

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger(settings)
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    logger.info(
        "startup bucket=%s region=%s stage=%s auth=%s notify=%s ratelimit=%s",
        settings.BUCKET_NAME,
        settings.AWS_REGION,
        settings.STAGE,
        settings.AUTH_ENABLED,
        settings.NOTIFICATIONS_ENABLED,
        settings.RATE_LIMIT_ENABLED,
    )
    if settings.RATE_LIMIT_ENABLED:
        try:
            redis = await get_redis()
            await FastAPILimiter.init(redis, identifier=_real_ip)
        except Exception as e:
            print("Failed to connect to Redis:", e)
            raise
    print(f"{Color.BLUE}Server Started{Color.RESET}")

    try:
        yield
    finally:
        if settings.RATE_LIMIT_ENABLED:
            try:
                await close_redis()
            except Exception as e:
                print("Error closing Redis:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(title="failure-uploader", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=settings.ALLOWED_ORIGIN != "*",
    allow_methods=["GET", "POST", "OPTIONS"],  # Allowed HTTP Methods
    allow_headers=["Content-Type", API_KEY_HEADER],  # Allowed HTTP Headers
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    logger.info(
        "request method=%s path=%s remote=%s ua=%s rid=%s",
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
        request.headers.get("user-agent", ""),
        request_id,
    )
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    info = ErrorMessage.VALIDATION_ERROR.value
    details = []
    for err in exc.errors():
        loc = [str(x) for x in err.get("loc", ()) if x != "body"]
        details.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return JSONResponse(
        status_code=info.http_status,
        content={
            "ok": False,
            "error": info.code,
            "message": info.message,
            "details": details,
        },
    )


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    info = ErrorMessage.RATE_LIMITED.value
    return JSONResponse(
        status_code=info.http_status,
        content={"ok": False, "error": info.code, "message": info.message},
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "request.unhandled path=%s err=%s", request.url.path, type(exc).__name__
    )
    info = ErrorMessage.INTERNAL_ERROR.value
    return JSONResponse(
        status_code=info.http_status,
        content={"ok": False, "error": info.code, "message": info.message},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.STAGE == Environment.DEV
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=reload)
