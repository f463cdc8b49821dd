from typing import Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from lochub.config import load_settings
from lochub.context import AppContext, build_context
from lochub.errors import ClientError, InvalidStateError, LocHubError, RepositoryNotFoundError
from lochub.github import parse_authorization
from lochub.logging import configure_logging, get_logger, mask_sensitive_data
from lochub.models import LanguageStat, RepositoryIdentity
from lochub.pipeline import count_lines

logger = get_logger()

router = APIRouter(prefix="/v1")


def get_context(request: Request) -> AppContext:
    return request.app.state.context


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/repos/{owner}/{repo}/loc", response_model=List[LanguageStat])
def loc(
    owner: str,
    repo: str,
    authorization: Optional[str] = Header(None),
    ctx: AppContext = Depends(get_context),
):
    """Per-language code/comment/blank line counts for ``owner/repo``.

    The optional ``Authorization: Bearer <token>`` header is used both for the
    access check and to authenticate the clone.
    """
    try:
        identity = RepositoryIdentity(owner=owner, name=repo)
    except ValidationError:
        # Not a name GitHub could host
        raise RepositoryNotFoundError()
    credential = parse_authorization(authorization)
    return count_lines(ctx, identity, credential)


@router.get("/auth/login")
def login(ctx: AppContext = Depends(get_context)):
    """Issue a login state and send the user to the app installation page."""
    state = ctx.states.issue()
    settings = ctx.settings
    url = f"{settings.web_base.rstrip('/')}/apps/{settings.app_slug}/installations/select_target?" + urlencode({"state": state})
    return RedirectResponse(url, status_code=302)


@router.get("/auth/callback")
def callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
) -> Dict[str, str]:
    if not code or not state:
        raise ClientError("code and state are required")
    # Spend the state before talking to GitHub so a replayed callback can never
    # trigger a second exchange
    if not ctx.states.consume(state):
        raise InvalidStateError()
    return ctx.oauth.exchange(code)


async def _handle_lochub_error(request: Request, exc: LocHubError) -> JSONResponse:
    detail = mask_sensitive_data(exc.detail)
    if exc.status_code >= 500:
        cause = exc.__cause__
        logger.error(
            "%s %s failed: %s%s",
            request.method,
            request.url.path,
            detail,
            f" (cause: {type(cause).__name__})" if cause is not None else "",
        )
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the ASGI app around an explicit context.

    Without one, settings come from the environment (and a .env file) and the
    schema is migrated before the first request.
    """
    if context is None:
        settings = load_settings()
        configure_logging(settings.log_level)
        context = build_context(settings)

    app = FastAPI(title="lochub", version="0.1.0")
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(context.settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(LocHubError, _handle_lochub_error)
    app.include_router(router)
    return app
