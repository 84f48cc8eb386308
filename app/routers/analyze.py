import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.errors import InvalidUrl, SiteAnalyzerError
from app.models.request import AnalyzeRequest
from app.models.response import AnalyzeResponse, SessionResponse
from app.services.loader import derive_base_url, load
from app.services.presenter import present_all
from app.services.sanitizer import sanitize
from app.services.session import AnalyzerSession

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def get_session(request: Request) -> AnalyzerSession:
    return request.app.state.session


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="Analyze a site from its site.json manifest",
    description=(
        "Normalises the user-entered *url* into the site's `site.json` "
        "location, fetches the manifest, and returns the site overview "
        "together with one card per content page.  Every relative link in "
        "the manifest is resolved against the manifest's scheme and host."
    ),
)
@limiter.limit("10/minute")
async def analyze(request: Request, body: AnalyzeRequest) -> AnalyzeResponse:
    logger.info("Analyze request received", extra={"url": body.url})

    try:
        canonical_url = sanitize(body.url)
    except InvalidUrl as exc:
        logger.warning("Rejected site location %r – %s", body.url, exc)
        raise HTTPException(status_code=exc.status_code, detail=exc.to_detail())

    session = get_session(request)
    try:
        site_metadata, items = await load(session, canonical_url, raw_url=body.url)
    except SiteAnalyzerError as exc:
        logger.error("Error loading manifest %s: %s", canonical_url, exc)
        raise HTTPException(status_code=exc.status_code, detail=exc.to_detail())

    # Base URL of this load, not the session's: a newer load may have started
    base_url = derive_base_url(canonical_url)
    return AnalyzeResponse(
        url=canonical_url,
        base_url=base_url,
        site=site_metadata,
        total_pages=len(items),
        cards=present_all(items, site_metadata, base_url),
    )


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current analyzer state",
    description=(
        "Returns the overview and cards of the last completed load, the "
        "`loading` flag, and the last error message.  Cards are rebuilt on "
        "every call against the base URL of the load that produced them."
    ),
)
async def read_session(request: Request) -> SessionResponse:
    session = get_session(request)
    return SessionResponse(
        loading=session.loading,
        raw_url=session.raw_url,
        url=session.committed_url,
        base_url=session.committed_base_url,
        site=session.site_metadata,
        total_pages=len(session.items),
        cards=present_all(session.items, session.site_metadata, session.committed_base_url),
        error=session.error,
    )
