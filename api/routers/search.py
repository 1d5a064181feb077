"""
Search router: faceted photo search and file/photo lookups.

"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.database import get_photo_search, run_sync
from search import CriteriaError, NotFoundError, PhotoSearch, QueryError

router = APIRouter(prefix="/api", tags=["search"])


async def _call(fn, *args):
    """Run a PhotoSearch call, mapping search errors to HTTP errors."""
    try:
        return await run_sync(fn, *args)
    except CriteriaError as e:
        raise HTTPException(status_code=400, detail={'message': str(e), 'errors': e.errors})
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QueryError:
        raise HTTPException(status_code=500, detail='Internal server error')


@router.get("/search")
async def api_search(request: Request, finder: PhotoSearch = Depends(get_photo_search)):
    """Faceted photo search; query parameters are SearchCriteria fields."""
    qp = dict(request.query_params)
    results = await _call(finder.photos, qp)
    return results.model_dump()


@router.get("/files")
async def api_files(
    limit: int = Query(100),
    offset: int = Query(0),
    finder: PhotoSearch = Depends(get_photo_search),
):
    """List files without filtering."""
    files = await _call(finder.find_files, limit, offset)
    return [f.model_dump() for f in files]


@router.get("/files/hash/{file_hash}")
async def api_file_by_hash(file_hash: str, finder: PhotoSearch = Depends(get_photo_search)):
    file = await _call(finder.find_file_by_hash, file_hash)
    return file.model_dump()


@router.get("/files/{file_id}")
async def api_file(file_id: int, finder: PhotoSearch = Depends(get_photo_search)):
    file = await _call(finder.find_file_by_id, file_id)
    return file.model_dump()


@router.get("/photos/{photo_id}")
async def api_photo(photo_id: int, finder: PhotoSearch = Depends(get_photo_search)):
    photo = await _call(finder.find_photo_by_id, photo_id)
    return photo.model_dump()
