from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from apps.api.deps import get_blob_store, get_current_identity, get_settings
from domain.models import Identity, StoredBlob
from services.persistence.object_store import LocalObjectStore, ObjectStoreError, safe_key

router = APIRouter(tags=["storage"])


@router.put("/storage/{key:path}", response_model=StoredBlob, status_code=status.HTTP_201_CREATED)
async def upload_blob(
    key: str,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    store: LocalObjectStore = Depends(get_blob_store),
    cfg=Depends(get_settings),
):
    ctype = (request.headers.get("content-type") or "").split(";")[0].strip().lower()
    if ctype not in cfg.ALLOWED_MIME:
        raise HTTPException(400, f"unsupported content-type: {ctype or 'missing'}")

    data = await request.body()
    if not data:
        raise HTTPException(400, "empty upload")
    if len(data) > cfg.MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(413, f"upload exceeds {cfg.MAX_UPLOAD_MB} MB")

    try:
        key = safe_key(key)
        url = store.put(key, data)
    except ObjectStoreError as e:
        raise HTTPException(400, str(e)) from e
    except OSError as e:
        raise HTTPException(500, f"storage error: {e}") from e
    return StoredBlob(key=key, url=url)


@router.get("/media/{key:path}")
def download_blob(key: str, store: LocalObjectStore = Depends(get_blob_store)):
    try:
        path, ctype = store.open(key)
    except (ObjectStoreError, FileNotFoundError):
        raise HTTPException(404, "blob not found")
    return FileResponse(path, media_type=ctype)
