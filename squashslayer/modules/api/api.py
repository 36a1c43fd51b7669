import threading
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
import fastapi_swagger_dark as fsd

from squashslayer.config import API_WORKDIR
from squashslayer.errors import ExtractionError, ListingError, ImageClosedError, FragmentBuildError
from squashslayer.modules.keepers.image_store import SquashfsImage
from squashslayer.modules.keepers.tools import SquashfsTools


app = FastAPI(
    title="squashslayer API",
    docs_url=None,
    description="""
**squashslayer API**
* Open SquashFS images, read their pseudo files, build fragments
    """,
    version="0.1.0"
    )

# Create a router for the dark docs
router = APIRouter()

# Install dark theme on the router
fsd.install(router)

# Include the router in the app
app.include_router(router)

# Opened images by id
_images: dict[str, SquashfsImage] = {}
_images_lock = threading.Lock()


# =============================================================================
# Request Models
# =============================================================================

class OpenImageRequest(BaseModel):
    image_path: str


class PseudofileRequest(BaseModel):
    paths: list[str]
    with_parents: bool = False


class FragmentRequest(BaseModel):
    paths: list[str]
    output_path: str
    with_parents: bool = False


# =============================================================================
# Dependencies
# =============================================================================

def get_tools() -> SquashfsTools:
    return SquashfsTools()


def get_workdir() -> Optional[str]:
    return API_WORKDIR


def _get_image(image_id: str) -> SquashfsImage:
    with _images_lock:
        image = _images.get(image_id)
    if image is None:
        raise HTTPException(status_code=404, detail=f"Unknown image id: {image_id}")
    return image


def _summary(image_id: str, image: SquashfsImage) -> dict:
    return {
        "id": image_id,
        "image_path": str(image.image_path),
        "entries": image.entry_count,
        "skipped_lines": image.skipped_lines,
    }


# =============================================================================
# Endpoints
# =============================================================================

@app.post("/images")
def open_image(
    request: OpenImageRequest,
    tools: SquashfsTools = Depends(get_tools),
    workdir: Optional[str] = Depends(get_workdir),
):
    """
    ## /images

    Extract an image and parse its listing.

    - Returns the new image id and its entry count.
    """
    try:
        image = SquashfsImage.open(request.image_path, tools=tools, workdir=workdir)
    except (ExtractionError, ListingError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    image_id = uuid.uuid4().hex[:12]
    with _images_lock:
        _images[image_id] = image
    return _summary(image_id, image)


@app.get("/images")
def list_images():
    """
    ## /images

    List images currently open.
    """
    with _images_lock:
        opened = list(_images.items())
    return [_summary(image_id, image) for image_id, image in opened]


@app.get("/images/{image_id}/files")
def image_files(image_id: str):
    """
    ## /images/{id}/files

    Paths of every non-directory entry, in listing order.
    """
    image = _get_image(image_id)
    try:
        return image.files()
    except ImageClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/images/{image_id}/pseudofile", response_class=PlainTextResponse)
def image_pseudofile(image_id: str):
    """
    ## /images/{id}/pseudofile

    Pseudo file for the whole image, as plain text.
    """
    image = _get_image(image_id)
    try:
        return image.pseudofile()
    except ImageClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/images/{image_id}/pseudofile", response_class=PlainTextResponse)
def image_pseudofile_fragment(image_id: str, request: PseudofileRequest):
    """
    ## /images/{id}/pseudofile

    Pseudo file restricted to the requested paths.

    - Set `with_parents` to include the parent directories' metadata lines.
    """
    image = _get_image(image_id)
    try:
        return image.pseudofile_fragment(request.paths, with_parents=request.with_parents)
    except ImageClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/images/{image_id}/fragment")
def image_fragment(image_id: str, request: FragmentRequest):
    """
    ## /images/{id}/fragment

    Repack the requested paths into a new image at `output_path`.

    - Blocks until mksquashfs finishes.
    - Builds sharing an output directory must not run at the same time.
    """
    image = _get_image(image_id)
    try:
        output = image.build_fragment(
            request.paths,
            request.output_path,
            with_parents=request.with_parents,
        )
    except ImageClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except FragmentBuildError as e:
        raise HTTPException(status_code=500, detail=f"{e} {e.stderr}".strip())
    return {"output_path": str(output)}


@app.delete("/images/{image_id}")
def close_image(image_id: str):
    """
    ## /images/{id}

    Close an image and remove its staging tree.
    """
    with _images_lock:
        image = _images.pop(image_id, None)
    if image is None:
        raise HTTPException(status_code=404, detail=f"Unknown image id: {image_id}")
    image.close()
    return {"id": image_id, "closed": True}
