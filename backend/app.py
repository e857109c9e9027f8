import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from auth import verify_token
from config import Config, load_config
from kinds import RecordKind
from mapper import to_storage, to_wire
from schemas import Checkpoint, OkResponse, PullRequest, PullResponse
from seed import ensure_settings, seed_store
from store import RecordConflict, RecordNotFound, RecordStore, build_store

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_PULL_LIMIT = 100


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_kind(collection: str) -> RecordKind:
    """Resolve the collection path segment, 404 for anything unknown."""
    kind = RecordKind.from_collection(collection)
    if kind is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return kind


@contextmanager
def store_errors(action: str):
    """Translate store failures into HTTP errors."""
    try:
        yield
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail="Record not found") from e
    except RecordConflict as e:
        raise HTTPException(status_code=409, detail=f"Record {e.record_id} already exists") from e
    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        # Keep internals out of the response
        logger.exception(f"Error in {action}: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error") from e


def check_fixed_id(kind: RecordKind, record_id, loc: tuple) -> None:
    """Reject ids other than the single one a singleton kind allows."""
    if kind.fixed_id is not None and record_id != kind.fixed_id:
        raise RequestValidationError(
            [{"type": "value_error", "loc": loc, "msg": f"{kind.value} id must be {kind.fixed_id}", "input": record_id}]
        )


def validate_document(kind: RecordKind, document: dict, loc: tuple = ("body",)) -> dict:
    """Map a wire document to its storage record, raising a 422 on bad input."""
    try:
        record = to_storage(kind, document)
    except ValidationError as e:
        errors = [{**err, "loc": (*loc, *err["loc"])} for err in e.errors(include_url=False)]
        raise RequestValidationError(errors) from e
    check_fixed_id(kind, record["id"], (*loc, "id"))
    return record


router = APIRouter(dependencies=[Depends(verify_token)])


@router.get("/verify", response_model=OkResponse)
def verify():
    """Confirm the bearer token is accepted."""
    return OkResponse(ok=True)


@router.post("/sync/{collection}/pull", response_model=PullResponse)
def sync_pull(
    pull: PullRequest | None = None,
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Return documents written after the checkpoint, oldest first.

    Without a checkpoint the whole collection is returned (up to the limit).
    Deleted records are not reported.
    """
    pull = pull or PullRequest()
    after = pull.checkpoint.sequence if pull.checkpoint else -1
    limit = pull.limit or DEFAULT_PULL_LIMIT
    logger.info(f"Sync pull for {kind.value} after sequence {after} (limit {limit})")

    with store_errors("sync pull"):
        changes = store.changes_since(kind, after, limit)
        documents = [to_wire(kind, change.record) for change in changes]

    checkpoint = pull.checkpoint
    if changes:
        last = changes[-1]
        checkpoint = Checkpoint(id=last.record["id"], sequence=last.sequence)

    logger.info(f"Sync pull returning {len(documents)} {kind.value}")
    return PullResponse(documents=documents, checkpoint=checkpoint)


@router.post("/sync/{collection}/push", response_model=OkResponse)
def sync_push(
    rows: list[dict] = Body(...),
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Apply a batch of pushed documents, last write wins.

    Rows may be bare documents or {newDocumentState, assumedMasterState}
    write rows; assumedMasterState is ignored. A document flagged
    `_deleted` removes the record.
    """
    deletes, upserts = [], []
    for index, row in enumerate(rows):
        document = row.get("newDocumentState", row)
        if not isinstance(document, dict):
            raise RequestValidationError(
                [{"type": "dict_type", "loc": ("body", index), "msg": "Document must be an object", "input": document}]
            )
        if document.get("_deleted"):
            record_id = document.get("id")
            if not isinstance(record_id, str) or not record_id:
                raise RequestValidationError(
                    [{"type": "missing", "loc": ("body", index, "id"), "msg": "Field required", "input": document}]
                )
            deletes.append(record_id)
        else:
            upserts.append(validate_document(kind, document, loc=("body", index)))

    if deletes and not kind.deletable:
        raise HTTPException(status_code=405, detail=f"{kind.value} records cannot be deleted")

    logger.info(f"Sync push for {kind.value}: {len(upserts)} upserts, {len(deletes)} deletes")
    with store_errors("sync push"):
        for record in upserts:
            store.upsert(kind, record)
        for record_id in deletes:
            try:
                store.delete(kind, record_id)
            except RecordNotFound:
                logger.info(f"Pushed delete for missing {kind.value}/{record_id}")

    return OkResponse(ok=True)


@router.get("/{collection}", response_model=list[dict])
def list_records(kind: RecordKind = Depends(get_kind), store: RecordStore = Depends(get_store)):
    """List every record in a collection."""
    logger.info(f"List request for {kind.value}")
    with store_errors("list"):
        return [to_wire(kind, record) for record in store.list(kind)]


@router.get("/{collection}/{record_id}", response_model=dict)
def get_record(
    record_id: str,
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Get one record by id."""
    with store_errors("get"):
        return to_wire(kind, store.get(kind, record_id))


@router.post("/{collection}", status_code=201, response_model=dict)
def create_record(
    document: dict = Body(...),
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Create a record; 409 if the id is already taken."""
    record = validate_document(kind, document)
    logger.info(f"Create request for {kind.value}/{record['id']}")
    with store_errors("create"):
        return to_wire(kind, store.create(kind, record))


@router.put("/{collection}/{record_id}", response_model=dict)
def upsert_record(
    record_id: str,
    document: dict = Body(...),
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Insert or fully replace a record. The path id wins over any id in the body."""
    check_fixed_id(kind, record_id, ("path", "record_id"))
    record = validate_document(kind, {**document, "id": record_id})
    logger.info(f"Upsert request for {kind.value}/{record_id}")
    with store_errors("upsert"):
        return to_wire(kind, store.upsert(kind, record))


@router.delete("/{collection}/{record_id}", response_model=OkResponse)
def delete_record(
    record_id: str,
    kind: RecordKind = Depends(get_kind),
    store: RecordStore = Depends(get_store),
):
    """Delete a record by id."""
    if not kind.deletable:
        raise HTTPException(status_code=405, detail=f"{kind.value} records cannot be deleted")

    logger.info(f"Delete request for {kind.value}/{record_id}")
    with store_errors("delete"):
        store.delete(kind, record_id)

    logger.info(f"Successfully deleted {kind.value}/{record_id}")
    return OkResponse(ok=True)


def create_app(config: Config | None = None, store: RecordStore | None = None) -> FastAPI:
    """Build the API. A store passed in is used as-is and left open at shutdown."""
    config = config or load_config()
    logging.getLogger().setLevel(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store and make sure the settings record exists."""
        owned = store is None
        app.state.store = build_store(config) if owned else store

        if config.open_mode:
            logger.warning("API_TOKEN is not set; any bearer token will be accepted")

        ensure_settings(app.state.store)
        if config.seed_sample_data:
            seed_store(app.state.store)

        logger.info("Record store ready")
        try:
            yield
        finally:
            if owned:
                app.state.store.close()

    app = FastAPI(title="TimeKiosk Sync Server", version="1.0.0", lifespan=lifespan)
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        """Health check."""
        return {"status": "TimeKiosk Sync Server Running"}

    @app.get("/time")
    def server_time():
        """Server clock, so kiosks can detect drift."""
        return {"time": datetime.now(UTC).isoformat()}

    app.include_router(router)
    return app


app = create_app()
