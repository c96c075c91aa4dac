"""
Main application entry point.

Serves the configured error log read-only over HTTP as JSON.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from errorlog.core.domain.entry import ErrorLogEntry
from errorlog.core.error_log import ErrorLog
from errorlog.core.exceptions import InvalidArgumentError, StorageError
from errorlog.core.xml_codec import encode_string

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 100


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the error log from configuration unless one was supplied.
    """
    if getattr(app.state, "error_log", None) is None:
        try:
            from errorlog.config import get_config
            from errorlog.stores.factory import create_error_log
            from errorlog.utils.logging_config import setup_logging

            config = get_config()
            setup_logging(config.log_level, structured=config.structured_logs)
            logger.info("✓ Configuration loaded")

            app.state.error_log = create_error_log(config)
            logger.info(f"✓ {app.state.error_log.name} ready")
        except Exception as e:
            logger.error(f"Failed to start application: {e}", exc_info=True)
            raise

    yield

    logger.info("Error Log Service Shutting Down...")


def _get_error_log(request: Request) -> ErrorLog:
    return request.app.state.error_log


def _sorted(values: Mapping[str, str]) -> Dict[str, str]:
    return {key: values[key] for key in sorted(values)}


def entry_to_dict(entry: ErrorLogEntry, full: bool = False) -> Dict[str, Any]:
    """Render an entry as a JSON-ready dictionary"""
    error = entry.error
    data: Dict[str, Any] = {
        "id": entry.id,
        "application": error.application_name,
        "host": error.host_name,
        "type": error.type,
        "source": error.source,
        "message": error.message,
        "user": error.user,
        "status_code": error.status_code,
        "time": error.time.isoformat(),
    }
    if full:
        data.update({
            "detail": error.detail,
            "web_host_html_message": error.web_host_html_message,
            "server_variables": _sorted(error.server_variables),
            "query_string": _sorted(error.query_string),
            "form": _sorted(error.form),
            "cookies": _sorted(error.cookies),
        })
    return data


def _fetch_entry(request: Request, error_id: str) -> ErrorLogEntry:
    try:
        entry = _get_error_log(request).get_error(error_id)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Error {error_id} not found")
    return entry


def create_app(error_log: Optional[ErrorLog] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        error_log: Log to serve; built from configuration at startup if omitted
    """
    app = FastAPI(
        title="Error Log Service",
        description="Read-only access to logged application errors",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.error_log = error_log

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "Error Log",
            "version": "1.0.0",
            "log": _get_error_log_name(app),
        }

    @app.get("/health")
    def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            JSON with health status
        """
        try:
            total = _get_error_log(request).get_errors(0, 0)
            store_status = "healthy"
        except Exception as e:
            logger.error(f"Error log health check failed: {e}")
            total = None
            store_status = "unhealthy"

        is_healthy = store_status == "healthy"
        response = {
            "status": "healthy" if is_healthy else "unhealthy",
            "store": store_status,
            "total_errors": total,
        }
        return JSONResponse(content=response, status_code=200 if is_healthy else 503)

    @app.get("/errors")
    def list_errors(
        request: Request,
        page_index: int = Query(0),
        page_size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_PAGE_SIZE),
    ):
        """One page of errors, newest first"""
        entries = []
        try:
            total = _get_error_log(request).get_errors(page_index, page_size, entries)
        except InvalidArgumentError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "total": total,
            "page_index": page_index,
            "page_size": page_size,
            "entries": [entry_to_dict(entry) for entry in entries],
        }

    @app.get("/errors/{error_id}")
    def get_error(request: Request, error_id: str):
        """A single error with all its details"""
        return entry_to_dict(_fetch_entry(request, error_id), full=True)

    @app.get("/errors/{error_id}/xml")
    def get_error_xml(request: Request, error_id: str):
        """A single error as an XML document"""
        entry = _fetch_entry(request, error_id)
        return Response(content=encode_string(entry.error), media_type="application/xml")

    return app


def _get_error_log_name(app: FastAPI) -> Optional[str]:
    error_log = getattr(app.state, "error_log", None)
    return error_log.name if error_log is not None else None


# Create FastAPI app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "errorlog.main:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
        access_log=True
    )
