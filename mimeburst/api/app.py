"""
mimeburst/api/app.py
--------------------
FastAPI service endpoint for the MIME exploder.
Accepts an uploaded .eml file, writes its decoded parts to a fresh
directory and returns what was written.
"""

import io
import uuid
from pathlib import Path

from fastapi import FastAPI, UploadFile, File
from fastapi.responses import JSONResponse

# Logging
from mimeburst.utils.logging_utils import configure_logging, get_logger

# Pipeline
from mimeburst.errors import UnclassifiableMessage
from mimeburst.explode.events import event_to_dict
from mimeburst.explode.message import display_headers, explode_message
from mimeburst.utils.config import CONFIG


# -------------------------------------------------------------------
# Initialize logging BEFORE creating the FastAPI app
# -------------------------------------------------------------------
configure_logging(log_dir=CONFIG.LOG_DIR, level=CONFIG.LOG_LEVEL)
logger = get_logger()


# -------------------------------------------------------------------
# Create FastAPI Application
# -------------------------------------------------------------------
app = FastAPI(
    title="mimeburst",
    description="Explodes multipart MIME messages into decoded part files.",
    version="0.1.0",
)

# -------------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------------

@app.post("/explode")
async def explode_email(file: UploadFile = File(...)):
    """
    Upload a .eml file; its leaf parts land in OUTPUT_DIR/<run id>/.
    """
    run_id = uuid.uuid4().hex
    out_dir = Path(CONFIG.OUTPUT_DIR) / run_id
    try:
        raw_bytes = await file.read()
        logger.info(
            f"Received file: name={file.filename}, size={len(raw_bytes)} bytes, run={run_id}"
        )

        message, summary = explode_message(io.BytesIO(raw_bytes), out_dir)

        logger.info(
            "Exploded email | subject={subject!r} written={written} failed={failed}",
            subject=message.header.first_value("Subject"),
            written=summary.files_written,
            failed=summary.parts_failed,
        )

        return JSONResponse(
            content={
                "run_id": run_id,
                "output_dir": str(out_dir),
                "headers": display_headers(message.header),
                "summary": summary.to_dict(),
                "events": [event_to_dict(e) for e in summary.events],
            },
            status_code=200,
        )

    except UnclassifiableMessage as e:
        return JSONResponse(
            content={"error": "unclassifiable_message", "detail": str(e)},
            status_code=422,
        )

    except Exception as e:
        logger.error(f"Error while processing email: {type(e).__name__}: {e}")
        return JSONResponse(
            content={
                "error": f"internal_error:{type(e).__name__}",
                "detail": str(e)
            },
            status_code=500,
        )


@app.get("/")
def home():
    logger.info("Health check called on /")
    return {
        "status": "running",
        "message": "mimeburst MIME exploder",
        "endpoints": {
            "POST /explode": "Upload .eml file to write out its decoded parts",
        },
    }
