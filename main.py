"""FastAPI entrypoint.
- /health : liveness
- /parse  : Accepts JSON { "document": "..." } and returns the parsed test cases
- /run    : Parses the document, runs every test case, returns the run summary
"""
import logging
import os
from typing import Iterator

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from apicase.config import get_settings
from apicase.errors import TestCaseParseError
from apicase.http_client import HttpClient
from apicase.parser import parse_document
from apicase.runner import TestCaseRunner

logger = logging.getLogger("apicase.api")

app = FastAPI(title="apicase - API test-case engine")


class DocumentRequest(BaseModel):
    document: str


def get_client() -> Iterator[HttpClient]:
    with HttpClient.from_settings(get_settings()) as client:
        yield client


def _parse(document: str):
    try:
        return parse_document(document)
    except TestCaseParseError as e:
        logger.info(f"rejected document: {e}")
        raise HTTPException(status_code=422, detail=e.to_dict())


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/parse")
def parse(req: DocumentRequest):
    cases = _parse(req.document)
    return {"status": "ok", "cases": [c.to_dict() for c in cases]}


# sync handler: FastAPI runs it in its threadpool, the runner blocks on its own pool
@app.post("/run")
def run(req: DocumentRequest, client: HttpClient = Depends(get_client)):
    cases = _parse(req.document)
    summary = TestCaseRunner(client, max_workers=get_settings().max_workers).run_summary(cases)
    return {"status": "ok", "summary": summary.to_dict(), "lines": [str(r) for r in summary.results]}


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level)
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv('PORT', 8000)))
