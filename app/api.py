"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.responses import PlainTextResponse

from app.schemas import ExecutionRecord, ExecutionStatistics, ProcessingMode
from services.processor import ProcessorService, build_default_processor

router = APIRouter()


def get_processor() -> ProcessorService:
    return build_default_processor()


def _fetch_or_404(processor: ProcessorService, execution_id: str) -> ExecutionRecord:
    try:
        return processor.fetch_execution(execution_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.post(
    "/executions",
    status_code=status.HTTP_201_CREATED,
    response_model=ExecutionRecord,
    summary="Process uploaded CSV, JSON or LOG files in the requested mode.",
)
def create_execution(
    files: List[UploadFile] = File(..., description="Files to process."),
    mode: ProcessingMode = Form(ProcessingMode.parallel),
    processor: ProcessorService = Depends(get_processor),
) -> ExecutionRecord:
    try:
        return processor.submit_uploads(files, mode)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get(
    "/executions",
    response_model=List[ExecutionRecord],
    summary="List past executions, newest first.",
)
async def list_executions(
    mode: Optional[ProcessingMode] = None,
    processor: ProcessorService = Depends(get_processor),
) -> List[ExecutionRecord]:
    return processor.list_executions(mode)


@router.get(
    "/executions/statistics",
    response_model=ExecutionStatistics,
    summary="Execution counts per mode and the average run time.",
)
async def execution_statistics(
    processor: ProcessorService = Depends(get_processor),
) -> ExecutionStatistics:
    return processor.statistics()


@router.get(
    "/executions/{execution_id}",
    response_model=ExecutionRecord,
    summary="Fetch one execution with its structured results.",
)
async def get_execution(
    execution_id: str,
    processor: ProcessorService = Depends(get_processor),
) -> ExecutionRecord:
    return _fetch_or_404(processor, execution_id)


@router.get(
    "/executions/{execution_id}/report",
    response_class=PlainTextResponse,
    summary="Download the rendered report of an execution.",
)
async def get_execution_report(
    execution_id: str,
    processor: ProcessorService = Depends(get_processor),
) -> PlainTextResponse:
    record = _fetch_or_404(processor, execution_id)
    return PlainTextResponse(
        record.report,
        headers={
            "Content-Disposition": f'attachment; filename="report_{execution_id}.txt"'
        },
    )


@router.delete(
    "/executions/{execution_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one execution from the history.",
)
async def delete_execution(
    execution_id: str,
    processor: ProcessorService = Depends(get_processor),
) -> Response:
    try:
        processor.delete_execution(execution_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/executions",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete the whole execution history.",
)
async def delete_all_executions(
    processor: ProcessorService = Depends(get_processor),
) -> Response:
    processor.delete_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
