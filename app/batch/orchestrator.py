"""Runs OCR over a whole page set in bounded concurrent chunks."""

import asyncio
import math
from collections.abc import Callable, Sequence
from typing import Any

from app.logging.logger import Log
from app.ocr.exceptions import RetryExhaustedError
from app.ocr.gateway import OcrGateway
from app.ocr.models import AnnotatedRecord, BatchProgress, ProviderCredential, ProviderKind
from app.ocr.retry import SleepFn
from app.ocr.validator import build_records
from app.preprocessing.models import EncodedImage

ProgressCallback = Callable[[float, int, int], None]


class BatchOrchestrator:
    """Fans extraction out chunk by chunk and assembles ordered records.

    Every request of a chunk is issued before any is awaited; the next chunk
    starts only after all of them resolved. A failing image contributes no
    records, except when a retry policy ran out of attempts, which aborts
    the run.
    """

    def __init__(self, gateway: OcrGateway, *, sleep: SleepFn = asyncio.sleep) -> None:
        self._gateway = gateway
        self._sleep = sleep

    async def run(
        self,
        images: Sequence[EncodedImage],
        prompt: str,
        credential: ProviderCredential,
        provider_kind: ProviderKind,
        batch_size: int,
        on_progress: ProgressCallback | None = None,
        request_interval: float = 0.0,
    ) -> list[AnnotatedRecord]:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        # Setup errors fail the run instead of degrading every image to [].
        self._gateway.resolve(credential, provider_kind)
        total = len(images)
        if total == 0:
            return []

        progress = BatchProgress(total_count=total, total_chunks=math.ceil(total / batch_size))
        Log.info(
            f"Extracting {total} page(s) with {provider_kind.value} "
            f"in {progress.total_chunks} chunk(s) of {batch_size}"
        )

        records: list[AnnotatedRecord] = []
        for start in range(0, total, batch_size):
            chunk = images[start : start + batch_size]
            results = await self._run_chunk(
                chunk, prompt, credential, provider_kind, request_interval
            )
            for offset, (image, raw_rows) in enumerate(zip(chunk, results)):
                records.extend(self._annotate(image, raw_rows, page_number=start + offset + 1))

            progress.completed_count = start + len(chunk)
            progress.current_chunk_index += 1
            Log.info(
                f"Chunk {progress.current_chunk_index}/{progress.total_chunks} done "
                f"({progress.completed_count}/{progress.total_count} pages)"
            )
            if on_progress is not None:
                on_progress(
                    progress.fraction, progress.current_chunk_index, progress.total_chunks
                )

        Log.info(f"Extraction finished: {len(records)} record(s) from {total} page(s)")
        return records

    async def _run_chunk(
        self,
        chunk: Sequence[EncodedImage],
        prompt: str,
        credential: ProviderCredential,
        provider_kind: ProviderKind,
        request_interval: float,
    ) -> list[list[Any]]:
        outcomes = await asyncio.gather(
            *(
                self._extract_one(image, prompt, credential, provider_kind, slot * request_interval)
                for slot, image in enumerate(chunk)
            ),
            return_exceptions=True,
        )
        results: list[list[Any]] = []
        for image, outcome in zip(chunk, outcomes):
            if isinstance(outcome, RetryExhaustedError):
                Log.error(f"Giving up on {image.filename}: {outcome}")
                raise outcome
            if isinstance(outcome, Exception):
                Log.warning(f"Extraction failed for {image.filename}: {outcome}")
                results.append([])
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
        return results

    async def _extract_one(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
        provider_kind: ProviderKind,
        delay: float,
    ) -> list[Any]:
        if delay > 0:
            await self._sleep(delay)
        return await self._gateway.extract(image, prompt, credential, provider_kind)

    @staticmethod
    def _annotate(
        image: EncodedImage,
        raw_rows: list[Any],
        *,
        page_number: int,
    ) -> list[AnnotatedRecord]:
        return [
            AnnotatedRecord(
                record=record,
                page_number=page_number,
                row_number=row_number,
                filename=image.filename,
            )
            for row_number, record in enumerate(
                build_records(raw_rows, source=image.filename), start=1
            )
        ]
