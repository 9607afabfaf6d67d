import asyncio

import psycopg

from app.batch.orchestrator import BatchOrchestrator
from app.config.pipeline_config import PipelineConfig
from app.credentials.cipher import CredentialCipher
from app.database.repositories.credential_repository import CredentialRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.matching_repository import MatchingRepository
from app.database.repositories.registration_data_repository import RegistrationDataRepository
from app.logging.logger import Log
from app.ocr.models import ProviderCredential
from app.preprocessing.encoder import encode
from app.preprocessing.preprocessor import ImagePreprocessor
from app.processor.exceptions import PipelineStateError
from app.processor.file_loader import FileLoader
from app.processor.pipeline import PipelineContext, PipelineStep


class LoadFilesStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.sources = self._file_loader.load(context.job)
        total_bytes = sum(len(source.content) for source in context.sources)
        Log.info(f"Loaded {len(context.sources)} file(s), {total_bytes} bytes for job {context.job.id}")
        return context


class PreprocessStep(PipelineStep):
    def __init__(self, preprocessor: ImagePreprocessor) -> None:
        self._preprocessor = preprocessor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.images = self._preprocessor.process(context.sources)
        context.sources = []
        Log.info(f"Normalized {len(context.images)} page(s) for job {context.job.id}")
        return context


class EncodeStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.encoded_images = [encode(image) for image in context.images]
        context.images = []
        return context


class ResolveCredentialStep(PipelineStep):
    def __init__(self, credential_repo: CredentialRepository, cipher: CredentialCipher) -> None:
        self._credential_repo = credential_repo
        self._cipher = cipher

    def run(self, context: PipelineContext) -> PipelineContext:
        labels = list(context.provider_kind.storage_labels())
        if context.job.provider not in labels:
            labels.append(context.job.provider)
        stored = self._credential_repo.find_active(context.job.owner_id, labels)
        context.credential = ProviderCredential(
            owner_id=context.job.owner_id,
            provider=context.provider_kind,
            secret=self._cipher.decrypt(stored.api_key),
        )
        return context


class ExtractStep(PipelineStep):
    def __init__(
        self,
        orchestrator: BatchOrchestrator,
        config: PipelineConfig,
        job_repo: JobRepository,
    ) -> None:
        self._orchestrator = orchestrator
        self._config = config
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.credential is None:
            raise PipelineStateError("PipelineContext.credential must be set before extraction")
        provider_config = self._config.provider(context.provider_kind)
        try:
            context.records = asyncio.run(
                self._orchestrator.run(
                    context.encoded_images,
                    context.prompt,
                    context.credential,
                    context.provider_kind,
                    self._config.batch_size,
                    on_progress=lambda fraction, chunk, total: self._report(
                        context.job.id, fraction, chunk, total
                    ),
                    request_interval=provider_config.request_interval_seconds,
                )
            )
        finally:
            context.credential = None
            context.encoded_images = []
        Log.info(f"Extracted {len(context.records)} record(s) for job {context.job.id}")
        return context

    def _report(self, job_id: int, fraction: float, chunk: int, total_chunks: int) -> None:
        try:
            self._job_repo.update_progress(job_id, fraction, chunk, total_chunks)
        except psycopg.Error as exc:
            Log.warning(f"Could not persist progress for job {job_id}: {exc}")


class PersistResultsStep(PipelineStep):
    def __init__(self, registration_repo: RegistrationDataRepository) -> None:
        self._registration_repo = registration_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.records:
            Log.warning(
                f"Job {context.job.id} produced no records; keeping existing rows "
                f"for campaign {context.job.campaign_id}"
            )
            context.record_count = 0
            return context
        context.record_count = self._registration_repo.replace(
            context.records, context.job.campaign_id
        )
        return context


class RunMatchingStep(PipelineStep):
    def __init__(self, matching_repo: MatchingRepository) -> None:
        self._matching_repo = matching_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.record_count == 0:
            return context
        result = self._matching_repo.run_for_campaign(context.job.campaign_id)
        Log.info(f"Voter matching finished for campaign {context.job.campaign_id}: {result}")
        return context
