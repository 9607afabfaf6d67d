from collections.abc import Sequence
from pathlib import Path

from app.batch.orchestrator import BatchOrchestrator
from app.config.pipeline_config import PipelineConfig
from app.config.settings import Settings
from app.credentials.cipher import CredentialCipher
from app.database.models import JobRecord
from app.database.repositories.credential_repository import CredentialRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.matching_repository import MatchingRepository
from app.database.repositories.registration_data_repository import RegistrationDataRepository
from app.logging.logger import Log
from app.ocr.factory import OcrGatewayFactory
from app.ocr.models import ProviderKind
from app.ocr.prompt_loader import load_prompt
from app.preprocessing.factory import PdfRasterizerFactory
from app.preprocessing.preprocessor import ImagePreprocessor
from app.processor.file_loader import FileLoader
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    EncodeStep,
    ExtractStep,
    LoadFilesStep,
    PersistResultsStep,
    PreprocessStep,
    ResolveCredentialStep,
    RunMatchingStep,
)


class Processor:
    """Runs one OCR job through the pipeline steps.

    Pipeline: load -> preprocess -> encode -> credential -> extract -> persist
    [-> match].
    """

    def __init__(self, steps: Sequence[PipelineStep], default_prompt: str) -> None:
        self._steps = list(steps)
        self._default_prompt = default_prompt

    def process(self, job: JobRecord) -> PipelineContext:
        """Run every step for the job. Step errors propagate to the caller."""
        Log.info(f"Processing job {job.id} for campaign {job.campaign_id}")
        context = PipelineContext(
            job=job,
            provider_kind=ProviderKind.parse(job.provider),
            prompt=(job.prompt or "").strip() or self._default_prompt,
        )
        for step in self._steps:
            context = step.run(context)
        return context


def build_processor(
    settings: Settings,
    config: PipelineConfig,
    job_repo: JobRepository,
    files_root: Path | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    preprocessor = ImagePreprocessor(
        crop=config.crop,
        rasterizer=PdfRasterizerFactory.create(config.pdf_engine),
        render_scale=config.render_scale,
        max_pages=config.max_pages,
    )
    orchestrator = BatchOrchestrator(OcrGatewayFactory.create(config))
    steps: list[PipelineStep] = [
        LoadFilesStep(FileLoader(files_root=files_root or Path(settings.files_root))),
        PreprocessStep(preprocessor),
        EncodeStep(),
        ResolveCredentialStep(
            CredentialRepository(), CredentialCipher(settings.credential_encryption_key)
        ),
        ExtractStep(orchestrator, config, job_repo),
        PersistResultsStep(RegistrationDataRepository()),
    ]
    if settings.run_matching_after_ocr:
        steps.append(RunMatchingStep(MatchingRepository(settings.matching_procedure)))
    return Processor(steps=steps, default_prompt=load_prompt())
