from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.database.models import JobRecord
from app.ocr.models import AnnotatedRecord, ProviderCredential, ProviderKind
from app.preprocessing.models import EncodedImage, NormalizedImage, SourceFile


@dataclass(slots=True)
class PipelineContext:
    job: JobRecord
    provider_kind: ProviderKind
    prompt: str
    sources: list[SourceFile] = field(default_factory=list)
    images: list[NormalizedImage] = field(default_factory=list)
    encoded_images: list[EncodedImage] = field(default_factory=list)
    credential: ProviderCredential | None = None
    records: list[AnnotatedRecord] = field(default_factory=list)
    record_count: int = 0


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
