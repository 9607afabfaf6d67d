from pathlib import Path

from app.config.pipeline_config import build_pipeline_config, load_crop_config
from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.processor import build_processor
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def main() -> None:
    """Entry point: load config -> initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    crop = load_crop_config(Path(settings.crop_config_path))
    pipeline_config = build_pipeline_config(settings, crop)
    init_pool(settings)

    try:
        job_repo = JobRepository(settings.max_job_attempts)
        processor = build_processor(settings, pipeline_config, job_repo)
        job_runner = JobRunner(processor, job_repo, settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
