"""Coverage submission pipeline."""

from covsubmit.pipeline.submission import SubmissionPipeline, default_client_factory

__all__ = ["SubmissionPipeline", "default_client_factory"]
