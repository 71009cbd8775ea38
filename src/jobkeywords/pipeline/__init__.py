"""Pipeline layer — per-source orchestration."""

from jobkeywords.pipeline.runner import PipelineRunner, RunResult, SourceOutcome, SourceStatus

__all__ = ["PipelineRunner", "RunResult", "SourceOutcome", "SourceStatus"]
