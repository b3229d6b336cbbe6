"""Core services exports."""

from .catalog import BulkUploader, BulkUploadResult
from .database import DbManageService, DbSessionService, transaction
from .generation import GenerationPipeline, GenerationResult
from .grading import GradingQueue
from .jwt import JwtGeneratorService, JwtVerificationService
from .llm import CompletionProvider, OpenAICompletionProvider
from .metrics import MetricsAggregator

__all__ = [
    "BulkUploadResult",
    "BulkUploader",
    "CompletionProvider",
    "DbManageService",
    "DbSessionService",
    "GenerationPipeline",
    "GenerationResult",
    "GradingQueue",
    "JwtGeneratorService",
    "JwtVerificationService",
    "MetricsAggregator",
    "OpenAICompletionProvider",
    "transaction",
]
