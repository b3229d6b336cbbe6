from dataclasses import dataclass

from catalog_grader.core.services import (
    CompletionProvider,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)


@dataclass
class ApplicationDependencies:
    jwt_verify_service: JwtVerificationService
    jwt_generation_service: JwtGeneratorService
    database_service: DbSessionService
    completion_provider: CompletionProvider
