from pydantic import BaseModel, Field, field_validator, model_validator

from cms_versioning.domain.entities import BLOCK_TYPES, DEFAULT_LANGUAGE, BlockType


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class ContentRules(BaseModel):
    default_language: str = DEFAULT_LANGUAGE
    languages: list[str] = Field(default_factory=lambda: [DEFAULT_LANGUAGE])
    block_types: list[BlockType] = Field(default_factory=lambda: list(BLOCK_TYPES))

    @model_validator(mode="after")
    def default_language_is_listed(self) -> "ContentRules":
        if self.default_language not in self.languages:
            raise ValueError(
                f"default_language '{self.default_language}' is not in languages"
            )
        return self


class SchedulingRules(BaseModel):
    enabled: bool = True
    poll_interval_seconds: float = Field(default=60.0, gt=0)
    max_versions_per_scan: int = Field(default=10, ge=1)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Rules(BaseModel):
    project: ProjectRules
    content: ContentRules = Field(default_factory=ContentRules)
    scheduling: SchedulingRules = Field(default_factory=SchedulingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
