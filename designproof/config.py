"""Analyzer configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DetectorConfig(BaseModel):
    """Base record shared by every detector config."""

    enabled: bool = True


class SRPConfig(DetectorConfig):
    max_methods: int = 7
    max_instantiations: int = 5


class OCPConfig(DetectorConfig):
    max_conditionals: int = 2


class LSPConfig(DetectorConfig):
    pass


class DIPConfig(DetectorConfig):
    max_concretions: int = 3


class ISPConfig(DetectorConfig):
    max_interface_methods: int = 6


class LawOfDemeterConfig(DetectorConfig):
    max_chain: int = 3


class DRYConfig(DetectorConfig):
    min_duplicates: int = 2
    max_reports: int = 5
    # Bodies smaller than this many syntax nodes are too trivial to compare
    min_body_size: int = 8


class InformationExpertConfig(DetectorConfig):
    min_external_calls: int = 4
    tolerance: int = 1


class EncapsulationConfig(DetectorConfig):
    max_attr_accessors: int = 3
    max_public_ratio: float = 0.85
    min_methods: int = 5


class OveruseClassMethodsConfig(DetectorConfig):
    min_class_methods: int = 4
    max_instance_methods: int = 1


class DetectorsConfig(BaseModel):
    """Per-detector thresholds, keyed by violation kind."""

    srp: SRPConfig = Field(default_factory=SRPConfig)
    ocp: OCPConfig = Field(default_factory=OCPConfig)
    lsp: LSPConfig = Field(default_factory=LSPConfig)
    dip: DIPConfig = Field(default_factory=DIPConfig)
    isp: ISPConfig = Field(default_factory=ISPConfig)
    law_of_demeter: LawOfDemeterConfig = Field(default_factory=LawOfDemeterConfig)
    dry: DRYConfig = Field(default_factory=DRYConfig)
    information_expert: InformationExpertConfig = Field(default_factory=InformationExpertConfig)
    encapsulation: EncapsulationConfig = Field(default_factory=EncapsulationConfig)
    overuse_class_methods: OveruseClassMethodsConfig = Field(
        default_factory=OveruseClassMethodsConfig
    )

    def enabled_detectors(self) -> list[str]:
        """Names of detectors whose config is enabled."""
        return [name for name, config in self if config.enabled]


class RetryConfig(BaseModel):
    """Back-off policy applied when the source-control host rate limits us.

    ``max_attempts`` of ``None`` retries forever with a fixed pause of
    ``base_delay`` seconds.
    """

    max_attempts: int | None = 5
    base_delay: float = 2.0
    backoff_factor: float = 2.0
    max_delay: float = 60.0
    jitter: bool = True

    @field_validator("max_attempts", mode="after")
    @classmethod
    def validate_max_attempts(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("max_attempts must be at least 1 (or null for unbounded)")
        return v


class Settings(BaseSettings):
    """Analyzer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DESIGNPROOF_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub
    github_token: str | None = None
    github_api_url: str = "https://api.github.com"
    github_per_page: int = 100
    github_timeout: float = 30.0

    # Gemini (judgment service)
    llm_enabled: bool = False
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 600

    # Analysis
    temp_dir: str | None = None
    cleanup_temp: bool = True
    candidates_dir: str = ".designproof/candidates"
    resume: bool = False
    min_confidence: float = 0.6
    high_severity_confidence: float = 0.8
    report_only_changed: bool = True
    changed_line_tolerance: int = 10
    max_concurrency: int = 1
    file_extensions: list[str] = [".py"]

    detectors: DetectorsConfig = Field(default_factory=DetectorsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("min_confidence", "high_severity_confidence", mode="after")
    @classmethod
    def validate_confidence(cls, v: float, info) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"{info.field_name} must be between 0.0 and 1.0")
        return v

    @field_validator("changed_line_tolerance", mode="after")
    @classmethod
    def validate_tolerance(cls, v: int) -> int:
        if v < 0:
            raise ValueError("changed_line_tolerance must not be negative")
        return v

    @field_validator("max_concurrency", mode="after")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @property
    def report_mode(self) -> str:
        return "changed_code_only" if self.report_only_changed else "all_violations"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance for entry points."""
    return Settings()
