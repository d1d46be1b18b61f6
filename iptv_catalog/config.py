import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_KEYWORDS: dict[str, list[str]] = {
    "series": ["series", "serie"],
    "movie": ["movie", "filme"],
}
REQUIRED_KEYWORD_SETS = ("series", "movie")


class CustomSettings(BaseSettings):
    """Catalog engine settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    max_lines: int = 200000  # Non-blank lines kept per source
    max_line_length: int = 4096
    max_title_length: int = 256
    max_description_length: int = 1024
    max_logo_length: int = 2048
    max_url_length: int = 2048
    default_group: str = "Uncategorized"
    content_keywords: dict[str, list[str]] = DEFAULT_CONTENT_KEYWORDS
    merge_max_concurrency: int = 4
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "max_lines",
        "max_line_length",
        "max_title_length",
        "max_description_length",
        "max_logo_length",
        "max_url_length",
        "merge_max_concurrency",
    )
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure size limits are positive integers."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("default_group")
    @classmethod
    def validate_default_group(cls, value: str) -> str:
        """Default group label must not be blank."""
        value = value.strip()
        if not value:
            raise ValueError("default_group must not be blank")
        return value

    @field_validator("content_keywords", mode="after")
    @classmethod
    def normalize_content_keywords(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        """Lowercase keyword substrings and drop blanks."""
        normalized = {}
        for name, keywords in value.items():
            cleaned = [keyword.strip().lower() for keyword in keywords if keyword.strip()]
            normalized[name.strip().lower()] = cleaned
        return normalized

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_keyword_sets(self):
        """Validate cross-field configuration."""
        missing = [name for name in REQUIRED_KEYWORD_SETS if name not in self.content_keywords]
        if missing:
            raise ValueError(f"content_keywords is missing keyword sets: {missing}")

        for name in REQUIRED_KEYWORD_SETS:
            if not self.content_keywords[name]:
                logger.warning(
                    "Keyword set '%s' is empty - no group will be classified as %s",
                    name,
                    name,
                )

        if self.max_line_length < self.max_url_length:
            logger.warning(
                "max_line_length (%s) is below max_url_length (%s) - long URLs are dropped, not truncated",
                self.max_line_length,
                self.max_url_length,
            )

        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Max Lines: %s", self.max_lines)
        logger.info("  Max Line Length: %s", self.max_line_length)
        logger.info(
            "  Field Limits: title=%s description=%s logo=%s url=%s",
            self.max_title_length,
            self.max_description_length,
            self.max_logo_length,
            self.max_url_length,
        )
        logger.info("  Default Group: %s", self.default_group)
        for name, keywords in sorted(self.content_keywords.items()):
            logger.info("  Keywords (%s): %s", name, ", ".join(keywords) or "none")
        logger.info("  Merge Concurrency: %s", self.merge_max_concurrency)

    def keywords_for(self, name: str) -> list[str]:
        """Return the keyword substrings configured for a content kind."""
        return self.content_keywords.get(name, [])


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
