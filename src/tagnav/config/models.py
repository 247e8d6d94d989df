"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TAGNAV__SECTION__KEY)
3. Repo YAML (.tagnav/config.yaml)
4. Global YAML (~/.config/tagnav/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    TAGNAV__<SECTION>__<KEY>=<VALUE>

Examples:
    TAGNAV__LOGGING__LEVEL=DEBUG
    TAGNAV__WORKSPACE__INCLUDE='app/**/*.ts'
    TAGNAV__GRAMMARS__HTML=tree_sitter_html:language
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TAGNAV__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every extracted component and skipped match.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WorkspaceConfig(BaseModel):
    """Which source files are scanned for component declarations.

    Globs are matched against POSIX paths relative to the workspace root.
    ``**/`` matches zero or more directories, ``*`` never crosses a ``/``.

    Env vars:
        TAGNAV__WORKSPACE__INCLUDE: Inclusion glob
        TAGNAV__WORKSPACE__EXCLUDE: Exclusion glob
    """

    include: str = Field(
        default="src/**/*.ts",
        description="Inclusion glob for component source files.",
    )
    exclude: str = Field(
        default="**/node_modules/**",
        description="Exclusion glob applied after the inclusion glob.",
    )

    @field_validator("include")
    @classmethod
    def validate_include(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Inclusion glob must not be empty")
        return v


class GrammarConfig(BaseModel):
    """Grammar locations, one per language kind.

    A location is ``module:function``; the function must return a tree-sitter
    language pointer (the convention of the tree-sitter-* wheels).

    Env vars:
        TAGNAV__GRAMMARS__TYPESCRIPT: Grammar for component sources
        TAGNAV__GRAMMARS__HTML: Grammar for markup documents
    """

    typescript: str = "tree_sitter_typescript:language_typescript"
    html: str = "tree_sitter_html:language"

    @field_validator("typescript", "html")
    @classmethod
    def validate_location(cls, v: str) -> str:
        module, sep, func = v.partition(":")
        if not sep or not module.strip() or not func.strip():
            raise ValueError(f"Grammar location must look like 'module:function', got {v!r}")
        return v


class WatchConfig(BaseModel):
    """File watcher configuration.

    Env vars:
        TAGNAV__WATCH__DEBOUNCE_MS: Batch window for rapid changes
        TAGNAV__WATCH__STEP_MS: Poll step of the native watcher
        TAGNAV__WATCH__QUEUE_MAX_SIZE: Max queued event batches before dropping
    """

    debounce_ms: int = Field(
        default=300,
        description="Changes arriving within this window are delivered as one batch.",
    )
    step_ms: int = Field(
        default=50,
        description="How often the native watcher checks for new events.",
    )
    queue_max_size: int = Field(
        default=1000,
        description="Max queued event batches. Excess batches are dropped (logged).",
    )

    @field_validator("debounce_ms", "step_ms", "queue_max_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v


class TagNavConfig(BaseModel):
    """Root configuration for TagNav.

    All settings can be configured via:
    1. Environment variables: TAGNAV__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    grammars: GrammarConfig = Field(default_factory=GrammarConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
