from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Sections shown by each view preset
VIEW_PRESETS: Dict[str, Dict[str, bool]] = {
    "basic": {
        "show_issues": True,
        "show_activity": False,
        "show_languages": False,
        "show_readme": False,
        "show_filters": False,
    },
    "activity": {
        "show_issues": False,
        "show_activity": True,
        "show_languages": True,
        "show_readme": False,
        "show_filters": False,
    },
    "full": {
        "show_issues": False,
        "show_activity": True,
        "show_languages": True,
        "show_readme": True,
        "show_filters": True,
    },
}

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

THEMES = {"emerald": "GIT Finder", "indigo": "GitHub Explorer", "slate": "GitHub Profile"}


@dataclass(slots=True)
class ApiConfig:
    base_url: str = "https://api.github.com"
    timeout: float = 30.0
    repo_page_size: int = 100
    events_limit: int = 10
    issues_limit: int = 5
    max_attempts: int = 1


@dataclass(slots=True)
class ViewConfig:
    variant: str = "full"
    theme: str = "emerald"
    show_issues: bool = False
    show_activity: bool = True
    show_languages: bool = True
    show_readme: bool = True
    show_filters: bool = True
    overrides: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def for_variant(cls, variant: str, theme: str = "emerald", **overrides: Any) -> "ViewConfig":
        if variant not in VIEW_PRESETS:
            raise ValueError(f"Unknown view variant {variant!r}; expected one of {', '.join(VIEW_PRESETS)}")
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}; expected one of {', '.join(THEMES)}")
        flags = dict(VIEW_PRESETS[variant])
        explicit = {key: bool(value) for key, value in overrides.items() if key in flags and value is not None}
        flags.update(explicit)
        return cls(variant=variant, theme=theme, overrides=explicit, **flags)

    def with_variant(self, variant: str) -> "ViewConfig":
        """Switch preset, keeping the theme and any flags set explicitly."""
        return ViewConfig.for_variant(variant, theme=self.theme, **self.overrides)

    @property
    def title(self) -> str:
        return THEMES[self.theme]


@dataclass(slots=True)
class OutputConfig:
    directory: Optional[Path] = None


@dataclass(slots=True)
class LoggingConfig:
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT


@dataclass(slots=True)
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Optional[Path] = None) -> AppConfig:
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return AppConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        raw: Dict[str, Any] = yaml.safe_load(handle) or {}

    api_raw = raw.get("api") or {}
    view_raw = raw.get("view") or {}
    output_raw = raw.get("output") or {}
    logging_raw = raw.get("logging") or {}

    directory = output_raw.get("directory")

    config = AppConfig(
        api=ApiConfig(
            base_url=str(api_raw.get("base_url", "https://api.github.com")).rstrip("/"),
            timeout=float(api_raw.get("timeout", 30)),
            repo_page_size=int(api_raw.get("repo_page_size", 100)),
            events_limit=int(api_raw.get("events_limit", 10)),
            issues_limit=int(api_raw.get("issues_limit", 5)),
            max_attempts=max(1, int(api_raw.get("max_attempts", 1))),
        ),
        view=ViewConfig.for_variant(
            str(view_raw.get("variant", "full")),
            theme=str(view_raw.get("theme", "emerald")),
            **{key: view_raw.get(key) for key in VIEW_PRESETS["full"]},
        ),
        output=OutputConfig(
            directory=Path(directory) if directory else None,
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", "WARNING")).upper(),
            format=str(logging_raw.get("format", DEFAULT_LOG_FORMAT)),
        ),
    )

    return config


def configure_logging(settings: LoggingConfig) -> None:
    level = logging.getLevelName(settings.level)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {settings.level!r}")
    logging.basicConfig(level=level, format=settings.format)
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
