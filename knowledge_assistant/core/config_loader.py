"""
Configuration loader for the Knowledge Assistant.

Loads settings from config.json and provides typed access via dataclasses.
Supports singleton pattern for global access and runtime reload capability.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import ConfigurationError


@dataclass
class PathsConfig:
    """Configuration for file system paths."""
    database_path: Path
    logs_directory: Path


@dataclass
class EmbeddingConfig:
    """Configuration for the embedding provider."""
    endpoint: str
    api_key: str
    model: str
    dimensions: int
    max_input_chars: int
    max_retries: int
    retry_delay_seconds: float
    request_timeout_seconds: float


@dataclass
class SearchConfig:
    """Configuration for knowledge search defaults."""
    default_limit: int
    default_threshold: float
    default_mode: str
    keyword_score: float
    snippet_length: int
    tokenizer: str


@dataclass
class ChatConfig:
    """Configuration for chat completions."""
    model: str
    feedback_model: str
    temperature: float
    max_tokens: int
    knowledge_results: int
    history_limit: int
    enable_feedback_detection: bool


@dataclass
class NavigationLink:
    """A page the assistant may point users to."""
    label: str
    path: str
    description: str = ""
    keywords: List[str] = field(default_factory=list)


@dataclass
class AssistantConfig:
    """Persona and platform facts injected into the system prompt."""
    organization_name: str
    assistant_name: str
    platform_description: str
    support_email: str
    knowledge_base: str
    custom_instructions: str
    existing_features: List[str] = field(default_factory=list)
    missing_features: List[str] = field(default_factory=list)
    navigation_links: List[NavigationLink] = field(default_factory=list)


@dataclass
class GUIConfig:
    """Configuration for Streamlit web interface."""
    page_title: str
    default_company_id: Optional[int]
    default_user_id: int


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""
    level: str
    format: str
    max_file_size_mb: int
    backup_count: int


@dataclass
class Config:
    """
    Main configuration container holding all config sections.

    Provides singleton access via get_config() function.
    """
    paths: PathsConfig
    embedding: EmbeddingConfig
    search: SearchConfig
    chat: ChatConfig
    assistant: AssistantConfig
    gui: GUIConfig
    logging: LoggingConfig
    project_root: Path = field(default_factory=Path)

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the config.json file.

        Returns:
            Populated Config instance.

        Raises:
            ConfigurationError: If file is missing or invalid.
        """
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)}
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                {"path": str(config_path)}
            )

        project_root = config_path.parent.parent

        return cls._parse_config(data, project_root)

    @classmethod
    def _parse_config(cls, data: dict, project_root: Path) -> "Config":
        """Parse raw config dict into typed Config object."""
        paths_data = data.get("paths", {})
        paths = PathsConfig(
            database_path=cls._resolve_path(paths_data.get("database_path", "output/assistant.db"), project_root),
            logs_directory=cls._resolve_path(paths_data.get("logs_directory", "output/logs"), project_root)
        )

        emb_data = data.get("embedding", {})
        embedding = EmbeddingConfig(
            endpoint=emb_data.get("endpoint", "https://api.openai.com/v1"),
            api_key=emb_data.get("api_key") or os.environ.get("OPENAI_API_KEY", ""),
            model=emb_data.get("model", "text-embedding-ada-002"),
            dimensions=emb_data.get("dimensions", 1536),
            max_input_chars=emb_data.get("max_input_chars", 8000),
            max_retries=emb_data.get("max_retries", 3),
            retry_delay_seconds=emb_data.get("retry_delay_seconds", 1.0),
            request_timeout_seconds=emb_data.get("request_timeout_seconds", 30.0)
        )

        search_data = data.get("search", {})
        search = SearchConfig(
            default_limit=search_data.get("default_limit", 5),
            default_threshold=search_data.get("default_threshold", 0.7),
            default_mode=search_data.get("default_mode", "hybrid"),
            keyword_score=search_data.get("keyword_score", 0.8),
            snippet_length=search_data.get("snippet_length", 200),
            tokenizer=search_data.get("tokenizer", "porter unicode61")
        )

        chat_data = data.get("chat", {})
        chat = ChatConfig(
            model=chat_data.get("model", "gpt-4"),
            feedback_model=chat_data.get("feedback_model", "gpt-3.5-turbo"),
            temperature=chat_data.get("temperature", 0.7),
            max_tokens=chat_data.get("max_tokens", 1000),
            knowledge_results=chat_data.get("knowledge_results", 3),
            history_limit=chat_data.get("history_limit", 10),
            enable_feedback_detection=chat_data.get("enable_feedback_detection", False)
        )

        assistant_data = data.get("assistant", {})
        organization_name = assistant_data.get("organization_name", "Vezlo")
        assistant = AssistantConfig(
            organization_name=organization_name,
            assistant_name=assistant_data.get("assistant_name", f"{organization_name} Assistant"),
            platform_description=assistant_data.get("platform_description", ""),
            support_email=assistant_data.get("support_email", "support@vezlo.ai"),
            knowledge_base=assistant_data.get("knowledge_base", ""),
            custom_instructions=assistant_data.get("custom_instructions", ""),
            existing_features=assistant_data.get("existing_features", []),
            missing_features=assistant_data.get("missing_features", []),
            navigation_links=[
                cls._parse_link(link) for link in assistant_data.get("navigation_links", [])
            ]
        )

        gui_data = data.get("gui", {})
        gui = GUIConfig(
            page_title=gui_data.get("page_title", "Knowledge Assistant"),
            default_company_id=gui_data.get("default_company_id"),
            default_user_id=gui_data.get("default_user_id", 1)
        )

        log_data = data.get("logging", {})
        logging_cfg = LoggingConfig(
            level=log_data.get("level", "INFO"),
            format=log_data.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            max_file_size_mb=log_data.get("max_file_size_mb", 10),
            backup_count=log_data.get("backup_count", 5)
        )

        return cls(
            paths=paths,
            embedding=embedding,
            search=search,
            chat=chat,
            assistant=assistant,
            gui=gui,
            logging=logging_cfg,
            project_root=project_root
        )

    @staticmethod
    def _parse_link(link_data: Dict) -> NavigationLink:
        """Build a NavigationLink from its JSON form."""
        if "label" not in link_data or "path" not in link_data:
            raise ConfigurationError(
                "Navigation links need both 'label' and 'path'",
                {"link": link_data}
            )
        return NavigationLink(
            label=link_data["label"],
            path=link_data["path"],
            description=link_data.get("description", ""),
            keywords=link_data.get("keywords", [])
        )

    @staticmethod
    def _resolve_path(path_str: str, project_root: Path) -> Path:
        """Resolve a path string, making relative paths absolute."""
        path = Path(path_str)
        if path.is_absolute():
            return path
        return project_root / path


_config_instance: Optional[Config] = None


def get_config(config_path: Path = None) -> Config:
    """
    Get the singleton Config instance.

    Args:
        config_path: Optional path to config file. If not provided,
                    searches upward from current directory.

    Returns:
        The global Config instance.

    Raises:
        ConfigurationError: If config cannot be loaded.
    """
    global _config_instance

    if _config_instance is None or config_path is not None:
        if config_path is None:
            config_path = _find_config_file()
        _config_instance = Config.from_file(config_path)

    return _config_instance


def _find_config_file() -> Path:
    """Search upward from current directory to find config/config.json."""
    current = Path.cwd()

    for _ in range(10):
        config_path = current / "config" / "config.json"
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    raise ConfigurationError(
        "Could not find config/config.json in current directory or parents"
    )


def reload_config(config_path: Path = None) -> Config:
    """
    Force reload of configuration.

    Args:
        config_path: Optional path to config file.

    Returns:
        Fresh Config instance.
    """
    global _config_instance
    _config_instance = None
    return get_config(config_path)


if __name__ == "__main__":
    try:
        config = get_config()
        print(f"Project root: {config.project_root}")
        print(f"Database path: {config.paths.database_path}")
        print(f"Embedding model: {config.embedding.model} ({config.embedding.dimensions} dims)")
        print(f"Chat model: {config.chat.model}")
        print(f"API key configured: {bool(config.embedding.api_key)}")
    except ConfigurationError as e:
        print(f"Config error: {e.message}")
