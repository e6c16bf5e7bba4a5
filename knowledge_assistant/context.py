"""
Application object graph.

AppContext.create() builds every service once at process start. Nothing
below it reaches for a module-level database or client.
"""

from dataclasses import dataclass
from pathlib import Path

from .core import get_config, get_logger, Config
from .database import (
    DatabaseManager,
    init_schema,
    KnowledgeRepository,
    ConversationRepository,
    MessageRepository,
    FeedbackRepository
)
from .search import EmbeddingService, KeywordEngine, SemanticEngine, HybridEngine
from .knowledge import KnowledgeBaseService
from .chat import AIService, ChatManager

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Container for the wired application services."""
    config: Config
    db: DatabaseManager
    embedding_service: EmbeddingService
    knowledge_repository: KnowledgeRepository
    search_engine: HybridEngine
    knowledge_service: KnowledgeBaseService
    ai_service: AIService
    chat_manager: ChatManager

    @classmethod
    def create(
        cls,
        config: Config = None,
        db_path: Path = None,
        embedding_service: EmbeddingService = None,
        ai_service: AIService = None
    ) -> "AppContext":
        """
        Build the application services and make sure the schema exists.

        Args:
            config: Configuration. Defaults to the global config.
            db_path: Database file. Defaults to config.paths.database_path.
            embedding_service: Replacement embedding service, mainly for tests.
            ai_service: Replacement AI service, mainly for tests.

        Returns:
            A ready AppContext.
        """
        config = config or get_config()

        db = DatabaseManager(db_path or config.paths.database_path)
        init_schema(db, config.search.tokenizer)

        embedding_service = embedding_service or EmbeddingService(config.embedding)

        knowledge_repository = KnowledgeRepository(db)
        search_engine = HybridEngine(
            KeywordEngine(knowledge_repository, config.search),
            SemanticEngine(knowledge_repository, embedding_service, config.embedding.dimensions),
            config.search
        )
        knowledge_service = KnowledgeBaseService(knowledge_repository, embedding_service, search_engine)

        ai_service = ai_service or AIService(
            chat_config=config.chat,
            assistant_config=config.assistant,
            knowledge_service=knowledge_service,
            provider_config=config.embedding
        )

        conversations = ConversationRepository(db)
        chat_manager = ChatManager(
            ai_service,
            conversations,
            MessageRepository(db, conversations),
            FeedbackRepository(db),
            config.chat
        )

        logger.info(f"Application context ready (database: {db.db_path})")

        return cls(
            config=config,
            db=db,
            embedding_service=embedding_service,
            knowledge_repository=knowledge_repository,
            search_engine=search_engine,
            knowledge_service=knowledge_service,
            ai_service=ai_service,
            chat_manager=chat_manager
        )
