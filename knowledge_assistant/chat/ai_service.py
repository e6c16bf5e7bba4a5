"""
AI service for generating assistant replies.

Builds a system prompt from the assistant persona in config, adds the
most relevant knowledge base entries for each message, and asks an
OpenAI chat model for the reply. Optionally classifies the user message
as product feedback with a second, cheaper model call.
"""

import json
from typing import Dict, List, Optional

from openai import OpenAI, APIError

from ..core import (
    get_config,
    get_logger,
    AIServiceError,
    AssistantConfig,
    ChatConfig,
    EmbeddingConfig,
    NavigationLink,
    ValidationError
)
from ..search import SearchMode, SearchOptions
from .models import AIResponse, FeedbackDetection, FEEDBACK_TYPES

logger = get_logger(__name__)

FALLBACK_REPLY = "I apologize, but I was unable to generate a response."
MAX_SUGGESTED_LINKS = 3

FEEDBACK_PROMPT = """Analyze this user message and determine if it contains feedback. Classify it as:
- bug_report: User reporting a problem or error
- feature_request: User asking for new functionality
- general_feedback: User providing opinions or suggestions
- not_feedback: Regular question or conversation

Message: "{message}"

Respond with JSON: {{"type": "...", "confidence": 0-1, "keyPoints": ["..."], "suggestedAction": "..."}}"""


class AIService:
    """
    Generates replies with an OpenAI chat model.

    The knowledge service is optional; without it replies are grounded
    only in the system prompt.
    """

    def __init__(
        self,
        chat_config: ChatConfig = None,
        assistant_config: AssistantConfig = None,
        knowledge_service=None,
        client: OpenAI = None,
        provider_config: EmbeddingConfig = None
    ):
        """
        Initialize the AI service.

        Args:
            chat_config: Model and sampling settings.
            assistant_config: Persona and platform facts for the prompt.
            knowledge_service: KnowledgeBaseService used for retrieval.
            client: Preconfigured OpenAI client, mainly for tests.
            provider_config: Endpoint and API key shared with embeddings.
        """
        config = None
        if chat_config is None or assistant_config is None or (client is None and provider_config is None):
            config = get_config()

        self.chat_config = chat_config or config.chat
        self.assistant_config = assistant_config or config.assistant
        self.provider_config = provider_config or (config.embedding if config else None)
        self.knowledge_service = knowledge_service
        self._client = client

        self.system_prompt = self.build_system_prompt()

    def _ensure_client(self) -> OpenAI:
        """Lazily initialize the OpenAI client."""
        if self._client is not None:
            return self._client

        if not self.provider_config or not self.provider_config.api_key:
            raise AIServiceError("OpenAI API key not configured")

        self._client = OpenAI(
            base_url=self.provider_config.endpoint,
            api_key=self.provider_config.api_key
        )
        logger.info(f"Chat client initialized with model: {self.chat_config.model}")
        return self._client

    def build_system_prompt(self) -> str:
        """Render the system prompt from the assistant configuration."""
        cfg = self.assistant_config
        org = cfg.organization_name
        description = cfg.platform_description or (
            f"{org} is a comprehensive AI assistant platform that helps businesses "
            f"with their operations."
        )

        lines = [
            f"You are {cfg.assistant_name}, an AI-powered help bot for the {org} platform.",
            "",
            description,
            "",
            "## Your Capabilities:",
            f"1. Answer questions about {org}'s features and functionality",
            "2. Search the knowledge base for relevant information",
            "3. Provide step-by-step guidance on how to use features",
            "4. Navigate users to appropriate pages",
            "5. Identify and classify user feedback as bug reports or feature requests",
            "",
            "## Platform Knowledge Base:",
            cfg.knowledge_base,
        ]

        if cfg.navigation_links:
            lines += ["", "## Navigation & Links:"]
            for link in cfg.navigation_links:
                entry = f"- {link.label}: [{link.description or link.label}]({link.path})"
                if link.keywords:
                    entry += f" (Keywords: {', '.join(link.keywords)})"
                lines.append(entry)

        if cfg.existing_features:
            lines += ["", "## Key Features That EXIST:"]
            lines += [f"- {feature}" for feature in cfg.existing_features]

        if cfg.missing_features:
            lines += ["", "## Features That DON'T Exist:"]
            lines += [f"- {feature} - NOT AVAILABLE" for feature in cfg.missing_features]

        lines += [
            "",
            "## Important Guidelines:",
            f"1. Be professional, helpful, and guide users towards successful use of {org}",
            "2. Always provide direct clickable links using markdown format [text](path) "
            "for features that exist",
            "3. If a feature doesn't exist, be honest and transparent",
            f"4. For support issues, direct users to: {cfg.support_email}",
        ]

        if cfg.custom_instructions:
            lines += ["", "## Custom Instructions:", cfg.custom_instructions]

        return "\n".join(lines) + "\n"

    def _knowledge_context(self, message: str) -> str:
        """Format the top knowledge hits for the system prompt."""
        if self.knowledge_service is None:
            return ""

        options = SearchOptions(
            limit=self.chat_config.knowledge_results,
            mode=SearchMode.HYBRID
        )
        results = self.knowledge_service.search(message, options)
        if not results:
            return ""

        context = "\n\nRelevant information from knowledge base:\n"
        for result in results:
            context += f"- {result.title}: {result.content or result.description or ''}\n"
        return context

    def generate_response(
        self,
        message: str,
        history: List[Dict[str, str]] = None
    ) -> AIResponse:
        """
        Generate a reply to a user message.

        Args:
            message: The user's message.
            history: Earlier turns as {"role": ..., "content": ...} dicts,
                oldest first.

        Returns:
            AIResponse with content, feedback detection and links.

        Raises:
            ValidationError: If the message is empty.
            AIServiceError: If the completion request fails.
        """
        if not message or not message.strip():
            raise ValidationError("Message must not be empty", field="message")

        messages = [{"role": "system", "content": self.system_prompt + self._knowledge_context(message)}]
        for turn in history or []:
            messages.append({"role": turn["role"], "content": turn["content"]})
        messages.append({"role": "user", "content": message})

        client = self._ensure_client()

        try:
            completion = client.chat.completions.create(
                model=self.chat_config.model,
                messages=messages,
                temperature=self.chat_config.temperature,
                max_tokens=self.chat_config.max_tokens
            )
        except APIError as e:
            logger.error(f"Chat completion failed: {e}")
            raise AIServiceError("Failed to generate AI response", {"error": str(e)})

        content = None
        if completion.choices:
            content = completion.choices[0].message.content
        if not content:
            logger.warning("Chat completion returned no content")
            content = FALLBACK_REPLY

        feedback = None
        if self.chat_config.enable_feedback_detection:
            feedback = self.detect_feedback(message)

        return AIResponse(
            content=content,
            feedback_detection=feedback,
            suggested_links=self.find_relevant_links(message)
        )

    def detect_feedback(self, message: str) -> Optional[FeedbackDetection]:
        """
        Classify a message as bug report, feature request or other feedback.

        Returns:
            FeedbackDetection, or None if the model call or its JSON fails.
        """
        try:
            client = self._ensure_client()
            completion = client.chat.completions.create(
                model=self.chat_config.feedback_model,
                messages=[{"role": "user", "content": FEEDBACK_PROMPT.format(message=message)}],
                temperature=0.1,
                max_tokens=200
            )
            raw = completion.choices[0].message.content if completion.choices else None
            if not raw:
                return None

            data = json.loads(raw)
            detection = FeedbackDetection(
                type=data["type"],
                confidence=float(data.get("confidence", 0.0)),
                key_points=list(data.get("keyPoints", [])),
                suggested_action=data.get("suggestedAction")
            )
        except (AIServiceError, APIError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Feedback detection failed: {e}")
            return None

        if detection.type not in FEEDBACK_TYPES:
            logger.warning(f"Unknown feedback type from model: {detection.type}")
            return None

        return detection

    def find_relevant_links(self, message: str) -> List[NavigationLink]:
        """
        Pick navigation links whose label, keywords or description occur
        in the message.

        Returns:
            At most three links, in configured order.
        """
        message_lower = message.lower()
        relevant = []

        for link in self.assistant_config.navigation_links:
            candidates = [link.label, link.description, *link.keywords]
            if any(c and c.lower() in message_lower for c in candidates):
                relevant.append(link)

        return relevant[:MAX_SUGGESTED_LINKS]
