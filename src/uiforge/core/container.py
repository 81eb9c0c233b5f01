"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from uiforge.agents import CodeGenerator, Explainer, IntentClassifier, Pipeline, Planner
from uiforge.handlers import ChatHandler
from uiforge.models import CompletionModel, GeminiConfig, ModelLoader
from uiforge.services import ConversationStore, InMemoryConversationStore
from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings, llm: CompletionModel | None = None) -> None:
        self.settings = settings
        self.llm = llm

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_completion_model(self, settings: Settings) -> CompletionModel:
        """Provide the shared model client."""
        if self.llm is not None:
            return self.llm
        config = GeminiConfig(
            model_name=settings.gemini_model,
            api_key=settings.gemini_api_key or None,
            timeout=settings.gemini_timeout,
        )
        return ModelLoader.load(config)

    @singleton
    @provider
    def provide_pipeline(self, llm: CompletionModel, settings: Settings) -> Pipeline:
        """Provide the pipeline with one instance of every stage."""
        return Pipeline(
            classifier=IntentClassifier(llm, settings),
            planner=Planner(llm, settings),
            generator=CodeGenerator(llm, settings),
            explainer=Explainer(llm, settings),
            max_attempts=settings.max_generation_attempts,
        )

    @singleton
    @provider
    def provide_store(self) -> ConversationStore:
        return InMemoryConversationStore()

    @singleton
    @provider
    def provide_chat_handler(
        self, pipeline: Pipeline, store: ConversationStore, settings: Settings
    ) -> ChatHandler:
        return ChatHandler(pipeline, store, max_message_length=settings.max_message_length)


def create_container(settings: Settings | None = None, llm: CompletionModel | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings or get_settings(), llm)])
