"""Intent Classifier - gatekeeper stage."""

import re

from uiforge.core import Settings, extract_tags, get_logger, parse_bool, parse_list
from uiforge.models import CompletionModel, CompletionRequest
from uiforge.monitoring import metrics_collector
from .models import INTENT_ACTIONS, UserIntent
from .prompts import INTENT_SYSTEM_PROMPT, PromptBuilder


logger = get_logger(__name__)

DISCARD_PATTERN = re.compile(
    r"(start over|starting over|clear everything|new ui|new layout|new dashboard|delete everything"
    r"|from scratch|fresh start|scrap this|scrap it|wipe|completely new|redo everything"
    r"|build me a new|replace everything|forget the old)",
    re.IGNORECASE,
)

INTENT_TAGS = (
    "intent",
    "action",
    "target",
    "discard_existing",
    "cleaned_request",
    "blocked_items",
    "is_completely_blocked",
)

NONE_MARKER = "NONE"
FULLY_BLOCKED_ITEM = "entire request (forbidden content only)"


def wants_discard(message: str) -> bool:
    """Local keyword check for a start-over request."""
    return bool(DISCARD_PATTERN.search(message or ""))


def fallback_intent(user_message: str, has_existing_code: bool) -> UserIntent:
    """Safe default used when the model's answer cannot be interpreted."""
    return UserIntent(
        intent="modify" if has_existing_code else "create",
        discard_existing=False,
        action="update" if has_existing_code else "create",
        target="unknown",
        sanitized_request=user_message,
        blocked_items=(),
        is_completely_blocked=False,
    )


class IntentClassifier:
    """Classifies a request as create/modify/explain and strips forbidden content."""

    def __init__(self, llm: CompletionModel, settings: Settings) -> None:
        self.llm = llm
        self.temperature = settings.intent_temperature
        self.max_tokens = settings.intent_max_tokens

    async def classify(self, user_message: str, has_existing_code: bool) -> UserIntent:
        """
        Classify one user message.

        Args:
            user_message: Raw user text
            has_existing_code: Whether a previous UI exists

        Returns:
            UserIntent; never raises on malformed model output

        Raises:
            ModelCallError: If the provider call itself fails
        """
        request = CompletionRequest(
            stage="intent",
            system_instruction=INTENT_SYSTEM_PROMPT,
            user_instruction=PromptBuilder.intent(user_message, has_existing_code),
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        text = (await self.llm.ainvoke(request)).strip()
        logger.debug("intent_raw", preview=text[:300])

        try:
            intent = self.parse(text, user_message, has_existing_code)
        except ValueError as e:
            logger.warning("intent_unparsable", error=str(e), preview=text[:200])
            metrics_collector.record_parse_warning("intent", "response")
            return fallback_intent(user_message, has_existing_code)

        logger.info(
            "intent_classified",
            intent=intent.intent,
            action=intent.action,
            discard=intent.discard_existing,
            blocked=len(intent.blocked_items),
            completely_blocked=intent.is_completely_blocked,
        )
        return intent

    @staticmethod
    def parse(text: str, user_message: str, has_existing_code: bool) -> UserIntent:
        """Turn tagged model output into a UserIntent, or raise ValueError."""
        fields = extract_tags(text, *INTENT_TAGS)

        raw_intent = fields["intent"].lower()
        if raw_intent not in ("create", "modify", "explain"):
            raise ValueError(f"missing or unknown <intent>: {raw_intent!r}")

        cleaned = fields["cleaned_request"]
        if not cleaned:
            raise ValueError("missing <cleaned_request>")

        blocked_items = parse_list(fields["blocked_items"], NONE_MARKER)
        fully_forbidden = cleaned.upper() == NONE_MARKER
        completely_blocked = parse_bool(fields["is_completely_blocked"]) or fully_forbidden
        if completely_blocked and not blocked_items:
            blocked_items = [FULLY_BLOCKED_ITEM]

        discard = parse_bool(fields["discard_existing"]) or wants_discard(user_message)

        if raw_intent == "explain":
            kind = "explain"
        elif discard:
            kind = "create"
        else:
            kind = "modify" if has_existing_code else "create"

        action = fields["action"].lower()
        if kind == "create" and discard:
            action = "create"
        elif action not in INTENT_ACTIONS:
            action = "update" if has_existing_code else "create"

        return UserIntent(
            intent=kind,
            discard_existing=discard,
            action=action,
            target=fields["target"] or "unknown",
            sanitized_request="" if fully_forbidden else cleaned,
            blocked_items=tuple(blocked_items),
            is_completely_blocked=completely_blocked,
        )
