"""Intent router: maps one utterance to exactly one reply.

Classifiers are tried in table order. A classifier's ``matches`` decides
whether it claims the utterance; its ``handle`` may still return None
(not applicable), in which case routing continues with the next entry. The
last entry always answers. Session updates carried by the chosen reply are
applied here and nowhere else.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from aurora.config import settings
from aurora.connectivity import Connectivity
from aurora.engine import intents
from aurora.engine.evaluator import evaluate
from aurora.engine.session import (
    ENTER_CREATOR_MODE,
    ENTER_PASSWORD_GATE,
    RESET_TO_ANONYMOUS,
    PasswordGate,
    SessionState,
    SessionUpdate,
)
from aurora.errors import ModelError
from aurora.llm.prompt import (
    format_date,
    format_day,
    format_time,
    local_now,
    time_of_day_greeting,
)
from aurora.notifications import Notice
from aurora.tools.facts import is_fact_query

if TYPE_CHECKING:
    from aurora.chat.models import Message
    from aurora.llm.client import LLMFallback
    from aurora.logbuffer import LogEntry
    from aurora.tools import Toolkit

logger = logging.getLogger(__name__)

WEATHER_OFFLINE = (
    "I'm sorry, I can't fetch real-time weather data while I'm offline. "
    "Please check your internet connection."
)
SEARCH_OFFLINE = (
    "I'm sorry, I can't access the internet while I'm offline. Please check your connection."
)
TRANSLATE_OFFLINE = (
    "I'm sorry, I can't reach a translation service while I'm offline. "
    "Please check your connection."
)
NEWS_OFFLINE = (
    "I'm sorry, I can't look up news headlines while I'm offline. Please check your connection."
)
TRENDS_OFFLINE = (
    "I'm sorry, I need to be online to analyze current trends. Please check your connection."
)
INSIGHTS_OFFLINE = (
    "I'm sorry, I need to be online to provide insights. Please check your connection."
)
MODEL_OFFLINE = (
    "I'm sorry, I can't reach my language model while I'm offline. "
    "Please check your connection and try again."
)

TRANSLATE_PROMPT = (
    "Please specify the text to translate and the target language "
    "(e.g., 'translate \"hello\" to es')."
)
SEARCH_PROMPT = "Please specify what you'd like me to search for."
SOCIAL_PROMPT = "Please specify the name of the person you'd like me to search for on social media."
SUMMARIZE_PROMPT = "Please provide the text you'd like me to summarize."
INTERESTS_PROMPT = "Please tell me at least one interest, separated by commas."
NO_INTERESTS = (
    "I don't have any specific interests set for you yet. Please tell me your interests "
    "first (e.g., 'My interests are tech and finance')."
)

EXPLORER_ANSWER = (
    'Ah, you asked me to search using "Explorer." Just to clarify, Internet Explorer is an '
    "outdated web browser, not a search engine itself. I cannot use it for searching. "
    "However, I can certainly use Google or DuckDuckGo if those tools are available!"
)
BEHAVIOR_INSTRUCTION = (
    "Based on your extensive knowledge and understanding of human society, please provide a "
    "thoughtful, speculative prediction on how human behavior might be affected or change in "
    "response to recent global events. Emphasize that this is an AI-generated perspective, "
    "not a factual forecast."
)


@dataclass(frozen=True)
class Reply:
    """What a handler produces. The router fills in ``intent``."""

    text: str
    updates: SessionUpdate = field(default_factory=SessionUpdate)
    notices: tuple[Notice, ...] = ()


@dataclass(frozen=True)
class TurnContext:
    utterance: str
    lowered: str
    session: SessionState
    connectivity: Connectivity
    history: Sequence[Message]
    logs: Sequence[LogEntry]
    now: datetime

    @property
    def online(self) -> bool:
        return self.connectivity is Connectivity.ONLINE


Handler = Callable[[TurnContext], Awaitable[Reply | None]]


@dataclass(frozen=True)
class Classifier:
    name: str
    matches: Callable[[TurnContext], bool]
    handle: Handler


@dataclass(frozen=True)
class RouteResult:
    reply: str
    intent: str
    updates: SessionUpdate
    notices: tuple[Notice, ...]


class IntentRouter:
    """Ordered classifier table over the tool adapters and the model fallback."""

    def __init__(
        self,
        toolkit: Toolkit,
        llm: LLMFallback,
        *,
        clock: Callable[[], datetime] = local_now,
        choose: Callable[[Sequence[str]], str] = random.choice,
    ) -> None:
        self._toolkit = toolkit
        self._llm = llm
        self._clock = clock
        self._choose = choose
        self.classifiers: list[Classifier] = self._build_table()

    def _build_table(self) -> list[Classifier]:
        return [
            Classifier(
                "password_attempt",
                lambda ctx: ctx.session.gate is PasswordGate.AWAITING_PASSWORD,
                self._password_attempt,
            ),
            Classifier(
                "creator_phrase",
                lambda ctx: (
                    not ctx.session.creator_mode and settings.creator_phrase.lower() in ctx.lowered
                ),
                self._creator_phrase,
            ),
            Classifier(
                "farewell",
                lambda ctx: (
                    ctx.session.creator_mode
                    and intents.contains_any(ctx.lowered, intents.FAREWELL_KEYWORDS)
                ),
                self._farewell,
            ),
            Classifier("identity", lambda ctx: True, self._identity),
            Classifier(
                "internet_explorer",
                lambda ctx: intents.EXPLORER_PHRASE in ctx.lowered,
                self._internet_explorer,
            ),
            Classifier(
                "creator_command", lambda ctx: ctx.session.creator_mode, self._creator_command
            ),
            Classifier("clock", lambda ctx: True, self._clock_query),
            Classifier(
                "weather",
                lambda ctx: intents.contains_any(ctx.lowered, intents.WEATHER_KEYWORDS),
                self._weather,
            ),
            Classifier(
                "calculation", lambda ctx: any(c.isdigit() for c in ctx.lowered), self._calculation
            ),
            Classifier(
                "translation",
                lambda ctx: "translate" in ctx.lowered and "to" in ctx.lowered,
                self._translation,
            ),
            Classifier(
                "fact",
                lambda ctx: self._toolkit.facts is not None and is_fact_query(ctx.lowered),
                self._fact,
            ),
            Classifier(
                "search", lambda ctx: intents.is_search_request(ctx.lowered), self._search
            ),
            Classifier(
                "social",
                lambda ctx: intents.contains_any(ctx.lowered, intents.SOCIAL_KEYWORDS),
                self._social,
            ),
            Classifier(
                "creative",
                lambda ctx: intents.starts_with_any(
                    ctx.lowered, (intents.DRAFT_EMAIL, intents.SUMMARIZE, intents.BRAINSTORM)
                ),
                self._creative,
            ),
            Classifier(
                "interests",
                lambda ctx: ctx.lowered.startswith(intents.INTERESTS_PREFIX),
                self._interests,
            ),
            Classifier(
                "trends",
                lambda ctx: (
                    ctx.lowered.startswith(intents.TRENDS_PREFIX)
                    or intents.INSIGHTS_PHRASE in ctx.lowered
                ),
                self._trends,
            ),
            Classifier(
                "speculation",
                lambda ctx: intents.starts_with_any(
                    ctx.lowered, intents.BEHAVIOR_PREFIXES + intents.PREDICTION_PREFIXES
                ),
                self._speculation,
            ),
            Classifier(
                "gauteng_news",
                lambda ctx: intents.contains_any(ctx.lowered, intents.GAUTENG_PHRASES),
                self._gauteng_news,
            ),
            Classifier(
                "news",
                lambda ctx: intents.contains_any(ctx.lowered, intents.NEWS_KEYWORDS),
                self._news,
            ),
            Classifier("model", lambda ctx: True, self._model),
        ]

    async def route(
        self,
        utterance: str,
        session: SessionState,
        connectivity: Connectivity,
        history: Sequence[Message] = (),
        logs: Sequence[LogEntry] = (),
    ) -> RouteResult:
        """Pick exactly one reply for ``utterance`` and apply its session updates.

        ``RequestCancelledError`` from the model fallback propagates.
        """
        text = intents.normalize(utterance)
        ctx = TurnContext(
            utterance=text,
            lowered=text.lower(),
            session=session,
            connectivity=connectivity,
            history=history,
            logs=logs,
            now=self._clock(),
        )

        for classifier in self.classifiers:
            if not classifier.matches(ctx):
                continue
            logger.debug("Classifier %s claimed utterance", classifier.name)
            reply = await classifier.handle(ctx)
            if reply is None:
                logger.debug("Classifier %s passed", classifier.name)
                continue
            session.apply(reply.updates)
            logger.info("Routed to %s (phase=%s)", classifier.name, session.phase)
            return RouteResult(
                reply=reply.text,
                intent=classifier.name,
                updates=reply.updates,
                notices=reply.notices,
            )

        msg = "No classifier produced a reply"
        raise RuntimeError(msg)

    # -- Creator verification -------------------------------------------------

    async def _password_attempt(self, ctx: TurnContext) -> Reply:
        creator = settings.creator_name
        if ctx.utterance == settings.creator_password:
            logger.info("Creator password verified. Hidden functions unlocked.")
            return Reply(
                f"Password correct. Welcome, {creator}! Hidden functions are now unlocked. "
                "How may I help you?",
                updates=ENTER_CREATOR_MODE,
                notices=(Notice.success("Hidden functions unlocked!"),),
            )
        if ctx.lowered == intents.CANCEL_KEYWORD:
            logger.info("Password verification cancelled by user.")
            return Reply("Password verification cancelled.", updates=RESET_TO_ANONYMOUS)

        logger.warning("Incorrect password entered.")
        return Reply(
            "Incorrect password. Please try again or say 'cancel' to stop verification.",
            notices=(Notice.error("Incorrect password"),),
        )

    async def _creator_phrase(self, ctx: TurnContext) -> Reply:
        logger.info("Creator recognition attempt detected. Awaiting password.")
        return Reply(
            f"Hello {settings.creator_name}! To verify your identity, please provide the "
            "secret password.",
            updates=ENTER_PASSWORD_GATE,
        )

    async def _farewell(self, ctx: TurnContext) -> Reply:
        logger.info("Creator Mode deactivated by user.")
        return Reply(
            "Good-bye, I've reverted to general user mode. It was a pleasure.",
            updates=RESET_TO_ANONYMOUS,
            notices=(Notice.info("Creator Mode deactivated."),),
        )

    # -- Canned answers -------------------------------------------------------

    async def _identity(self, ctx: TurnContext) -> Reply | None:
        if intents.contains_any(ctx.lowered, intents.NAME_QUESTIONS):
            return Reply(f"My name is {settings.persona_name}.")
        if intents.contains_any(ctx.lowered, intents.CREATOR_QUESTIONS):
            return Reply(f"I was created by {settings.creator_name}.")
        if intents.contains_any(ctx.lowered, intents.ORIGIN_QUESTIONS):
            return Reply("I was created somewhere in South Africa.")
        return None

    async def _internet_explorer(self, ctx: TurnContext) -> Reply:
        return Reply(EXPLORER_ANSWER)

    async def _creator_command(self, ctx: TurnContext) -> Reply | None:
        creator = settings.creator_name
        if intents.SECRET_COMMAND in ctx.lowered:
            logger.info("Secret command accessed by %s.", creator)
            return Reply(
                "Accessing secret command: Initiating quantum entanglement sequence... Just "
                "kidding! This is a placeholder for a special function only accessible by my "
                f"creator, {creator}."
            )
        if intents.SHOW_LOGS in ctx.lowered:
            logger.info("System logs requested by %s.", creator)
            if not ctx.logs:
                return Reply("My system logs are currently empty.")
            lines = "\n".join(entry.format() for entry in ctx.logs)
            return Reply(f"Here are the recent system logs:\n\n{lines}")
        if intents.contains_any(ctx.lowered, intents.DEBUG_PHRASES):
            logger.info("Debug explanation requested by %s.", creator)
            return Reply(
                "In debug mode, I can tell you that my current response was generated by "
                "analyzing your input for keywords related to my persona, special functions "
                "(like weather or creator access), and then querying my core language model. "
                "My decision tree prioritizes direct commands and creator verification before "
                "general knowledge queries. My current state: Creator Mode Active, Humour 40%, "
                "IQ 187."
            )
        if intents.BOSS_GREETING in ctx.lowered:
            logger.info("Creator greeting recognized.")
            return Reply("Hello Boss, what can I do for you?")
        return None

    async def _clock_query(self, ctx: TurnContext) -> Reply | None:
        day, date, time = format_day(ctx.now), format_date(ctx.now), format_time(ctx.now)
        if intents.contains_any(ctx.lowered, intents.DATE_PHRASES):
            return Reply(f"Today's date is {date}.")
        if intents.contains_any(ctx.lowered, intents.DAY_PHRASES):
            return Reply(f"Today is {day}.")
        if intents.contains_any(ctx.lowered, intents.TIME_PHRASES):
            return Reply(f"The current time is {time}.")
        if intents.contains_any(ctx.lowered, intents.DATETIME_PHRASES):
            return Reply(f"Currently, it's {day}, {date}, at {time}.")
        return None

    # -- Tools ------------------------------------------------------------------

    async def _weather(self, ctx: TurnContext) -> Reply:
        if not ctx.online:
            return Reply(WEATHER_OFFLINE)
        location = intents.extract_location(ctx.utterance)
        return Reply(await self._toolkit.weather(location))

    async def _calculation(self, ctx: TurnContext) -> Reply | None:
        answer = evaluate(ctx.utterance)
        return Reply(answer) if answer is not None else None

    async def _translation(self, ctx: TurnContext) -> Reply:
        request = intents.extract_translation(ctx.utterance)
        if request is None:
            return Reply(TRANSLATE_PROMPT)
        if not ctx.online:
            return Reply(TRANSLATE_OFFLINE)
        text, target_lang = request
        return Reply(await self._toolkit.translate(text, target_lang))

    async def _fact(self, ctx: TurnContext) -> Reply:
        if not ctx.online:
            return Reply(SEARCH_OFFLINE)
        return Reply(await self._toolkit.lookup_fact(ctx.utterance))

    async def _search(self, ctx: TurnContext) -> Reply:
        if not ctx.online:
            return Reply(SEARCH_OFFLINE)
        query, engine = intents.extract_search(ctx.utterance)
        if not query:
            return Reply(SEARCH_PROMPT)
        return Reply(await self._toolkit.search(query, engine))

    async def _social(self, ctx: TurnContext) -> Reply:
        person = intents.extract_person(ctx.lowered)
        if not person:
            return Reply(SOCIAL_PROMPT)
        return Reply(await self._toolkit.social_lookup(person))

    async def _trends(self, ctx: TurnContext) -> Reply:
        if ctx.lowered.startswith(intents.TRENDS_PREFIX):
            topic = intents.strip_prefix(ctx.utterance, intents.TRENDS_PREFIX)
            if not ctx.online:
                return Reply(TRENDS_OFFLINE)
            found = await self._toolkit.search(f"trending news about {topic}", "google")
            return Reply(f'Analyzing trends for "{topic}" based on recent online data: \n\n{found}')

        if not ctx.online:
            return Reply(INSIGHTS_OFFLINE)
        if not ctx.session.interests:
            return Reply(NO_INTERESTS)
        interest = self._choose(ctx.session.interests)
        found = await self._toolkit.search(f"recent insights and trends in {interest}", "google")
        return Reply(
            f"Based on your interest in {interest}, here are some recent insights I found: "
            f"\n\n{found}"
        )

    async def _gauteng_news(self, ctx: TurnContext) -> Reply:
        greeting = time_of_day_greeting(ctx.now).rstrip(".")
        return Reply(
            f"{greeting}! While {settings.persona_name} is quite adept at many things, I "
            "currently don't have access to the very latest real-time news headlines to give "
            "you the top story in Gauteng today. My information isn't updated minute-by-minute "
            "like a live news feed. However, if you have a different question, perhaps about "
            "the weather in a specific area, a calculation you need help with, or a language "
            "translation, I'd be happy to assist!"
        )

    async def _news(self, ctx: TurnContext) -> Reply:
        if not ctx.online:
            return Reply(NEWS_OFFLINE)
        return Reply(await self._toolkit.news(intents.extract_news_topic(ctx.utterance)))

    # -- Model-backed -----------------------------------------------------------

    async def _creative(self, ctx: TurnContext) -> Reply:
        if ctx.lowered.startswith(intents.DRAFT_EMAIL):
            topic = intents.strip_prefix(ctx.utterance, intents.DRAFT_EMAIL)
            return await self._ask_model(ctx, f"Draft a professional email about: {topic}.")
        if ctx.lowered.startswith(intents.SUMMARIZE):
            text = intents.strip_prefix(ctx.utterance, intents.SUMMARIZE)
            if not text:
                return Reply(SUMMARIZE_PROMPT)
            return await self._ask_model(ctx, f'Summarize the following text concisely: "{text}"')
        topic = intents.strip_prefix(ctx.utterance, intents.BRAINSTORM)
        return await self._ask_model(
            ctx,
            f"Brainstorm creative ideas for a project about: {topic}. "
            "Provide a list of at least 5 ideas.",
        )

    async def _interests(self, ctx: TurnContext) -> Reply:
        interests = intents.parse_interests(ctx.utterance)
        if not interests:
            return Reply(INTERESTS_PROMPT)
        return Reply(
            f"Understood! I'll keep your interests in mind: {', '.join(interests)}.",
            updates=SessionUpdate(add_interests=tuple(interests)),
        )

    async def _speculation(self, ctx: TurnContext) -> Reply:
        if intents.starts_with_any(ctx.lowered, intents.BEHAVIOR_PREFIXES):
            return await self._ask_model(ctx, BEHAVIOR_INSTRUCTION)
        topic = intents.extract_prediction_topic(ctx.utterance)
        return await self._ask_model(
            ctx,
            f'Provide a thoughtful, high-level prediction for the future of "{topic}". '
            "Emphasize that this is a speculative, AI-generated perspective, not a factual "
            "forecast based on external data.",
        )

    async def _model(self, ctx: TurnContext) -> Reply:
        return await self._ask_model(ctx, ctx.utterance)

    async def _ask_model(self, ctx: TurnContext, prompt: str) -> Reply:
        if not ctx.online:
            return Reply(MODEL_OFFLINE)
        try:
            text = await self._llm.complete(
                prompt, ctx.history, creator_mode=ctx.session.creator_mode
            )
        except ModelError as exc:
            logger.error("Error getting AI response: %s", exc)
            return Reply(
                f"I'm experiencing some technical difficulties: {exc}. Please try again later.",
                notices=(Notice.error(f"Failed to get response: {exc}"),),
            )
        return Reply(text)
