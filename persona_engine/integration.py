"""Mood-persona integration: the learning loop over immutable PersonaState snapshots.

Every operation takes the caller's current :class:`PersonaState` and returns a
new one.  Nothing is cached between calls, so the caller owns persistence and
must serialise concurrent updates for the same user.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from persona_engine.engine import RecommendationEngine
from persona_engine.models import (
    ActionType,
    AdaptationMetrics,
    DynamicMoodWeights,
    EventOutcomes,
    Game,
    GameRecommendation,
    GameSession,
    Mood,
    MoodFilterContext,
    MoodPatterns,
    MoodSelectionEvent,
    MoodSuggestion,
    MoodSuggestionContext,
    PersonaState,
    TimeOfDay,
    UserAction,
    weekday_name,
)
from persona_engine.moods import MOOD_DEFINITIONS, SOCIAL_CONTEXT_MOODS
from persona_engine.playstyle import PlaystyleClassifier

logger = logging.getLogger(__name__)

_CONFIDENCE_FLOOR = 0.1
_CONFIDENCE_CEILING = 0.9
_NEUTRAL_TIME_PREFERENCE = 0.5
_TIME_PREFERENCE_FACTOR = 0.3
_DEFAULT_RATING = 3
_RECENT_EVENTS = 10
_MAX_SUGGESTIONS = 3


class MoodPersonaIntegration:
    """Ingests mood selections and user feedback, and serves suggestions.

    Learning rules applied on each new mood selection:

    ====================  ==================================================
    Quantity              Update
    ====================  ==================================================
    ``sample_size``       ``+= 1``
    ``confidence``        ``min(0.9, 0.1 + sample_size / 100)``
    genre weights         ``+= learning_rate * (0.6*launch + 0.4*sat - 0.5)``,
                          clamped to [-1, 1]
    time preference       ``+= learning_rate * (1 - pref)`` for the bucket
    ====================  ==================================================

    Feedback from :meth:`learn_from_user_action` amends the latest event and
    nudges the weights again with the amended outcomes, but does not count
    as a new sample: ``sample_size``, ``confidence``, history length and
    mood patterns are left unchanged.

    Args:
        engine: Engine used for personalised recommendations.
        classifier: Playstyle classifier.  Defaults to a 30-day half-life.
    """

    def __init__(
        self,
        engine: RecommendationEngine,
        classifier: PlaystyleClassifier | None = None,
    ) -> None:
        self._engine = engine
        self._classifier = classifier or PlaystyleClassifier()

    # ------------------------------------------------------------------
    # Persona lifecycle
    # ------------------------------------------------------------------

    def create_persona(
        self, user_id: str, sessions: Iterable[GameSession] = ()
    ) -> PersonaState:
        """Return a fresh persona for *user_id* with a profile from *sessions*.

        Raises:
            ValueError: If *user_id* is empty.
        """
        if not user_id:
            raise ValueError("user_id must be non-empty")
        profile = self._classifier.compute_playstyle(list(sessions))
        logger.info(
            "Created persona for user %r (archetype=%s)",
            user_id,
            profile.primary_archetype.archetype.value,
        )
        return PersonaState(user_id=user_id, profile=profile)

    def refresh_profile(
        self, state: PersonaState, sessions: Iterable[GameSession]
    ) -> PersonaState:
        """Recompute the playstyle profile wholesale from *sessions*."""
        profile = self._classifier.compute_playstyle(list(sessions))
        return replace(state, profile=profile, version=state.version + 1)

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def process_mood_selection(
        self, state: PersonaState | None, event: MoodSelectionEvent
    ) -> PersonaState:
        """Record *event* and return the updated persona.

        Args:
            state: Current persona, or ``None`` for a user seen for the
                first time.
            event: The mood selection to record.

        Returns:
            A new :class:`PersonaState` with the event appended and weights,
            patterns and metrics updated.

        Raises:
            ValueError: If the event is malformed or belongs to another user.
        """
        _validate_event(event)
        if state is None:
            state = self.create_persona(event.user_id)
        elif state.user_id != event.user_id:
            raise ValueError(
                f"Event for user {event.user_id!r} applied to persona {state.user_id!r}"
            )
        return self._apply_event(state, event, new_sample=True)

    def learn_from_user_action(self, state: PersonaState, action: UserAction) -> PersonaState:
        """Fold *action* into the most recent mood event and re-learn from it.

        ======================  =============================================
        Action                  Effect on the latest event's outcomes
        ======================  =============================================
        ``launch``              ``games_launched += 1``; duration and rating
                                recorded when supplied
        ``ignore``              ``ignored_recommendations += 1``
        ``rate``                ``user_rating`` set
        ``session_complete``    ``average_session_duration`` set
        ``switch_mood``         unchanged
        ======================  =============================================

        Returns:
            The updated persona, or *state* itself when there is no event
            to attach the action to.

        Raises:
            ValueError: If the action belongs to another user or carries an
                out-of-range or missing rating.
        """
        if action.user_id != state.user_id:
            raise ValueError(
                f"Action for user {action.user_id!r} applied to persona {state.user_id!r}"
            )
        if action.rating is not None:
            _validate_rating(action.rating)
        if not state.mood_history:
            logger.debug("No mood event to attach %s action to", action.action_type.value)
            return state

        latest = state.mood_history[-1]
        outcomes = _amend_outcomes(latest.outcomes, action)
        amended = replace(latest, outcomes=outcomes)
        logger.debug(
            "Applied %s action for user %r to %s event",
            action.action_type.value,
            state.user_id,
            latest.primary_mood.value,
        )
        return self._apply_event(state, amended, new_sample=False)

    # ------------------------------------------------------------------
    # Suggestions and recommendations
    # ------------------------------------------------------------------

    def generate_mood_suggestions(
        self, state: PersonaState, context: MoodSuggestionContext
    ) -> list[MoodSuggestion]:
        """Suggest up to three moods for the current situation.

        Candidates are the moods previously chosen in the same time-of-day
        bucket plus, when a social context is given, the moods suited to it.
        Each is scored by its learned confidence adjusted by
        ``(time_preference - 0.5) * 0.3``.
        """
        time_of_day = context.time_of_day
        suggestions: dict[Mood, MoodSuggestion] = {}

        for mood in dict.fromkeys(state.mood_patterns.daily_rhythms.get(time_of_day, ())):
            self._add_suggestion(
                suggestions,
                state,
                mood,
                time_of_day,
                f"You often feel {mood.value} in the {time_of_day.value}",
                time_of_day.value,
            )
        if context.social_context is not None:
            for mood in SOCIAL_CONTEXT_MOODS[context.social_context]:
                self._add_suggestion(
                    suggestions,
                    state,
                    mood,
                    time_of_day,
                    f"Good match for {context.social_context.value} gaming",
                    context.social_context.value,
                )

        ranked = sorted(suggestions.values(), key=lambda s: s.confidence, reverse=True)
        return ranked[:_MAX_SUGGESTIONS]

    def generate_recommendations(
        self, state: PersonaState | None, games: list[Game], n: int | None = None
    ) -> list[GameRecommendation]:
        """Context-free recommendations from the vector baseline."""
        return self._engine.generate(state, games, None, n)

    def generate_personalized_recommendations(
        self,
        state: PersonaState | None,
        mood: Mood,
        games: list[Game],
        context: MoodFilterContext | None = None,
        n: int | None = None,
    ) -> list[GameRecommendation]:
        """Recommend games for *mood*, using learned weights when they exist.

        Falls back to the static mood tables for moods the user has never
        selected.
        """
        if context is None:
            context = MoodFilterContext(primary_mood=mood)
        elif context.primary_mood != mood:
            context = replace(context, primary_mood=mood)
        return self._engine.generate(state, games, context, n)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply_event(
        self, state: PersonaState, event: MoodSelectionEvent, new_sample: bool
    ) -> PersonaState:
        if new_sample:
            history = state.mood_history + (event,)
            patterns = _update_patterns(state.mood_patterns, event)
        else:
            history = state.mood_history[:-1] + (event,)
            patterns = state.mood_patterns

        weights = dict(state.dynamic_mood_weights)
        current = weights.get(event.primary_mood) or _seed_weights(event)
        weights[event.primary_mood] = _update_weights(
            current, event, state.adaptation_metrics.learning_rate, new_sample
        )

        return replace(
            state,
            mood_history=history,
            dynamic_mood_weights=weights,
            mood_patterns=patterns,
            hybrid_mood_preferences=_hybrid_preferences(history),
            adaptation_metrics=_adaptation_metrics(history),
            version=state.version + 1,
        )

    @staticmethod
    def _add_suggestion(
        suggestions: dict[Mood, MoodSuggestion],
        state: PersonaState,
        mood: Mood,
        time_of_day: TimeOfDay,
        reason: str,
        factor: str,
    ) -> None:
        existing = suggestions.get(mood)
        if existing is not None:
            existing.reasoning.append(reason)
            if factor not in existing.contextual_factors:
                existing.contextual_factors.append(factor)
            return
        confidence = _mood_confidence(state, mood, time_of_day)
        suggestions[mood] = MoodSuggestion(
            mood=mood,
            confidence=confidence,
            reasoning=[reason],
            contextual_factors=[factor],
            success_probability=_success_probability(state, mood, confidence),
        )


# ---------------------------------------------------------------------------
# Pure update rules
# ---------------------------------------------------------------------------


def _validate_event(event: MoodSelectionEvent) -> None:
    if not event.user_id:
        raise ValueError("user_id must be non-empty")
    if not 0.0 <= event.intensity <= 1.0:
        raise ValueError(f"intensity must be in [0, 1], got {event.intensity}")
    if event.outcomes.user_rating is not None:
        _validate_rating(event.outcomes.user_rating)


def _validate_rating(rating: int) -> None:
    if not 1 <= rating <= 5:
        raise ValueError(f"rating must be 1-5, got {rating}")


def _seed_weights(event: MoodSelectionEvent) -> DynamicMoodWeights:
    """Fresh weights for a mood, copied from its static definition."""
    definition = MOOD_DEFINITIONS[event.primary_mood]
    return DynamicMoodWeights(
        genre_weights=dict(definition.genre_weights),
        tag_weights=dict(definition.tag_weights),
        platform_biases=dict(definition.platform_bias),
        time_preferences={bucket: _NEUTRAL_TIME_PREFERENCE for bucket in TimeOfDay},
        confidence=_CONFIDENCE_FLOOR,
        sample_size=0,
        last_updated=event.timestamp,
    )


def _update_weights(
    current: DynamicMoodWeights,
    event: MoodSelectionEvent,
    learning_rate: float,
    new_sample: bool,
) -> DynamicMoodWeights:
    outcomes = event.outcomes
    launch_rate = _launch_rate(outcomes)
    satisfaction = (outcomes.user_rating or _DEFAULT_RATING) / 5.0
    adjustment = learning_rate * (0.6 * launch_rate + 0.4 * satisfaction - 0.5)

    genre_weights = {
        genre: max(-1.0, min(1.0, weight + adjustment))
        for genre, weight in current.genre_weights.items()
    }

    sample_size = current.sample_size
    confidence = current.confidence
    time_preferences = dict(current.time_preferences)
    if new_sample:
        sample_size += 1
        confidence = min(_CONFIDENCE_CEILING, _CONFIDENCE_FLOOR + sample_size / 100.0)
        bucket = TimeOfDay.for_timestamp(event.timestamp)
        preference = time_preferences.get(bucket, _NEUTRAL_TIME_PREFERENCE)
        time_preferences[bucket] = preference + learning_rate * (1.0 - preference)

    logger.debug(
        "Updated %s weights: sample_size=%d confidence=%.3f adjustment=%+.4f",
        event.primary_mood.value,
        sample_size,
        confidence,
        adjustment,
    )
    return replace(
        current,
        genre_weights=genre_weights,
        time_preferences=time_preferences,
        confidence=confidence,
        sample_size=sample_size,
        last_updated=max(current.last_updated, event.timestamp),
    )


def _update_patterns(patterns: MoodPatterns, event: MoodSelectionEvent) -> MoodPatterns:
    bucket = TimeOfDay.for_timestamp(event.timestamp)
    day = weekday_name(event.timestamp)
    daily = dict(patterns.daily_rhythms)
    weekly = dict(patterns.weekly_patterns)
    daily[bucket] = daily.get(bucket, ()) + (event.primary_mood,)
    weekly[day] = weekly.get(day, ()) + (event.primary_mood,)
    return MoodPatterns(daily_rhythms=daily, weekly_patterns=weekly)


def _launch_rate(outcomes: EventOutcomes) -> float:
    return outcomes.games_launched / max(outcomes.games_recommended, 1)


def _hybrid_preferences(history: tuple[MoodSelectionEvent, ...]) -> dict[str, float]:
    """Mean launch rate per ``"primary+secondary"`` combination."""
    rates: dict[str, list[float]] = {}
    for event in history:
        key = event.combination_key
        if key is not None:
            rates.setdefault(key, []).append(_launch_rate(event.outcomes))
    return {key: sum(values) / len(values) for key, values in rates.items()}


def _adaptation_metrics(history: tuple[MoodSelectionEvent, ...]) -> AdaptationMetrics:
    if not history:
        return AdaptationMetrics()
    recent = history[-_RECENT_EVENTS:]
    ratings = [e.outcomes.user_rating or _DEFAULT_RATING for e in recent]
    return AdaptationMetrics(
        learning_rate=min(0.3, 0.05 + len(history) / 200.0),
        prediction_accuracy=min(0.9, 0.3 + len(recent) / 20.0),
        user_satisfaction_score=sum(ratings) / len(ratings) / 5.0,
    )


def _amend_outcomes(outcomes: EventOutcomes, action: UserAction) -> EventOutcomes:
    if action.action_type == ActionType.LAUNCH:
        return replace(
            outcomes,
            games_launched=outcomes.games_launched + 1,
            average_session_duration=(
                action.session_duration_minutes
                if action.session_duration_minutes is not None
                else outcomes.average_session_duration
            ),
            user_rating=action.rating if action.rating is not None else outcomes.user_rating,
        )
    if action.action_type == ActionType.IGNORE:
        return replace(outcomes, ignored_recommendations=outcomes.ignored_recommendations + 1)
    if action.action_type == ActionType.RATE:
        if action.rating is None:
            raise ValueError("rate actions require a rating")
        return replace(outcomes, user_rating=action.rating)
    if action.action_type == ActionType.SESSION_COMPLETE:
        if action.session_duration_minutes is None:
            return outcomes
        return replace(outcomes, average_session_duration=action.session_duration_minutes)
    return outcomes


def _mood_confidence(state: PersonaState, mood: Mood, time_of_day: TimeOfDay) -> float:
    weights = state.dynamic_mood_weights.get(mood)
    if weights is None:
        return _CONFIDENCE_FLOOR
    preference = weights.time_preferences.get(time_of_day, _NEUTRAL_TIME_PREFERENCE)
    confidence = weights.confidence + (preference - 0.5) * _TIME_PREFERENCE_FACTOR
    return max(0.0, min(1.0, confidence))


def _success_probability(state: PersonaState, mood: Mood, confidence: float) -> float:
    """Historical launch rate for *mood*, or *confidence* without history."""
    rates = [_launch_rate(e.outcomes) for e in state.mood_history if e.primary_mood == mood]
    if not rates:
        return confidence
    return max(0.0, min(1.0, sum(rates) / len(rates)))
