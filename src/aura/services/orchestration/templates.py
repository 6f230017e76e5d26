"""
Response Templates

Deterministic response pieces used when AI output is not attempted,
fails, or needs a reliable backbone for a hybrid blend.

A template response is composed as:
    tone opening + mood body + (work insight) + tone closing

Every tone opening carries a recognizable therapeutic opening phrase
and every tone closing carries an insight closing phrase, so template
segments always qualify when blending.

CLINICAL_REVIEW_REQUIRED: All wording in this module.
"""

import re

from aura.domain.enums.check_in import MoodTag, Tone
from aura.services.prompt.themes import detect_themes


# Lowercase phrases that mark a therapeutic opening
OPENING_PHRASES: tuple[str, ...] = (
    "thank you for sharing",
    "thank you for trusting",
    "i hear you",
    "it sounds like",
    "i'm really glad you",
    "it takes courage",
)

# Lowercase phrases that mark an insight closing
CLOSING_PHRASES: tuple[str, ...] = (
    "?",
    "remember",
    "be gentle with yourself",
    "you deserve",
    "you don't have to",
)

PAUSE_MARKER = "..."


TONE_OPENINGS: dict[Tone, str] = {
    Tone.CALM: (
        "Thank you for sharing this with me in your own voice. "
        "Let's take a slow breath together before we look at it."
    ),
    Tone.MOTIVATIONAL: (
        "Thank you for trusting me with this. "
        "It takes courage to speak your feelings out loud, and you just did it."
    ),
    Tone.REFLECTIVE: (
        "I hear you, and I'm really glad you took this moment to pause. "
        "Putting feelings into spoken words is its own kind of insight."
    ),
}

TONE_CLOSINGS: dict[Tone, str] = {
    Tone.CALM: (
        "Remember that you can move at your own pace today. "
        "What is one small, kind thing you could offer yourself right now?"
    ),
    Tone.MOTIVATIONAL: (
        "You deserve the same encouragement you would give a good friend. "
        "What is one step, however small, that would feel good to take next?"
    ),
    Tone.REFLECTIVE: (
        "Be gentle with yourself as you sit with this. "
        "What do you notice when you listen closely to what you just said?"
    ),
}

MOOD_BODIES: dict[MoodTag, str] = {
    MoodTag.HAPPY: (
        "It's wonderful to hear some lightness in how you're feeling. "
        "Moments like this are worth noticing and holding onto."
    ),
    MoodTag.SAD: (
        "It makes sense to feel heavy when things hurt. "
        "Sadness often shows us what matters most to us, and it deserves room."
    ),
    MoodTag.ANXIOUS: (
        "Anxiety can make everything feel urgent and uncertain at once. "
        "Your feelings are valid, and noticing them is already a steadying step."
    ),
    MoodTag.STRESSED: (
        "It sounds like a lot is pressing on you right now. "
        "Stress is a signal that you're carrying more than feels sustainable."
    ),
    MoodTag.CALM: (
        "There's a steadiness in how you're feeling today. "
        "Calm moments are a resource you can return to."
    ),
    MoodTag.EXCITED: (
        "Your excitement comes through clearly. "
        "That energy says something about what you care about and where you want to go."
    ),
    MoodTag.FRUSTRATED: (
        "Frustration is understandable when things don't go the way we hoped. "
        "It often points to a need or a boundary that isn't being met."
    ),
    MoodTag.GRATEFUL: (
        "Gratitude has a way of softening the edges of a day. "
        "Noticing what you appreciate is a practice that builds on itself."
    ),
    MoodTag.OVERWHELMED: (
        "Feeling overwhelmed is what happens when everything asks for attention at once. "
        "It makes sense that it's hard to know where to begin."
    ),
    MoodTag.CONTENT: (
        "There's a quiet satisfaction in what you've shared. "
        "Contentment is easy to overlook, and it's worth savoring."
    ),
}

WORK_INSIGHTS: dict[MoodTag, str] = {
    MoodTag.STRESSED: "Work pressures can feel all-consuming, but your worth isn't defined by your productivity.",
    MoodTag.ANXIOUS: "Work anxiety is common, and it often means you care deeply about doing well.",
    MoodTag.FRUSTRATED: "Work frustrations are draining because we spend so much of our time there.",
    MoodTag.HAPPY: "It's wonderful when work feels aligned with who you are.",
    MoodTag.OVERWHELMED: "When work feels overwhelming, you may be carrying more than one person should.",
    MoodTag.SAD: "Sadness around work can point to a gap between your values and your days.",
    MoodTag.GRATEFUL: "When work connects with your sense of purpose, it can be a real source of fulfillment.",
    MoodTag.EXCITED: "Excitement about work is a sign that something there matters to you.",
}
DEFAULT_WORK_INSIGHT = "Work seems to be playing a meaningful role in how you feel right now."


# Theme suggestion pools; one item is drawn per detected theme
THEME_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "work": (
        "Take a 5-minute mindful break from work tasks",
        "Set a boundary around work communication after hours",
        "Schedule a walking meeting or outdoor lunch break",
        "Write down three work accomplishments from this week",
    ),
    "anxiety": (
        "Name the worry out loud, then name one thing you can control about it",
        "Place a hand on your chest and take five slow breaths",
        "Write the anxious thought down and ask how likely it really is",
        "Give yourself permission to not solve everything today",
    ),
    "stress": (
        "List what's on your plate and pick just one thing to finish",
        "Step outside for a few minutes of fresh air",
        "Let go of one task that can wait until tomorrow",
    ),
    "sadness": (
        "Reach out to someone who feels safe to talk to",
        "Wrap up in something warm and let yourself rest",
        "Write a few lines about what you're missing right now",
    ),
    "relationships": (
        "Reach out to someone you care about with a thoughtful message",
        "Express appreciation to someone who supports you",
        "Reflect on what you value most in your relationships",
    ),
    "isolation": (
        "Send a short hello to someone you haven't spoken to in a while",
        "Spend a little time somewhere with other people around",
        "Look for a community built around something you enjoy",
    ),
    "health": (
        "Drink a glass of water and stretch for two minutes",
        "Set a gentle wind-down time for tonight",
        "Take a short walk at whatever pace feels right",
    ),
    "gratitude": (
        "Write down three things you're thankful for today",
        "Tell someone why you appreciate them",
    ),
    "growth": (
        "Note one thing you've learned about yourself this week",
        "Celebrate a small win before moving to the next goal",
    ),
}

MOOD_SUGGESTIONS: dict[MoodTag, tuple[str, ...]] = {
    MoodTag.HAPPY: (
        "Write down what's contributing to your happiness to remember for tougher days",
        "Share your positive energy with someone who might need encouragement",
        "Take a photo or make a note about this moment to capture the feeling",
    ),
    MoodTag.ANXIOUS: (
        "Try the 5-4-3-2-1 grounding technique: 5 things you see, 4 you can touch, 3 you hear, 2 you smell, 1 you taste",
        "Practice box breathing: inhale for 4, hold for 4, exhale for 4, hold for 4",
        "Remind yourself: 'This feeling is temporary, and I have the strength to handle it'",
    ),
    MoodTag.SAD: (
        "Allow yourself to feel this emotion fully - it's part of healing",
        "Create a comfort kit: tea, soft blanket, soothing music, or whatever brings you peace",
        "Consider journaling about what this sadness might be teaching you",
    ),
    MoodTag.STRESSED: (
        "Use the 'One Thing' rule: focus on completing just one task before moving to the next",
        "Take 10 conscious breaths while releasing tension from your shoulders and jaw",
        "Ask yourself: 'What would I tell a friend feeling this way?'",
    ),
    MoodTag.OVERWHELMED: (
        "Brain dump everything on your mind onto paper, then sort it by urgency",
        "Practice the 'Good Enough' principle: not everything needs to be perfect",
        "Schedule a 15-minute 'worry window' to contain anxious thoughts",
    ),
    MoodTag.FRUSTRATED: (
        "Take a break from whatever is causing frustration and return with fresh perspective",
        "Try some physical movement to release tension - even a 2-minute walk helps",
        "Write down what's frustrating you, then brainstorm 3 possible solutions",
    ),
    MoodTag.GRATEFUL: (
        "Write a thank-you note to someone who has positively impacted your life",
        "Take a mindful moment to appreciate something beautiful around you",
        "Consider how you might pay this gratitude forward to others",
    ),
    MoodTag.EXCITED: (
        "Channel this energy into taking one concrete step toward what excites you",
        "Share your enthusiasm with someone who would celebrate with you",
        "Write down what's exciting you to revisit when you need motivation",
    ),
    MoodTag.CALM: (
        "Use this peaceful moment for meditation or mindful reflection",
        "Set positive intentions for how you want to feel today",
        "Appreciate this sense of balance and remember how you created it",
    ),
    MoodTag.CONTENT: (
        "Reflect on what has contributed to this sense of satisfaction",
        "Consider how you might maintain this feeling going forward",
        "Take a moment to really savor this inner peace",
    ),
}


VIDEO_OPENINGS: dict[MoodTag, str] = {
    MoodTag.HAPPY: "Hey, I could hear the brightness in your check-in today.",
    MoodTag.SAD: "Hey, I've been thinking about what you shared, and I wanted to sit with you for a moment.",
    MoodTag.ANXIOUS: "Hey, let's slow things down together for a minute.",
    MoodTag.STRESSED: "Hey, I know there's a lot on your plate, so thank you for making time for this.",
    MoodTag.CALM: "Hey, it was lovely to hear the calm in your voice today.",
    MoodTag.EXCITED: "Hey, your energy today was contagious.",
    MoodTag.FRUSTRATED: "Hey, I heard how frustrating things have been.",
    MoodTag.GRATEFUL: "Hey, thank you for sharing what you're grateful for.",
    MoodTag.OVERWHELMED: "Hey, let's take this one breath at a time.",
    MoodTag.CONTENT: "Hey, it's good to hear you feeling settled.",
}

VIDEO_CLOSINGS: dict[MoodTag, str] = {
    MoodTag.HAPPY: "Hold onto this feeling. I'll be here next time too.",
    MoodTag.SAD: "Be gentle with yourself tonight. You're not alone in this.",
    MoodTag.ANXIOUS: "Remember, this feeling will pass. Breathe easy.",
    MoodTag.STRESSED: "Remember to leave a little room for yourself today.",
    MoodTag.CALM: "Carry this calm with you. Take care.",
    MoodTag.EXCITED: "Go enjoy it. I can't wait to hear how it goes.",
    MoodTag.FRUSTRATED: "Give yourself some space. You're handling more than you think.",
    MoodTag.GRATEFUL: "Keep noticing the good. Take care of yourself.",
    MoodTag.OVERWHELMED: "One thing at a time. You've got this.",
    MoodTag.CONTENT: "Enjoy this moment. Take care.",
}


_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_BLANK_LINES = re.compile(r"\n\s*\n+")
_INLINE_BOUNDARY = re.compile(r"(?<=[.!?])[ \t]+(?=\S)")


def split_sentences(text: str) -> list[str]:
    """Split text at sentence-ending punctuation, dropping empties."""
    return [s for s in _SENTENCE_BOUNDARY.split(text.strip()) if s]


def has_opening(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in OPENING_PHRASES)


def has_closing(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in CLOSING_PHRASES)


def compose_template(mood: MoodTag, tone: Tone, transcript: str) -> str:
    """
    Build a full template response.

    Always yields at least three sentences: opening, body, closing.
    """
    parts = [TONE_OPENINGS[tone], MOOD_BODIES[mood]]
    if "work" in detect_themes(transcript):
        parts.append(WORK_INSIGHTS.get(mood, DEFAULT_WORK_INSIGHT))
    parts.append(TONE_CLOSINGS[tone])
    return " ".join(parts)


def build_suggestions(
    transcript: str,
    mood: MoodTag,
    variant: int = 0,
    limit: int = 3,
) -> list[str]:
    """
    Pick up to limit suggestions.

    Theme-pool items come first (at most limit - 1 of them) so at
    least one mood default is always kept.

    Args:
        transcript: Reviewed transcript
        mood: Selected mood
        variant: Rotation index into each theme pool
        limit: Maximum suggestions returned
    """
    if limit <= 0:
        return []

    themed = [
        THEME_SUGGESTIONS[theme][variant % len(THEME_SUGGESTIONS[theme])]
        for theme in detect_themes(transcript)
        if theme in THEME_SUGGESTIONS
    ][: limit - 1]

    suggestions: list[str] = []
    for item in [*themed, *MOOD_SUGGESTIONS[mood]]:
        if item not in suggestions:
            suggestions.append(item)
    return suggestions[:limit]


def build_video_script(text: str, mood: MoodTag) -> str:
    """
    Turn a response into a script for the video persona.

    Blank-line runs collapse to single newlines and every sentence
    boundary gets a pause marker.
    """
    body = _BLANK_LINES.sub("\n", text.strip())
    body = _INLINE_BOUNDARY.sub(f" {PAUSE_MARKER} ", body)
    return f"{VIDEO_OPENINGS[mood]}\n{body}\n{VIDEO_CLOSINGS[mood]}"
