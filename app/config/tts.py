"""Speech-synthesis voice configuration.

Voice catalog and default speaking prompts for the Gemini TTS model.
"""

from pydantic import BaseModel, Field

FEMALE_VOICES: tuple[str, ...] = (
    "Achernar",
    "Aoede",
    "Autonoe",
    "Callirrhoe",
    "Despina",
    "Erinome",
    "Gacrux",
    "Kore",
    "Laomedeia",
    "Leda",
    "Pulcherrima",
    "Sulafat",
    "Vindemiatrix",
    "Zephyr",
)

MALE_VOICES: tuple[str, ...] = (
    "Achird",
    "Algenib",
    "Algieba",
    "Alnilam",
    "Charon",
    "Enceladus",
    "Fenrir",
    "Iapetus",
    "Orus",
    "Puck",
    "Rasalgethi",
    "Sadachbia",
    "Sadaltager",
    "Schedar",
    "Umbriel",
    "Zubenelgenubi",
)

VALID_VOICES: frozenset[str] = frozenset(FEMALE_VOICES + MALE_VOICES)


class TTSVoiceConfig(BaseModel):
    """Voice selection defaults.

    Attributes:
        default_voice: Used when a series has no valid default voice
        alternate_voice: Used when alternation is on and no valid alternate voice is set
        custom_prompt_prefix: Prepended to series-supplied prompts
        difficulty_prompts: Default prompt per difficulty tier
        narrator_prompt: Person A prompt for voice alternation
        partner_prompt: Person B prompt for voice alternation
    """

    default_voice: str = Field(default="Charon")
    alternate_voice: str = Field(default="Kore")
    custom_prompt_prefix: str = Field(default="Generate speech in English. ")
    difficulty_prompts: dict[str, str] = Field(
        default_factory=lambda: {
            "beginner": (
                "Speak slowly and clearly as if teaching a beginner student. "
                "Use natural pauses between phrases. Sound warm and encouraging."
            ),
            "intermediate": (
                "Speak naturally with normal pacing. "
                "Use expressive intonation to make content engaging. "
                "Sound conversational but clear."
            ),
            "advanced": (
                "Speak naturally and confidently at normal pace. "
                "Use sophisticated intonation. Sound professional and authoritative."
            ),
        }
    )
    narrator_prompt: str = Field(
        default="Speak as Person A - a friendly narrator explaining concepts naturally."
    )
    partner_prompt: str = Field(
        default=(
            "Speak as Person B - an engaging speaker with a slightly different tone "
            "to create natural dialogue."
        )
    )

    def is_valid_voice(self, name: str | None) -> bool:
        """Check a voice name against the catalog."""
        return bool(name) and name in VALID_VOICES

    def valid_voice(self, name: str | None, fallback: str) -> str:
        """Return ``name`` if it is a catalog voice, otherwise ``fallback``."""
        return name if name and self.is_valid_voice(name) else fallback

    def prompt_for_difficulty(self, difficulty: str | None) -> str:
        """Default prompt for a difficulty tier (intermediate when unset or unknown)."""
        return self.difficulty_prompts.get(
            difficulty or "intermediate", self.difficulty_prompts["intermediate"]
        )


__all__ = [
    "FEMALE_VOICES",
    "MALE_VOICES",
    "VALID_VOICES",
    "TTSVoiceConfig",
]
