"""
Dental Phrase Hints

Static vocabulary that biases speech recognition toward chart commands.
"""

from dataclasses import dataclass

from dental_voice_chart.extraction.chart_types import QUADRANT_RANGES


@dataclass(frozen=True)
class PhraseHint:
    """A phrase with its recognition boost weight."""

    value: str
    boost: float

    def to_dict(self) -> dict:
        return {"value": self.value, "boost": self.boost}


PHRASE_SET_ID = "dental-chart-vocabulary"

SEVERITY_BOOST = 20
FINDING_BOOST = 15
PROCEDURE_BOOST = 10
TOOTH_BOOST = 5


def _tooth_phrases() -> list[PhraseHint]:
    return [
        PhraseHint(f"{quadrant}{position:02d}번", TOOTH_BOOST)
        for quadrant, last in QUADRANT_RANGES.items()
        for position in range(1, last + 1)
    ]


DENTAL_PHRASES: tuple[PhraseHint, ...] = (
    *(PhraseHint(f"치주염 {stage}단계", SEVERITY_BOOST) for stage in range(1, 5)),
    PhraseHint("발치", FINDING_BOOST),
    PhraseHint("크랙", FINDING_BOOST),
    PhraseHint("치은 퇴축", FINDING_BOOST),
    PhraseHint("치근단 농양", FINDING_BOOST),
    PhraseHint("스케일링", PROCEDURE_BOOST),
    PhraseHint("레진", PROCEDURE_BOOST),
    *_tooth_phrases(),
)


def build_adaptation(phrases: tuple[PhraseHint, ...] = DENTAL_PHRASES) -> dict:
    """Inline phrase-set adaptation block for a recognize request."""
    return {
        "phraseSets": [
            {
                "phraseSetId": PHRASE_SET_ID,
                "phrases": [p.to_dict() for p in phrases],
            }
        ]
    }
