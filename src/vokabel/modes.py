import random
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Type

from .config import settings
from .errors import UnknownModeError
from .models import (
    DatasetKind,
    Gender,
    ModeInfo,
    NounRecord,
    Person,
    Question,
    Record,
    VerbConjugationRecord,
    VerbPersonRecord,
)

GENDER_OPTIONS = [gender.value for gender in Gender]
PERSON_OPTIONS = [person.value for person in Person]


def make_options(
    correct: str,
    candidates: Iterable[str],
    rng: random.Random,
    count: int = 4,
) -> List[str]:
    """
    Builds up to ``count`` distinct options, one of them ``correct``.

    When the pool holds fewer distinct values than needed, fewer options are
    returned.
    """
    distinct = [value for value in dict.fromkeys(candidates) if value and value != correct]
    rng.shuffle(distinct)
    options = [correct] + distinct[: max(count - 1, 0)]
    rng.shuffle(options)
    return options


# --- Strategy Pattern: Practice Modes ---
class PracticeMode(ABC):
    """Turns a pooled record into a question."""

    id: str = ""
    name: str = ""
    description: str = ""
    dataset: DatasetKind = DatasetKind.NOUNS
    free_text: bool = False

    @abstractmethod
    def build_question(
        self, index: int, pool: Sequence[Record], rng: random.Random
    ) -> Question:
        pass

    def detail(self, record: Record) -> Optional[str]:
        """Extra feedback about the answered record, if the mode has any."""
        return None

    def is_correct(self, question: Question, candidate: str) -> bool:
        if self.free_text:
            return candidate.strip().lower() == question.expected.strip().lower()
        return candidate == question.expected

    def info(self) -> ModeInfo:
        return ModeInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            dataset=self.dataset,
            free_text=self.free_text,
        )


class NounGenderMode(PracticeMode):
    id = "noun_gender"
    name = "Noun Gender Practice"
    description = "Identify the gender of German nouns (Masculine, Feminine, Neutral)"
    dataset = DatasetKind.NOUNS

    def detail(self, record):
        return f"{record.article} {record.target_word} is {record.gender.value}"

    def build_question(self, index, pool, rng):
        record: NounRecord = pool[index]
        return Question(
            index=index,
            prompt=f"{record.noun} ({record.target_word})",
            expected=record.gender.value,
            options=list(GENDER_OPTIONS),
        )


class NounTranslationMode(PracticeMode):
    id = "noun_translation"
    name = "Noun Translation Practice"
    description = "Pick the German word for an English noun"
    dataset = DatasetKind.NOUNS

    def __init__(self, option_count: int = settings.OPTION_COUNT):
        self.option_count = option_count

    def detail(self, record):
        return f"{record.noun} in German is {record.article} {record.target_word}"

    def build_question(self, index, pool, rng):
        record: NounRecord = pool[index]
        return Question(
            index=index,
            prompt=record.noun,
            expected=record.target_word,
            options=make_options(
                record.target_word,
                (item.target_word for item in pool),
                rng,
                self.option_count,
            ),
        )


class VerbPersonMode(PracticeMode):
    id = "verb_person"
    name = "Verb Conjugation Practice"
    description = "Match a conjugated verb form to its person (ich, du, er/sie/es, ...)"
    dataset = DatasetKind.VERBS_PERSON

    def detail(self, record):
        return f'"{record.conjugation}" is the {record.person.value} form of {record.target_word}'

    def build_question(self, index, pool, rng):
        record: VerbPersonRecord = pool[index]
        return Question(
            index=index,
            prompt=f"{record.conjugation} ({record.verb})",
            expected=record.person.value,
            options=list(PERSON_OPTIONS),
        )


class VerbTypingMode(PracticeMode):
    id = "verb_typing"
    name = "Verb Typing Practice"
    description = "Type the correct conjugation for a meaning and a person"
    dataset = DatasetKind.VERBS_CONJUGATION
    free_text = True

    def detail(self, record):
        return f"The infinitive is {record.infinitive}"

    def build_question(self, index, pool, rng):
        record: VerbConjugationRecord = pool[index]
        # "ich" is always filled, so there is at least one candidate
        persons = [person for person in Person if record.conjugation(person)]
        person = rng.choice(persons)
        return Question(
            index=index,
            prompt=f"{record.meaning} ({person.value})",
            expected=record.conjugation(person),
            hint=record.infinitive,
            person=person,
        )


MODES: Dict[str, Type[PracticeMode]] = {
    mode.id: mode
    for mode in (NounGenderMode, NounTranslationMode, VerbPersonMode, VerbTypingMode)
}

VERB_SCHEMA_DATASETS = {
    "A": DatasetKind.VERBS_CONJUGATION,
    "B": DatasetKind.VERBS_PERSON,
}


class ModeFactory:
    """Factory to select the practice mode for a session."""

    @staticmethod
    def create(mode: str) -> PracticeMode:
        mode_class = MODES.get(mode)
        if mode_class is None:
            raise UnknownModeError(mode)
        return mode_class()

    @staticmethod
    def available(verb_schema: Optional[str] = None) -> List[PracticeMode]:
        """Modes usable with the active verb schema."""
        verb_dataset = VERB_SCHEMA_DATASETS.get((verb_schema or settings.VERB_SCHEMA).upper())
        return [
            mode_class()
            for mode_class in MODES.values()
            if mode_class.dataset in (DatasetKind.NOUNS, verb_dataset)
        ]
