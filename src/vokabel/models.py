from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


# --- Enums ---
class Gender(str, Enum):
    MASCULINE = "Masculine"
    FEMININE = "Feminine"
    NEUTRAL = "Neutral"


class Person(str, Enum):
    ICH = "ich"
    DU = "du"
    ER_SIE_ES = "er/sie/es"
    WIR = "wir"
    IHR = "ihr"
    SIE_SIE = "sie/Sie"


class DatasetKind(str, Enum):
    NOUNS = "nouns"
    VERBS_CONJUGATION = "verbs_conjugation"
    VERBS_PERSON = "verbs_person"


# --- Records ---
class NounRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence_number: int
    noun: str
    target_word: str
    article: str
    gender: Gender
    plural: str = ""
    example: str = ""


class VerbConjugationRecord(BaseModel):
    """A verb row carrying the full present-tense table (schema A)."""

    model_config = ConfigDict(frozen=True)

    infinitive: str
    meaning: str
    ich: str
    du: str = ""
    er_sie_es: str = ""
    wir: str = ""
    ihr: str = ""
    sie_sie: str = ""
    past: str = ""
    past_participle: str = ""
    auxiliary: str = ""
    prepositions: str = ""
    example_sentence: str = ""
    notes: str = ""

    def conjugation(self, person: Person) -> str:
        return getattr(self, PERSON_FIELDS[person])


class VerbPersonRecord(BaseModel):
    """A verb row holding a single person and its conjugation (schema B)."""

    model_config = ConfigDict(frozen=True)

    sequence_number: int
    verb: str
    target_word: str
    person: Person
    conjugation: str
    example: str = ""


Record = Union[NounRecord, VerbConjugationRecord, VerbPersonRecord]

PERSON_FIELDS = {
    Person.ICH: "ich",
    Person.DU: "du",
    Person.ER_SIE_ES: "er_sie_es",
    Person.WIR: "wir",
    Person.IHR: "ihr",
    Person.SIE_SIE: "sie_sie",
}


# --- Session models ---
class Question(BaseModel):
    index: int
    prompt: str
    expected: str
    options: List[str] = []
    hint: Optional[str] = None
    person: Optional[Person] = None


class Outcome(BaseModel):
    correct: bool
    expected: str
    given: str
    detail: Optional[str] = None


class SessionStatus(str, Enum):
    IDLE = "idle"
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    ANSWERED = "answered"
    COMPLETE = "complete"


# --- API views ---
class QuestionView(BaseModel):
    prompt: str
    options: List[str]
    hint: Optional[str] = None
    person: Optional[Person] = None
    free_text: bool


class SessionView(BaseModel):
    mode: str
    status: SessionStatus
    score: int
    total_answered: int
    accuracy: int
    remaining: int
    pool_size: int
    question: Optional[QuestionView] = None
    outcome: Optional[Outcome] = None


class ModeInfo(BaseModel):
    id: str
    name: str
    description: str
    dataset: DatasetKind
    free_text: bool
