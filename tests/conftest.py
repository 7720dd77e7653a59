"""
Shared fixtures. Settings are read at import time, so the environment is
prepared before any vokabel module is imported.
"""

import os
import random
import tempfile

_RUNTIME_DIR = tempfile.mkdtemp(prefix="vokabel-tests-")
os.environ.setdefault("VOKABEL_LOG_DIR", os.path.join(_RUNTIME_DIR, "log"))
os.environ.setdefault("VOKABEL_DB_DIR", os.path.join(_RUNTIME_DIR, "db"))

import pytest  # noqa: E402

from vokabel.models import Gender, NounRecord, VerbConjugationRecord  # noqa: E402

NOUNS_CSV = """Sr No.,Noun,German Word ,Article,Gender,Plural,Example
1,dog,Hund,der,Masculine,Hunde,"Der Hund bellt, laut."
2,cat,Katze,die,Feminine (f),Katzen,Die Katze schläft.
3,house,Haus,das,Neutral,Häuser,Das Haus ist groß.
4,tree,Baum,der,masculine,Bäume,Der Baum ist alt.
5,water,Wasser,das,neuter,,Das Wasser ist kalt.
"""

VERBS_CSV = """Infinitive,Meaning,ich,du,er/sie/es,wir,ihr,sie/Sie,Past (Präteritum),Past Participle,Auxiliary,Prepositions,Example Sentence,Notes
gehen,to go,gehe,gehst,geht,gehen,geht,gehen,ging,gegangen,sein,,Ich gehe nach Hause.,irregular
machen,to make,mache,machst,macht,machen,macht,machen,machte,gemacht,haben,,Was machst du?,
sehen,to see,sehe,siehst,sieht,sehen,seht,sehen,sah,gesehen,haben,,Ich sehe dich.,
"""

VERB_PERSON_CSV = """SrNo,Verb,German Word,Person,Conjugation,Example
1,to go,gehen,ich,gehe,Ich gehe.
2,to go,gehen,du,gehst,Du gehst.
3,to go,gehen,er/sie/es,geht,Er geht.
4,to make,machen,Sie (formal),machen,Sie machen.
"""


@pytest.fixture
def nouns_csv():
    return NOUNS_CSV


@pytest.fixture
def verbs_csv():
    return VERBS_CSV


@pytest.fixture
def verb_person_csv():
    return VERB_PERSON_CSV


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def nouns():
    words = [
        ("dog", "Hund", "der", Gender.MASCULINE),
        ("cat", "Katze", "die", Gender.FEMININE),
        ("house", "Haus", "das", Gender.NEUTRAL),
        ("tree", "Baum", "der", Gender.MASCULINE),
        ("water", "Wasser", "das", Gender.NEUTRAL),
        ("door", "Tür", "die", Gender.FEMININE),
    ]
    return [
        NounRecord(sequence_number=i, noun=noun, target_word=word, article=article, gender=gender)
        for i, (noun, word, article, gender) in enumerate(words, start=1)
    ]


@pytest.fixture
def verbs():
    return [
        VerbConjugationRecord(
            infinitive="gehen", meaning="to go", ich="gehe", du="gehst", er_sie_es="geht",
            wir="gehen", ihr="geht", sie_sie="gehen",
        ),
        VerbConjugationRecord(
            infinitive="machen", meaning="to make", ich="mache", du="machst",
            er_sie_es="macht", wir="machen", ihr="macht", sie_sie="machen",
        ),
    ]
