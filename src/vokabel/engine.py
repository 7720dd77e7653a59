"""
Practice session state machine.

    idle -> empty                       (load_pool with no records)
    idle -> in_progress                 (load_pool)
    in_progress -> answered             (submit_answer)
    answered -> in_progress | complete  (advance)
    complete -> in_progress             (restart)

Every index of the pool is presented once before the session completes.
Calls that do not fit the current state are ignored.
"""

import logging
import random
from typing import Iterable, Optional, Set, Tuple, Union

from .models import Outcome, Question, Record, SessionStatus
from .modes import PracticeMode

logger = logging.getLogger(__name__)

COMPLETE = SessionStatus.COMPLETE


def accuracy_percentage(score: int, total_answered: int) -> int:
    """Rounded half up; 0 when nothing has been answered."""
    if total_answered <= 0:
        return 0
    return (200 * score + total_answered) // (2 * total_answered)


class PracticeSession:
    def __init__(self, mode: PracticeMode, rng: Optional[random.Random] = None):
        self.mode = mode
        self.rng = rng or random.Random()
        self.pool: Tuple[Record, ...] = ()
        self.loaded = False
        self.generation = 0
        self._reset()

    def _reset(self):
        self.consumed: Set[int] = set()
        self.current: Optional[Question] = None
        self.score = 0
        self.total_answered = 0
        self.answered = False
        self.complete = False
        self.last_outcome: Optional[Outcome] = None

    # --- Pool ---
    def begin_load(self) -> int:
        """Stamps a new load; only a load_pool carrying this stamp will apply."""
        self.generation += 1
        return self.generation

    def load_pool(self, records: Iterable[Record], generation: Optional[int] = None) -> bool:
        if generation is not None and generation != self.generation:
            logger.info(
                f"Ignoring stale pool load (generation {generation}, current {self.generation})"
            )
            return False

        self.pool = tuple(records)
        self.loaded = True
        self._reset()
        logger.info(f"Loaded pool of {len(self.pool)} items for mode '{self.mode.id}'")
        if self.pool:
            self.select_next()
        return True

    # --- Lifecycle ---
    def select_next(self) -> Union[Question, SessionStatus, None]:
        if not self.pool:
            return None
        if self.complete:
            return COMPLETE
        if self.current is not None and self.answered:
            return self.current

        available = [index for index in range(len(self.pool)) if index not in self.consumed]
        if not available:
            self._finish()
            return COMPLETE

        index = self.rng.choice(available)
        self.consumed.add(index)
        self.current = self.mode.build_question(index, self.pool, self.rng)
        self.answered = False
        return self.current

    def submit_answer(self, candidate: str) -> Optional[Outcome]:
        if self.current is None or self.answered:
            return None
        if self.mode.free_text and not candidate.strip():
            return None

        self.answered = True
        self.total_answered += 1
        correct = self.mode.is_correct(self.current, candidate)
        if correct:
            self.score += 1

        self.last_outcome = Outcome(
            correct=correct,
            expected=self.current.expected,
            given=candidate,
            detail=self.mode.detail(self.pool[self.current.index]),
        )
        return self.last_outcome

    def advance(self):
        if self.current is None or not self.answered:
            return

        self.answered = False
        self.last_outcome = None
        if len(self.consumed) == len(self.pool):
            self._finish()
        else:
            self.select_next()

    def restart(self):
        """Reshuffles the same pool; the source is not fetched again."""
        self._reset()
        logger.info(f"Restarting '{self.mode.id}' session over {len(self.pool)} items")
        self.select_next()

    def _finish(self):
        self.complete = True
        self.current = None
        logger.info(
            f"Session '{self.mode.id}' complete: {self.score}/{self.total_answered} "
            f"({self.accuracy}%)"
        )

    # --- Read-only views ---
    @property
    def accuracy(self) -> int:
        return accuracy_percentage(self.score, self.total_answered)

    @property
    def remaining(self) -> int:
        return len(self.pool) - len(self.consumed)

    @property
    def status(self) -> SessionStatus:
        if not self.loaded:
            return SessionStatus.IDLE
        if not self.pool:
            return SessionStatus.EMPTY
        if self.complete:
            return SessionStatus.COMPLETE
        if self.answered:
            return SessionStatus.ANSWERED
        return SessionStatus.IN_PROGRESS
