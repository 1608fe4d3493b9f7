"""
Consensus reconciliation across grading runs.

Merges the per-question results of several runs into one result by
majority vote on the earned score. Ties are broken deterministically by
taking the middle score of the tied candidates.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from core.models import GradingResult, QuestionResult


@dataclass
class ScoreTally:
    """Votes for one earned score, with the first result that carried it."""
    score: float
    representative: QuestionResult
    count: int = 0


@dataclass
class ConsensusResult:
    """Reconciled results; ``confidences`` lines up with ``results``."""
    results: List[QuestionResult] = field(default_factory=list)
    confidences: List[float] = field(default_factory=list)
    total_score: float = 0.0
    max_possible_score: float = 0.0
    comments: str = ""

    def to_grading_result(self) -> GradingResult:
        return GradingResult(
            results=self.results,
            total_score=self.total_score,
            max_possible_score=self.max_possible_score,
            comments=self.comments
        )


def group_by_question(all_results: Sequence[GradingResult]) -> Dict[int, List[QuestionResult]]:
    """Collect every question result by question number, in run order."""
    groups: Dict[int, List[QuestionResult]] = {}
    for grading in all_results:
        for question in grading.results:
            groups.setdefault(question.question_number, []).append(question)
    return groups


def tally_scores(results: Sequence[QuestionResult]) -> List[ScoreTally]:
    """Count occurrences of each earned score, in first-seen order."""
    tallies: Dict[float, ScoreTally] = {}
    for result in results:
        tally = tallies.get(result.earned_score)
        if tally is None:
            tally = tallies[result.earned_score] = ScoreTally(result.earned_score, result)
        tally.count += 1
    return list(tallies.values())


def select_majority(tallies: Sequence[ScoreTally]) -> ScoreTally:
    """
    Pick the winning score.

    The most frequent score wins. When several scores share the highest
    count they are sorted ascending and the one at index ``len // 2`` is
    taken, e.g. [4, 8] -> 8 and [1, 2, 3] -> 2.
    """
    max_count = max(t.count for t in tallies)
    candidates = [t for t in tallies if t.count == max_count]
    if len(candidates) == 1:
        return candidates[0]
    candidates.sort(key=lambda t: t.score)
    return candidates[len(candidates) // 2]


def reconcile(all_results: Sequence[GradingResult], num_runs: int) -> ConsensusResult:
    """
    Reconcile several gradings of the same answer sheet.

    Questions are emitted in ascending question number. A question's
    confidence is its winning vote count divided by ``num_runs`` (the
    requested run count), so a question missing from some runs gets a
    lower confidence. Comments are taken from the first run.

    Args:
        all_results: One GradingResult per run
        num_runs: Number of runs requested

    Returns:
        ConsensusResult
    """
    if num_runs < 1:
        raise ValueError("num_runs must be >= 1")

    consensus = ConsensusResult()

    groups = group_by_question(all_results)
    for question_number in sorted(groups):
        winner = select_majority(tally_scores(groups[question_number]))
        consensus.results.append(winner.representative)
        consensus.confidences.append(winner.count / num_runs)

    consensus.total_score = sum(r.earned_score for r in consensus.results)
    consensus.max_possible_score = sum(r.max_score for r in consensus.results)
    consensus.comments = all_results[0].comments if all_results else ""

    return consensus
