"""Per-stage pass/fail counts for a filter run."""

from dataclasses import dataclass, field
from typing import Sequence

from variant_ranking.model.variant import VariantEvaluation


@dataclass
class StageCount:
    """Pass/fail tally for one stage.

    Attributes:
        filter_type: Stage name
        passed: Variants that passed this stage
        failed: Variants that failed this stage
        not_run: Variants that never reached this stage (PASS_ONLY mode or errored)
    """
    filter_type: str
    passed: int = 0
    failed: int = 0
    not_run: int = 0


@dataclass
class FilterReport:
    total: int = 0
    passed_all: int = 0
    errored: int = 0
    stages: list[StageCount] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed_all": self.passed_all,
            "errored": self.errored,
            "stages": [
                {
                    "filter_type": s.filter_type,
                    "passed": s.passed,
                    "failed": s.failed,
                    "not_run": s.not_run,
                }
                for s in self.stages
            ],
        }


def build_filter_report(
    stages: Sequence,
    evaluations: Sequence[VariantEvaluation],
) -> FilterReport:
    """
    Tally the recorded results of every stage over all evaluations.

    Args:
        stages: Variant stages and gene filters, in the order they ran
        evaluations: Every evaluation of the run
    """
    report = FilterReport(
        total=len(evaluations),
        passed_all=sum(1 for ve in evaluations if ve.passed_filters()),
        errored=sum(1 for ve in evaluations if ve.errored),
    )
    for stage in stages:
        count = StageCount(filter_type=stage.filter_type.value)
        for evaluation in evaluations:
            result = evaluation.filter_result(stage.filter_type)
            if result is None:
                count.not_run += 1
            elif result.passed:
                count.passed += 1
            else:
                count.failed += 1
        report.stages.append(count)
    return report
