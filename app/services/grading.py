# app/services/grading.py - Score aggregation, letter grades and class ranking
"""Pure grading arithmetic.

Nothing here touches the database: the result service feeds rows in and
persists what comes out, so every rule can be tested in isolation.
"""
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.errors import ValidationError


class ScoringConfig(BaseModel):
    """Maximum marks per component and the pass mark (percent)"""
    ca: float = Field(default=10, ge=0)
    test: float = Field(default=20, ge=0)
    exam: float = Field(default=70, ge=0)
    total: float = Field(default=100, gt=0)
    pass_mark: float = Field(default=40, ge=0, le=100)

    @classmethod
    def from_settings(cls) -> "ScoringConfig":
        return cls(
            ca=settings.SCORE_CA_MAX,
            test=settings.SCORE_TEST_MAX,
            exam=settings.SCORE_EXAM_MAX,
            total=settings.default_total_score or 100,
            pass_mark=settings.PASS_MARK,
        )


class GradeBand(BaseModel):
    grade: str
    min: float = Field(ge=0, le=100)
    remark: str = ""


DEFAULT_GRADING_SCALE: List[GradeBand] = [
    GradeBand(grade="A+", min=90, remark="Outstanding performance"),
    GradeBand(grade="A", min=80, remark="Excellent performance"),
    GradeBand(grade="B+", min=70, remark="Very good result"),
    GradeBand(grade="B", min=60, remark="Good effort"),
    GradeBand(grade="C+", min=50, remark="Fair performance"),
    GradeBand(grade="C", min=40, remark="Needs improvement"),
    GradeBand(grade="D", min=35, remark="At risk"),
    GradeBand(grade="F", min=0, remark="Fail"),
]

# Teacher-facing remark per percentage band, highest first
REMARK_BANDS: Tuple[Tuple[int, str], ...] = (
    (90, "Excellent performance! Keep it up."),
    (80, "Very good work. Well done!"),
    (70, "Good performance. You can do better."),
    (60, "Satisfactory. More effort needed."),
    (50, "Fair performance. Needs improvement."),
    (40, "Below average. Requires serious attention."),
    (35, "Poor performance. Needs intensive support."),
)
LOWEST_REMARK = "Very poor. Immediate intervention required."


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: Any, maximum: float) -> float:
    return min(max(_number(value), 0.0), maximum)


def clamp_scores(ca: Any, test: Any, exam: Any, config: ScoringConfig) -> Dict[str, float]:
    """Clamp each component into [0, max]; missing values count as 0"""
    scores = {
        "ca": clamp(ca, config.ca),
        "test": clamp(test, config.test),
        "exam": clamp(exam, config.exam),
    }
    scores["total"] = scores["ca"] + scores["test"] + scores["exam"]
    return scores


def calculate_percentage(total: float, config: ScoringConfig) -> int:
    return round_half_up(_number(total) / config.total * 100)


def calculate_grade(
    total: float,
    config: ScoringConfig,
    scale: Optional[Sequence[GradeBand]] = None,
) -> str:
    """Letter grade of the first band whose minimum the percentage reaches"""
    percentage = calculate_percentage(total, config)
    for band in sorted(scale or DEFAULT_GRADING_SCALE, key=lambda b: b.min, reverse=True):
        if percentage >= band.min:
            return band.grade
    return "F"


def grade_remark(grade: str, scale: Optional[Sequence[GradeBand]] = None) -> str:
    for band in scale or DEFAULT_GRADING_SCALE:
        if band.grade == grade:
            return band.remark
    return ""


def generate_remark(total: float, config: ScoringConfig) -> str:
    percentage = calculate_percentage(total, config)
    for minimum, remark in REMARK_BANDS:
        if percentage >= minimum:
            return remark
    return LOWEST_REMARK


def has_passed(total: float, config: ScoringConfig) -> bool:
    return calculate_percentage(total, config) >= config.pass_mark


def rank(entries: Iterable[Tuple[Any, float]]) -> List[Tuple[Any, float, int]]:
    """
    Competition ranking ("1224") on score, highest first.

    Args:
        entries: (key, score) pairs

    Returns:
        (key, score, position) triples sorted by score descending. Equal scores
        share a position and the next distinct score takes its index + 1.
    """
    ordered = sorted(entries, key=lambda entry: entry[1], reverse=True)
    ranked = []
    position = 0
    previous = None
    for index, (key, score) in enumerate(ordered):
        if previous is None or score != previous:
            position = index + 1
            previous = score
        ranked.append((key, score, position))
    return ranked


def percentile(position: int, count: int) -> int:
    if count <= 0:
        return 0
    return round_half_up((count - position + 1) / count * 100)


def normalize_scoring_config(values: Mapping[str, Any], base: Optional[ScoringConfig] = None) -> ScoringConfig:
    """
    Merge a partial config over ``base``.

    Components are made non-negative; a non-positive total becomes the sum of
    the components.

    Raises:
        ValidationError: if the resulting total is still not positive
    """
    base = base or ScoringConfig.from_settings()
    ca = max(_number(values.get("ca", base.ca)), 0.0)
    test = max(_number(values.get("test", base.test)), 0.0)
    exam = max(_number(values.get("exam", base.exam)), 0.0)
    total = _number(values.get("total", ca + test + exam))
    pass_mark = min(max(_number(values.get("pass_mark", base.pass_mark)), 0.0), 100.0)

    if total <= 0:
        total = ca + test + exam
    if total <= 0:
        raise ValidationError("Total score must be greater than 0")

    return ScoringConfig(ca=ca, test=test, exam=exam, total=total, pass_mark=pass_mark)


def normalize_grading_scale(value: Union[Sequence[Any], Mapping[str, Any]]) -> List[GradeBand]:
    """
    Accept ``[{grade, min, remark}]`` or ``{grade: min}`` and return bands sorted
    by minimum descending. ``F`` always exists with minimum 0.
    """
    defaults = {band.grade: band for band in DEFAULT_GRADING_SCALE}
    bands: Dict[str, GradeBand] = {}

    if isinstance(value, Mapping):
        items = [{"grade": grade, "min": minimum} for grade, minimum in value.items()]
    else:
        items = [band.model_dump() if isinstance(band, GradeBand) else band for band in value]

    for item in items:
        grade = str(item.get("grade", "")).strip()
        if not grade:
            raise ValidationError("Every grade band needs a grade")
        minimum = min(max(_number(item.get("min")), 0.0), 100.0)
        remark = item.get("remark") or (defaults[grade].remark if grade in defaults else "")
        bands[grade] = GradeBand(grade=grade, min=minimum, remark=remark)

    if not bands:
        raise ValidationError("Grading scale cannot be empty")

    bands["F"] = GradeBand(grade="F", min=0, remark=bands["F"].remark if "F" in bands else defaults["F"].remark)
    return sorted(bands.values(), key=lambda band: band.min, reverse=True)


def grade_bands(scale: Optional[Sequence[GradeBand]] = None) -> List[Dict[str, Any]]:
    """Scale as display bands with an inclusive max (previous min - 1, top band 100)"""
    ordered = sorted(scale or DEFAULT_GRADING_SCALE, key=lambda band: band.min, reverse=True)
    bands = []
    upper = 100.0
    for band in ordered:
        bands.append({"grade": band.grade, "min": band.min, "max": upper, "remark": band.remark})
        upper = band.min - 1
    return bands
