# pairing_core/matching/recommender.py
from __future__ import annotations

from typing import Iterable

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import Expertise, MeetingType, Need


def recommend_meeting_type(
    student_id: int,
    staff_id: int,
    needs: Iterable[Need],
    expertise: Iterable[Expertise],
    cfg: AppConfig = DEFAULT_CONFIG,
) -> MeetingType:
    """
    Decision table over the student's top-priority subject:
    - no needs -> COMBO
    - staff covers it at >= strategist_proficiency -> LEARNING_STRATEGIST
    - staff covers it below that -> ACADEMIC_COACH
    - staff does not cover it -> COMBO
    Advisory only.
    """
    ranked = sorted((n for n in needs if n.student_id == student_id),
                    key=lambda n: n.priority_level, reverse=True)
    if not ranked:
        return MeetingType.COMBO

    top_subject = ranked[0].subject_id
    match = next((e for e in expertise if e.staff_id == staff_id and e.subject_id == top_subject), None)
    if match is None:
        return MeetingType.COMBO
    if match.proficiency_level >= cfg.matching.strategist_proficiency:
        return MeetingType.LEARNING_STRATEGIST
    return MeetingType.ACADEMIC_COACH
