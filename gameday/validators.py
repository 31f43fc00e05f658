"""Validation functions gating lifecycle transitions.

Component checks return lists of messages (empty if valid); the composite
checks fold them into a ValidationResult where `messages` are hard failures
and `warnings` need user confirmation.
"""

from typing import Mapping, Optional

from .config import get_bench_range
from .constants import GOALKEEPER_SLOT, TEAM_SUMMARY_FIELDS, UNAVAILABLE
from .formation import FormationAssignmentStore, required_starters
from .models import FinalScore, Player, TeamSummary, ValidationResult
from .roster import RosterAssignmentStore


def validate_starting_lineup(formation: Mapping[str, Optional[str]], required: int = 11) -> list[str]:
    """
    Check the number of filled formation slots.

    Args:
        formation: Slot id -> player id (or None)
        required: Slots the layout needs filled

    Returns:
        List of validation error messages (empty if valid)
    """
    filled = sum(1 for pid in formation.values() if pid)
    if filled == 0:
        return ['No players assigned to starting lineup']
    if filled < required:
        return [f'Only {filled} players in starting lineup. Need exactly {required} players.']
    if filled > required:
        return [f'Too many players ({filled}) in starting lineup. Maximum {required} players allowed.']
    return []


def validate_goalkeeper(formation: Mapping[str, Optional[str]]) -> list[str]:
    if not formation.get(GOALKEEPER_SLOT):
        return ['No goalkeeper assigned to the team']
    return []


def validate_bench_size(bench_count: int, bench_range: Optional[tuple[int, int]] = None) -> list[str]:
    """
    Soft check on bench size; returns confirmation messages.

    Args:
        bench_count: Players with status 'Bench'
        bench_range: Recommended (min, max); defaults to config
    """
    minimum, maximum = bench_range or get_bench_range()
    if bench_count == 0:
        return ['You have no players on the bench. Are you sure you want to continue?']
    if bench_count < minimum:
        return [
            f'You have fewer than {minimum} bench players ({bench_count}). '
            'Are you sure you want to continue?'
        ]
    if bench_count > maximum:
        return [
            f'You have more than {maximum} bench players ({bench_count}). '
            'Are you sure you want to continue?'
        ]
    return []


def validate_unavailable_in_formation(
    formation: Mapping[str, Optional[str]],
    statuses: Mapping[str, str],
    players: Mapping[str, Player],
) -> list[str]:
    """Unavailable players must never hold a slot."""
    errors = []
    for slot_id, pid in formation.items():
        if pid and statuses.get(pid) == UNAVAILABLE:
            name = players[pid].name if pid in players else pid
            errors.append(f'{name} is unavailable but assigned to {slot_id}')
    return errors


def validate_squad_for_played(
    formation: FormationAssignmentStore,
    roster: RosterAssignmentStore,
    bench_range: Optional[tuple[int, int]] = None,
) -> ValidationResult:
    """
    Checks for Scheduled -> Played.

    Hard: full starting lineup, goalkeeper present, no unavailable starters.
    Soft: bench size within the recommended range.
    """
    slots = formation.as_dict()
    errors = validate_starting_lineup(slots, required_starters(formation.formation_type))
    errors += validate_goalkeeper(slots)
    errors += validate_unavailable_in_formation(slots, roster.as_dict(), roster.players)
    warnings = validate_bench_size(len(roster.bench()), bench_range)

    return ValidationResult(
        is_valid=not errors,
        needs_confirmation=bool(warnings),
        messages=errors,
        warnings=warnings,
    )


def validate_team_summary(summary: TeamSummary) -> list[str]:
    """Every team summary must be non-empty after trimming."""
    errors = []
    for field_name, label in TEAM_SUMMARY_FIELDS.items():
        if not (getattr(summary, field_name) or '').strip():
            errors.append(f'{label} is required')
    return errors


def validate_report_completeness(missing: list[str], players: Mapping[str, Player]) -> list[str]:
    """
    Args:
        missing: Ids of rostered players without a complete report
        players: Team pool, for names

    Returns:
        One message naming every player still missing a report
    """
    if not missing:
        return []
    names = [players[pid].name if pid in players else pid for pid in missing]
    return [f'Missing player reports for {len(names)} players: {", ".join(names)}']


def validate_final_score(score: FinalScore) -> list[str]:
    if score.our_score == 0 and score.opponent_score == 0:
        return ['Final score is 0-0. Are you sure you want to submit the report?']
    return []


def validate_for_done(
    summary: TeamSummary,
    missing_reports: list[str],
    players: Mapping[str, Player],
    score: FinalScore,
) -> ValidationResult:
    """Checks for Played -> Done."""
    errors = validate_team_summary(summary)
    errors += validate_report_completeness(missing_reports, players)
    warnings = validate_final_score(score)

    return ValidationResult(
        is_valid=not errors,
        needs_confirmation=bool(warnings),
        messages=errors,
        warnings=warnings,
    )
