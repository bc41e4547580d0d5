from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set

from models import LogEntry, Surah

CORPUS_TOTAL_VERSES = 6236


def rounded_percentage(part: int, whole: int) -> int:
    """``100 * part / whole`` rounded half away from zero; 0 when ``whole <= 0``."""
    if whole <= 0:
        return 0
    numerator = 200 * abs(part) + whole
    value = numerator // (2 * whole)
    return value if part >= 0 else -value


def union_coverage(entries: Iterable[LogEntry]) -> Dict[int, Set[int]]:
    coverage: Dict[int, Set[int]] = {}
    for entry in entries:
        verses = coverage.setdefault(entry.surah_number, set())
        verses.update(range(entry.verse_start, entry.verse_end + 1))
    return coverage


def coverage_percentage(verses: Set[int], total_verses: int) -> int:
    return rounded_percentage(len(verses), total_verses)


def is_complete(verses: Set[int], total_verses: int) -> bool:
    return len(verses) >= total_verses


@dataclass(frozen=True)
class ProgramCoverage:
    covered: int
    percentage: int
    is_complete: bool


@dataclass(frozen=True)
class SurahCoverage:
    surah_number: int
    total_verses: int
    covered_verse_count: int
    percentage: int
    is_complete: bool
    per_program: Dict[str, ProgramCoverage] = field(default_factory=dict)


@dataclass(frozen=True)
class CorpusTotal:
    covered: int
    percentage: int


def compute_surah_coverage(
    owner_id: int,
    program_codes: Sequence[str],
    surahs: Iterable[Surah],
    entries: Iterable[LogEntry],
) -> List[SurahCoverage]:
    """Per-surah coverage for ``owner_id``, one independent verse set per program.

    The headline count and percentage follow the first program in
    ``program_codes``. Entries for other owners, other programs or surahs
    outside ``surahs`` are ignored.
    """
    codes = list(program_codes)
    by_program: Dict[str, List[LogEntry]] = {code: [] for code in codes}
    for entry in entries:
        if entry.owner_id != owner_id:
            continue
        bucket = by_program.get(entry.program)
        if bucket is not None:
            bucket.append(entry)
    sets = {code: union_coverage(by_program[code]) for code in codes}

    results: List[SurahCoverage] = []
    for surah in sorted(surahs, key=lambda s: s.number):
        per_program: Dict[str, ProgramCoverage] = {}
        for code in codes:
            verses = sets[code].get(surah.number, set())
            per_program[code] = ProgramCoverage(
                covered=len(verses),
                percentage=coverage_percentage(verses, surah.total_verses),
                is_complete=is_complete(verses, surah.total_verses),
            )
        headline = per_program[codes[0]] if codes else ProgramCoverage(0, 0, False)
        results.append(
            SurahCoverage(
                surah_number=surah.number,
                total_verses=surah.total_verses,
                covered_verse_count=headline.covered,
                percentage=headline.percentage,
                is_complete=headline.is_complete,
                per_program=per_program,
            )
        )
    return results


def compute_corpus_totals(
    results: Iterable[SurahCoverage],
    program_codes: Sequence[str],
    corpus_total: int = CORPUS_TOTAL_VERSES,
) -> Dict[str, CorpusTotal]:
    covered = {code: 0 for code in program_codes}
    for result in results:
        for code in program_codes:
            program = result.per_program.get(code)
            if program:
                covered[code] += program.covered
    return {
        code: CorpusTotal(covered=count, percentage=rounded_percentage(count, corpus_total))
        for code, count in covered.items()
    }
