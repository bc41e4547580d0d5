from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from config import load_config
from db.database import get_db
from models import DataKind, User
from utils.auth import get_viewer, require_access, require_owner
from utils.coverage import compute_corpus_totals, compute_surah_coverage
from utils.mastery import summarize_mastery, with_mirror_entries
from utils.progress import load_log_entries, load_mastery_records, load_program_codes, load_surahs
from utils.validation import validate_program

router = APIRouter()


@router.get("/{owner_id}/surahs")
async def surah_stats(
    owner_id: int,
    programs: Optional[List[str]] = Query(default=None),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Per-surah coverage for each tracked program plus corpus-wide totals."""
    config = load_config()
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.STATS)
    known = load_program_codes(conn)
    codes = [validate_program(code, known) for code in (programs or config["coverage"]["tracked_programs"])]
    surahs = load_surahs(conn)
    entries = load_log_entries(conn, owner.id, codes)
    mirror_program = config["mastery"]["mirror_program"]
    if mirror_program in codes:
        # mastery records without a stored mirror entry still count as covered
        entries = with_mirror_entries(entries, load_mastery_records(conn, owner.id), surahs, mirror_program)
    results = compute_surah_coverage(owner.id, codes, surahs, entries)
    totals = compute_corpus_totals(results, codes, config["coverage"]["corpus_total_verses"])
    return {
        "owner_id": owner.id,
        "programs": codes,
        "surahs": [asdict(result) for result in results],
        "totals": {code: asdict(total) for code, total in totals.items()},
    }


@router.get("/{owner_id}/mastery")
async def mastery_stats(
    owner_id: int,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Count of surahs per mastery status."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.STATS)
    return summarize_mastery(load_mastery_records(conn, owner.id))
