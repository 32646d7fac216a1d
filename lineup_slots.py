# lineup_slots.py
#
# Slot label handling and lineup requirement derivation.
# - Normalises host-platform slot labels ("RB2", "RB/WR/TE", "BE", "OP", ...)
#   onto the closed SlotTag set from models.py
# - Derives the slot -> required count map, preferring league settings, then
#   the current starters, then a hardcoded default lineup.

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional

from models import (  # type: ignore[import]
    RosterPlayer,
    SlotRequirement,
    SlotTag,
    UNLIMITED,
)

logger = logging.getLogger(__name__)

# Every spelling we have seen from ESPN / Sleeper / Yahoo for each tag.
_LABEL_ALIASES = {
    "QB": SlotTag.QB,
    "RB": SlotTag.RB,
    "WR": SlotTag.WR,
    "TE": SlotTag.TE,
    "K": SlotTag.K,
    "PK": SlotTag.K,
    "DEF": SlotTag.DEF,
    "DST": SlotTag.DEF,
    "D/ST": SlotTag.DEF,
    "D": SlotTag.DEF,
    "FLEX": SlotTag.FLEX,
    "RB/WR/TE": SlotTag.FLEX,
    "W/R/T": SlotTag.FLEX,
    "SUPER_FLEX": SlotTag.SUPER_FLEX,
    "SUPERFLEX": SlotTag.SUPER_FLEX,
    "OP": SlotTag.SUPER_FLEX,
    "QB/RB/WR/TE": SlotTag.SUPER_FLEX,
    "Q/W/R/T": SlotTag.SUPER_FLEX,
    "WRRB_FLEX": SlotTag.WRRB_FLEX,
    "RB/WR": SlotTag.WRRB_FLEX,
    "WR/RB": SlotTag.WRRB_FLEX,
    "W/R": SlotTag.WRRB_FLEX,
    "REC_FLEX": SlotTag.REC_FLEX,
    "WRTE_FLEX": SlotTag.REC_FLEX,
    "WR/TE": SlotTag.WR_TE,
    "TE/WR": SlotTag.WR_TE,
    "W/T": SlotTag.WR_TE,
    "BN": SlotTag.BENCH,
    "BE": SlotTag.BENCH,
    "BENCH": SlotTag.BENCH,
    "RES": SlotTag.BENCH,
    "IR": SlotTag.IR,
    "IR+": SlotTag.IR,
    "INJURY_RESERVE": SlotTag.IR,
}

_TRAILING_NUMBER = re.compile(r"\d+$")


def strip_slot_number(label: str) -> str:
    """
    Drop a trailing position number from a slot label: "RB2" -> "RB".
    """
    cleaned = str(label or "").strip().upper().replace(" ", "_")
    return _TRAILING_NUMBER.sub("", cleaned)


def normalize_slot_label(label: Optional[str]) -> Optional[SlotTag]:
    """
    Map a raw slot label onto a SlotTag, or None when we don't recognise it
    (IDP slots, head coach, etc.).
    """
    if label is None:
        return None
    if isinstance(label, SlotTag):
        return label
    return _LABEL_ALIASES.get(strip_slot_number(label))


def current_slot_tag(player: RosterPlayer) -> SlotTag:
    """
    Where a player sits right now, as a SlotTag.

    Bench players and starters with an unknown label fall back to BENCH and to
    their own position respectively, so every player always has a slot.
    """
    if not player.is_starter:
        tag = normalize_slot_label(player.current_slot)
        return SlotTag.IR if tag == SlotTag.IR else SlotTag.BENCH
    return _classify_starter(player) or SlotTag.BENCH


# ---------------------------------------------------------------------------
# Requirement derivation
# ---------------------------------------------------------------------------


def default_requirements() -> SlotRequirement:
    """Standard 1QB / 2RB / 2WR / TE / FLEX / K / DEF lineup."""
    return _with_sinks(
        {
            SlotTag.QB: 1,
            SlotTag.RB: 2,
            SlotTag.WR: 2,
            SlotTag.TE: 1,
            SlotTag.FLEX: 1,
            SlotTag.K: 1,
            SlotTag.DEF: 1,
        }
    )


def _with_sinks(counts: SlotRequirement) -> SlotRequirement:
    out = dict(counts)
    out[SlotTag.BENCH] = UNLIMITED
    out[SlotTag.IR] = UNLIMITED
    return out


def requirements_from_labels(slot_labels: Iterable[str]) -> SlotRequirement:
    """
    Count league roster-slot labels, e.g. ["QB", "RB", "RB", "FLEX", "BN", ...].
    Bench / IR labels are skipped; the sinks are added by the caller.
    """
    counts: Counter = Counter()
    for label in slot_labels:
        tag = normalize_slot_label(label)
        if tag is None:
            logger.warning("[Slots] Ignoring unsupported league slot label %r", label)
            continue
        if not tag.is_starting:
            continue
        counts[tag] += 1
    return dict(counts)


def _classify_starter(player: RosterPlayer) -> Optional[SlotTag]:
    tag = normalize_slot_label(player.current_slot)
    if tag is None or not tag.is_starting:
        tag = normalize_slot_label(player.position)
    if tag is None or not tag.is_starting:
        return None

    # A TE parked in a WR slot means the league has a WR/TE slot, not a
    # third WR.
    if tag == SlotTag.WR and player.position == "TE":
        return SlotTag.WR_TE
    return tag


def infer_requirements(roster: Iterable[RosterPlayer]) -> SlotRequirement:
    """
    Guess requirements from whoever is starting right now. Only used when the
    league settings are unavailable.
    """
    counts: Counter = Counter()
    for p in roster:
        if not p.is_starter:
            continue
        tag = _classify_starter(p)
        if tag is not None:
            counts[tag] += 1
    return dict(counts)


def derive_requirements(
    slot_labels: Optional[List[str]] = None,
    roster: Optional[List[RosterPlayer]] = None,
) -> SlotRequirement:
    """
    Resolve the slot -> count map for a lineup.

    Order of precedence:
      1. league slot labels (authoritative, no inference at all)
      2. inference from the current starters
      3. default_requirements()
    The result always contains at least one starting slot plus the unlimited
    BENCH / IR sinks.
    """
    if slot_labels:
        counts = requirements_from_labels(slot_labels)
        if counts:
            logger.debug("[Slots] Using league slot configuration: %s", counts)
            return _with_sinks(counts)
        logger.warning(
            "[Slots] League slot labels %s contained no starting slots; "
            "falling back to lineup inference.",
            slot_labels,
        )

    if roster:
        counts = infer_requirements(roster)
        if counts:
            logger.info("[Slots] No league settings; inferred requirements %s", counts)
            return _with_sinks(counts)

    logger.info("[Slots] Could not resolve lineup requirements; using default lineup.")
    return default_requirements()
