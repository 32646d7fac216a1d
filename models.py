# models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")

# Capacity used for bench / IR sinks.
UNLIMITED: int = 99


class SlotTag(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DEF = "DEF"
    SUPER_FLEX = "SUPER_FLEX"
    FLEX = "FLEX"
    WRRB_FLEX = "WRRB_FLEX"
    REC_FLEX = "REC_FLEX"
    WR_TE = "WR/TE"
    BENCH = "BENCH"
    IR = "IR"

    @property
    def is_starting(self) -> bool:
        return self not in (SlotTag.BENCH, SlotTag.IR)


STANDARD_SLOTS = (
    SlotTag.QB,
    SlotTag.RB,
    SlotTag.WR,
    SlotTag.TE,
    SlotTag.K,
    SlotTag.DEF,
)

# Fill order for flexible slots; earlier entries get first pick of the pool.
FLEX_PRIORITY = (
    SlotTag.SUPER_FLEX,
    SlotTag.FLEX,
    SlotTag.WRRB_FLEX,
    SlotTag.REC_FLEX,
    SlotTag.WR_TE,
)

SLOT_ELIGIBILITY: Dict[SlotTag, FrozenSet[str]] = {
    SlotTag.QB: frozenset({"QB"}),
    SlotTag.RB: frozenset({"RB"}),
    SlotTag.WR: frozenset({"WR"}),
    SlotTag.TE: frozenset({"TE"}),
    SlotTag.K: frozenset({"K"}),
    SlotTag.DEF: frozenset({"DEF"}),
    SlotTag.SUPER_FLEX: frozenset({"QB", "RB", "WR", "TE"}),
    SlotTag.FLEX: frozenset({"RB", "WR", "TE"}),
    SlotTag.WRRB_FLEX: frozenset({"WR", "RB"}),
    SlotTag.REC_FLEX: frozenset({"WR", "TE"}),
    SlotTag.WR_TE: frozenset({"WR", "TE"}),
    SlotTag.BENCH: frozenset(POSITIONS),
    SlotTag.IR: frozenset(POSITIONS),
}

SlotRequirement = Dict[SlotTag, int]


class ScoringFormat(str, Enum):
    PPR = "ppr"
    HALF_PPR = "half_ppr"
    STANDARD = "standard"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ScoringFormat":
        """
        Parse a user / config scoring string. Unknown values fall back to PPR.
        """
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower()
        aliases = {
            "ppr": cls.PPR,
            "full": cls.PPR,
            "half_ppr": cls.HALF_PPR,
            "half-ppr": cls.HALF_PPR,
            "half": cls.HALF_PPR,
            "standard": cls.STANDARD,
            "std": cls.STANDARD,
        }
        return aliases.get(key, cls.PPR)


@dataclass
class RosterPlayer:
    player_id: str
    name: str
    position: str                         # QB, RB, WR, TE, K, DEF
    team: Optional[str] = None            # NFL team abbreviation
    is_starter: bool = False              # current lineup flag
    current_slot: Optional[str] = None    # raw label, e.g. "RB2", "RB/WR/TE", "BE"
    current_points: Optional[float] = None
    projection_key: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.player_id,
            "name": self.name,
            "position": self.position,
            "nfl_team": self.team,
            "was_starter": bool(self.is_starter),
            "current_slot": self.current_slot,
            "current_points": self.current_points,
        }


@dataclass
class ProjectionRecord:
    ppr: Optional[float] = None
    half_ppr: Optional[float] = None
    standard: Optional[float] = None

    def points_for(self, fmt: ScoringFormat) -> Optional[float]:
        if fmt == ScoringFormat.HALF_PPR:
            return self.half_ppr
        if fmt == ScoringFormat.STANDARD:
            return self.standard
        return self.ppr


@dataclass
class LineupAssignment:
    """
    Slot tag -> ordered players. Every rostered player lives in exactly one
    slot, bench and IR included.
    """

    slots: Dict[SlotTag, List[RosterPlayer]] = field(default_factory=dict)

    def add(self, tag: SlotTag, player: RosterPlayer) -> None:
        self.slots.setdefault(tag, []).append(player)

    def players(self) -> List[RosterPlayer]:
        return [p for group in self.slots.values() for p in group]

    def starters(self) -> List[RosterPlayer]:
        return [
            p
            for tag, group in self.slots.items()
            if tag.is_starting
            for p in group
        ]

    def slot_of(self, player_id: str) -> Optional[SlotTag]:
        for tag, group in self.slots.items():
            if any(p.player_id == player_id for p in group):
                return tag
        return None

    def as_ids(self) -> Dict[str, List[str]]:
        """Comparable, JSON-friendly view: {slot label: [player ids]}."""
        return {
            tag.value: [p.player_id for p in group]
            for tag, group in self.slots.items()
            if group
        }


@dataclass
class MoveStep:
    player: RosterPlayer
    from_slot: str
    to_slot: str
    reason: str
    projection: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "player": self.player.to_dict(),
            "from_slot": self.from_slot,
            "to_slot": self.to_slot,
            "reason": self.reason,
            "projection": float(self.projection),
        }


@dataclass
class MoveChain:
    steps: List[MoveStep]
    net_improvement: float
    started_player: RosterPlayer
    benched_player: Optional[RosterPlayer] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "net_improvement": float(self.net_improvement),
            "started": self.started_player.player_id,
            "benched": self.benched_player.player_id if self.benched_player else None,
        }


@dataclass
class LineupChange:
    player_in: RosterPlayer
    position: SlotTag
    projected_points_in: float
    projected_points_out: float
    move_chain: MoveChain
    player_out: Optional[RosterPlayer] = None

    @property
    def improvement(self) -> float:
        return self.projected_points_in - self.projected_points_out

    @property
    def improvement_percentage(self) -> float:
        if self.projected_points_out <= 0:
            return 0.0
        # 12.1 vs 11.0 must come out as exactly 10%
        return round(self.improvement / self.projected_points_out * 100.0, 6)

    @property
    def reason(self) -> str:
        return f"Projected +{self.improvement:.1f} pts"

    def to_dict(self) -> Dict[str, object]:
        return {
            "player_in": self.player_in.to_dict(),
            "player_out": self.player_out.to_dict() if self.player_out else None,
            "position": self.position.value,
            "projected_points_in": float(self.projected_points_in),
            "projected_points_out": float(self.projected_points_out),
            "improvement": float(self.improvement),
            "improvement_percentage": float(self.improvement_percentage),
            "reason": self.reason,
            "move_chain": self.move_chain.to_dict(),
        }


@dataclass
class OptimizationResult:
    optimal_lineup: LineupAssignment
    benched_players: List[RosterPlayer]
    projected_points: float
    current_points: float
    changes: List[LineupChange]
    player_projections: Dict[str, float]
    locked_player_ids: FrozenSet[str]
    requirements: SlotRequirement
    threshold_pct: float

    @property
    def improvement(self) -> float:
        """Theoretical gain of the whole optimal lineup over the current one."""
        return self.projected_points - self.current_points

    @property
    def actionable_improvement(self) -> float:
        """Gain from the recommendations that survived the threshold."""
        return sum(c.improvement for c in self.changes)

    @property
    def move_chains(self) -> List[MoveChain]:
        return [c.move_chain for c in self.changes]


@dataclass
class AvailablePlayer:
    player_id: str
    name: str
    position: str
    projected_points: float
    team: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.player_id,
            "name": self.name,
            "position": self.position,
            "nfl_team": self.team,
            "projection": float(self.projected_points),
        }


@dataclass
class WaiverRecommendation:
    player_to_add: AvailablePlayer
    player_to_drop: RosterPlayer
    projected_impact: float
    projected_points_drop: float
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "add": self.player_to_add.to_dict(),
            "drop": self.player_to_drop.to_dict(),
            "projected_impact": float(self.projected_impact),
            "projected_points_drop": float(self.projected_points_drop),
            "reason": self.reason,
        }
