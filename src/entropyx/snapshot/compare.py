"""Compare two snapshots and describe the drift between them.

The verdict reads like a weather forecast: a single sharp rise is a heat
spike, a sustained plateau above the prior level is a heat wave, a run of
consecutive drops is a cold front, and a gentle slope is warming or cooling.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .models import Snapshot, SnapshotFile, SnapshotHistoryEntry

# Minimum absolute entropy change used by the spike/wave/front detectors
ELEVATION_THRESHOLD = 0.05

# Per-step slope treated as flat
TREND_EPSILON = 0.001

# Entropy rise between snapshots required for a warming verdict
WARMING_DELTA = 0.01

# Badness changes smaller than this are noise
BADNESS_EPSILON = 1e-9


class Verdict(Enum):
    STABLE = "stable"
    WARMING = "warming"
    COOLING = "cooling"
    HEAT_SPIKE = "heat_spike"
    HEAT_WAVE = "heat_wave"
    COLD_FRONT = "cold_front"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


VERDICT_DESCRIPTIONS = {
    Verdict.STABLE: "Entropy is flat within normal variability; no significant structural drift.",
    Verdict.WARMING: "Entropy is trending up steadily; structural drift is accumulating commit by commit.",
    Verdict.COOLING: "Entropy is trending down; stabilization or refactoring is paying off.",
    Verdict.HEAT_SPIKE: "Entropy jumped sharply in a single step; a regression event was detected.",
    Verdict.HEAT_WAVE: "Entropy stays elevated across a sustained window without correction.",
    Verdict.COLD_FRONT: "Entropy dropped consistently over several commits; focused cleanup is working.",
}

_SUMMARIES = {
    Verdict.HEAT_WAVE: (
        "Entropy has remained elevated across multiple commits. Sustained structural drift "
        "is accumulating; consider a focused refactoring session."
    ),
    Verdict.HEAT_SPIKE: (
        "Entropy spiked sharply. A single change significantly disrupted the structural "
        "balance of the codebase; investigate recent commits."
    ),
    Verdict.COLD_FRONT: (
        "A sustained entropy reduction is underway. Refactoring or cleanup is producing a "
        "meaningful structural improvement."
    ),
    Verdict.WARMING: (
        "Entropy is drifting upward steadily. No immediate crisis, but keep an eye on hot spots."
    ),
    Verdict.COOLING: "Entropy is trending downward and the codebase is stabilizing.",
    Verdict.STABLE: "Entropy is flat within normal variability. The codebase is holding steady.",
}


@dataclass(frozen=True)
class Assessment:
    verdict: Verdict
    label: str
    summary: str
    observations: list[str]


# ── detectors ────────────────────────────────────────────────────


def _steps(history: Sequence[SnapshotHistoryEntry]) -> list[float]:
    return [cur.entropy - prev.entropy for prev, cur in zip(history, history[1:])]


def compute_entropy_trend(history: Sequence[SnapshotHistoryEntry]) -> float:
    """Mean entropy change per commit step."""
    steps = _steps(history)
    return sum(steps) / len(steps) if steps else 0.0


def detect_heat_spike(history: Sequence[SnapshotHistoryEntry]) -> bool:
    """True when the largest rise is an outlier (> mean + 1.5σ) and above the threshold.

    Needs at least three entries.
    """
    if len(history) < 3:
        return False
    steps = _steps(history)
    mean = sum(steps) / len(steps)
    std = math.sqrt(sum((s - mean) ** 2 for s in steps) / len(steps))
    peak = max(steps)
    return peak > mean + 1.5 * std and peak > ELEVATION_THRESHOLD


def detect_heat_wave(history: Sequence[SnapshotHistoryEntry], window: int = 3) -> bool:
    """True when the last ``window`` entries all sit above the point before them.

    Each must exceed the reference by more than the threshold, and the
    movement inside the window must be smaller than the initial jump (a
    plateau, not a continuing climb). Needs ``window + 2`` entries.
    """
    if len(history) < window + 2:
        return False
    ref_idx = len(history) - window - 1
    ref = history[ref_idx].entropy

    if any(h.entropy <= ref + ELEVATION_THRESHOLD for h in history[ref_idx + 1 :]):
        return False

    elevation = history[ref_idx + 1].entropy - ref
    window_rise = history[-1].entropy - history[ref_idx + 1].entropy
    return elevation > ELEVATION_THRESHOLD and abs(window_rise) < elevation


def detect_cold_front(history: Sequence[SnapshotHistoryEntry], window: int = 3) -> bool:
    """True when at least 70% of the last ``window`` steps are declines."""
    if len(history) < window + 1:
        return False
    declines = sum(
        1 for i in range(len(history) - window, len(history)) if history[i].entropy < history[i - 1].entropy
    )
    return declines >= math.ceil(window * 0.7)


# ── file diffs ───────────────────────────────────────────────────


def worsened_files(baseline: Snapshot, current: Snapshot) -> list[SnapshotFile]:
    """Files present in both whose badness rose, largest rise first."""
    base = {f.path: f for f in baseline.files}
    hits = [f for f in current.files if f.path in base and f.badness > base[f.path].badness + BADNESS_EPSILON]
    return sorted(hits, key=lambda f: (-(f.badness - base[f.path].badness), f.path))


def improved_files(baseline: Snapshot, current: Snapshot) -> list[SnapshotFile]:
    """Files present in both whose badness fell, largest drop first."""
    base = {f.path: f for f in baseline.files}
    hits = [f for f in current.files if f.path in base and f.badness < base[f.path].badness - BADNESS_EPSILON]
    return sorted(hits, key=lambda f: (f.badness - base[f.path].badness, f.path))


def new_files(baseline: Snapshot, current: Snapshot) -> list[SnapshotFile]:
    known = {f.path for f in baseline.files}
    return sorted((f for f in current.files if f.path not in known), key=lambda f: (-f.badness, f.path))


def removed_files(baseline: Snapshot, current: Snapshot) -> list[SnapshotFile]:
    remaining = {f.path for f in current.files}
    return sorted((f for f in baseline.files if f.path not in remaining), key=lambda f: (-f.badness, f.path))


# ── assessment ───────────────────────────────────────────────────


def _observations(baseline: Snapshot, current: Snapshot, trend: float) -> list[str]:
    b_entropy = baseline.summary.entropy
    delta = current.summary.entropy - b_entropy
    relative = delta / b_entropy if b_entropy != 0 else 0.0
    sloc_delta = current.summary.sloc - baseline.summary.sloc
    files_delta = current.summary.files - baseline.summary.files

    obs = []
    if abs(delta) < TREND_EPSILON:
        obs.append("Entropy is virtually unchanged between snapshots.")
    elif delta < 0:
        obs.append(f"Entropy dropped by {abs(delta):.4f} ({abs(relative):.1%}) since baseline.")
    else:
        obs.append(f"Entropy rose by {delta:.4f} ({relative:.1%}) since baseline.")

    if len(current.history) >= 3:
        if trend > TREND_EPSILON:
            obs.append(f"Entropy is rising within the current snapshot at ~{trend:.4f} per commit.")
        elif trend < -TREND_EPSILON:
            obs.append(f"Entropy is falling within the current snapshot at ~{abs(trend):.4f} per commit.")
        else:
            obs.append("Entropy is flat within the current snapshot.")

    if sloc_delta > 0 and delta <= 0:
        obs.append(f"Codebase grew by {sloc_delta:,} SLOC while entropy held or fell.")
    elif sloc_delta > 0 and delta > 0:
        obs.append(f"Codebase grew by {sloc_delta:,} SLOC with rising entropy.")
    elif sloc_delta < 0 and delta < 0:
        obs.append(f"Codebase shrank by {abs(sloc_delta):,} SLOC and entropy improved.")

    if files_delta > 0:
        obs.append(f"{files_delta} new file(s) since baseline.")
    elif files_delta < 0:
        obs.append(f"{abs(files_delta)} file(s) removed since baseline.")

    worse = worsened_files(baseline, current)
    better = improved_files(baseline, current)
    if worse:
        obs.append(f"{len(worse)} file(s) run hotter than at baseline (e.g. {worse[0].path}).")
    if better:
        obs.append(f"{len(better)} file(s) cooled down since baseline (e.g. {better[0].path}).")
    return obs


def build_assessment(baseline: Snapshot, current: Snapshot) -> Assessment:
    """Classify the drift from ``baseline`` to ``current``.

    A heat wave outranks a heat spike; a cold front requires the overall
    drop to exceed the elevation threshold.
    """
    b_entropy = baseline.summary.entropy
    c_entropy = current.summary.entropy
    delta = c_entropy - b_entropy
    trend = compute_entropy_trend(current.history)

    heat_wave = c_entropy > b_entropy and detect_heat_wave(current.history)
    heat_spike = not heat_wave and delta > 0 and detect_heat_spike(current.history)
    cold_front = delta < -ELEVATION_THRESHOLD and detect_cold_front(current.history)

    if heat_wave:
        verdict = Verdict.HEAT_WAVE
    elif heat_spike:
        verdict = Verdict.HEAT_SPIKE
    elif cold_front:
        verdict = Verdict.COLD_FRONT
    elif trend > TREND_EPSILON and delta > WARMING_DELTA:
        verdict = Verdict.WARMING
    elif trend < -TREND_EPSILON and delta <= 0:
        verdict = Verdict.COOLING
    else:
        verdict = Verdict.STABLE

    return Assessment(
        verdict=verdict,
        label=verdict.label,
        summary=_SUMMARIES[verdict],
        observations=_observations(baseline, current, trend),
    )
