# Copyright (C) 2020-2025 Motphys Technology Co., Ltd. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Mapping, Union

from .segment import SegmentClass

_C = SegmentClass


@dataclass(frozen=True)
class RewardTerms:
    """
    Reward constants for one segment class.

    immediate: bonus on every not-touching -> touching transition
    continuous_rate: reward per second of sustained contact
    release_penalty: added when a segment that had touched lets go (usually < 0)
    """

    immediate: float
    continuous_rate: float
    release_penalty: float

    def continuous(self, dt: float) -> float:
        """Continuous reward for one physics step of length dt."""
        return self.continuous_rate * dt


def _default_terms() -> dict[SegmentClass, RewardTerms]:
    # rates are "per 5 seconds" of contact
    return RewardPolicy.from_tables(
        immediate={
            _C.BASE_JOINT: 0.15,
            _C.MID_JOINT: 0.10,
            _C.END_JOINT: 0.05,
            _C.THUMB_JOINT: 0.20,
            _C.PALM: 0.25,
        },
        continuous_rate={
            _C.BASE_JOINT: 0.002 / 5.0,
            _C.MID_JOINT: 0.0015 / 5.0,
            _C.END_JOINT: 0.001 / 5.0,
            _C.THUMB_JOINT: 0.0025 / 5.0,
            _C.PALM: 0.003 / 5.0,
        },
        release_penalty=-0.02,
    ).terms


@dataclass
class RewardPolicy:
    """
    Table from segment class to its reward constants.

    The policy holds no state; one instance is shared by every tracker of an
    environment and can be swapped through the env config.
    """

    terms: dict[SegmentClass, RewardTerms] = field(default_factory=_default_terms)

    @classmethod
    def from_tables(
        cls,
        immediate: Mapping[SegmentClass, float],
        continuous_rate: Mapping[SegmentClass, float],
        release_penalty: Union[float, Mapping[SegmentClass, float]],
    ) -> "RewardPolicy":
        """
        Build a policy from per-class tables. A scalar release penalty applies
        to every class.
        """
        immediate = {SegmentClass(c): v for c, v in immediate.items()}
        continuous_rate = {SegmentClass(c): v for c, v in continuous_rate.items()}
        classes = set(immediate) | set(continuous_rate)
        if not isinstance(release_penalty, Mapping):
            release_penalty = {c: float(release_penalty) for c in classes}
        else:
            release_penalty = {SegmentClass(c): v for c, v in release_penalty.items()}
            classes |= set(release_penalty)

        missing = {
            name: sorted(c.value for c in classes - set(table))
            for name, table in (
                ("immediate", immediate),
                ("continuous_rate", continuous_rate),
                ("release_penalty", release_penalty),
            )
        }
        missing = {name: values for name, values in missing.items() if values}
        if missing:
            raise ValueError(f"Incomplete reward tables: {missing}")

        return cls(
            terms={
                c: RewardTerms(
                    immediate=float(immediate[c]),
                    continuous_rate=float(continuous_rate[c]),
                    release_penalty=float(release_penalty[c]),
                )
                for c in classes
            }
        )

    def lookup(self, segment_class: SegmentClass) -> RewardTerms:
        try:
            return self.terms[SegmentClass(segment_class)]
        except KeyError:
            raise KeyError(f"No reward terms for segment class '{segment_class}'") from None

    def validate(self, segments) -> None:
        """Check that every configured segment has reward terms."""
        missing = sorted({s.segment_class.value for s in segments if s.segment_class not in self.terms})
        if missing:
            raise ValueError(f"Reward policy has no terms for segment classes: {missing}")
