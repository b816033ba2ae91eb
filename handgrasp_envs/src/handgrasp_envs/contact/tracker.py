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

"""
Per-segment contact state machine.

A tracker moves between three observable states:

    Idle      (in_contact=False, had_contact=False)
    Touching  (in_contact=True,  had_contact=True)
    Released  (in_contact=False, had_contact=True)

Idle/Released -> Touching pays the immediate bonus, Touching pays the
continuous reward at most once per physics step, and Touching -> Released
pays the release penalty. reset() returns to Idle from any state.
"""

from typing import Optional

from .segment import Segment
from .state import ContactStateStore


class SegmentContactTracker:
    """
    Contact state and reward events for one segment in one environment.

    The tracker is a view onto a single (env_id, index) slot of a
    ContactStateStore. When no store is given it owns a private 1x1 store.
    Callers must follow the physics step contract: reset() at episode start,
    begin_step() once before each step's events. Inputs are not validated.
    """

    def __init__(
        self,
        segment: Segment,
        release_penalty: float,
        state: Optional[ContactStateStore] = None,
        env_id: int = 0,
        index: int = 0,
    ):
        if state is None:
            state = ContactStateStore(1, 1)
        self._segment = segment
        self._release_penalty = float(release_penalty)
        self._state = state
        self._slot = (env_id, index)

    @property
    def segment(self) -> Segment:
        return self._segment

    @property
    def release_penalty(self) -> float:
        return self._release_penalty

    def reset(self):
        self._state.in_contact[self._slot] = False
        self._state.had_contact[self._slot] = False

    def begin_step(self):
        self._state.rewarded_this_step[self._slot] = False

    def touch(self, immediate_reward: float, continuous_reward: float) -> tuple[float, float]:
        """
        Register one contact point against this segment.

        Returns the (immediate, continuous) rewards that fired; either may be 0.
        """
        state = self._state
        slot = self._slot
        immediate = 0.0
        continuous = 0.0

        # edge triggered: once per not-touching -> touching transition
        if not state.in_contact[slot]:
            state.in_contact[slot] = True
            state.had_contact[slot] = True
            immediate = immediate_reward

        # several contact points in one step still pay once
        if not state.rewarded_this_step[slot]:
            state.rewarded_this_step[slot] = True
            continuous = continuous_reward

        return immediate, continuous

    def on_contact(self, immediate_reward: float, continuous_reward: float) -> float:
        immediate, continuous = self.touch(immediate_reward, continuous_reward)
        return immediate + continuous

    def on_release(self) -> float:
        """
        Register that the segment stopped touching the target.

        Only a segment that was touching, and has touched since the last reset,
        is penalized.
        """
        state = self._state
        slot = self._slot
        reward = 0.0
        if state.in_contact[slot] and state.had_contact[slot]:
            reward = self._release_penalty
        state.in_contact[slot] = False
        return reward

    def is_in_contact(self) -> bool:
        return bool(self._state.in_contact[self._slot])

    def had_contact(self) -> bool:
        return bool(self._state.had_contact[self._slot])

    def __repr__(self) -> str:
        env_id, index = self._slot
        return (
            f"SegmentContactTracker({self._segment.name!r}, env_id={env_id}, index={index}, "
            f"in_contact={self.is_in_contact()}, had_contact={self.had_contact()})"
        )
