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

"""Configuration for the hand / cylinder grasp contact environments"""

from dataclasses import dataclass, field

from handgrasp_envs import registry
from handgrasp_envs.base import ContactEnvCfg
from handgrasp_envs.contact.reward_policy import RewardPolicy
from handgrasp_envs.contact.segment import HAND_SEGMENTS, Segment, SegmentClass

_C = SegmentClass


def _strict_reward_policy() -> RewardPolicy:
    # larger magnitudes, rates per second instead of per 5 seconds
    return RewardPolicy.from_tables(
        immediate={
            _C.BASE_JOINT: 0.15,
            _C.MID_JOINT: 0.10,
            _C.END_JOINT: 0.05,
            _C.THUMB_JOINT: 0.20,
            _C.PALM: 0.25,
        },
        continuous_rate={
            _C.BASE_JOINT: 0.002,
            _C.MID_JOINT: 0.0015,
            _C.END_JOINT: 0.001,
            _C.THUMB_JOINT: 0.0025,
            _C.PALM: 0.003,
        },
        release_penalty=-0.25,
    )


@registry.envcfg("hand-grasp-cylinder")
@dataclass
class HandGraspEnvCfg(ContactEnvCfg):
    """
    Six-segment hand learning to grasp a cylinder.

    Physics reports contacts every 0.02 s; the policy decides every 0.1 s.
    """

    sim_dt: float = 0.02
    ctrl_dt: float = 0.1

    segments: tuple[Segment, ...] = HAND_SEGMENTS
    target_tag: str = "Cylinder"


@registry.envcfg("hand-grasp-cylinder-strict")
@dataclass
class HandGraspStrictEnvCfg(HandGraspEnvCfg):
    reward_policy: RewardPolicy = field(default_factory=_strict_reward_policy)


@registry.envcfg("hand-grasp-cylinder-tips")
@dataclass
class HandGraspTipsEnvCfg(HandGraspEnvCfg):
    segments: tuple[Segment, ...] = (
        Segment("FingerEnd", SegmentClass.END_JOINT),
        Segment("ThumbEnd", SegmentClass.THUMB_JOINT),
        Segment("Palm", SegmentClass.PALM),
    )
