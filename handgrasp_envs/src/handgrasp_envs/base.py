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

import abc
from dataclasses import dataclass, field

import gymnasium as gym

from handgrasp_envs.contact.reward_policy import RewardPolicy
from handgrasp_envs.contact.segment import HAND_SEGMENTS, Segment, validate_segments


@dataclass
class EnvCfg:
    """
    Config for the contact environment

    """

    sim_dt: float = 0.02
    ctrl_dt: float = 0.02

    @property
    def sim_substeps(self) -> int:
        """
        return the number of physics steps per decision step
        """
        return int(round(self.ctrl_dt / self.sim_dt))

    def validate(self):
        """
        validate the config
        """
        if self.sim_dt <= 0:
            raise ValueError("sim_dt must be positive")
        if self.sim_dt > self.ctrl_dt:
            raise ValueError("sim_dt must be less than or equal to ctrl_dt")


@dataclass
class ContactEnvCfg(EnvCfg):
    """
    Config shared by environments rewarding hand/target contact.

    segments: tracked hand segments, in observation order
    reward_policy: reward constants per segment class
    target_tag: tag of the object whose contacts are rewarded
    """

    segments: tuple[Segment, ...] = HAND_SEGMENTS
    reward_policy: RewardPolicy = field(default_factory=RewardPolicy)
    target_tag: str = "Cylinder"

    def validate(self):
        super().validate()
        validate_segments(self.segments)
        self.reward_policy.validate(self.segments)


class ABEnv(abc.ABC):
    @property
    @abc.abstractmethod
    def num_envs(self) -> int:
        """
        return the size of the env if it is vectorized
        """

    @property
    @abc.abstractmethod
    def cfg(self) -> EnvCfg:
        """
        The configuration of the environment
        """

    @property
    @abc.abstractmethod
    def observation_space(self) -> gym.Space:
        """Observation space"""
