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

import gymnasium as gym
import numpy as np

from handgrasp_envs import registry
from handgrasp_envs.np.env import NpContactEnv, NpEnvState

from .cfg import HandGraspEnvCfg


@registry.env("hand-grasp-cylinder", sim_backend="np")
@registry.env("hand-grasp-cylinder-strict", sim_backend="np")
@registry.env("hand-grasp-cylinder-tips", sim_backend="np")
class HandGraspEnv(NpContactEnv):
    """
    Contact rewards for a hand grasping a cylinder.

    Observation space: one 0.0/1.0 contact flag per configured segment, in
    `cfg.segments` order (FingerBase, FingerMiddle, FingerEnd, ThumbBase,
    ThumbEnd, Palm for the default hand).
    """

    _cfg: HandGraspEnvCfg

    def __init__(self, cfg: HandGraspEnvCfg, num_envs: int = 1):
        super().__init__(cfg, num_envs=num_envs)
        num_segments = len(self.segment_names)
        self._observation_space = gym.spaces.Box(0.0, 1.0, (num_segments,), dtype=np.float32)

    @property
    def observation_space(self):
        return self._observation_space

    def update_state(self, state: NpEnvState) -> NpEnvState:
        obs = self.observe()
        assert obs.shape == (self._num_envs, len(self.segment_names))

        state.obs = obs
        state.info["num_contacts"] = obs.sum(axis=1).astype(np.int32)
        return state
