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

from typing import Optional

import numpy as np


class ContactStateStore:
    """
    Contact bits for every (env, segment) pair, as (num_envs, num_segments)
    boolean arrays allocated once.

    in_contact: touching in the most recent physics step
    had_contact: touched at least once since the last reset
    rewarded_this_step: continuous reward already granted in this physics step
    """

    def __init__(self, num_envs: int, num_segments: int):
        shape = (num_envs, num_segments)
        self.in_contact = np.zeros(shape, dtype=bool)
        self.had_contact = np.zeros(shape, dtype=bool)
        self.rewarded_this_step = np.zeros(shape, dtype=bool)

    @property
    def shape(self) -> tuple[int, int]:
        return self.in_contact.shape

    def reset(self, env_mask: Optional[np.ndarray] = None):
        """
        Clear contact history for the masked envs (all envs if mask is None).
        rewarded_this_step is left to begin_step.
        """
        if env_mask is None:
            self.in_contact.fill(False)
            self.had_contact.fill(False)
            return
        assert env_mask.shape == (self.shape[0],), env_mask.shape
        self.in_contact[env_mask] = False
        self.had_contact[env_mask] = False

    def begin_step(self):
        self.rewarded_this_step.fill(False)

    def observation(self) -> np.ndarray:
        return self.in_contact.astype(np.float32)
