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
import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from handgrasp_envs.base import ABEnv, ContactEnvCfg
from handgrasp_envs.contact.events import ContactEvent
from handgrasp_envs.contact.state import ContactStateStore
from handgrasp_envs.contact.tracker import SegmentContactTracker

logger = logging.getLogger(__name__)

REWARD_TERMS = ("immediate", "continuous", "release")


@dataclass
class NpEnvState:
    obs: np.ndarray
    reward: np.ndarray
    info: dict

    def replace(self, **updates) -> "NpEnvState":
        return dataclasses.replace(self, **updates)

    def validate(self):
        num_envs = self.reward.shape[0]
        assert self.obs.shape[0] == num_envs, self.obs.shape
        assert self.info["episode_return"].shape == (num_envs,), self.info["episode_return"].shape
        for term in REWARD_TERMS:
            assert self.info["reward_terms"][term].shape == (num_envs,), term


class NpContactEnv(ABEnv):
    """
    Drives the segment trackers of a batch of environments through physics steps.

    Per physics step: begin_step on every tracker, then the step's contact
    events in delivery order. Reward deltas are summed into `state.reward`
    (float32) and, per term, into `info["reward_terms"]` (float64). The
    running `info["episode_return"]` accumulates the float64 terms.
    """

    _cfg: ContactEnvCfg
    _state: NpEnvState = None

    def __init__(self, cfg: ContactEnvCfg, num_envs: int = 1):
        self._cfg = cfg
        self._num_envs = num_envs

        segments = tuple(cfg.segments)
        self._segment_names = tuple(segment.name for segment in segments)
        self._store = ContactStateStore(num_envs, len(segments))

        # collider tag -> segment index, resolved once
        self._segment_ids = {name: index for index, name in enumerate(self._segment_names)}
        self._terms = [cfg.reward_policy.lookup(segment.segment_class) for segment in segments]
        self._trackers = [
            [
                SegmentContactTracker(segment, terms.release_penalty, self._store, env_id, index)
                for index, (segment, terms) in enumerate(zip(segments, self._terms))
            ]
            for env_id in range(num_envs)
        ]
        self._unknown_colliders: set[str] = set()

    @property
    def cfg(self) -> ContactEnvCfg:
        """
        Get the environment configuration
        """
        return self._cfg

    @property
    def num_envs(self) -> int:
        return self._num_envs

    @property
    def state(self) -> NpEnvState:
        """
        Get the current environment state
        """
        return self._state

    @property
    def segment_names(self) -> tuple[str, ...]:
        return self._segment_names

    def tracker(self, segment_name: str, env_id: int = 0) -> SegmentContactTracker:
        return self._trackers[env_id][self._segment_ids[segment_name]]

    def observe(self) -> np.ndarray:
        """
        Contact flags as 0.0/1.0, shape (num_envs, num_segments), in segment order.
        """
        return self._store.observation()

    def init_state(self) -> NpEnvState:
        """
        Create a new environment state and reset every env
        """
        obs = np.zeros((self._num_envs, self.observation_space.shape[0]), dtype=np.float32)
        reward = np.zeros((self._num_envs,), dtype=np.float32)
        info = {
            "steps": np.zeros((self._num_envs,), dtype=np.uint64),
            "episode_return": np.zeros((self._num_envs,), dtype=np.float64),
            "reward_terms": {term: np.zeros((self._num_envs,), dtype=np.float64) for term in REWARD_TERMS},
        }
        self._state = NpEnvState(obs, reward, info)
        self.reset()
        self._state.validate()
        return self._state

    def reset(self, env_ids=None) -> np.ndarray:
        """
        Start a new episode for the given envs (index array or boolean mask,
        all envs if None).

        Returns:
            np.ndarray: the observations of the reset envs
        """
        if self._state is None:
            self.init_state()
            return self._state.obs

        mask = self._env_mask(env_ids)
        state = self._state
        if not np.any(mask):
            return state.obs[mask]

        self._store.reset(mask)
        np.putmask(state.info["steps"], mask, 0)
        np.putmask(state.info["episode_return"], mask, 0.0)
        state.obs = self.update_state(state).obs
        return state.obs[mask]

    def _env_mask(self, env_ids) -> np.ndarray:
        """Boolean mask over envs from an index list or boolean mask, all envs if None."""
        if env_ids is None:
            return np.ones((self._num_envs,), dtype=bool)
        env_ids = np.asarray(env_ids)
        if env_ids.dtype == bool:
            assert env_ids.shape == (self._num_envs,), env_ids.shape
            return env_ids.copy()
        mask = np.zeros((self._num_envs,), dtype=bool)
        mask[env_ids.astype(np.intp)] = True
        return mask

    def _check_event(self, event) -> ContactEvent:
        event = ContactEvent.coerce(event)
        if not 0 <= event.env_id < self._num_envs:
            raise IndexError(f"env_id {event.env_id} out of range for {self._num_envs} envs")
        return event

    def _prev_physics_step(self):
        state = self._state
        state.reward.fill(0.0)
        for values in state.info["reward_terms"].values():
            values.fill(0.0)
        self._store.begin_step()

    def _dispatch(self, event: ContactEvent, dt: float):
        if event.other is not None and event.other != self._cfg.target_tag:
            return

        index = self._segment_ids.get(event.collider)
        if index is None:
            if event.collider not in self._unknown_colliders:
                self._unknown_colliders.add(event.collider)
                logger.warning(f"Ignoring contact events for unknown segment '{event.collider}'")
            return

        env_id = event.env_id
        tracker = self._trackers[env_id][index]
        reward_terms = self._state.info["reward_terms"]
        if event.kind.touching:
            terms = self._terms[index]
            immediate, continuous = tracker.touch(terms.immediate, terms.continuous(dt))
            reward_terms["immediate"][env_id] += immediate
            reward_terms["continuous"][env_id] += continuous
            delta = immediate + continuous
        else:
            delta = tracker.on_release()
            reward_terms["release"][env_id] += delta
        self._state.reward[env_id] += delta

    @abc.abstractmethod
    def update_state(self, state: NpEnvState) -> NpEnvState:
        """
        Update the observation and info after the step's events

        Args:
            state (NpEnvState): The environment state to update
        """

    def step(self, events: Iterable = (), dt: Optional[float] = None) -> NpEnvState:
        """
        Process one physics step.

        Args:
            events: ContactEvents (or plain tuples) reported for this step
            dt: elapsed simulation time, cfg.sim_dt if None
        """
        if self._state is None:
            self.init_state()

        dt = self._cfg.sim_dt if dt is None else float(dt)
        # a malformed event rejects the whole step before any state changes
        events = [self._check_event(event) for event in events]
        self._prev_physics_step()
        for event in events:
            self._dispatch(event, dt)

        state = self._state
        reward_terms = state.info["reward_terms"]
        state.info["episode_return"] += sum(reward_terms[term] for term in REWARD_TERMS)
        state.info["steps"] += 1
        self._state = self.update_state(state)
        assert self._state is not None, "update_state must return a valid NpEnvState"
        return self._state
