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
Feed a contact env with contact events and log the rewards it produces.

Without --trace, contacts are sampled from a per-segment random touch/release
process. With --trace, events are read from a JSON-lines file, one event per
line:

    {"step": 0, "collider": "Palm", "kind": "begin", "other": "Cylinder", "env_id": 0}

`step` counts physics steps. Lines may come in any order; events of one step
keep their file order.
"""

import collections
import json
import logging

import numpy as np
from absl import app, flags

from handgrasp_envs import registry
from handgrasp_envs.contact.events import ContactEvent, ContactKind
from handgrasp_envs.np.env import REWARD_TERMS, NpContactEnv

logger = logging.getLogger(__name__)

_ENV = flags.DEFINE_string("env", "hand-grasp-cylinder", "The env to replay contacts into")
_SIM_BACKEND = flags.DEFINE_string("sim-backend", None, "The simulation backend to use.")
_NUM_ENVS = flags.DEFINE_integer("num-envs", 1, "Number of parallel environments.")
_STEPS = flags.DEFINE_integer("steps", 100, "Number of decision steps to run.")
_TRACE = flags.DEFINE_string("trace", None, "JSON-lines contact trace to replay instead of random contacts.")
_TOUCH_PROB = flags.DEFINE_float("touch-prob", 0.05, "Per physics step probability that a free segment touches.")
_RELEASE_PROB = flags.DEFINE_float("release-prob", 0.02, "Per physics step probability that a segment lets go.")
_MAX_POINTS = flags.DEFINE_integer("max-points", 3, "Max contact points reported per touching segment and step.")
_SEED = flags.DEFINE_integer("seed", None, "Random seed for reproducibility")


class RandomContactSource:
    """
    Random touch/release process per (env, segment). Touching segments report
    1..max_points duplicate contact points per physics step.
    """

    def __init__(self, env: NpContactEnv, touch_prob: float, release_prob: float, max_points: int, seed=None):
        self._names = env.segment_names
        self._target = env.cfg.target_tag
        self._touch_prob = touch_prob
        self._release_prob = release_prob
        self._max_points = max(1, max_points)
        self._rng = np.random.default_rng(seed)
        self._touching = np.zeros((env.num_envs, len(self._names)), dtype=bool)

    def events(self, step: int) -> list[ContactEvent]:
        rand = self._rng.uniform(size=self._touching.shape)
        begin = ~self._touching & (rand < self._touch_prob)
        end = self._touching & (rand < self._release_prob)
        stay = self._touching & ~end

        events = []
        for env_id, index in zip(*np.nonzero(begin | stay)):
            kind = ContactKind.BEGIN if begin[env_id, index] else ContactKind.STAY
            points = int(self._rng.integers(1, self._max_points + 1))
            events.extend([ContactEvent(self._names[index], kind, self._target, int(env_id))] * points)
        for env_id, index in zip(*np.nonzero(end)):
            events.append(ContactEvent(self._names[index], ContactKind.END, self._target, int(env_id)))

        self._touching = (self._touching | begin) & ~end
        return events


class TraceContactSource:
    def __init__(self, path: str):
        with open(path) as f:
            records = [json.loads(line) for line in f if line.strip()]
        self._by_step = collections.defaultdict(list)
        for r in records:
            event = ContactEvent(r["collider"], r["kind"], r.get("other"), int(r.get("env_id", 0)))
            self._by_step[int(r["step"])].append(event)
        logger.info(f"Loaded {len(records)} contact events from {path}")

    def events(self, step: int) -> list[ContactEvent]:
        return self._by_step.get(step, [])


def main(argv):
    env = registry.make(_ENV.value, sim_backend=_SIM_BACKEND.value, num_envs=_NUM_ENVS.value)
    assert isinstance(env, NpContactEnv)

    if _TRACE.value:
        source = TraceContactSource(_TRACE.value)
    else:
        source = RandomContactSource(
            env,
            touch_prob=_TOUCH_PROB.value,
            release_prob=_RELEASE_PROB.value,
            max_points=_MAX_POINTS.value,
            seed=_SEED.value,
        )

    env.init_state()
    substeps = env.cfg.sim_substeps
    physics_step = 0
    for decision_step in range(_STEPS.value):
        reward = np.zeros((env.num_envs,), dtype=np.float64)
        terms = {term: 0.0 for term in REWARD_TERMS}
        for _ in range(substeps):
            state = env.step(source.events(physics_step))
            physics_step += 1
            reward += state.reward
            for term in REWARD_TERMS:
                terms[term] += float(state.info["reward_terms"][term].sum())

        logger.info(
            f"step {decision_step}: mean reward {reward.mean():.6f} "
            + " ".join(f"{term}={value:.6f}" for term, value in terms.items())
            + f" contacts={env.observe().mean(axis=0).round(2).tolist()}"
        )

    for env_id, episode_return in enumerate(env.state.info["episode_return"]):
        logger.info(f"env {env_id}: episode return {episode_return:.6f}")


if __name__ == "__main__":
    app.run(main)
