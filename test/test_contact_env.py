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

import logging

import numpy as np
import pytest

from handgrasp_envs import registry
from handgrasp_envs.contact import ContactEvent, ContactKind, RewardPolicy, SegmentClass

BEGIN = ContactKind.BEGIN
STAY = ContactKind.STAY
END = ContactKind.END


def _policy():
    classes = list(SegmentClass)
    return RewardPolicy.from_tables(
        immediate={c: 0.15 for c in classes},
        continuous_rate={c: 0.0004 for c in classes},
        release_penalty=-0.02,
    )


@pytest.fixture
def env():
    env = registry.make(
        "hand-grasp-cylinder",
        env_cfg_override={"reward_policy": _policy(), "sim_dt": 0.02},
        num_envs=2,
    )
    env.init_state()
    return env


def test_observation_layout(env):
    assert env.segment_names == ("FingerBase", "FingerMiddle", "FingerEnd", "ThumbBase", "ThumbEnd", "Palm")
    assert env.observation_space.shape == (6,)
    state = env.state
    assert state.obs.shape == (2, 6)
    assert not state.obs.any()


def test_scenario_through_env(env):
    state = env.step([("FingerBase", "begin"), ("FingerBase", "stay")])
    assert state.reward[0] == pytest.approx(0.15 + 0.000008)
    assert state.reward[1] == 0.0
    assert state.obs[0].tolist() == [1.0, 0.0, 0.0, 0.0, 0.0, 0.0]

    state = env.step([ContactEvent("FingerBase", STAY)])
    assert state.reward[0] == pytest.approx(0.000008)

    state = env.step([ContactEvent("FingerBase", END)])
    assert state.reward[0] == pytest.approx(-0.02)
    assert state.obs[0, 0] == 0.0

    state = env.step([ContactEvent("FingerBase", END)])
    assert state.reward[0] == 0.0

    assert state.info["steps"].tolist() == [4, 4]
    assert state.info["episode_return"][0] == pytest.approx(0.15 + 2 * 0.000008 - 0.02, rel=1e-5)


def test_reward_terms_breakdown(env):
    state = env.step([ContactEvent("Palm", BEGIN), ContactEvent("ThumbEnd", BEGIN)])
    terms = state.info["reward_terms"]
    assert terms["immediate"][0] == pytest.approx(0.30)
    assert terms["continuous"][0] == pytest.approx(2 * 0.000008)
    assert terms["release"][0] == 0.0

    state = env.step([ContactEvent("Palm", END)])
    terms = state.info["reward_terms"]
    assert terms["immediate"][0] == 0.0
    assert terms["release"][0] == pytest.approx(-0.02)
    assert state.info["num_contacts"].tolist() == [1, 0]


def test_duplicate_points_do_not_multiply_continuous_reward(env):
    steps = 20
    env.step([ContactEvent("Palm", BEGIN)])
    total = 0.0
    for _ in range(steps):
        state = env.step([ContactEvent("Palm", STAY)] * 5)
        total += float(state.reward[0])
    assert total == pytest.approx(steps * 0.0004 * 0.02, rel=1e-5)


def test_explicit_dt(env):
    state = env.step([ContactEvent("Palm", BEGIN)], dt=0.1)
    assert state.info["reward_terms"]["continuous"][0] == pytest.approx(0.0004 * 0.1)


def test_batched_envs_are_independent(env):
    state = env.step([ContactEvent("Palm", BEGIN, env_id=1)])
    assert state.reward[0] == 0.0
    assert state.reward[1] == pytest.approx(0.15 + 0.000008)
    assert env.tracker("Palm", env_id=1).is_in_contact()
    assert not env.tracker("Palm", env_id=0).is_in_contact()


def test_unknown_collider_is_ignored(env, caplog):
    with caplog.at_level(logging.WARNING):
        state = env.step([ContactEvent("Wrist", BEGIN), ContactEvent("Wrist", END)])
        env.step([ContactEvent("Wrist", STAY)])
    assert not state.reward.any()
    assert not env.observe().any()
    assert sum("Wrist" in r.getMessage() for r in caplog.records) == 1


def test_events_for_other_objects_are_ignored(env):
    state = env.step([ContactEvent("Palm", BEGIN, other="Table")])
    assert state.reward[0] == 0.0
    assert not env.tracker("Palm").is_in_contact()

    state = env.step([ContactEvent("Palm", BEGIN, other="Cylinder")])
    assert state.reward[0] == pytest.approx(0.15 + 0.000008)


def test_release_after_other_collider_left(env):
    # two colliders on the same segment: the first exit clears the contact bit
    env.step([ContactEvent("FingerEnd", BEGIN), ContactEvent("FingerEnd", BEGIN)])
    state = env.step([ContactEvent("FingerEnd", STAY), ContactEvent("FingerEnd", END)])
    assert state.reward[0] == pytest.approx(0.000008 - 0.02)
    state = env.step([ContactEvent("FingerEnd", STAY)])
    assert state.reward[0] == pytest.approx(0.15 + 0.000008)


def test_partial_reset(env):
    env.step([ContactEvent("Palm", BEGIN, env_id=0), ContactEvent("Palm", BEGIN, env_id=1)])
    obs = env.reset([1])
    assert obs.shape == (1, 6)
    assert not obs.any()

    state = env.state
    assert state.obs[0, 5] == 1.0
    assert state.info["steps"].tolist() == [1, 0]
    assert state.info["episode_return"][1] == 0.0
    assert state.info["episode_return"][0] > 0.0

    # env 1 is idle again: no penalty for a stray exit
    state = env.step([ContactEvent("Palm", END, env_id=1)])
    assert state.reward[1] == 0.0


def test_reset_with_mask(env):
    env.step([ContactEvent("Palm", BEGIN, env_id=0), ContactEvent("Palm", BEGIN, env_id=1)])
    env.reset(np.array([True, False]))
    assert env.observe()[:, 5].tolist() == [0.0, 1.0]


@pytest.mark.parametrize("env_ids", [[], (), np.array([], dtype=np.int64), np.array([False, False])])
def test_reset_nothing(env, env_ids):
    env.step([ContactEvent("Palm", BEGIN, env_id=0)])
    obs = env.reset(env_ids)
    assert obs.shape == (0, 6)
    assert env.tracker("Palm").is_in_contact()
    assert env.state.info["steps"].tolist() == [1, 1]
    assert env.state.info["episode_return"][0] > 0.0


def test_out_of_range_env_id(env):
    with pytest.raises(IndexError):
        env.step([ContactEvent("Palm", BEGIN, env_id=2)])


def _snapshot(env):
    state = env.state
    return (
        env.observe().copy(),
        env.tracker("Palm").had_contact(),
        state.reward.copy(),
        state.info["episode_return"].copy(),
        state.info["steps"].copy(),
    )


@pytest.mark.parametrize(
    "bad_event, error",
    [
        (ContactEvent("Palm", BEGIN, env_id=5), IndexError),
        (("Palm", "touching"), ValueError),
    ],
)
def test_rejected_step_leaves_state_untouched(env, bad_event, error):
    env.step([ContactEvent("FingerEnd", BEGIN)])
    before = _snapshot(env)

    with pytest.raises(error):
        env.step([ContactEvent("Palm", BEGIN, env_id=0), bad_event])

    after = _snapshot(env)
    np.testing.assert_array_equal(after[0], before[0])
    assert after[1] == before[1] is False
    for b, a in zip(before[2:], after[2:]):
        np.testing.assert_array_equal(a, b)

    # the palm bonus is still available once the step is resent without the bad event
    state = env.step([ContactEvent("Palm", BEGIN, env_id=0)])
    assert state.info["reward_terms"]["immediate"][0] == pytest.approx(0.15)


def test_reward_terms_keep_small_continuous_term(env):
    state = env.step([ContactEvent("Palm", BEGIN)], dt=0.03)
    terms = state.info["reward_terms"]
    assert terms["continuous"].dtype == np.float64
    assert terms["continuous"][0] == 0.0004 * 0.03
    assert state.info["episode_return"][0] == 0.15 + 0.0004 * 0.03


def test_step_before_init_state():
    env = registry.make("hand-grasp-cylinder-tips")
    state = env.step([ContactEvent("ThumbEnd", BEGIN)])
    assert env.segment_names == ("FingerEnd", "ThumbEnd", "Palm")
    assert state.obs.tolist() == [[0.0, 1.0, 0.0]]
    assert state.reward[0] == pytest.approx(0.20 + 0.0025 / 5.0 * env.cfg.sim_dt, rel=1e-5)
