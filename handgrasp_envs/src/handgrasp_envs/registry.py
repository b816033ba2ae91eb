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
Name -> (contact env config, env class per backend) registry.

Configs are registered first with `@envcfg(name)`; env classes then attach to
one or more config names with `@env(name, sim_backend)`. `make` builds the
config, applies overrides, validates the segment topology and reward policy
against each other, and instantiates the env.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from handgrasp_envs.base import ABEnv, EnvCfg

logger = logging.getLogger(__name__)

TEnvCfg = TypeVar("TEnvCfg", bound=EnvCfg)
TEnv = TypeVar("TEnv", bound=ABEnv)

SIM_BACKENDS = ("np",)


@dataclass
class EnvMeta:
    env_cfg_cls: Type[EnvCfg]
    # env classes by backend, first registered is the default
    backends: Dict[str, Type[ABEnv]] = field(default_factory=dict)


_envs: Dict[str, EnvMeta] = {}


def _meta(name: str) -> EnvMeta:
    try:
        return _envs[name]
    except KeyError:
        raise ValueError(f"Environment '{name}' is not registered.") from None


def contains(name: str) -> bool:
    return name in _envs


def register_env_config(name: str, env_cfg_cls: Type[EnvCfg]):
    if name in _envs:
        raise ValueError(f"Environment '{name}' is already registered.")
    _envs[name] = EnvMeta(env_cfg_cls)


def register_env(name: str, env_cls: Type[ABEnv], sim_backend: str):
    if sim_backend not in SIM_BACKENDS:
        raise ValueError(f"Unsupported simulation backend: {sim_backend}. Only 'np' is supported yet.")
    if name not in _envs:
        raise ValueError(f"Environment '{name}' is not registered. Please register the config first.")
    backends = _envs[name].backends
    if sim_backend in backends:
        raise ValueError(f"Environment '{name}' with sim backend '{sim_backend}' is already registered.")
    backends[sim_backend] = env_cls


def envcfg(name: str) -> Callable[[Type[TEnvCfg]], Type[TEnvCfg]]:
    """Class decorator form of `register_env_config`."""

    def decorator(cls: Type[TEnvCfg]) -> Type[TEnvCfg]:
        register_env_config(name, cls)
        return cls

    return decorator


def env(name: str, sim_backend: str) -> Callable[[Type[TEnv]], Type[TEnv]]:
    """Class decorator form of `register_env`; stack it to serve several configs."""

    def decorator(cls: Type[TEnv]) -> Type[TEnv]:
        register_env(name, cls, sim_backend)
        return cls

    return decorator


def make_cfg(name: str, env_cfg_override: Optional[Dict[str, Any]] = None) -> EnvCfg:
    """
    Build and validate the config registered under `name`.

    Overrides replace whole attributes, so a reward policy or a segment
    topology can be swapped without subclassing the config.
    """
    env_cfg = _meta(name).env_cfg_cls()
    for key, value in (env_cfg_override or {}).items():
        if not hasattr(env_cfg, key):
            raise ValueError(f"Config class '{type(env_cfg).__name__}' has no attribute '{key}'")
        setattr(env_cfg, key, value)
    env_cfg.validate()
    return env_cfg


def make(
    name: str,
    sim_backend: Optional[str] = None,
    env_cfg_override: Optional[Dict[str, Any]] = None,
    num_envs: int = 1,
) -> ABEnv:
    """
    Create a contact environment by name.

    Args:
        name: Environment name
        sim_backend: "np", or None for the first registered backend
        env_cfg_override: attribute overrides applied to the config
        num_envs: number of batched environments
    """
    env_cfg = make_cfg(name, env_cfg_override)
    backends = _meta(name).backends
    if not backends:
        raise ValueError(f"Environment '{name}' does not support any simulation backend.")
    sim_backend = sim_backend or next(iter(backends))
    if sim_backend not in backends:
        raise ValueError(f"Environment '{name}' does not support simulation backend '{sim_backend}'.")

    env_cls = backends[sim_backend]
    logger.info(f"Creating env '{name}' ({env_cls.__name__}, backend '{sim_backend}', num_envs={num_envs})")
    return env_cls(env_cfg, num_envs=num_envs)


def list_registered_envs() -> Dict[str, Dict[str, Any]]:
    return {
        name: {"config_class": meta.env_cfg_cls.__name__, "available_backends": list(meta.backends)}
        for name, meta in _envs.items()
    }
