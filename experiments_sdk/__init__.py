"""
experiments_sdk
─────────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from experiments_sdk.tier0_core.logging import get_logger, bind_context, clear_context
from experiments_sdk.tier0_core.errors import (
    ExperimentsError,
    ValidationError,
    ConfigurationError,
    TrackingError,
)
from experiments_sdk.tier0_core.config import get_config, ExperimentsConfig
from experiments_sdk.tier0_core.tasks import BackgroundTasks, get_background_tasks

from experiments_sdk.tier1_runtime.sampling import Sampler, get_sampler, set_sampler
from experiments_sdk.tier1_runtime.validate import validate_input
from experiments_sdk.tier1_runtime.serialize import GroupCodec, GroupListCodec

from experiments_sdk.tier2_reliability.storage import (
    KeyValueStorage,
    MemoryStorage,
    RedisStorage,
    get_browser_storage,
    get_tab_storage,
)
from experiments_sdk.tier2_reliability.cache import TieredAssignmentStore

from experiments_sdk.tier3_platform.experiments import (
    AbExperiment,
    MultivariateExperiment,
    load_definitions,
    select_ab_group,
    select_multivariate_groups,
)
from experiments_sdk.tier3_platform.tracking import Tracker, MockTracker, get_tracker
from experiments_sdk.tier3_platform.predicates import (
    EvaluationContext,
    Predicate,
    And,
    Contains,
    Variable,
)
from experiments_sdk.tier3_platform.rules import Rule, PredicateBuilder
from experiments_sdk.tier3_platform.runner import ExperimentRunner
from experiments_sdk.tier3_platform.extension import (
    ExperimentsExtension,
    ExtensionServices,
    create_experiments_extension,
)
from experiments_sdk._registry import create_extension, register_extension

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger", "bind_context", "clear_context",
    # errors
    "ExperimentsError", "ValidationError", "ConfigurationError", "TrackingError",
    # config
    "get_config", "ExperimentsConfig",
    # tasks
    "BackgroundTasks", "get_background_tasks",
    # sampling
    "Sampler", "get_sampler", "set_sampler",
    # validate
    "validate_input",
    # serialize
    "GroupCodec", "GroupListCodec",
    # storage
    "KeyValueStorage", "MemoryStorage", "RedisStorage",
    "get_browser_storage", "get_tab_storage",
    # cache
    "TieredAssignmentStore",
    # experiments
    "AbExperiment", "MultivariateExperiment", "load_definitions",
    "select_ab_group", "select_multivariate_groups",
    # tracking
    "Tracker", "MockTracker", "get_tracker",
    # predicates
    "EvaluationContext", "Predicate", "And", "Contains", "Variable",
    # rules
    "Rule", "PredicateBuilder",
    # runner
    "ExperimentRunner",
    # extension
    "ExperimentsExtension", "ExtensionServices", "create_experiments_extension",
    # registry
    "create_extension", "register_extension",
]
