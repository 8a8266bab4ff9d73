# topicnet/__init__.py
import importlib
from types import ModuleType

__version__ = "1.0.0"

__all__ = [
    "core",
    "corpus",
    "dataframe_schema",
    "exceptions",
    "utils",
    "model_selection",
    "model_evaluation",
    "distributions",
    "association",
    "temporal_network",
    "__version__",
]

# Map attribute -> submodule for lazy loading
_lazy_submodules = {
    "core": "topicnet.core",
    "corpus": "topicnet.corpus",
    "dataframe_schema": "topicnet.dataframe_schema",
    "exceptions": "topicnet.exceptions",
    "utils": "topicnet.utils",
    "model_selection": "topicnet.model_selection",
    "model_evaluation": "topicnet.model_evaluation",
    "distributions": "topicnet.distributions",
    "association": "topicnet.association",
    "temporal_network": "topicnet.temporal_network",
}

def __getattr__(name: str) -> ModuleType:
    if name in _lazy_submodules:
        module = importlib.import_module(_lazy_submodules[name])
        globals()[name] = module  # cache for future
        return module
    raise AttributeError(f"module 'topicnet' has no attribute '{name}'")

def __dir__():
    return sorted(list(globals().keys()) + list(_lazy_submodules.keys()))
