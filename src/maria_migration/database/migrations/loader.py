"""Locate user-defined Migrator subclasses."""

import importlib
import importlib.util
import inspect
from pathlib import Path
from types import ModuleType

from ...utils.logging import ConfigurationError
from .migrator import Migrator


def _load_module_from_file(migrator_file: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(migrator_file.stem, migrator_file)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot load migrator file {migrator_file}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _find_migrator_class(module: ModuleType) -> type[Migrator]:
    """Find the single concrete Migrator subclass defined in ``module``."""
    candidates = [
        obj
        for _name, obj in inspect.getmembers(module, inspect.isclass)
        if issubclass(obj, Migrator)
        and not inspect.isabstract(obj)
        and obj.__module__ == module.__name__
    ]

    if len(candidates) != 1:
        names = ", ".join(c.__name__ for c in candidates) or "none"
        raise ConfigurationError(
            f"Expected exactly one Migrator subclass in {module.__name__}, "
            f"found {names}"
        )
    return candidates[0]


def load_migrator_class(reference: str) -> type[Migrator]:
    """Resolve a migrator reference.

    Args:
        reference: ``package.module:ClassName``, ``package.module`` or a path
            to a ``.py`` file.

    Returns:
        The Migrator subclass.

    Raises:
        ConfigurationError: If the reference cannot be resolved.
    """
    module_name, _, class_name = reference.partition(":")

    try:
        if module_name.endswith(".py"):
            path = Path(module_name).expanduser()
            if not path.exists():
                raise ConfigurationError(f"Migrator file not found: {path}")
            module = _load_module_from_file(path)
        else:
            module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import migrator {reference}: {e}") from e

    if not class_name:
        return _find_migrator_class(module)

    migrator_cls = getattr(module, class_name, None)
    if not (inspect.isclass(migrator_cls) and issubclass(migrator_cls, Migrator)):
        raise ConfigurationError(
            f"{reference} does not name a Migrator subclass",
            context={"reference": reference},
        )
    return migrator_cls
