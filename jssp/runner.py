"""Config-driven batch run: load an instance, solve it with each requested
rule, then persist exports and Gantt charts.

Kept apart from ``main.py`` so the whole flow can be driven from tests or a
notebook with a plain dict instead of a config file.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .models import ProblemInstance, ScheduleResult
from .parser import generate_simple_problem, load_instance
from .rules import SchedulingAlgorithm, resolve_rule
from .serializer import export_solution
from .solver import Solver, compare_solutions
from .visualization import plot_gantt

logger = logging.getLogger("jssp.runner")

EXPORT_SUFFIXES = {"json": ".json", "text": ".txt"}
EXPORT_FORMATS = tuple(EXPORT_SUFFIXES)
KNOWN_KEYS = {
    "instance",
    "generator",
    "algorithms",
    "compare",
    "output_dir",
    "export",
    "gantt",
    "log_level",
}


@dataclass(frozen=True)
class RunnerConfig:
    """Validated run configuration.

    Exactly one of ``instance`` (path to a text instance) and ``generator``
    (currently only ``"simple"``) is set.
    """

    instance: Optional[str]
    generator: Optional[str]
    algorithms: tuple[str, ...] = (SchedulingAlgorithm.FIFO.value,)
    compare: bool = False
    output_dir: str = "results"
    export: tuple[str, ...] = ()
    gantt: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "RunnerConfig":
        """Build a config from a parsed YAML/JSON mapping.

        Raises:
            ValueError: On unknown keys, a missing or duplicated instance
                source, unknown algorithms or export formats.
        """
        unknown = set(cfg) - KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        instance = cfg.get("instance")
        generator = cfg.get("generator")
        if bool(instance) == bool(generator):
            raise ValueError("Set exactly one of 'instance' or 'generator' in config")
        if generator is not None and generator != "simple":
            raise ValueError(f"Unknown generator: {generator!r}")

        algorithms = cfg.get("algorithms") or [SchedulingAlgorithm.FIFO.value]
        if isinstance(algorithms, str):
            algorithms = [algorithms]
        names = []
        for name in algorithms:
            resolve_rule(str(name))  # raises UnknownRuleError (a ValueError)
            names.append(str(name).strip().lower())

        export = cfg.get("export") or []
        if isinstance(export, str):
            export = [export]
        for fmt in export:
            if fmt not in EXPORT_FORMATS:
                raise ValueError(f"Unknown export format: {fmt!r}")

        compare = bool(cfg.get("compare", False))
        if compare and len(names) < 2:
            raise ValueError("'compare' needs at least two algorithms")

        return cls(
            instance=str(instance) if instance else None,
            generator=generator,
            algorithms=tuple(names),
            compare=compare,
            output_dir=str(cfg.get("output_dir", "results")),
            export=tuple(export),
            gantt=bool(cfg.get("gantt", False)),
            log_level=str(cfg.get("log_level", "INFO")),
        )


def load_config(config_file: str) -> dict:
    """Load configuration from a YAML (``.yml``/``.yaml``) or JSON file."""
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _free_path(path: str) -> str:
    """Return ``path``, or the first ``<stem>_<n><ext>`` not yet on disk."""
    if not os.path.exists(path):
        return path
    stem, ext = os.path.splitext(path)
    for n in itertools.count(1):
        candidate = f"{stem}_{n}{ext}"
        if not os.path.exists(candidate):
            return candidate


def _load_problem(config: RunnerConfig) -> tuple[ProblemInstance, str]:
    if config.instance:
        problem = load_instance(config.instance)
        data_name = os.path.basename(config.instance).split(".")[0]
    else:
        problem = generate_simple_problem()
        data_name = "generated_simple"
    return problem, data_name


def run(config: RunnerConfig) -> Dict[str, ScheduleResult]:
    """Solve the configured instance with every requested rule.

    Artefacts land in ``<output_dir>/<instance name>/`` as
    ``<rule>.json``, ``<rule>.txt`` and ``gantt_<rule>.png`` depending on the
    configuration. A name already taken on disk gets a ``_1``, ``_2``, ...
    suffix instead of being overwritten.

    Returns:
        Results keyed by rule name, in configuration order.
    """
    problem, data_name = _load_problem(config)
    logger.info(
        "Instance: %s jobs=%d machines=%d ops=%d",
        data_name,
        problem.num_jobs,
        problem.num_machines,
        problem.total_operations,
    )
    out_dir = os.path.join(config.output_dir, data_name)
    if config.export or config.gantt:
        os.makedirs(out_dir, exist_ok=True)

    solver = Solver()
    results: Dict[str, ScheduleResult] = {}
    for name in config.algorithms:
        solver.set_algorithm(name)
        result = solver.solve(problem)
        results[name] = result
        for fmt in config.export:
            target = os.path.join(out_dir, f"{name}{EXPORT_SUFFIXES[fmt]}")
            export_solution(result, _free_path(target))
        if config.gantt:
            plot_gantt(result, save_path=_free_path(os.path.join(out_dir, f"gantt_{name}.png")))

    if config.compare:
        first, second = config.algorithms[0], config.algorithms[1]
        compare_solutions(
            results[first],
            results[second],
            name1=first.upper(),
            name2=second.upper(),
        )
    return results
