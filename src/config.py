"""Runtime configuration for the versions report.

Settings come from, highest precedence first: CLI flags, environment
variables, the config file (YAML or Java ``.properties``), and defaults.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from constants import Constants
from common.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class VersionsConfig:
    """Everything the project walk and the report need."""

    git_home: str
    nexus_url: Optional[str] = None
    check_registry: bool = True
    report_file: Optional[str] = None
    json_file: Optional[str] = None
    extra_projects: Dict[str, List[str]] = field(default_factory=dict)
    registry_timeout: float = Constants.REQUEST_TIMEOUT
    workers: int = Constants.DEFAULT_WORKERS
    config_path: Optional[str] = None


def parse_second_level(value: Any) -> Dict[str, List[str]]:
    """Parse the subproject declaration.

    Accepts the property form ``base[sub1|sub2],base2[sub3]`` or, from YAML,
    a mapping of base project name to a list (or ``|`` separated string) of
    subproject paths.

    Raises:
        ConfigError: the declaration is malformed.
    """
    if value is None:
        return {}
    if isinstance(value, Mapping):
        result: Dict[str, List[str]] = {}
        for base, subs in value.items():
            base = str(base).strip()
            if isinstance(subs, str):
                subs = subs.split("|")
            if not base or not isinstance(subs, (list, tuple)):
                raise ConfigError(f"Invalid {Constants.PROPS_2NDLEVEL} entry for {base!r}")
            result[base] = _clean_subprojects(base, subs)
        return result
    if not isinstance(value, str):
        raise ConfigError(f"{Constants.PROPS_2NDLEVEL} must be a string or a mapping")

    result = {}
    for chunk in value.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if chunk.count("[") != 1 or not chunk.endswith("]"):
            raise ConfigError(
                f"Invalid {Constants.PROPS_2NDLEVEL} entry {chunk!r}; expected baseProject[sub1|sub2]"
            )
        base, subs = chunk[:-1].split("[", 1)
        base = base.strip()
        if not base:
            raise ConfigError(f"Invalid {Constants.PROPS_2NDLEVEL} entry {chunk!r}; missing base project")
        result[base] = _clean_subprojects(base, subs.split("|"))
    return result


def _clean_subprojects(base: str, subs: List[Any]) -> List[str]:
    cleaned = [str(s).strip() for s in subs if str(s).strip()]
    if not cleaned:
        raise ConfigError(f"No subprojects declared for {base!r} in {Constants.PROPS_2NDLEVEL}")
    for sub in cleaned:
        # Subprojects must stay inside their base project directory
        path = PurePosixPath(sub.replace("\\", "/"))
        if path.is_absolute() or ".." in path.parts or os.path.isabs(sub):
            raise ConfigError(
                f"Subproject {sub!r} of {base!r} in {Constants.PROPS_2NDLEVEL} must be a relative "
                "path inside the base project"
            )
    return cleaned


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Nested YAML mappings -> dotted keys, so both file formats share keys.

    The subproject mapping is kept whole since its keys are project names.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping) and dotted != Constants.PROPS_2NDLEVEL:
            flat.update(_flatten(value, dotted + "."))
        else:
            flat[dotted] = value
    return flat


_PROPERTY_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _ends_with_continuation(line: str) -> bool:
    """An odd number of trailing backslashes continues the line."""
    return (len(line) - len(line.rstrip("\\"))) % 2 == 1


def _logical_lines(fh) -> List[str]:
    lines: List[str] = []
    pending: Optional[str] = None
    for raw in fh:
        line = raw.rstrip("\r\n")
        if pending is None:
            line = line.lstrip()
            if not line or line[0] in "#!":
                continue
        else:
            line = pending + line.lstrip()
        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        pending = None
        lines.append(line)
    if pending is not None:
        lines.append(pending)
    return lines


def _split_property(line: str) -> Tuple[str, str]:
    """Split on the first unescaped ``=`` or ``:``."""
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in "=:":
            return line[:i], line[i + 1:]
        i += 1
    return line, ""


def _unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\" or i + 1 == len(text):
            out.append(char)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and len(text) >= i + 6:
            try:
                out.append(chr(int(text[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_PROPERTY_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def load_properties(path: str) -> Dict[str, str]:
    """Read a Java-style ``.properties`` file.

    Supports ``key=value`` and ``key: value`` pairs, ``#``/``!`` comments,
    backslash escapes (``\\:``, ``\\=``, ``\\t``, ``\\uXXXX``...) and lines
    continued with a trailing backslash.
    """
    props: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as fh:
        for line in _logical_lines(fh):
            key, value = _split_property(line)
            props[_unescape(key.strip())] = _unescape(value.strip())
    return props


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML or .properties config file into flat dotted keys.

    Raises:
        ConfigError: the file cannot be read or parsed.
    """
    try:
        if path.lower().endswith(".properties"):
            return load_properties(path)
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return _flatten(data)


def find_config_file(args: Any = None, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Explicit --config, then VERSIONS_CONFIG, then a default file in cwd."""
    environ = os.environ if environ is None else environ
    explicit = getattr(args, "CONFIG", None) or environ.get(Constants.ENV_CONFIG)
    if explicit:
        if not os.path.isfile(explicit):
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit
    for name in Constants.DEFAULT_CONFIG_FILES:
        if os.path.isfile(name):
            return name
    return None


def _as_number(value: Any, key: str, cast):
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return number


def load_config(args: Any = None, environ: Optional[Mapping[str, str]] = None) -> VersionsConfig:
    """Merge CLI arguments, environment and config file into a VersionsConfig.

    Raises:
        ConfigError: a required setting is missing or a value is malformed.
    """
    environ = os.environ if environ is None else environ
    path = find_config_file(args, environ)
    props = load_config_file(path) if path else {}
    if path:
        logger.info("Using configuration from %s", path)

    git_home = getattr(args, "FROM_SRC", None) or environ.get(Constants.ENV_GIT_HOME)
    if not git_home or not str(git_home).strip():
        raise ConfigError(
            f'Could not find environment variable "{Constants.ENV_GIT_HOME}". '
            "Please set the variable to your git directory and try again."
        )

    check_registry = not getattr(args, "NO_REGISTRY", False)
    nexus_url = (
        getattr(args, "NEXUS_URL", None)
        or environ.get(Constants.ENV_NEXUS_URL)
        or props.get(Constants.PROPS_NEXUS)
    )
    if check_registry and (not nexus_url or not str(nexus_url).strip()):
        raise ConfigError(
            f"Cannot have empty {Constants.PROPS_NEXUS}; set it in the config file, "
            f"{Constants.ENV_NEXUS_URL}, --nexus-url, or pass --no-registry."
        )

    timeout = getattr(args, "TIMEOUT", None)
    if timeout is None:
        timeout = props.get(Constants.PROPS_NEXUS_TIMEOUT, Constants.REQUEST_TIMEOUT)
    workers = getattr(args, "WORKERS", None)
    if workers is None:
        workers = props.get(Constants.PROPS_WORKERS, Constants.DEFAULT_WORKERS)

    return VersionsConfig(
        git_home=str(git_home).strip(),
        nexus_url=str(nexus_url).strip() if nexus_url else None,
        check_registry=check_registry,
        report_file=getattr(args, "OUTPUT", None) or props.get(Constants.PROPS_REPORTFILE) or None,
        json_file=getattr(args, "JSON_OUTPUT", None) or props.get(Constants.PROPS_JSONFILE) or None,
        extra_projects=parse_second_level(props.get(Constants.PROPS_2NDLEVEL) or None),
        registry_timeout=_as_number(timeout, Constants.PROPS_NEXUS_TIMEOUT, float),
        workers=_as_number(workers, Constants.PROPS_WORKERS, int),
        config_path=path,
    )
