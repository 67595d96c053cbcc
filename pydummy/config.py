# pydummy/config.py
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os
import importlib.resources as ir

from .errors import ConfigError
from .logconf import configure_logger

# Where the *project-local* config was loaded from (or None).
LAST_CONFIG_PATH: Path | None = None

_log = logging.getLogger("pydummy.config")

_NAMES = ("config.toml", "config.yaml", "config.yml")


# ---------- File discovery helpers ----------


def _first_existing(paths: list[Path]) -> Path | None:
    for p in paths:
        if p.is_file():
            return p
    return None


def _find_project_config(start: Path) -> Path | None:
    """
    Return the nearest '.pydummy/config.{toml,yaml,yml}' walking upward from 'start'.
    """
    cur = start.resolve()
    for p in [cur, *cur.parents]:
        cand = _first_existing([p / ".pydummy" / n for n in _NAMES])
        if cand:
            _log.info("project config: %s", cand)
            return cand
    return None


def _find_user_config() -> Path | None:
    """
    Return the user-level config in precedence order:
      1) $PYDUMMY_CONFIG            (exact path)
      2) $XDG_CONFIG_HOME/pydummy/config.{toml,yaml,yml}
      3) ~/.config/pydummy/config.{toml,yaml,yml}
      4) ~/.pydummy/config.{toml,yaml,yml}
    """
    env_path = os.getenv("PYDUMMY_CONFIG")
    if env_path:
        env_cand = Path(env_path).expanduser()
        if env_cand.is_file():
            _log.info("user config via PYDUMMY_CONFIG=%s", env_cand)
            return env_cand

    xdg_home = os.getenv("XDG_CONFIG_HOME")
    if xdg_home:
        cand = _first_existing([Path(xdg_home) / "pydummy" / n for n in _NAMES])
        if cand:
            _log.info("user config via XDG: %s", cand)
            return cand

    for base in (Path.home() / ".config" / "pydummy", Path.home() / ".pydummy"):
        cand = _first_existing([base / n for n in _NAMES])
        if cand:
            _log.info("user config: %s", cand)
            return cand

    return None


# ---------- Parsers ----------


def _load_toml_text(txt: str) -> Dict[str, Any]:
    try:
        import tomllib  # Python >= 3.11

        return tomllib.loads(txt)
    except ModuleNotFoundError:
        try:
            import tomli  # 3.10

            return tomli.loads(txt)
        except Exception as exc:
            _log.warning("Failed to parse TOML with tomli: %s", exc)
            return {}
    except Exception as exc:
        _log.warning("Failed to parse TOML with tomllib: %s", exc)
        return {}


def _load_yaml_text(txt: str) -> Dict[str, Any]:
    import yaml  # PyYAML

    try:
        data = yaml.safe_load(txt) or {}
    except yaml.YAMLError as exc:
        _log.warning("Failed to parse YAML: %s", exc)
        return {}
    if not isinstance(data, dict):
        _log.warning("YAML config root is not a mapping; ignoring.")
        return {}
    return data


def _parse_config_file(path: Path) -> Dict[str, Any]:
    txt = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return _load_toml_text(txt) or {}
    if suffix in (".yaml", ".yml"):
        return _load_yaml_text(txt) or {}
    _log.warning("Unknown config extension '%s' for %s; ignoring.", suffix, path)
    return {}


# ---------- Merging & coercion ----------


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge two dicts: values in 'b' override 'a'; nested dicts are merged recursively.
    """
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce_types(d: Dict[str, Any]) -> Dict[str, Any]:
    """
    Coerce the known keys so downstream code gets stable types.
      - seed:           int, or None for OS entropy
      - log_level:      upper-case logging level name
      - bare_instances: bool
    """
    out = dict(d)

    if "seed" in out and out["seed"] is not None:
        if isinstance(out["seed"], bool):
            raise ConfigError(f"seed must be an integer, got {out['seed']!r}")
        try:
            out["seed"] = int(out["seed"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"seed must be an integer, got {out['seed']!r}") from exc

    if "log_level" in out and out["log_level"] is not None:
        level = str(out["log_level"]).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"unknown log_level {out['log_level']!r}")
        out["log_level"] = level

    if "bare_instances" in out and not isinstance(out["bare_instances"], bool):
        raw = str(out["bare_instances"]).strip().lower()
        if raw in _TRUE:
            out["bare_instances"] = True
        elif raw in _FALSE:
            out["bare_instances"] = False
        else:
            raise ConfigError(f"bare_instances must be a boolean, got {out['bare_instances']!r}")

    return out


def _effective(section: str, raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compute the effective settings for a section by merging:
      effective = deep_merge(raw['defaults'] or {}, raw[section] or {})
    then coercing types.
    """
    eff = _deep_merge(raw.get("defaults", {}) or {}, raw.get(section, {}) or {})
    eff = _coerce_types(eff)
    _log.info("Effective config for [%s]: %s", section, eff if eff else "{}")
    return eff


# ---------- Loader (layering: embedded < user < project) ----------


def _load_default_config(start: Path | None = None) -> Dict[str, Any]:
    """
    Layered load:
      base = packaged defaults (pydummy/default_config.toml)
      base ← deep-merge user-level config (if any)
      base ← deep-merge nearest project config (if any)
    """
    global LAST_CONFIG_PATH

    base: Dict[str, Any] = {}
    try:
        txt = ir.files("pydummy").joinpath("default_config.toml").read_text(encoding="utf-8")
        base = _load_toml_text(txt) or {}
    except (FileNotFoundError, ModuleNotFoundError) as exc:
        _log.info("No packaged defaults available: %s", exc)

    user_cfg_path = _find_user_config()
    if user_cfg_path:
        try:
            base = _deep_merge(base, _parse_config_file(user_cfg_path))
        except OSError as exc:
            _log.warning("Failed to read user config %s: %s", user_cfg_path, exc)

    proj_cfg_path = _find_project_config((start or Path.cwd()).resolve())
    if proj_cfg_path:
        try:
            base = _deep_merge(base, _parse_config_file(proj_cfg_path))
        except OSError as exc:
            _log.warning("Failed to read project config %s: %s", proj_cfg_path, exc)
        LAST_CONFIG_PATH = proj_cfg_path
    else:
        LAST_CONFIG_PATH = None

    return base


def get_effective_config(section: str, start: Path | None = None) -> Dict[str, Any]:
    """
    Return the effective config dict for a section ("populate", "compare"),
    i.e. merge [defaults] -> [section] from the layered configuration
    (embedded < user < project), then coerce types.

    Raises
    ------
    ConfigError
        If a known key holds a value of the wrong type.
    """
    raw = _load_default_config(start)
    if not raw:
        _log.info("get_effective_config(%s): no config found.", section)
        return {}
    return _effective(section, raw)


# ---------- Applying settings ----------


@dataclass(frozen=True)
class Settings:
    seed: Optional[int] = None
    log_level: str = "WARNING"
    bare_instances: bool = True


def configure(start: Path | None = None) -> Settings:
    """
    Load the [populate] settings and apply them to the process:
    log level on the 'pydummy' logger, seed of the shared random source,
    and the default construction service.
    """
    from .populate import Constructor, set_default_constructor
    from .random_source import reseed

    eff = get_effective_config("populate", start)
    settings = Settings(
        seed=eff.get("seed"),
        log_level=eff.get("log_level", Settings.log_level),
        bare_instances=eff.get("bare_instances", Settings.bare_instances),
    )
    configure_logger(settings.log_level)
    reseed(settings.seed)
    set_default_constructor(Constructor(bare_instances=settings.bare_instances))
    _log.info("configured: %s", settings)
    return settings
