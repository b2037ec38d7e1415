#!/usr/bin/env python3
"""
Profiles Package

Dynamic chain profile registration and lookup (descriptor-only).

Descriptor source resolution rules when duplicates exist (same basename):
- Prefer JSON (.json) over YAML (.yaml/.yml).
- YAML files are only considered if PyYAML is installed.
- When multiple files exist for the same basename, a warning is logged and the
  selected file path is recorded for display in the CLI.
"""

from rpc_health.core.profile_models import from_dict as profile_from_dict, ChainProfile
import os
import json
from typing import Dict, List, Optional
import re
import logging

# Optional YAML support for descriptors (.yaml/.yml)
try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore

# Selected profiles (after resolving duplicates)
PROFILE_REGISTRY: Dict[str, ChainProfile] = {}

# Track descriptor source paths and duplicates for transparency in CLI
PROFILE_SOURCES: Dict[str, Dict] = {}
_DUPLICATE_WARNINGS: List[str] = []

PROFILE_DIRS_ENV = 'RPC_HEALTH_PROFILE_DIRS'

logger = logging.getLogger(__name__)


def _search_dirs() -> List[str]:
    """Package descriptors first, then any extra directories from the environment."""
    dirs = []
    desc_dir = os.path.join(os.path.dirname(__file__), 'descriptors')
    if os.path.isdir(desc_dir):
        dirs.append(desc_dir)
    extra = os.environ.get(PROFILE_DIRS_ENV)
    if extra:
        for d in extra.split(os.path.pathsep):
            d = d.strip()
            if d and os.path.isdir(d):
                dirs.append(d)
    return dirs


def _parse_descriptor(path: str) -> Optional[ChainProfile]:
    try:
        if path.endswith('.json'):
            with open(path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        elif path.endswith(('.yaml', '.yml')) and yaml is not None:
            with open(path, 'r', encoding='utf-8') as fh:
                data = yaml.safe_load(fh)
        else:
            return None
        if not isinstance(data, dict):
            logger.warning(f"Profile descriptor is not a mapping: {os.path.basename(path)}")
            return None
        return profile_from_dict(data)
    except Exception as e:
        # Make descriptor failures visible to help diagnose why a profile is missing
        logger.warning(f"Failed to parse profile descriptor '{os.path.basename(path)}': {e}")
        return None


def load_profiles(search_dirs: Optional[List[str]] = None) -> Dict[str, ChainProfile]:
    """(Re)load every profile descriptor into the registry and return it."""
    PROFILE_REGISTRY.clear()
    PROFILE_SOURCES.clear()
    del _DUPLICATE_WARNINGS[:]

    groups: Dict[str, List] = {}
    for d in (search_dirs if search_dirs is not None else _search_dirs()):
        try:
            files = [f for f in os.listdir(d) if f.lower().endswith(('.json', '.yaml', '.yml'))]
        except OSError:
            files = []
        for fname in files:
            base, ext = os.path.splitext(fname)
            groups.setdefault(base, []).append((os.path.join(d, fname), ext.lower()))

    # Resolve per-group selection with priority: .json > .yaml/.yml
    for base, abs_candidates in sorted(groups.items()):
        json_candidates = [p for p, ext in abs_candidates if ext == '.json']
        yaml_candidates = [p for p, ext in abs_candidates if ext in ('.yaml', '.yml')]

        if json_candidates:
            selected_path = sorted(json_candidates)[0]
        elif yaml is not None and yaml_candidates:
            selected_path = sorted(yaml_candidates)[0]
        else:
            if yaml_candidates:
                warning = (
                    f"Profile '{base}' has only YAML candidates but PyYAML is not installed; "
                    f"files ignored: {', '.join(sorted(os.path.basename(p) for p in yaml_candidates))}"
                )
                _DUPLICATE_WARNINGS.append(warning)
                logger.warning(warning)
            continue

        if len(abs_candidates) > 1:
            warning = (
                f"Multiple descriptor files for profile '{base}': "
                f"{', '.join(sorted(os.path.basename(p) for p, _ in abs_candidates))}. "
                f"Selected '{os.path.basename(selected_path)}' (JSON preferred)."
            )
            _DUPLICATE_WARNINGS.append(warning)
            logger.warning(warning)

        profile = _parse_descriptor(selected_path)
        if not profile:
            continue

        key = profile.profile_key
        PROFILE_REGISTRY[key] = profile
        PROFILE_SOURCES[key] = {
            'selected_path': selected_path,
            'selected_file': os.path.basename(selected_path),
            'candidates': [p for p, _ in abs_candidates],
        }

    _NAME_INDEX.clear()
    _NAME_INDEX.update(_build_name_index())
    logger.debug(f"Loaded {len(PROFILE_REGISTRY)} chain profiles")
    return PROFILE_REGISTRY


# --- Flexible name handling -------------------------------------------------

def _normalize_name(name: str) -> str:
    """Normalize user-provided profile names for flexible matching."""
    return re.sub(r"[^a-z0-9]", "", name.lower())


def _build_name_index() -> Dict[str, str]:
    """Build a mapping of normalized names to canonical profile keys."""
    index = {}
    for key, profile in PROFILE_REGISTRY.items():
        index[_normalize_name(key)] = key
        index[_normalize_name(profile.display_name)] = key
        for alias in profile.aliases:
            index[_normalize_name(alias)] = key
    return index


_NAME_INDEX: Dict[str, str] = {}


def resolve_profile_key(name_or_key) -> Optional[str]:
    """Resolve a user-provided profile identifier (key, display name, alias or chain id)."""
    if name_or_key is None or name_or_key == "":
        return None
    if isinstance(name_or_key, int):
        return profile_for_chain_id(name_or_key)
    if name_or_key in PROFILE_REGISTRY:
        return name_or_key
    return _NAME_INDEX.get(_normalize_name(str(name_or_key)))


def get_profile(name_or_key) -> Optional[ChainProfile]:
    canonical = resolve_profile_key(name_or_key)
    return PROFILE_REGISTRY.get(canonical) if canonical else None


def profile_for_chain_id(chain_id: int) -> Optional[str]:
    """Profile key whose descriptor lists the given chain id."""
    for key, profile in PROFILE_REGISTRY.items():
        if chain_id in profile.chain_ids:
            return key
    return None


def get_profile_source(name_or_key) -> Optional[Dict]:
    """Return descriptor source information for a given profile (accepts aliases)."""
    canonical = resolve_profile_key(name_or_key)
    return PROFILE_SOURCES.get(canonical) if canonical else None


def get_duplicate_warnings() -> List[str]:
    """Expose any duplicate/selection warnings captured during descriptor loading."""
    return list(_DUPLICATE_WARNINGS)


load_profiles()
