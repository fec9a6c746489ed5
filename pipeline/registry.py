import os
import json
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional
from loguru import logger

from pipeline.errors import ConfigurationError

DEFAULT_REGISTRY_PATH = Path(__file__).resolve().parent / "data" / "registries.json"

@dataclass(frozen=True)
class FragmentRegistry:
    """Curated fragment lists used to classify places.

    Loaded once at start-up and shared read-only by every request.
    All fragments are stored lowercased.
    """
    version: str
    chain_names: FrozenSet[str]
    chain_domains: FrozenSet[str]
    sns_domains: FrozenSet[str]

def _fragments(values: Iterable[Any], field: str) -> FrozenSet[str]:
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ConfigurationError(f"Registry field '{field}' must be a list of strings")
    return frozenset(v.lower() for v in values if v)

def registry_from_dict(data: Dict[str, Any]) -> FragmentRegistry:
    """Build a registry from the parsed JSON document."""
    if not isinstance(data, dict):
        raise ConfigurationError("Registry document must be a JSON object")

    chain = data.get("chain", {})
    if not isinstance(chain, dict):
        raise ConfigurationError("Registry field 'chain' must be an object")

    return FragmentRegistry(
        version=str(data.get("version", "unversioned")),
        chain_names=_fragments(chain.get("names", []), "chain.names"),
        chain_domains=_fragments(chain.get("domains", []), "chain.domains"),
        sns_domains=_fragments(data.get("sns_domains", []), "sns_domains"),
    )

def load_registry(path: Optional[str] = None) -> FragmentRegistry:
    """
    Load the fragment registry from a JSON file.

    Args:
        path: File to read. Defaults to $REGISTRY_JSON, then the bundled pipeline/data/registries.json.

    Returns:
        Immutable FragmentRegistry

    Raises:
        ConfigurationError: if the file is missing or malformed
    """
    registry_path = path or os.getenv("REGISTRY_JSON") or str(DEFAULT_REGISTRY_PATH)

    try:
        with open(registry_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"Registry file not found at {registry_path}")
        raise ConfigurationError(f"Registry file not found: {registry_path}")
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in registry {registry_path}: {e}")
        raise ConfigurationError(f"Invalid registry JSON: {registry_path}")

    registry = registry_from_dict(data)
    logger.info(
        f"Loaded registry {registry.version} from {registry_path}: "
        f"{len(registry.chain_names)} chain names, {len(registry.chain_domains)} chain domains, "
        f"{len(registry.sns_domains)} SNS domains"
    )
    return registry
