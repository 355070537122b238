from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from hydrotopo.core.models.network import Network

logger = logging.getLogger(__name__)


def _records(payload: Any) -> List[Dict[str, Any]]:
    """
    Accepts a bare list of component records or {"components": [...]}.
    """
    if isinstance(payload, dict):
        payload = payload.get("components")
    if not isinstance(payload, list):
        raise ValueError("JSON topology must be a list of components or an object with a 'components' list")
    for i, rec in enumerate(payload):
        if not isinstance(rec, dict):
            raise ValueError(f"Component #{i} is not an object: {rec!r}")
    return payload


def network_from_json(text: str) -> Network:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON topology: {e}") from e
    return Network.from_records(_records(payload))


def load_network_from_json(path: Union[str, Path]) -> Network:
    net = network_from_json(Path(path).read_text(encoding="utf-8"))
    logger.info("Loaded %d components from %s", len(net), path)
    return net


def dump_network_json(network: Network, path: Union[str, Path]) -> None:
    Path(path).write_text(json.dumps(network.to_records(), indent=2), encoding="utf-8")
