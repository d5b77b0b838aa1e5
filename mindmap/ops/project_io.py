"""Mind map import (JSON documents chosen by the user).

Files written by the JSON exporter read back here unchanged.
"""

import json
import logging

from ..errors import ImportFormatError
from ..graph_editor.graph_model import GraphStore

log = logging.getLogger(__name__)


def read_mindmap(path: str) -> dict:
    """Read and validate a mind map JSON document.

    Returns the raw {nodes, connections} dict.  Raises ImportFormatError if
    the file is JSON but not a mind map; raises on I/O or parse errors.
    """
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get('nodes'), list):
        raise ImportFormatError(
            f"{path} is not a mind map file (expected an object with a 'nodes' list)"
        )
    if not isinstance(data.get('connections', []), list):
        raise ImportFormatError(f"{path}: 'connections' must be a list")
    return data


def import_mindmap(store: GraphStore, path: str):
    """Replace the store's contents with the mind map at path."""
    data = read_mindmap(path)
    try:
        store.load_dict(data, source='import')
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ImportFormatError(f"{path}: malformed node or connection ({e})") from e
    log.info("Imported %d nodes, %d connections from %s",
             len(store.nodes), len(store.connections), path)
