"""Various helper functions that are used across multiple modules."""

from __future__ import annotations

# Standard Library Imports
import json
from json import JSONEncoder

# Third Party Imports
import numpy as np

# Local Imports
from .logger import odcovLogError


class NumpyArrayEncoder(JSONEncoder):
    """Handles serialization of numpy arrays and scalars."""

    def default(self, obj):
        """Serializes a numpy object and returns it as a json-compatible type.

        Args:
            obj (np.ndarray): Numpy array you wish to serialize

        Returns:
            list, Any: Serialized json.
        """
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        return JSONEncoder.default(self, obj)


def ndArrayToString(obj: np.ndarray) -> str:
    """Converts an instance of :class:`np.ndarray` to a json string."""
    return json.dumps(obj, cls=NumpyArrayEncoder)


def stringToNdarray(json_string: str) -> np.ndarray:
    """Converts a serialized json string to a float :class:`np.ndarray`."""
    return np.array(json.loads(json_string), dtype=float)


def loadJSONFile(file_name):
    """Load in a JSON file into a Python dictionary.

    Args:
        file_name (``str``): name of JSON file to load

    Raises:
        ``FileNotFoundError``: helps with debugging bad filenames
        ``json.decoder.JSONDecodeError``: error parsing JSON file (bad syntax)
        ``IOError``: valid JSON file is empty

    Returns:
        ``dict``: documents loaded from the JSON file
    """
    try:
        with open(file_name, encoding="utf-8") as input_file:
            json_data = json.load(input_file)
    except FileNotFoundError:
        odcovLogError(f"Could not find JSON file: {file_name}")
        raise
    except json.decoder.JSONDecodeError:
        odcovLogError(f"Decoding error reading JSON file: {file_name}")
        raise

    if not json_data:
        msg = f"Empty JSON file: {file_name}"
        odcovLogError(msg)
        raise OSError(msg)

    return json_data
