#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

import os
import logging

logger = logging.getLogger(__name__)

MAX_NUMBERED_VARIANTS = 100


def generate_output_filename(base_name: str, directory: str = "") -> str:
    """
    Generates an output HTML filename and reserves it by creating an empty file.

    Strategy:
    1. Drop a trailing .html from base_name (case-insensitive)
    2. Append " map.html"
    3. If the file exists, try " map (1).html", " map (2).html", etc.
    4. Stop after MAX_NUMBERED_VARIANTS attempts
    5. Use exclusive open (`open(path, 'x')`) so the name is reserved atomically

    Args:
        base_name: Base name for the map, e.g. "Soho to Shoreditch"
        directory: Directory to create the file in (default: current directory)

    Returns:
        Filename that has been created as an empty file

    Raises:
        RuntimeError: If no available filename is found
        ValueError: If the file cannot be created (permissions, invalid name)
    """
    if base_name.lower().endswith(".html"):
        base_name = base_name[:-5]

    base_output = base_name + " map"
    candidates = [os.path.join(directory, base_output + ".html")] + [
        os.path.join(directory, f"{base_output} ({i}).html")
        for i in range(1, MAX_NUMBERED_VARIANTS + 1)
    ]

    for candidate in candidates:
        try:
            with open(candidate, "x"):
                pass
            return candidate
        except FileExistsError:
            continue
        except OSError as e:
            logger.error(f"Cannot create file {candidate}: {e}")
            raise ValueError(f"Cannot create file: {e}")

    logger.error(
        f"Could not find an available filename after {MAX_NUMBERED_VARIANTS + 1} attempts. "
        f"Please clean up your output directory or specify --output explicitly."
    )
    raise RuntimeError(
        f"No available filename found after {MAX_NUMBERED_VARIANTS + 1} attempts"
    )
