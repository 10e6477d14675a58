#!/usr/bin/env python3
"""
Extract MCXA1xx/MCXA2xx pin and peripheral metadata from the NXP tables.

Usage (from the repository root): extractors/MCXA2.py > mcxa2.json

Reads data/mcxa2/family.yaml and the pinout and memory map CSV files it
names, and prints the metadata document as JSON on stdout.

The vendor tables (data/mcxa2/pinout.csv and data/mcxa2/memory-map.csv) are
not part of the repository. Export them from the NXP reference manual
attachments and put them there before running; without them the script
exits with an error.
"""

import sys
from pathlib import Path

from ruamel.yaml.error import YAMLError

# Add sodaCat tools to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'tools'))
import csvtable
import metadata

CONFIG_PATH = Path("data/mcxa2/family.yaml")


def extract(config_path=CONFIG_PATH, out=None, skipped=None):
    """Run the whole pipeline; raises OSError or metadata.MetadataError on failure."""
    config = metadata.load_family_config(config_path)

    # Both tables are read completely before anything is assembled
    with csvtable.open_table(config.pinout) as f:
        pinout = list(csvtable.read_pinout(f, skipped))
    with csvtable.open_table(config.memory_map) as f:
        memory_map = list(csvtable.read_memory_map(f, skipped))

    data = metadata.assemble(config, pinout, memory_map)
    metadata.validate(metadata.to_dict(data))
    metadata.emit(data, out)
    return data


def main():
    try:
        extract()
    except (OSError, YAMLError, metadata.MetadataError, ValueError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
