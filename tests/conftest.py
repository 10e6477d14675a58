import csv
import io
import os
import sys

import pytest

# Add the project tools to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.join(project_root, "tools"))

import csvtable


def _csv_text(header, records):
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(records)
    return buf.getvalue()


PINOUT_HEADER = [c.header for c in csvtable.PINOUT_COLUMNS]
MEMORY_MAP_HEADER = [c.header for c in csvtable.MEMORY_MAP_COLUMNS]


def pinout_record(supply="", alt0="", **fields):
    """A pinout record with every column empty except the ones given."""
    values = {c.attr: "" for c in csvtable.PINOUT_COLUMNS}
    values.update(supply=supply, alt0=alt0, **fields)
    return [values[c.attr] for c in csvtable.PINOUT_COLUMNS]


def memory_map_record(instance, desc="Peripheral", nickname="mod", size="4",
                      start="0x40000000", end="0x40000FFF"):
    return [desc, nickname, instance, size, start, end]


@pytest.fixture
def pinout_csv():
    """Build pinout CSV text from records."""
    def build(records, header=PINOUT_HEADER):
        return _csv_text(header, records)
    return build


@pytest.fixture
def memory_map_csv():
    """Build memory map CSV text from records."""
    def build(records, header=MEMORY_MAP_HEADER):
        return _csv_text(header, records)
    return build
