# Assemble, validate and emit the chip family metadata document.
# (C) 2025 Stefan Heinzmann
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from jsonschema import Draft202012Validator
from ruamel.yaml import YAML

SCHEMA_REF = "./schema.json"
SCHEMA_PATH = Path(__file__).parent.parent / 'schema.json'

class MetadataError(Exception):
    """Configuration or validation problem with the metadata document."""

@dataclass
class Pin:
    name: str
    supply: str

@dataclass
class Signal:
    # Not produced yet: peripheral-to-pin signal association is future work.
    name: str
    pins: List[Pin] = field(default_factory=list)

@dataclass
class Peripheral:
    name: str
    signals: List[Signal] = field(default_factory=list)

@dataclass
class Metadata:
    comment: str
    chips: List[str]
    pins: List[Pin] = field(default_factory=list)
    peripherals: List[Peripheral] = field(default_factory=list)
    schema: str = SCHEMA_REF

@dataclass
class FamilyConfig:
    """Static per-family data: not derived from the vendor tables."""
    comment: str
    chips: List[str]
    pinout: Path
    memory_map: Path

def load_family_config(path:Path):
    """ Read a family config YAML file.

        The file must contain 'comment', 'chips', 'pinout' and 'memory_map'.
        The table paths are kept as written, i.e. relative to the working directory. """
    yaml = YAML(typ='safe')
    with open(path, 'r', encoding='utf-8') as f:
        cfg = yaml.load(f)
    if not isinstance(cfg, dict):
        raise MetadataError(f"{path}: expected a mapping at top level")
    missing = [k for k in ('comment', 'chips', 'pinout', 'memory_map') if k not in cfg]
    if missing:
        raise MetadataError(f"{path}: missing keys {', '.join(missing)}")
    return FamilyConfig(
        comment=str(cfg['comment']),
        chips=[str(c) for c in cfg['chips']],
        pinout=Path(cfg['pinout']),
        memory_map=Path(cfg['memory_map']),
    )

def assemble(config:FamilyConfig, pinout_rows, memory_map_rows=None):
    """ Build the metadata document from decoded table rows.

        Peripherals come from the memory map instances (uppercased, empty ones
        dropped), pins from pinout rows that have both an ALT0 signal and an
        I/O supply. Both keep source order and are not deduplicated. """
    data = Metadata(comment=config.comment, chips=list(config.chips))

    for row in memory_map_rows or []:
        name = row['instance'].upper()
        if name:
            data.peripherals.append(Peripheral(name))

    for row in pinout_rows:
        supply, alt0 = row.get('supply'), row.get('alt0')
        if supply is not None and alt0 is not None:
            data.pins.append(Pin(alt0, supply))

    return data

def _pinToDict(pin:Pin):
    return {'name': pin.name, 'supply': pin.supply}

def to_dict(data:Metadata):
    """ Convert to plain JSON data, keys in document order. """
    return {
        '$schema': data.schema,
        '$comment': data.comment,
        'chips': list(data.chips),
        'pins': [_pinToDict(p) for p in data.pins],
        'peripherals': [{
            'name': per.name,
            'signals': [{'name': s.name, 'pins': [_pinToDict(p) for p in s.pins]} for s in per.signals],
        } for per in data.peripherals],
    }

def from_dict(doc:dict):
    """ Rebuild a Metadata from plain JSON data as written by emit(). """
    def pin(p):
        return Pin(p['name'], p['supply'])
    return Metadata(
        schema=doc['$schema'],
        comment=doc['$comment'],
        chips=list(doc['chips']),
        pins=[pin(p) for p in doc['pins']],
        peripherals=[Peripheral(per['name'],
                                [Signal(s['name'], [pin(p) for p in s['pins']]) for s in per['signals']])
                     for per in doc.get('peripherals', [])],
    )

def validate(doc:dict, schema_path:Optional[Path]=None):
    """ Check a document against the JSON schema; raise MetadataError listing all violations. """
    with open(schema_path or SCHEMA_PATH, 'r', encoding='utf-8') as f:
        schema = json.load(f)
    Draft202012Validator.check_schema(schema)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(doc), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = []
        for e in errors:
            loc = "/".join([str(p) for p in e.path]) or "(root)"
            lines.append(f"at {loc}: {e.message}")
        raise MetadataError("document failed validation:\n   - " + "\n   - ".join(lines))

def emit(data:Metadata, stream=None):
    """ Write the document as pretty-printed JSON. """
    text = json.dumps(to_dict(data), indent=2, ensure_ascii=False)
    if stream is None:
        stream = sys.stdout
    stream.write(text + "\n")
