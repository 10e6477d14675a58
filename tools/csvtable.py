# Decode vendor CSV tables into rows keyed by a fixed column convention.
# (C) 2025 Stefan Heinzmann
import csv
import re
from collections import namedtuple

U32_MAX = 0xFFFFFFFF

class DecodeError(ValueError):
    """A single table field could not be decoded."""

# One entry of a column table: the exact vendor header text, the row key it
# maps to, the converter for its text, and whether an empty field means absent.
Column = namedtuple('Column', ['header', 'attr', 'convert', 'optional'])

# A row that was dropped, with the 1-based line number of the source record.
SkippedRow = namedtuple('SkippedRow', ['line', 'reason'])

def from_hex(text:str):
    """ Convert hex text (optional 0x/0X prefix, optional surrounding whitespace) into a u32. """
    s = text.strip()
    if s[:2] in ('0x', '0X'):
        s = s[2:]
    digits = s[1:] if s.startswith('+') else s
    if not digits:
        raise DecodeError("Invalid hex: cannot parse integer from empty string")
    if not re.fullmatch(r'[0-9a-fA-F]+', digits):
        raise DecodeError("Invalid hex: invalid digit found in string")
    value = int(digits, 16)
    if value > U32_MAX:
        raise DecodeError("Invalid hex: number too large to fit in target type")
    return value

def from_u32(text:str):
    """ Convert integer text into a u32. No whitespace is tolerated.

        Text starting with a lowercase 0x is read as hex, anything else as decimal. """
    base, pattern = 10, r'[0-9]+'
    if text.startswith('0x'):
        text = text[2:]
        base, pattern = 16, r'[0-9a-fA-F]+'
    digits = text[1:] if text.startswith('+') else text
    if not digits:
        raise DecodeError("cannot parse integer from empty string")
    if not re.fullmatch(pattern, digits):
        raise DecodeError("invalid digit found in string")
    value = int(digits, base)
    if value > U32_MAX:
        raise DecodeError("number too large to fit in target type")
    return value

def from_str(text:str):
    return text

def _optional(header, attr, convert=from_str):
    return Column(header, attr, convert, True)

def _required(header, attr, convert=from_str):
    return Column(header, attr, convert, False)

# Header texts are copied from the MCXA2 reference manual attachments, stray
# spaces and line breaks included. Edit here when the vendor revises them.
PINOUT_COLUMNS = [
    _optional("MCXA26x/A25x/A18x/A17x\nLQFP144", 'lqfp144_pin_number', from_u32),
    _optional("MCXA26x/A25x/A18x/A17x\n LQFP144 Pin Name", 'lqfp144_pin_name'),
    _optional("MCXA26x/A25x/A18x/A17x\nWFBGA169", 'wfbga169_pin_coord'),
    _optional("MCXA26x/A25x/A18x/A17x\nWFBGA169 Pin Name", 'wfbga169_pin_name'),
    _optional(" MCXA26x/A25x/A18x/A17x\nLQFP100", 'lqfp100_pin_number', from_u32),
    _optional(" MCXA26x/A25x/A18x/A17x \nLQFP100 Pin Name", 'lqfp100_pin_name'),
    _optional(" MCXA26x/A25x/A18x/A17x\nLQFP64", 'lqfp64_pin_number', from_u32),
    _optional(" MCXA26x/A25x/A18x/A17x\nLQFP64 Pin Name", 'lqfp64_pin_name'),
    _optional("I/O Supply", 'supply'),
    _optional("Default", 'default'),
    _optional("ISP", 'isp'),
    _optional("ANALOG", 'analog'),
] + [_optional("ALT%d" % n, 'alt%d' % n) for n in range(13)] + [
    _optional("VDD_SYS", 'vdd_sys'),
    _optional("Pad type", 'pad_type'),
]

MEMORY_MAP_COLUMNS = [
    _required("Peripheral description", 'desc'),
    _required("module_nickname", 'nickname'),
    _required("Peripheral instance", 'instance'),
    _required("Size (KB)", 'size', from_u32),
    _required("Start address (hex)", 'start', from_hex),
    _required("End address (hex)", 'end', from_hex),
]

def decodeRecord(record:list, index:dict, columns:list):
    """ Decode one CSV record into a dict keyed by column attribute.

        index maps header text to field position. Raises DecodeError if
        the record can't be decoded. """
    row = {}
    for col in columns:
        pos = index.get(col.header)
        if pos is None:
            if not col.optional:
                raise DecodeError("missing field `%s`" % col.header)
            row[col.attr] = None
            continue
        text = record[pos]
        if col.optional and text == '':
            row[col.attr] = None
            continue
        try:
            row[col.attr] = col.convert(text)
        except DecodeError as ex:
            raise DecodeError("field `%s`: %s" % (col.header, ex)) from ex
    return row

def open_table(path):
    """ Open a CSV table for read_rows().

        A leading UTF-8 BOM is dropped. Bytes that aren't valid UTF-8 are kept as
        surrogate escapes, so read_rows() can drop just the records holding them. """
    return open(path, 'r', newline='', encoding='utf-8-sig', errors='surrogateescape')

def checkUtf8(record:list):
    """ Raise DecodeError if a field holds undecodable bytes (surrogate escapes). """
    for pos, text in enumerate(record):
        try:
            text.encode('utf-8')
        except UnicodeEncodeError as ex:
            raise DecodeError("invalid UTF-8 in field %d at position %d" % (pos, ex.start)) from ex

def read_rows(stream, columns:list, skipped=None):
    """ Read a CSV table from stream and yield one decoded dict per data record.

        The first record is the header. Its texts are looked up in the column
        table exactly as written; unknown columns are ignored. Records that
        can't be decoded (wrong number of fields, missing required column,
        unparseable value, invalid UTF-8) are dropped without raising. A BOM in
        front of the first header text is ignored. If skipped is a list,
        a SkippedRow is appended to it for every dropped record. """
    reader = csv.reader(stream)
    header = None
    for record in reader:
        if not record:
            continue    # blank line
        if header is None:
            header = record
            if header[0].startswith('\ufeff'):
                header[0] = header[0][1:]
            index = {}
            for pos, text in enumerate(header):
                index.setdefault(text, pos)
            continue
        try:
            if len(record) != len(header):
                raise DecodeError("found record with %d fields, but the header has %d fields"
                                  % (len(record), len(header)))
            checkUtf8(record)
            row = decodeRecord(record, index, columns)
        except DecodeError as ex:
            if skipped is not None:
                skipped.append(SkippedRow(reader.line_num, str(ex)))
            continue
        yield row

def read_pinout(stream, skipped=None):
    """ Decode the pinout table. """
    return read_rows(stream, PINOUT_COLUMNS, skipped)

def read_memory_map(stream, skipped=None):
    """ Decode the memory map table. """
    return read_rows(stream, MEMORY_MAP_COLUMNS, skipped)
