#!/usr/bin/env python3
"""
Chunk Reader Tests using Slash Testing Framework

Tests for the streaming float, integer and string decoders, in particular
that splitting the input at arbitrary positions never changes the result.
"""

import itertools
import logging
import math
import slash

from collada_module import ChunkFloatReader, ChunkIntReader, ChunkStringReader
from collada_module.errors import MalformedValueError
from collada_module.logger import set_log_level

# Configure logging for tests
set_log_level(logging.WARNING)


FLOAT_TEXT = "1.5 2.5\t3.0\n-4e2  +0.125 .5"
FLOAT_VALUES = [1.5, 2.5, 3.0, -400.0, 0.125, 0.5]


def decode(reader_class, fragments):
    """Feed fragments to a fresh reader and return the decoded values"""
    values = []
    reader = reader_class(values.append)
    for fragment in fragments:
        reader.feed(fragment)
    reader.finish()
    return values


def split_at(text, positions):
    """Split text at the given sorted cut positions"""
    bounds = [0] + list(positions) + [len(text)]
    return [text[start:end] for start, end in zip(bounds, bounds[1:])]


def test_float_reader_single_fragment():
    """Test decoding a whole string in one fragment"""
    assert decode(ChunkFloatReader, [FLOAT_TEXT]) == FLOAT_VALUES


def test_float_reader_split_inside_token():
    """Test the canonical split inside a token"""
    assert decode(ChunkFloatReader, ["1.5 2", ".5 3.0"]) == [1.5, 2.5, 3.0]


@slash.parametrize('pieces', [2, 3])
def test_float_reader_every_split(pieces):
    """Test that every split into N fragments decodes identically"""
    for positions in itertools.combinations(range(1, len(FLOAT_TEXT)), pieces - 1):
        fragments = split_at(FLOAT_TEXT, positions)
        assert decode(ChunkFloatReader, fragments) == FLOAT_VALUES


def test_float_reader_one_character_fragments():
    """Test feeding one character at a time"""
    assert decode(ChunkFloatReader, list(FLOAT_TEXT)) == FLOAT_VALUES


def test_float_reader_special_values():
    """Test infinities and NaN"""
    values = decode(ChunkFloatReader, ["INF -INF NaN"])
    assert values[0] == math.inf
    assert values[1] == -math.inf
    assert math.isnan(values[2])


def test_float_reader_empty_and_whitespace():
    """Test that empty or blank input decodes nothing"""
    assert decode(ChunkFloatReader, []) == []
    assert decode(ChunkFloatReader, ["", "   ", "\n\t"]) == []


def test_float_reader_rejects_garbage():
    """Test that a non-numeric token raises MalformedValueError"""
    with slash.assert_raises(MalformedValueError):
        decode(ChunkFloatReader, ["1.0 abc 2.0"])


def test_float_reader_rejects_locale_separator():
    """Test that a decimal comma is not accepted"""
    with slash.assert_raises(MalformedValueError):
        decode(ChunkFloatReader, ["1,5"])


def test_float_reader_error_on_trailing_token():
    """Test that a bad token is reported by finish() when it ends the input"""
    values = []
    reader = ChunkFloatReader(values.append)
    reader.feed("1.0 2.0 x")
    assert values == [1.0, 2.0]
    with slash.assert_raises(MalformedValueError):
        reader.finish()


@slash.parametrize('positions', [(), (1,), (3,), (2, 5), (1, 4, 7)])
def test_int_reader_splits(positions):
    """Test integer decoding across fragment boundaries"""
    text = "0 12 -3 +45 6"
    assert decode(ChunkIntReader, split_at(text, positions)) == [0, 12, -3, 45, 6]


def test_int_reader_rejects_float():
    """Test that a float token is not an integer"""
    with slash.assert_raises(MalformedValueError) as caught:
        decode(ChunkIntReader, ["1 2.5"])
    assert caught.exception.value == "2.5"


def test_string_reader_keeps_raw_tokens():
    """Test that tokens are delivered verbatim"""
    assert decode(ChunkStringReader, ["joint_", "root jo", "int_1\n", "x"]) == ["joint_root", "joint_1", "x"]


def test_reader_does_not_check_bounds():
    """Test that the reader emits every token; bounds belong to the caller"""
    assert len(decode(ChunkIntReader, [" ".join(["7"] * 1000)])) == 1000
